"""
Reconciliation of the parametric budget against its executive breakdown.

``conciliar`` is a pure function: given the parametric lines and the
executive subpartidas of a project (already fetched), it builds the rows of
the "Vista Final", the totals card and the groups by mayor.  It performs no
I/O and never mutates its inputs; it is recomputed from scratch on every
call.

Row layout
----------
For every parametric line, in input order, one ``residual`` row is emitted
followed by that line's subpartida rows in ascending ``created_at`` order.
The same row objects are appended to the flat list and to the group of the
line's mayor.

Totals
------
- ``total_ejecutivo`` sums every executive subpartida, including those whose
  parent reference does not resolve to a parametric line.
- ``total_residual`` and the group subtotals only see linked subpartidas.

The two figures are not reconciled with each other on purpose; an orphaned
subpartida shows up as a gap between ``diferencia`` and ``total_residual``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from app.schemas.presupuesto_ejecutivo import (
    EstadoResidual,
    FilaVistaFinal,
    GrupoMayor,
    PartidaParametricaIn,
    SubpartidaEjecutivaIn,
    TipoFila,
    TotalesVistaFinal,
    VistaFinalResponse,
)
from app.utils.constants import (
    CERO,
    MAYOR_SIN_ASIGNAR_ID,
    MAYOR_SIN_ASIGNAR_NOMBRE,
    TOLERANCIA_RESIDUAL,
)

logger = logging.getLogger(__name__)

_Modelo = TypeVar("_Modelo", bound=BaseModel)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _normalizar(items: Any, modelo: type[_Modelo], nombre: str) -> list[_Modelo]:
    """Validate a caller-supplied collection into a list of ``modelo``.

    Args:
        items: Iterable of ``modelo`` instances or mappings.
        modelo: Target input schema.
        nombre: Argument name used in error messages.

    Returns:
        A new list; the caller's collection is left untouched.

    Raises:
        TypeError: If ``items`` is not a collection of rows, or an element is
            neither a mapping nor a ``modelo`` instance, or lacks an ``id``.
    """
    if items is None or isinstance(items, (str, bytes, Mapping)) or not isinstance(items, Iterable):
        raise TypeError(
            f"'{nombre}' debe ser una colección de filas, se recibió {type(items).__name__}"
        )

    resultado: list[_Modelo] = []
    for indice, item in enumerate(items):
        if isinstance(item, modelo):
            resultado.append(item)
            continue
        if isinstance(item, BaseModel):
            item = item.model_dump()
        if not isinstance(item, Mapping):
            raise TypeError(
                f"'{nombre}[{indice}]' debe ser un objeto, se recibió {type(item).__name__}"
            )
        try:
            resultado.append(modelo.model_validate(item))
        except ValidationError as exc:
            raise TypeError(f"'{nombre}[{indice}]' no es una fila válida: {exc}") from exc
    return resultado


def _clave_cronologica(item: SubpartidaEjecutivaIn) -> tuple[bool, float]:
    """Sort key by ``created_at``; rows without a timestamp go last."""
    fecha = item.created_at
    if fecha is None:
        return (True, 0.0)
    if fecha.tzinfo is None:
        fecha = fecha.replace(tzinfo=timezone.utc)
    return (False, fecha.timestamp())


def clasificar_residual(residual: Decimal) -> EstadoResidual:
    """Return ``dentro`` when ``residual >= -0.01``, otherwise ``excedido``."""
    if residual >= TOLERANCIA_RESIDUAL:
        return EstadoResidual.DENTRO
    return EstadoResidual.EXCEDIDO


def resolver_etiqueta(snapshot: str | None, en_vivo: str | None) -> str:
    """Prefer the frozen snapshot label, then the live catalog label, else ''."""
    return snapshot or en_vivo or ""


def agrupar_por_parametrico(
    ejecutivos: Iterable[SubpartidaEjecutivaIn],
) -> dict[str, list[SubpartidaEjecutivaIn]]:
    """Map each parametric id to its subpartidas, in input order.

    Subpartidas whose two-hop parent reference is broken are left out.
    """
    mapa: dict[str, list[SubpartidaEjecutivaIn]] = {}
    for item in ejecutivos:
        parametrico_id = item.parametrico_id
        if not parametrico_id:
            continue
        mapa.setdefault(parametrico_id, []).append(item)
    return mapa


def _fila_residual(
    parametrico: PartidaParametricaIn,
    residual: Decimal,
    estado: EstadoResidual,
) -> FilaVistaFinal:
    return FilaVistaFinal(
        id=f"residual-{parametrico.id}",
        tipo=TipoFila.RESIDUAL,
        departamento=parametrico.departamento,
        mayor_codigo=parametrico.mayor_codigo,
        mayor_nombre=parametrico.mayor_nombre,
        partida_codigo=parametrico.partida_codigo,
        partida_nombre=parametrico.partida_nombre,
        importe=residual,
        estado=estado,
        parametrico_partida_id=parametrico.id,
        mayor_id=parametrico.mayor_id,
        partida_id=parametrico.partida_id,
    )


def _fila_subpartida(
    parametrico: PartidaParametricaIn,
    subpartida: SubpartidaEjecutivaIn,
) -> FilaVistaFinal:
    catalogo = subpartida.subpartida
    return FilaVistaFinal(
        id=f"subpartida-{subpartida.id}",
        tipo=TipoFila.SUBPARTIDA,
        departamento=parametrico.departamento,
        mayor_codigo=parametrico.mayor_codigo,
        mayor_nombre=parametrico.mayor_nombre,
        partida_codigo=parametrico.partida_codigo,
        partida_nombre=parametrico.partida_nombre,
        subpartida_codigo=resolver_etiqueta(
            subpartida.codigo_snapshot, catalogo.codigo if catalogo else None
        ),
        subpartida_nombre=resolver_etiqueta(
            subpartida.nombre_snapshot, catalogo.nombre if catalogo else None
        ),
        unidad=subpartida.unidad,
        cantidad=subpartida.cantidad,
        precio_unitario=subpartida.precio_unitario,
        importe=subpartida.importe,
        parametrico_partida_id=parametrico.id,
        mayor_id=parametrico.mayor_id,
        partida_id=parametrico.partida_id,
        created_at=subpartida.created_at,
    )


# ---------------------------------------------------------------------------
# Public service function
# ---------------------------------------------------------------------------


def conciliar(parametricos: Any, ejecutivos: Any) -> VistaFinalResponse:
    """Reconcile parametric lines against executive subpartidas.

    Args:
        parametricos: Parametric lines (``PartidaParametricaIn`` or mappings).
        ejecutivos: Executive subpartidas (``SubpartidaEjecutivaIn`` or
            mappings) carrying the ``partida_ejecutivo.parametrico.id`` link.

    Returns:
        A ``VistaFinalResponse`` with the flat rows, the global totals and
        the rows grouped by ``mayor_id``.

    Raises:
        TypeError: If either argument is not a collection of rows.
    """
    partidas = _normalizar(parametricos, PartidaParametricaIn, "parametricos")
    subpartidas = _normalizar(ejecutivos, SubpartidaEjecutivaIn, "ejecutivos")

    por_parametrico = agrupar_por_parametrico(subpartidas)

    filas: list[FilaVistaFinal] = []
    agrupado: dict[str, GrupoMayor] = {}
    residuales_excedidos = 0
    vinculadas = 0

    for parametrico in partidas:
        hijas = por_parametrico.get(parametrico.id, [])
        vinculadas += len(hijas)
        total_ejecutivo_partida = sum((hija.importe for hija in hijas), CERO)
        residual = parametrico.monto_total - total_ejecutivo_partida
        estado = clasificar_residual(residual)
        if estado is EstadoResidual.EXCEDIDO:
            residuales_excedidos += 1

        mayor_id = parametrico.mayor_id or MAYOR_SIN_ASIGNAR_ID
        grupo = agrupado.get(mayor_id)
        if grupo is None:
            grupo = GrupoMayor(
                mayor_codigo=parametrico.mayor_codigo,
                mayor_nombre=parametrico.mayor_nombre or MAYOR_SIN_ASIGNAR_NOMBRE,
            )
            agrupado[mayor_id] = grupo

        emitidas = [_fila_residual(parametrico, residual, estado)]
        emitidas.extend(
            _fila_subpartida(parametrico, hija)
            for hija in sorted(hijas, key=_clave_cronologica)
        )

        filas.extend(emitidas)
        grupo.filas.extend(emitidas)
        grupo.subtotal_parametrico += parametrico.monto_total
        grupo.subtotal_ejecutivo += total_ejecutivo_partida
        grupo.subtotal_residual += residual

    total_parametrico = sum((p.monto_total for p in partidas), CERO)
    total_ejecutivo = sum((s.importe for s in subpartidas), CERO)
    total_residual = sum(
        (fila.importe for fila in filas if fila.tipo is TipoFila.RESIDUAL), CERO
    )

    totales = TotalesVistaFinal(
        total_parametrico=total_parametrico,
        total_ejecutivo=total_ejecutivo,
        total_residual=total_residual,
        diferencia=total_parametrico - total_ejecutivo,
        partidas_count=len(partidas),
        subpartidas_count=len(subpartidas),
        residuales_excedidos=residuales_excedidos,
    )

    logger.debug(
        "conciliar: partidas=%d subpartidas=%d huerfanas=%d excedidos=%d",
        len(partidas),
        len(subpartidas),
        len(subpartidas) - vinculadas,
        residuales_excedidos,
    )

    return VistaFinalResponse(filas=filas, totales=totales, agrupado=agrupado)
