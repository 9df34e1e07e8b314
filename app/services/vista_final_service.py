"""
Table operations over the reconciled "Vista Final" rows.

Everything here works on rows already produced by
``conciliacion_service.conciliar``: text search, department and status
filters, sorting, grouping by mayor for display/export, drill-down of one
parametric line, and the budget status card.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from app.schemas.presupuesto_ejecutivo import (
    EstadoFiltro,
    EstadoResidual,
    EstadoResumen,
    FilaVistaFinal,
    FiltrosVistaFinal,
    GrupoFiltrado,
    Orden,
    OrdenarPor,
    ResumenPresupuestoResponse,
    TablaVistaFinalResponse,
    TipoFila,
    TotalesVistaFinal,
    VistaFinalResponse,
)
from app.utils.constants import CERO, MAYOR_SIN_ASIGNAR_ID, TOLERANCIA_BALANCE

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _coincide_busqueda(fila: FilaVistaFinal, termino: str) -> bool:
    campos = (
        fila.departamento,
        fila.mayor_nombre,
        fila.partida_nombre,
        fila.subpartida_nombre,
        fila.subpartida_codigo,
        fila.mayor_codigo,
        fila.partida_codigo,
    )
    return any(termino in campo.casefold() for campo in campos if campo)


def _coincide_estado(fila: FilaVistaFinal, estado: EstadoFiltro) -> bool:
    if estado is EstadoFiltro.DENTRO:
        return fila.tipo is TipoFila.RESIDUAL and fila.estado is EstadoResidual.DENTRO
    if estado is EstadoFiltro.EXCEDIDO:
        return fila.tipo is TipoFila.RESIDUAL and fila.estado is EstadoResidual.EXCEDIDO
    if estado is EstadoFiltro.RESIDUAL:
        return fila.tipo is TipoFila.RESIDUAL
    if estado is EstadoFiltro.SUBPARTIDAS:
        return fila.tipo is TipoFila.SUBPARTIDA
    return True


def _clave_orden(ordenar_por: OrdenarPor):
    if ordenar_por is OrdenarPor.PARTIDA:
        return lambda fila: fila.partida_nombre.casefold()
    if ordenar_por is OrdenarPor.IMPORTE:
        return lambda fila: abs(fila.importe)
    return lambda fila: (fila.mayor_nombre.casefold(), fila.partida_nombre.casefold())


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------


def filtrar_filas(
    filas: Iterable[FilaVistaFinal], filtros: FiltrosVistaFinal
) -> list[FilaVistaFinal]:
    """Apply search, department and status filters, then sort.

    Args:
        filas: Reconciled rows, in engine order.
        filtros: Table controls.

    Returns:
        A new list; the input is not modified.  The sort is stable, so rows
        with equal keys keep their engine order.
    """
    resultado = list(filas)

    if filtros.busqueda:
        termino = filtros.busqueda.strip().casefold()
        if termino:
            resultado = [f for f in resultado if _coincide_busqueda(f, termino)]

    if filtros.departamento:
        resultado = [f for f in resultado if f.departamento == filtros.departamento]

    if filtros.estado is not EstadoFiltro.TODOS:
        resultado = [f for f in resultado if _coincide_estado(f, filtros.estado)]
    elif filtros.solo_residuales_negativos:
        resultado = [
            f for f in resultado if f.tipo is not TipoFila.RESIDUAL or f.importe < CERO
        ]

    resultado.sort(
        key=_clave_orden(filtros.ordenar_por),
        reverse=filtros.orden is Orden.DESC,
    )
    return resultado


def agrupar_filas(filas: Iterable[FilaVistaFinal]) -> list[GrupoFiltrado]:
    """Group rows by mayor, in first-seen order, with a running total."""
    grupos: dict[str, GrupoFiltrado] = {}
    for fila in filas:
        clave = f"{fila.mayor_id or MAYOR_SIN_ASIGNAR_ID}-{fila.mayor_nombre}"
        grupo = grupos.get(clave)
        if grupo is None:
            grupo = GrupoFiltrado(
                clave=clave,
                mayor=f"{fila.mayor_codigo} - {fila.mayor_nombre}",
            )
            grupos[clave] = grupo
        grupo.filas.append(fila)
        grupo.total += fila.importe
    return list(grupos.values())


def listar_departamentos(filas: Iterable[FilaVistaFinal]) -> list[str]:
    """Distinct departments in first-seen order."""
    return list(dict.fromkeys(fila.departamento for fila in filas))


def subpartidas_de(filas: Iterable[FilaVistaFinal], parametrico_id: str) -> list[FilaVistaFinal]:
    """Subpartida rows that break down one parametric line."""
    return [
        fila
        for fila in filas
        if fila.parametrico_partida_id == parametrico_id and fila.tipo is TipoFila.SUBPARTIDA
    ]


def tabla_vista_final(
    vista: VistaFinalResponse, filtros: FiltrosVistaFinal
) -> TablaVistaFinalResponse:
    """Build the filtered table, optional groups and department list."""
    filas = filtrar_filas(vista.filas, filtros)
    grupos = agrupar_filas(filas) if filtros.agrupar_por_mayor else []

    logger.debug(
        "tabla_vista_final: %d/%d filas, %d grupos",
        len(filas), len(vista.filas), len(grupos),
    )

    return TablaVistaFinalResponse(
        filas=filas,
        grupos=grupos,
        departamentos=listar_departamentos(vista.filas),
        totales=vista.totales,
    )


def resumen_presupuestal(totales: TotalesVistaFinal) -> ResumenPresupuestoResponse:
    """Classify executive progress against the parametric budget.

    - ``balanceado``: |ejecutivo − paramétrico| < 0.01
    - ``sobrepresupuesto``: ejecutivo exceeds paramétrico by more than 0.01
    - ``en_progreso``: otherwise
    """
    parametrico = totales.total_parametrico
    ejecutivo = totales.total_ejecutivo
    diferencia = ejecutivo - parametrico

    if parametrico > CERO:
        progreso = max(round(float(ejecutivo / parametrico * 100), 2), 0.0)
    else:
        progreso = 0.0

    if abs(diferencia) < TOLERANCIA_BALANCE:
        estado = EstadoResumen.BALANCEADO
    elif diferencia > TOLERANCIA_BALANCE:
        estado = EstadoResumen.SOBREPRESUPUESTO
    else:
        estado = EstadoResumen.EN_PROGRESO

    return ResumenPresupuestoResponse(
        estado=estado,
        progreso_porcentaje=progreso,
        diferencia=diferencia,
        totales=totales,
    )
