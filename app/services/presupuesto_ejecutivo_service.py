"""
Presupuesto Ejecutivo service layer.

Reads the parametric lines and executive subpartidas of a client project,
feeds them to the reconciliation, and handles the write path of executive
subpartidas (create / update / delete).

Design notes
------------
- Reads return the reconciliation input schemas, not ORM objects, so the
  engine never touches a ``Session``.
- ``importe`` is computed here, on write, as ``cantidad × precio_unitario``
  rounded half-up to cents.  Reads trust the stored value.
- Catalog labels are frozen into ``codigo_snapshot`` / ``nombre_snapshot``
  when a subpartida is created.
- Every public function is synchronous and receives a ``Session`` from the
  ``get_db`` dependency.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.catalogo_cuenta import CuentaSubpartida
from app.models.presupuesto_ejecutivo import (
    PresupuestoEjecutivoPartida,
    PresupuestoEjecutivoSubpartida,
)
from app.models.presupuesto_parametrico import PresupuestoParametrico
from app.schemas.presupuesto_ejecutivo import (
    PartidaParametricaIn,
    SubpartidaEjecutivaCreate,
    SubpartidaEjecutivaIn,
    SubpartidaEjecutivaUpdate,
    VistaFinalResponse,
)
from app.services.conciliacion_service import conciliar
from app.utils.montos import calcular_importe

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def listar_partidas_parametricas(
    db: Session, cliente_id: str, proyecto_id: str
) -> list[PartidaParametricaIn]:
    """Parametric lines of a project, oldest first, with catalog labels joined."""
    registros = (
        db.query(PresupuestoParametrico)
        .filter(
            PresupuestoParametrico.cliente_id == cliente_id,
            PresupuestoParametrico.proyecto_id == proyecto_id,
        )
        .order_by(PresupuestoParametrico.created_at.asc())
        .all()
    )

    partidas: list[PartidaParametricaIn] = []
    for registro in registros:
        mayor = registro.mayor
        partida = registro.partida
        partidas.append(
            PartidaParametricaIn(
                id=registro.id,
                departamento=registro.departamento,
                mayor_id=registro.mayor_id,
                mayor_codigo=mayor.codigo if mayor else "",
                mayor_nombre=mayor.nombre if mayor else "",
                partida_id=registro.partida_id,
                partida_codigo=partida.codigo if partida else "",
                partida_nombre=partida.nombre if partida else "",
                monto_total=registro.monto_total,
            )
        )

    logger.debug(
        "listar_partidas_parametricas: cliente=%s proyecto=%s -> %d",
        cliente_id, proyecto_id, len(partidas),
    )
    return partidas


def listar_subpartidas_ejecutivas(
    db: Session, cliente_id: str, proyecto_id: str
) -> list[SubpartidaEjecutivaIn]:
    """Executive subpartidas of a project, oldest first.

    The ``partida_ejecutivo → parametrico`` chain is loaded through the ORM
    relationships; a broken link simply yields ``None`` in the reference.
    """
    registros = (
        db.query(PresupuestoEjecutivoSubpartida)
        .filter(
            PresupuestoEjecutivoSubpartida.cliente_id == cliente_id,
            PresupuestoEjecutivoSubpartida.proyecto_id == proyecto_id,
        )
        .order_by(PresupuestoEjecutivoSubpartida.created_at.asc())
        .all()
    )
    subpartidas = [SubpartidaEjecutivaIn.model_validate(r, from_attributes=True) for r in registros]

    logger.debug(
        "listar_subpartidas_ejecutivas: cliente=%s proyecto=%s -> %d",
        cliente_id, proyecto_id, len(subpartidas),
    )
    return subpartidas


def obtener_vista_final(db: Session, cliente_id: str, proyecto_id: str) -> VistaFinalResponse:
    """Reconcile the project's parametric budget against its executive breakdown."""
    return conciliar(
        listar_partidas_parametricas(db, cliente_id, proyecto_id),
        listar_subpartidas_ejecutivas(db, cliente_id, proyecto_id),
    )


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


def _get_subpartida_or_404(db: Session, subpartida_id: str) -> PresupuestoEjecutivoSubpartida:
    registro = db.get(PresupuestoEjecutivoSubpartida, subpartida_id)
    if registro is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Subpartida ejecutiva con id={subpartida_id} no encontrada.",
        )
    return registro


def _obtener_o_crear_partida_ejecutivo(
    db: Session, parametrico: PresupuestoParametrico
) -> PresupuestoEjecutivoPartida:
    partida = (
        db.query(PresupuestoEjecutivoPartida)
        .filter(PresupuestoEjecutivoPartida.parametrico_id == parametrico.id)
        .first()
    )
    if partida is None:
        partida = PresupuestoEjecutivoPartida(
            cliente_id=parametrico.cliente_id,
            proyecto_id=parametrico.proyecto_id,
            parametrico_id=parametrico.id,
        )
        db.add(partida)
        db.flush()
        logger.info("Partida ejecutiva creada para paramétrico %s", parametrico.id)
    return partida


def crear_subpartida(
    db: Session, datos: SubpartidaEjecutivaCreate
) -> PresupuestoEjecutivoSubpartida:
    """Create an executive subpartida under a parametric line.

    Raises:
        HTTPException 404: If the parametric line does not exist in the
            given client project.
        HTTPException 422: If ``subpartida_id`` does not exist in the catalog.
    """
    parametrico = db.get(PresupuestoParametrico, datos.parametrico_id)
    if (
        parametrico is None
        or parametrico.cliente_id != datos.cliente_id
        or parametrico.proyecto_id != datos.proyecto_id
    ):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Partida paramétrica con id={datos.parametrico_id} no encontrada en el proyecto.",
        )

    codigo, nombre = datos.codigo, datos.nombre
    if datos.subpartida_id is not None:
        catalogo = db.get(CuentaSubpartida, datos.subpartida_id)
        if catalogo is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Subpartida de catálogo con id={datos.subpartida_id} no existe.",
            )
        codigo = catalogo.codigo
        nombre = catalogo.nombre

    partida_ejecutivo = _obtener_o_crear_partida_ejecutivo(db, parametrico)

    registro = PresupuestoEjecutivoSubpartida(
        cliente_id=datos.cliente_id,
        proyecto_id=datos.proyecto_id,
        partida_ejecutivo_id=partida_ejecutivo.id,
        subpartida_id=datos.subpartida_id,
        codigo_snapshot=codigo,
        nombre_snapshot=nombre,
        unidad=datos.unidad,
        cantidad=datos.cantidad,
        precio_unitario=datos.precio_unitario,
        importe=calcular_importe(datos.cantidad, datos.precio_unitario),
    )
    db.add(registro)
    db.commit()
    db.refresh(registro)

    logger.info(
        "Subpartida ejecutiva %s creada: paramétrico=%s importe=%s",
        registro.id, parametrico.id, registro.importe,
    )
    return registro


def actualizar_subpartida(
    db: Session, subpartida_id: str, datos: SubpartidaEjecutivaUpdate
) -> PresupuestoEjecutivoSubpartida:
    """Partially update a subpartida, recomputing ``importe`` when needed.

    Raises:
        HTTPException 404: If the subpartida does not exist.
    """
    registro = _get_subpartida_or_404(db, subpartida_id)
    cambios = datos.model_dump(exclude_unset=True)
    # An explicit null clears unidad; quantities and prices are NOT NULL
    for campo in ("cantidad", "precio_unitario"):
        if campo in cambios and cambios[campo] is None:
            del cambios[campo]

    for campo, valor in cambios.items():
        setattr(registro, campo, valor)

    if "cantidad" in cambios or "precio_unitario" in cambios:
        registro.importe = calcular_importe(registro.cantidad, registro.precio_unitario)

    db.commit()
    db.refresh(registro)

    logger.info("Subpartida ejecutiva %s actualizada: %s", subpartida_id, sorted(cambios))
    return registro


def eliminar_subpartida(db: Session, subpartida_id: str) -> None:
    """Delete a subpartida.

    Raises:
        HTTPException 404: If the subpartida does not exist.
    """
    registro = _get_subpartida_or_404(db, subpartida_id)
    db.delete(registro)
    db.commit()
    logger.info("Subpartida ejecutiva %s eliminada", subpartida_id)
