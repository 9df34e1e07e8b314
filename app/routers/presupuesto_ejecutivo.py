"""
Presupuesto Ejecutivo router.

Mounts under ``/api/presupuesto-ejecutivo`` (prefix set in ``main.py``).

Authentication is handled upstream by the hosting platform; these
endpoints trust the ``cliente_id`` / ``proyecto_id`` they receive.

Endpoints
---------
POST   /conciliar                                   — Reconcile a posted payload.
GET    /vista-final                                 — Reconciliation for a project.
GET    /vista-final/tabla                           — Filtered/sorted rows + groups.
GET    /vista-final/resumen                         — Budget status card.
GET    /vista-final/partidas/{parametrico_id}/subpartidas — Drill-down rows.
POST   /subpartidas                                 — Create executive subpartida.
PUT    /subpartidas/{subpartida_id}                 — Update executive subpartida.
DELETE /subpartidas/{subpartida_id}                 — Delete executive subpartida.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.common import MessageResponse
from app.schemas.presupuesto_ejecutivo import (
    ConciliacionRequest,
    EstadoFiltro,
    FilaVistaFinal,
    FiltrosVistaFinal,
    Orden,
    OrdenarPor,
    ResumenPresupuestoResponse,
    SubpartidaEjecutivaCreate,
    SubpartidaEjecutivaResponse,
    SubpartidaEjecutivaUpdate,
    TablaVistaFinalResponse,
    VistaFinalResponse,
)
from app.services import presupuesto_ejecutivo_service, vista_final_service
from app.services.conciliacion_service import conciliar

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Presupuesto Ejecutivo"])


# ---------------------------------------------------------------------------
# Shared dependencies: project scope and table filters from Query parameters
# ---------------------------------------------------------------------------


def proyecto_params(
    cliente_id: Annotated[str, Query(description="ID del cliente.", min_length=1, max_length=36)],
    proyecto_id: Annotated[str, Query(description="ID del proyecto.", min_length=1, max_length=36)],
) -> tuple[str, str]:
    return cliente_id, proyecto_id


def filtros_params(
    busqueda: Annotated[
        str | None,
        Query(description="Texto a buscar en departamento, mayor, partida o subpartida.", max_length=200),
    ] = None,
    departamento: Annotated[
        str | None,
        Query(description="Departamento exacto. Omitir para todos.", max_length=100),
    ] = None,
    estado: Annotated[
        EstadoFiltro,
        Query(description="todos | dentro | excedido | residual | subpartidas."),
    ] = EstadoFiltro.TODOS,
    ordenar_por: Annotated[OrdenarPor, Query(description="mayor | partida | importe.")] = OrdenarPor.MAYOR,
    orden: Annotated[Orden, Query(description="asc | desc.")] = Orden.ASC,
    solo_residuales_negativos: Annotated[
        bool, Query(description="Ocultar residuales no negativos (con estado=todos).")
    ] = False,
    agrupar_por_mayor: Annotated[bool, Query(description="Agrupar filas por mayor.")] = False,
) -> FiltrosVistaFinal:
    """Assemble ``FiltrosVistaFinal`` from URL query parameters."""
    return FiltrosVistaFinal(
        busqueda=busqueda,
        departamento=departamento,
        estado=estado,
        ordenar_por=ordenar_por,
        orden=orden,
        solo_residuales_negativos=solo_residuales_negativos,
        agrupar_por_mayor=agrupar_por_mayor,
    )


# ---------------------------------------------------------------------------
# POST /conciliar
# ---------------------------------------------------------------------------


@router.post(
    "/conciliar",
    response_model=VistaFinalResponse,
    summary="Conciliar paramétrico vs ejecutivo",
    description=(
        "Calcula filas residuales y de subpartida, totales y agrupación por mayor "
        "a partir de las partidas paramétricas y subpartidas ejecutivas enviadas."
    ),
    responses={
        200: {"description": "Conciliación calculada."},
        400: {"description": "Payload con forma inválida."},
    },
)
def post_conciliar(payload: ConciliacionRequest) -> VistaFinalResponse:
    logger.debug(
        "POST /conciliar parametricos=%d ejecutivos=%d",
        len(payload.parametricos), len(payload.ejecutivos),
    )
    try:
        return conciliar(payload.parametricos, payload.ejecutivos)
    except TypeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


# ---------------------------------------------------------------------------
# GET /vista-final (+ tabla, resumen, drill-down)
# ---------------------------------------------------------------------------


@router.get(
    "/vista-final",
    response_model=VistaFinalResponse,
    summary="Vista final del presupuesto ejecutivo",
)
def get_vista_final(
    proyecto: Annotated[tuple[str, str], Depends(proyecto_params)],
    db: Annotated[Session, Depends(get_db)],
) -> VistaFinalResponse:
    """Return the reconciliation of a project read from the database."""
    cliente_id, proyecto_id = proyecto
    logger.debug("GET /vista-final cliente=%s proyecto=%s", cliente_id, proyecto_id)
    return presupuesto_ejecutivo_service.obtener_vista_final(db, cliente_id, proyecto_id)


@router.get(
    "/vista-final/tabla",
    response_model=TablaVistaFinalResponse,
    summary="Tabla filtrada de la vista final",
)
def get_tabla_vista_final(
    proyecto: Annotated[tuple[str, str], Depends(proyecto_params)],
    filtros: Annotated[FiltrosVistaFinal, Depends(filtros_params)],
    db: Annotated[Session, Depends(get_db)],
) -> TablaVistaFinalResponse:
    """Return filtered and sorted rows, optional groups and the department list."""
    vista = presupuesto_ejecutivo_service.obtener_vista_final(db, *proyecto)
    return vista_final_service.tabla_vista_final(vista, filtros)


@router.get(
    "/vista-final/resumen",
    response_model=ResumenPresupuestoResponse,
    summary="Resumen presupuestal (balanceado / sobrepresupuesto / en progreso)",
)
def get_resumen(
    proyecto: Annotated[tuple[str, str], Depends(proyecto_params)],
    db: Annotated[Session, Depends(get_db)],
) -> ResumenPresupuestoResponse:
    vista = presupuesto_ejecutivo_service.obtener_vista_final(db, *proyecto)
    return vista_final_service.resumen_presupuestal(vista.totales)


@router.get(
    "/vista-final/partidas/{parametrico_id}/subpartidas",
    response_model=list[FilaVistaFinal],
    summary="Subpartidas de una partida paramétrica",
)
def get_subpartidas_de_partida(
    parametrico_id: Annotated[str, Path(description="ID de la partida paramétrica.")],
    proyecto: Annotated[tuple[str, str], Depends(proyecto_params)],
    db: Annotated[Session, Depends(get_db)],
) -> list[FilaVistaFinal]:
    vista = presupuesto_ejecutivo_service.obtener_vista_final(db, *proyecto)
    return vista_final_service.subpartidas_de(vista.filas, parametrico_id)


# ---------------------------------------------------------------------------
# Subpartidas CRUD
# ---------------------------------------------------------------------------


@router.post(
    "/subpartidas",
    response_model=SubpartidaEjecutivaResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Crear subpartida ejecutiva",
    responses={
        404: {"description": "Partida paramétrica no encontrada."},
        422: {"description": "Subpartida de catálogo inexistente o datos inválidos."},
    },
)
def post_subpartida(
    datos: SubpartidaEjecutivaCreate,
    db: Annotated[Session, Depends(get_db)],
) -> SubpartidaEjecutivaResponse:
    """Create a subpartida; ``importe`` is computed server-side."""
    registro = presupuesto_ejecutivo_service.crear_subpartida(db, datos)
    return SubpartidaEjecutivaResponse.model_validate(registro)


@router.put(
    "/subpartidas/{subpartida_id}",
    response_model=SubpartidaEjecutivaResponse,
    summary="Actualizar subpartida ejecutiva",
    responses={404: {"description": "Subpartida no encontrada."}},
)
def put_subpartida(
    subpartida_id: Annotated[str, Path(description="ID de la subpartida ejecutiva.")],
    datos: SubpartidaEjecutivaUpdate,
    db: Annotated[Session, Depends(get_db)],
) -> SubpartidaEjecutivaResponse:
    registro = presupuesto_ejecutivo_service.actualizar_subpartida(db, subpartida_id, datos)
    return SubpartidaEjecutivaResponse.model_validate(registro)


@router.delete(
    "/subpartidas/{subpartida_id}",
    response_model=MessageResponse,
    summary="Eliminar subpartida ejecutiva",
    responses={404: {"description": "Subpartida no encontrada."}},
)
def delete_subpartida(
    subpartida_id: Annotated[str, Path(description="ID de la subpartida ejecutiva.")],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    presupuesto_ejecutivo_service.eliminar_subpartida(db, subpartida_id)
    return MessageResponse(message="Subpartida eliminada correctamente.")
