"""
Exportación router.

Mounts under ``/api/exportar`` (prefix set in ``main.py``).

Endpoints
---------
GET /vista-final/excel — Final view of a project as .xlsx.

The response is streamed with ``Content-Disposition: attachment`` so that
browsers prompt a download.  Filters and grouping use the same query
parameters as ``/api/presupuesto-ejecutivo/vista-final/tabla``.
"""

from __future__ import annotations

import io
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.presupuesto_ejecutivo import filtros_params, proyecto_params
from app.schemas.presupuesto_ejecutivo import FiltrosVistaFinal
from app.services import exportacion_service, presupuesto_ejecutivo_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Exportación"])

_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get(
    "/vista-final/excel",
    summary="Exportar la vista final a Excel (.xlsx)",
    response_class=StreamingResponse,
    responses={
        200: {
            "description": "Archivo Excel generado exitosamente.",
            "content": {_XLSX_MEDIA_TYPE: {}},
        },
        500: {"description": "Error generando el archivo."},
    },
)
def export_vista_final_excel(
    proyecto: Annotated[tuple[str, str], Depends(proyecto_params)],
    filtros: Annotated[FiltrosVistaFinal, Depends(filtros_params)],
    db: Annotated[Session, Depends(get_db)],
    cliente_nombre: Annotated[
        str | None, Query(description="Nombre del cliente para la cabecera.", max_length=200)
    ] = None,
    proyecto_nombre: Annotated[
        str | None, Query(description="Nombre del proyecto para la cabecera.", max_length=200)
    ] = None,
) -> StreamingResponse:
    """Generate and stream the final view of a project as an Excel file.

    Raises:
        HTTPException 500: If workbook generation fails unexpectedly.
    """
    cliente_id, proyecto_id = proyecto
    cliente = cliente_nombre or cliente_id
    nombre_proyecto = proyecto_nombre or proyecto_id
    logger.info("GET /exportar/vista-final/excel cliente=%s proyecto=%s", cliente_id, proyecto_id)

    vista = presupuesto_ejecutivo_service.obtener_vista_final(db, cliente_id, proyecto_id)
    try:
        file_bytes = exportacion_service.export_excel(vista, filtros, cliente, nombre_proyecto)
    except Exception as exc:
        logger.exception("export_vista_final_excel failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error generando el archivo Excel: {exc}",
        ) from exc

    filename = exportacion_service.nombre_archivo(cliente, nombre_proyecto)
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"',
        "Content-Length": str(len(file_bytes)),
    }
    return StreamingResponse(io.BytesIO(file_bytes), media_type=_XLSX_MEDIA_TYPE, headers=headers)
