"""
Export service layer for the "Vista Final".

Turns reconciled rows into the nine-column sheet the budget team already
uses (Departamento … Origen) and hands it to ``ExcelExporter``.  Filters and
grouping are applied with the same functions the table endpoint uses, so an
export always matches what is on screen.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any

from app.config import get_settings
from app.exporters.excel_exporter import ESTILO_EXCEDIDO, ESTILO_GRUPO, ExcelExporter
from app.schemas.presupuesto_ejecutivo import (
    EstadoResidual,
    FilaVistaFinal,
    FiltrosVistaFinal,
    TipoFila,
    VistaFinalResponse,
)
from app.services import vista_final_service
from app.utils.constants import (
    COLUMNAS_EXPORTACION,
    ORIGEN_EXCEDIDO,
    ORIGEN_RESIDUAL,
    ORIGEN_SUBPARTIDA,
    SIN_VALOR,
)

logger = logging.getLogger(__name__)

# P.U. and Importe; Cantidad is a quantity, not money
_COLUMNAS_MONTO = {6, 7}


def _etiqueta(codigo: str | None, nombre: str | None) -> str:
    return f"{codigo or ''} - {nombre or ''}"


def origen_fila(fila: FilaVistaFinal) -> str:
    """``Excedido`` / ``Residual`` for residual rows, ``Subpartida`` otherwise."""
    if fila.tipo is TipoFila.RESIDUAL:
        return ORIGEN_EXCEDIDO if fila.estado is EstadoResidual.EXCEDIDO else ORIGEN_RESIDUAL
    return ORIGEN_SUBPARTIDA


def fila_a_celdas(fila: FilaVistaFinal) -> list[Any]:
    """Render one row as the nine export cells."""
    return [
        fila.departamento,
        _etiqueta(fila.mayor_codigo, fila.mayor_nombre),
        _etiqueta(fila.partida_codigo, fila.partida_nombre),
        _etiqueta(fila.subpartida_codigo, fila.subpartida_nombre) if fila.subpartida_nombre else SIN_VALOR,
        fila.unidad or SIN_VALOR,
        float(fila.cantidad) if fila.cantidad else SIN_VALOR,
        float(fila.precio_unitario) if fila.precio_unitario else SIN_VALOR,
        float(fila.importe),
        origen_fila(fila),
    ]


def construir_tabla_exportacion(
    vista: VistaFinalResponse, filtros: FiltrosVistaFinal
) -> tuple[list[list[Any]], list[str | None]]:
    """Build export rows and their style tags.

    With ``agrupar_por_mayor`` each group is preceded by a header row
    carrying the group total and followed by an empty separator row.

    Returns:
        ``(rows, styles)`` of equal length.
    """
    filas = vista_final_service.filtrar_filas(vista.filas, filtros)
    max_filas = get_settings().EXPORT_MAX_FILAS
    if len(filas) > max_filas:
        logger.warning("Exportación truncada: %d filas > máximo %d", len(filas), max_filas)
        filas = filas[:max_filas]

    rows: list[list[Any]] = []
    styles: list[str | None] = []

    def _agregar(fila: FilaVistaFinal) -> None:
        rows.append(fila_a_celdas(fila))
        excedida = fila.tipo is TipoFila.RESIDUAL and fila.estado is EstadoResidual.EXCEDIDO
        styles.append(ESTILO_EXCEDIDO if excedida else None)

    if filtros.agrupar_por_mayor:
        for grupo in vista_final_service.agrupar_filas(filas):
            total = float(grupo.total)
            rows.append(["", f"=== {grupo.mayor} ===", "", "", "", "", "", total, f"Total: ${total:,.2f}"])
            styles.append(ESTILO_GRUPO)
            for fila in grupo.filas:
                _agregar(fila)
            rows.append([])
            styles.append(None)
    else:
        for fila in filas:
            _agregar(fila)

    return rows, styles


def nombre_archivo(cliente: str, proyecto: str, ahora: datetime | None = None) -> str:
    """``Vista-Final_{cliente}_{proyecto}_{YYYYMMDD_HHMM}.xlsx`` with safe characters."""
    ahora = ahora or datetime.now()

    def _limpio(texto: str) -> str:
        return re.sub(r"[^\w\-]+", "_", texto.strip(), flags=re.ASCII).strip("_") or "sin_nombre"

    return f"Vista-Final_{_limpio(cliente)}_{_limpio(proyecto)}_{ahora:%Y%m%d_%H%M}.xlsx"


def export_excel(
    vista: VistaFinalResponse,
    filtros: FiltrosVistaFinal,
    cliente: str,
    proyecto: str,
) -> bytes:
    """Generate the ``.xlsx`` bytes of the final view.

    Args:
        vista: Reconciliation result for the project.
        filtros: Table controls to honour (search, status, grouping, sort).
        cliente: Client label for the header.
        proyecto: Project label for the header.
    """
    rows, styles = construir_tabla_exportacion(vista, filtros)
    totales = vista.totales

    exporter = ExcelExporter(
        title="Presupuesto Ejecutivo — Vista Final",
        filters={"Cliente": cliente, "Proyecto": proyecto},
    )
    exporter.add_header()
    exporter.add_kpi_row({
        "Total Paramétrico": float(totales.total_parametrico),
        "Total Ejecutivo": float(totales.total_ejecutivo),
        "Total Residual": float(totales.total_residual),
        "Diferencia": float(totales.diferencia),
        "Partidas": totales.partidas_count,
        "Subpartidas": totales.subpartidas_count,
        "Excedidos": totales.residuales_excedidos,
    })
    exporter.add_data_table(
        COLUMNAS_EXPORTACION, rows, numeric_cols=_COLUMNAS_MONTO, row_styles=styles
    )

    logger.info("export_excel: %d filas exportadas (%s / %s)", len(rows), cliente, proyecto)
    return exporter.finalize()
