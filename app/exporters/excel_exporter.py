"""
Excel export helper wrapping xlsxwriter.

Provides ``ExcelExporter`` — a builder that writes a styled workbook in
memory and returns its bytes for ``StreamingResponse``.

Usage example::

    exporter = ExcelExporter(title="Vista Final", filters={"Proyecto": "Casa Norte"})
    exporter.add_header()
    exporter.add_kpi_row({"Total Paramétrico": 1000.0})
    exporter.add_data_table(headers, rows, numeric_cols={5, 6, 7})
    file_bytes = exporter.finalize()

Design notes
------------
- ``xlsxwriter`` in-memory mode (``BytesIO``).
- Money cells use ``"$"#,##0.00``.
- Rows can be tagged with a style (``"grupo"``, ``"excedido"``) so group
  headers and over-budget residuals stand out; untagged rows alternate
  white / light grey.
- The table header row is frozen.
"""

from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Any, Sequence

import xlsxwriter

_COLOR_PRIMARY = "#1E3A5F"
_COLOR_WHITE = "#FFFFFF"
_COLOR_LIGHT_GREY = "#F3F4F6"
_COLOR_GROUP_BG = "#DBEAFE"
_COLOR_DANGER_BG = "#FEE2E2"
_COLOR_DANGER_TEXT = "#B91C1C"
_COLOR_BORDER = "#E5E7EB"

_MONEY_FORMAT = '"$"#,##0.00'

_MAX_COL_WIDTH = 50
_MIN_COL_WIDTH = 8

ESTILO_GRUPO = "grupo"
ESTILO_EXCEDIDO = "excedido"


class ExcelExporter:
    """Single-sheet workbook: title block, KPI row and a data table.

    Args:
        title: Title shown in the merged header row.
        filters: Label/value pairs printed under the title.
        sheet_name: Worksheet tab name.
    """

    def __init__(
        self,
        title: str,
        filters: dict[str, str] | None = None,
        sheet_name: str = "Vista Final",
    ) -> None:
        self._title = title
        self._filters = filters or {}

        self._buffer = io.BytesIO()
        self._workbook = xlsxwriter.Workbook(self._buffer, {"in_memory": True})
        self._worksheet = self._workbook.add_worksheet(sheet_name[:31])

        self._current_row = 0
        self._num_cols = 9
        self._formats = self._build_formats()

    def _build_formats(self) -> dict[str, Any]:
        wb = self._workbook
        base = {"font_size": 9, "valign": "vcenter", "border": 1, "border_color": _COLOR_BORDER}

        def fmt(**extra: Any):
            return wb.add_format({**base, **extra})

        return {
            "title": wb.add_format({
                "bold": True, "font_size": 14, "font_color": _COLOR_WHITE,
                "bg_color": _COLOR_PRIMARY, "align": "center", "valign": "vcenter",
            }),
            "subtitle": wb.add_format({
                "font_size": 9, "font_color": "#374151", "align": "center",
            }),
            "filter_key": wb.add_format({"bold": True, "font_size": 9, "align": "right"}),
            "filter_value": wb.add_format({"font_size": 9, "align": "left"}),
            "kpi_label": fmt(bold=True, bg_color="#EFF6FF", align="center"),
            "kpi_value": fmt(bold=True, font_size=11, bg_color="#EFF6FF", align="center",
                             num_format=_MONEY_FORMAT),
            "kpi_count": fmt(bold=True, font_size=11, bg_color="#EFF6FF", align="center",
                             num_format="#,##0"),
            "col_header": fmt(bold=True, font_size=10, font_color=_COLOR_WHITE,
                              bg_color=_COLOR_PRIMARY, align="center", text_wrap=True),
            "text": fmt(bg_color=_COLOR_WHITE),
            "text_alt": fmt(bg_color=_COLOR_LIGHT_GREY),
            "money": fmt(bg_color=_COLOR_WHITE, align="right", num_format=_MONEY_FORMAT),
            "money_alt": fmt(bg_color=_COLOR_LIGHT_GREY, align="right", num_format=_MONEY_FORMAT),
            "text_grupo": fmt(bold=True, bg_color=_COLOR_GROUP_BG),
            "money_grupo": fmt(bold=True, bg_color=_COLOR_GROUP_BG, align="right",
                               num_format=_MONEY_FORMAT),
            "text_excedido": fmt(bg_color=_COLOR_DANGER_BG, font_color=_COLOR_DANGER_TEXT),
            "money_excedido": fmt(bg_color=_COLOR_DANGER_BG, font_color=_COLOR_DANGER_TEXT,
                                  align="right", num_format=_MONEY_FORMAT),
        }

    # -----------------------------------------------------------------------
    # Builder methods
    # -----------------------------------------------------------------------

    def add_header(self) -> "ExcelExporter":
        """Write the title row, the generation timestamp and filter rows."""
        ws = self._worksheet
        last_col = self._num_cols - 1

        ws.set_row(self._current_row, 28)
        ws.merge_range(self._current_row, 0, self._current_row, last_col,
                       self._title, self._formats["title"])
        self._current_row += 1

        generado = datetime.now(timezone.utc).strftime("%d/%m/%Y %H:%M UTC")
        ws.merge_range(self._current_row, 0, self._current_row, last_col,
                       f"Generado: {generado}", self._formats["subtitle"])
        self._current_row += 1

        for key, value in self._filters.items():
            ws.write(self._current_row, 0, key, self._formats["filter_key"])
            ws.write(self._current_row, 1, value, self._formats["filter_value"])
            self._current_row += 1

        self._current_row += 1
        return self

    def add_kpi_row(self, kpis: dict[str, Any]) -> "ExcelExporter":
        """Write label cells with their values underneath, side by side.

        ``int`` values are counts and skip the money format.
        """
        ws = self._worksheet
        for col, (label, value) in enumerate(kpis.items()):
            es_conteo = isinstance(value, int) and not isinstance(value, bool)
            ws.write(self._current_row, col, label, self._formats["kpi_label"])
            ws.write(self._current_row + 1, col, value,
                     self._formats["kpi_count" if es_conteo else "kpi_value"])
        self._current_row += 3
        return self

    def add_data_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
        numeric_cols: set[int] | None = None,
        row_styles: Sequence[str | None] | None = None,
    ) -> "ExcelExporter":
        """Write the column headers and the data rows.

        Args:
            headers: Column header strings.
            rows: Data rows; an empty row leaves a blank separator line.
            numeric_cols: Zero-based indices written with the money format
                when the cell holds a number.
            row_styles: Optional style tag per row (``"grupo"``,
                ``"excedido"`` or ``None``).
        """
        ws = self._worksheet
        numeric_cols = numeric_cols or set()
        row_styles = row_styles or [None] * len(rows)
        col_widths = [len(str(h)) for h in headers]

        for ci, header in enumerate(headers):
            ws.write(self._current_row, ci, header, self._formats["col_header"])
        ws.freeze_panes(self._current_row + 1, 0)
        self._current_row += 1

        shaded = False
        for data_row, style in zip(rows, row_styles):
            if not data_row:
                self._current_row += 1
                continue

            if style is None:
                suffix = "_alt" if shaded else ""
                shaded = not shaded
            else:
                suffix = f"_{style}"

            for ci, value in enumerate(data_row):
                is_money = ci in numeric_cols and isinstance(value, (int, float))
                fmt = self._formats[("money" if is_money else "text") + suffix]
                ws.write(self._current_row, ci, value, fmt)
                col_widths[ci] = min(_MAX_COL_WIDTH, max(col_widths[ci], len(str(value))))

            self._current_row += 1

        for ci, width in enumerate(col_widths):
            ws.set_column(ci, ci, max(width + 2, _MIN_COL_WIDTH))

        return self

    def finalize(self) -> bytes:
        """Close the workbook and return the ``.xlsx`` bytes."""
        self._workbook.close()
        self._buffer.seek(0)
        return self._buffer.read()
