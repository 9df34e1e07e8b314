"""
Application-wide constants for the Presupuesto Ejecutivo service.

Defines row/status enumerations, the residual tolerance, and the labels
used by the final-view table and its Excel export.
"""

from decimal import Decimal
from typing import Final

# ---------------------------------------------------------------------------
# Final-view row types
# ---------------------------------------------------------------------------

TIPO_RESIDUAL: Final[str] = "residual"
TIPO_SUBPARTIDA: Final[str] = "subpartida"
# Reserved: no current code path emits it
TIPO_PARAMETRICO_SIN_DESAGREGAR: Final[str] = "parametrico_sin_desagregar"

# ---------------------------------------------------------------------------
# Residual status
# ---------------------------------------------------------------------------

ESTADO_DENTRO: Final[str] = "dentro"
ESTADO_EXCEDIDO: Final[str] = "excedido"

# A residual at or above this value is still "dentro"
TOLERANCIA_RESIDUAL: Final[Decimal] = Decimal("-0.01")

# ---------------------------------------------------------------------------
# Grouping by mayor
# ---------------------------------------------------------------------------

MAYOR_SIN_ASIGNAR_ID: Final[str] = "sin_mayor"
MAYOR_SIN_ASIGNAR_NOMBRE: Final[str] = "Sin Mayor"

# ---------------------------------------------------------------------------
# Budget summary (sidebar) status
# ---------------------------------------------------------------------------

RESUMEN_BALANCEADO: Final[str] = "balanceado"
RESUMEN_SOBREPRESUPUESTO: Final[str] = "sobrepresupuesto"
RESUMEN_EN_PROGRESO: Final[str] = "en_progreso"

# |ejecutivo − paramétrico| below this is "balanceado"
TOLERANCIA_BALANCE: Final[Decimal] = Decimal("0.01")

# ---------------------------------------------------------------------------
# Money
# ---------------------------------------------------------------------------

CENTAVO: Final[Decimal] = Decimal("0.01")
CERO: Final[Decimal] = Decimal("0")

# ---------------------------------------------------------------------------
# Excel export
# ---------------------------------------------------------------------------

COLUMNAS_EXPORTACION: Final[list[str]] = [
    "Departamento",
    "Mayor",
    "Partida",
    "Subpartida",
    "Unidad",
    "Cantidad",
    "P.U.",
    "Importe",
    "Origen",
]

SIN_VALOR: Final[str] = "—"

ORIGEN_EXCEDIDO: Final[str] = "Excedido"
ORIGEN_RESIDUAL: Final[str] = "Residual"
ORIGEN_SUBPARTIDA: Final[str] = "Subpartida"
