"""
Shared Pydantic v2 types and schemas reused across modules.

Money is carried as ``Decimal`` inside the service so that totals are exact,
and written as a JSON number on the way out.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, PlainSerializer

from app.utils.montos import a_decimal


def _id_a_texto(valor: Any) -> Any:
    """Identifiers and codes may arrive as int or UUID; keep them as strings."""
    if valor is None or isinstance(valor, str):
        return valor
    return str(valor)


def _texto_o_vacio(valor: Any) -> str:
    """Labels may arrive as numbers (ledger codes like 101); render them as text."""
    if valor is None:
        return ""
    return valor if isinstance(valor, str) else str(valor)


def _fecha_o_none(valor: Any) -> datetime | None:
    """Parse timestamps leniently — unparseable values become ``None``."""
    if valor is None or isinstance(valor, datetime):
        return valor
    if isinstance(valor, str) and valor.strip():
        try:
            return datetime.fromisoformat(valor.strip())
        except ValueError:
            return None
    return None


_a_json = PlainSerializer(float, return_type=float, when_used="json")

# Exact money value, serialised as a JSON number.
Monto = Annotated[Decimal, _a_json]

# Money read from upstream rows: missing or garbage values become 0.
MontoFlexible = Annotated[Decimal, BeforeValidator(a_decimal), _a_json]

Identificador = Annotated[str, BeforeValidator(_id_a_texto)]
IdentificadorOpcional = Annotated[str | None, BeforeValidator(_id_a_texto)]
Texto = Annotated[str, BeforeValidator(_texto_o_vacio)]
TextoOpcional = Annotated[str | None, BeforeValidator(_id_a_texto)]
FechaFlexible = Annotated[datetime | None, BeforeValidator(_fecha_o_none)]


class MessageResponse(BaseModel):
    """Generic message envelope for operations that do not return a resource.

    Attributes:
        message: Short human-readable result summary.
        detail: Optional extended information (error description, hint, etc.).
    """

    message: str = Field(..., description="Resumen del resultado de la operación.")
    detail: str | None = Field(
        default=None,
        description="Información adicional (contexto de error, sugerencia, etc.).",
    )
