"""
Money helpers shared by the reconciliation engine and the write path.

``a_decimal`` is deliberately lenient: rows coming from the data layer may
carry ``None``, empty strings or garbage in numeric columns, and the final
view must still render totals.  Anything that is not a finite number
becomes ``Decimal("0")``.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from app.utils.constants import CENTAVO, CERO

logger = logging.getLogger(__name__)


def a_decimal(valor: Any) -> Decimal:
    """Coerce ``valor`` to a finite ``Decimal``, falling back to zero.

    Floats are converted through ``str`` so that ``0.1`` becomes
    ``Decimal("0.1")`` and not its binary expansion.

    Args:
        valor: Any scalar — ``Decimal``, ``int``, ``float``, ``str`` or ``None``.

    Returns:
        The numeric value as ``Decimal``, or ``Decimal("0")`` when the input
        is missing, non-numeric, NaN or infinite.
    """
    if valor is None or isinstance(valor, bool):
        return CERO
    if isinstance(valor, Decimal):
        resultado = valor
    elif isinstance(valor, int):
        return Decimal(valor)
    else:
        texto = str(valor).strip()
        if not texto:
            return CERO
        try:
            resultado = Decimal(texto)
        except (InvalidOperation, ValueError):
            logger.debug("a_decimal: valor no numérico %r coercionado a 0", valor)
            return CERO
    if not resultado.is_finite():
        return CERO
    return resultado


def redondear(valor: Any) -> Decimal:
    """Round to cents using half-up, the way invoices are rounded."""
    return a_decimal(valor).quantize(CENTAVO, rounding=ROUND_HALF_UP)


def calcular_importe(cantidad: Any, precio_unitario: Any) -> Decimal:
    """Return ``cantidad × precio_unitario`` rounded to two decimals (half-up)."""
    return redondear(a_decimal(cantidad) * a_decimal(precio_unitario))
