"""
SQLAlchemy ORM models for the Presupuesto Ejecutivo service.

Import order matters: referenced models must be registered before models
that declare foreign keys or relationships pointing to them.

Usage::

    from app.models import PresupuestoParametrico, PresupuestoEjecutivoSubpartida
"""

# Chart of accounts catalog
from app.models.catalogo_cuenta import CuentaMayor, CuentaPartida, CuentaSubpartida  # noqa: F401

# Parametric budget
from app.models.presupuesto_parametrico import PresupuestoParametrico  # noqa: F401

# Executive breakdown
from app.models.presupuesto_ejecutivo import (  # noqa: F401
    PresupuestoEjecutivoPartida,
    PresupuestoEjecutivoSubpartida,
)

__all__ = [
    "CuentaMayor",
    "CuentaPartida",
    "CuentaSubpartida",
    "PresupuestoParametrico",
    "PresupuestoEjecutivoPartida",
    "PresupuestoEjecutivoSubpartida",
]
