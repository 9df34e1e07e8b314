"""
Pydantic v2 schemas for the Presupuesto Ejecutivo module.

Input models describe the already-fetched rows the reconciliation consumes;
output models are the exact JSON shapes returned by
``app/routers/presupuesto_ejecutivo.py``.  Output keys follow the contract
the frontend already reads (``rows`` / ``totals`` / ``grouped`` and camelCase
totals), declared as aliases over Spanish snake_case attributes.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.common import (
    FechaFlexible,
    Identificador,
    IdentificadorOpcional,
    Monto,
    MontoFlexible,
    Texto,
    TextoOpcional,
)
from app.utils.constants import (
    ESTADO_DENTRO,
    ESTADO_EXCEDIDO,
    RESUMEN_BALANCEADO,
    RESUMEN_EN_PROGRESO,
    RESUMEN_SOBREPRESUPUESTO,
    TIPO_PARAMETRICO_SIN_DESAGREGAR,
    TIPO_RESIDUAL,
    TIPO_SUBPARTIDA,
)


class TipoFila(str, Enum):
    RESIDUAL = TIPO_RESIDUAL
    SUBPARTIDA = TIPO_SUBPARTIDA
    PARAMETRICO_SIN_DESAGREGAR = TIPO_PARAMETRICO_SIN_DESAGREGAR


class EstadoResidual(str, Enum):
    DENTRO = ESTADO_DENTRO
    EXCEDIDO = ESTADO_EXCEDIDO


# ---------------------------------------------------------------------------
# Reconciliation input
# ---------------------------------------------------------------------------


class PartidaParametricaIn(BaseModel):
    """One parametric budget line, with mayor/partida labels already joined.

    Attributes:
        id: Opaque unique identifier.
        departamento: Department label.
        mayor_id: Grouping key (``None`` groups under ``sin_mayor``).
        monto_total: Budgeted ceiling; missing or non-numeric becomes 0.
    """

    model_config = ConfigDict(extra="ignore")

    id: Identificador
    departamento: Texto = ""
    mayor_id: IdentificadorOpcional = None
    mayor_codigo: Texto = ""
    mayor_nombre: Texto = ""
    partida_id: IdentificadorOpcional = None
    partida_codigo: Texto = ""
    partida_nombre: Texto = ""
    monto_total: MontoFlexible = Decimal("0")


class ReferenciaParametrico(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: IdentificadorOpcional = None


class ReferenciaPartidaEjecutivo(BaseModel):
    """First hop of the subpartida → parametric link."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: IdentificadorOpcional = None
    parametrico: ReferenciaParametrico | None = None


class ReferenciaCatalogo(BaseModel):
    """Live catalog join for a subpartida label."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    codigo: TextoOpcional = None
    nombre: TextoOpcional = None


class SubpartidaEjecutivaIn(BaseModel):
    """One executive subpartida as read from the data layer.

    ``importe`` is trusted as stored; it is not recomputed here.
    """

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: Identificador
    partida_ejecutivo: ReferenciaPartidaEjecutivo | None = None
    subpartida: ReferenciaCatalogo | None = None
    codigo_snapshot: TextoOpcional = None
    nombre_snapshot: TextoOpcional = None
    unidad: Texto = ""
    cantidad: MontoFlexible = Decimal("0")
    precio_unitario: MontoFlexible = Decimal("0")
    importe: MontoFlexible = Decimal("0")
    created_at: FechaFlexible = None

    @property
    def parametrico_id(self) -> str | None:
        """Resolve the two-hop parent reference, or ``None`` if broken."""
        if self.partida_ejecutivo is None or self.partida_ejecutivo.parametrico is None:
            return None
        return self.partida_ejecutivo.parametrico.id or None


class ConciliacionRequest(BaseModel):
    """Payload for ``POST /conciliar``."""

    parametricos: list[PartidaParametricaIn] = Field(default_factory=list)
    ejecutivos: list[SubpartidaEjecutivaIn] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Reconciliation output
# ---------------------------------------------------------------------------


class FilaVistaFinal(BaseModel):
    """One row of the final view: a residual or an executive subpartida."""

    id: str
    tipo: TipoFila
    departamento: str = ""
    mayor_codigo: str = ""
    mayor_nombre: str = ""
    partida_codigo: str = ""
    partida_nombre: str = ""
    subpartida_codigo: str | None = None
    subpartida_nombre: str | None = None
    unidad: str | None = None
    cantidad: Monto | None = None
    precio_unitario: Monto | None = None
    importe: Monto
    estado: EstadoResidual | None = None
    parametrico_partida_id: str
    mayor_id: str | None = None
    partida_id: str | None = None
    created_at: datetime | None = None


class TotalesVistaFinal(BaseModel):
    """Global totals of the final view (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_parametrico: Monto = Decimal("0")
    total_ejecutivo: Monto = Decimal("0")
    total_residual: Monto = Decimal("0")
    diferencia: Monto = Decimal("0")
    partidas_count: int = 0
    subpartidas_count: int = 0
    residuales_excedidos: int = 0


class GrupoMayor(BaseModel):
    """Rows and running subtotals of one mayor."""

    model_config = ConfigDict(populate_by_name=True)

    mayor_codigo: str = ""
    mayor_nombre: str = ""
    filas: list[FilaVistaFinal] = Field(default_factory=list, alias="rows")
    subtotal_parametrico: Monto = Decimal("0")
    subtotal_ejecutivo: Monto = Decimal("0")
    subtotal_residual: Monto = Decimal("0")


class VistaFinalResponse(BaseModel):
    """Full reconciliation result: flat rows, totals and groups by mayor."""

    model_config = ConfigDict(populate_by_name=True)

    filas: list[FilaVistaFinal] = Field(default_factory=list, alias="rows")
    totales: TotalesVistaFinal = Field(default_factory=TotalesVistaFinal, alias="totals")
    agrupado: dict[str, GrupoMayor] = Field(default_factory=dict, alias="grouped")


# ---------------------------------------------------------------------------
# Final-view table (filters, sorting, grouping)
# ---------------------------------------------------------------------------


class EstadoFiltro(str, Enum):
    TODOS = "todos"
    DENTRO = "dentro"
    EXCEDIDO = "excedido"
    RESIDUAL = "residual"
    SUBPARTIDAS = "subpartidas"


class OrdenarPor(str, Enum):
    MAYOR = "mayor"
    PARTIDA = "partida"
    IMPORTE = "importe"


class Orden(str, Enum):
    ASC = "asc"
    DESC = "desc"


class FiltrosVistaFinal(BaseModel):
    """Table controls of the final view.

    Attributes:
        busqueda: Case-insensitive text matched against labels and codes.
        departamento: Exact department, ``None`` for all.
        estado: Row-type / residual-status filter.
        ordenar_por: Sort key.
        orden: Sort direction.
        solo_residuales_negativos: With ``estado=todos``, hide residual rows
            that are not negative.
        agrupar_por_mayor: Also return rows grouped by mayor.
    """

    busqueda: str | None = Field(default=None, max_length=200)
    departamento: str | None = Field(default=None, max_length=100)
    estado: EstadoFiltro = EstadoFiltro.TODOS
    ordenar_por: OrdenarPor = OrdenarPor.MAYOR
    orden: Orden = Orden.ASC
    solo_residuales_negativos: bool = False
    agrupar_por_mayor: bool = False


class GrupoFiltrado(BaseModel):
    clave: str
    mayor: str
    filas: list[FilaVistaFinal] = Field(default_factory=list)
    total: Monto = Decimal("0")


class TablaVistaFinalResponse(BaseModel):
    filas: list[FilaVistaFinal] = Field(default_factory=list)
    grupos: list[GrupoFiltrado] = Field(default_factory=list)
    departamentos: list[str] = Field(default_factory=list)
    totales: TotalesVistaFinal = Field(default_factory=TotalesVistaFinal)


class EstadoResumen(str, Enum):
    BALANCEADO = RESUMEN_BALANCEADO
    SOBREPRESUPUESTO = RESUMEN_SOBREPRESUPUESTO
    EN_PROGRESO = RESUMEN_EN_PROGRESO


class ResumenPresupuestoResponse(BaseModel):
    """Budget status card: progress of executive against parametric."""

    estado: EstadoResumen
    progreso_porcentaje: float = Field(..., ge=0.0, description="Ejecutivo / paramétrico × 100.")
    diferencia: Monto = Field(..., description="Ejecutivo − paramétrico.")
    totales: TotalesVistaFinal


# ---------------------------------------------------------------------------
# Executive subpartida CRUD
# ---------------------------------------------------------------------------


class SubpartidaEjecutivaCreate(BaseModel):
    cliente_id: Identificador
    proyecto_id: Identificador
    parametrico_id: Identificador
    subpartida_id: IdentificadorOpcional = None
    codigo: str | None = Field(default=None, max_length=20, description="Código si no hay subpartida de catálogo.")
    nombre: str | None = Field(default=None, max_length=255, description="Nombre si no hay subpartida de catálogo.")
    unidad: str | None = Field(default=None, max_length=20)
    cantidad: Decimal = Field(..., ge=0)
    precio_unitario: Decimal = Field(..., ge=0)


class SubpartidaEjecutivaUpdate(BaseModel):
    unidad: str | None = Field(default=None, max_length=20)
    cantidad: Decimal | None = Field(default=None, ge=0)
    precio_unitario: Decimal | None = Field(default=None, ge=0)


class SubpartidaEjecutivaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    cliente_id: str
    proyecto_id: str
    partida_ejecutivo_id: str | None = None
    subpartida_id: str | None = None
    codigo_snapshot: str | None = None
    nombre_snapshot: str | None = None
    unidad: str | None = None
    cantidad: Monto
    precio_unitario: Monto
    importe: Monto
    created_at: datetime | None = None
