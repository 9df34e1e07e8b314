"""PresupuestoParametrico model — budgeted ceiling per partida."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from app.database import Base
from app.models.catalogo_cuenta import _uuid


def _ahora() -> datetime:
    return datetime.now(timezone.utc)


class PresupuestoParametrico(Base):
    """One parametric budget line for a client project.

    Attributes:
        id: UUID primary key.
        cliente_id: Owning client.
        proyecto_id: Owning project.
        departamento: Organisational department label.
        mayor_id: Foreign key to CuentaMayor.
        partida_id: Foreign key to CuentaPartida.
        cantidad_requerida: Quantity used to derive the ceiling.
        precio_unitario: Unit price used to derive the ceiling.
        monto_total: Budgeted ceiling for this partida.
    """

    __tablename__ = "presupuesto_parametrico"

    id = Column(String(36), primary_key=True, default=_uuid)
    cliente_id = Column(String(36), nullable=False, index=True)
    proyecto_id = Column(String(36), nullable=False, index=True)
    departamento = Column(String(100), nullable=False, default="CONSTRUCCIÓN")
    mayor_id = Column(String(36), ForeignKey("chart_of_accounts_mayor.id"), nullable=True)
    partida_id = Column(String(36), ForeignKey("chart_of_accounts_partidas.id"), nullable=True)
    cantidad_requerida = Column(Numeric(15, 4), default=0, nullable=False)
    precio_unitario = Column(Numeric(15, 2), default=0, nullable=False)
    monto_total = Column(Numeric(15, 2), default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_ahora, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_ahora, onupdate=_ahora, nullable=False)

    mayor = relationship("CuentaMayor", lazy="joined")
    partida = relationship("CuentaPartida", lazy="joined")
    partidas_ejecutivo = relationship(
        "PresupuestoEjecutivoPartida",
        back_populates="parametrico",
        lazy="select",
        cascade="all, delete-orphan",
    )
