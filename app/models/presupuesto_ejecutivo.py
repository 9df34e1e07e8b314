"""Executive budget breakdown — partida record and its subpartidas.

A subpartida reaches its parametric line through two hops:
``PresupuestoEjecutivoSubpartida.partida_ejecutivo`` →
``PresupuestoEjecutivoPartida.parametrico``.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from app.database import Base
from app.models.catalogo_cuenta import _uuid
from app.models.presupuesto_parametrico import _ahora


class PresupuestoEjecutivoPartida(Base):
    """Executive counterpart of one parametric line."""

    __tablename__ = "presupuesto_ejecutivo_partida"

    id = Column(String(36), primary_key=True, default=_uuid)
    cliente_id = Column(String(36), nullable=False, index=True)
    proyecto_id = Column(String(36), nullable=False, index=True)
    parametrico_id = Column(
        String(36),
        ForeignKey("presupuesto_parametrico.id", ondelete="CASCADE"),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), default=_ahora, nullable=False)

    parametrico = relationship(
        "PresupuestoParametrico", back_populates="partidas_ejecutivo", lazy="joined"
    )
    subpartidas = relationship(
        "PresupuestoEjecutivoSubpartida",
        back_populates="partida_ejecutivo",
        lazy="select",
        cascade="all, delete-orphan",
    )


class PresupuestoEjecutivoSubpartida(Base):
    """Executive line item priced as ``cantidad × precio_unitario``.

    ``codigo_snapshot`` / ``nombre_snapshot`` freeze the catalog label at
    creation time so historical rows stay readable after a rename.
    ``importe`` is computed on write and trusted on read.
    """

    __tablename__ = "presupuesto_ejecutivo_subpartida"

    id = Column(String(36), primary_key=True, default=_uuid)
    cliente_id = Column(String(36), nullable=False, index=True)
    proyecto_id = Column(String(36), nullable=False, index=True)
    partida_ejecutivo_id = Column(
        String(36),
        ForeignKey("presupuesto_ejecutivo_partida.id", ondelete="CASCADE"),
        nullable=True,
    )
    subpartida_id = Column(String(36), ForeignKey("chart_of_accounts_subpartidas.id"), nullable=True)
    codigo_snapshot = Column(String(20), nullable=True)
    nombre_snapshot = Column(String(255), nullable=True)
    unidad = Column(String(20), nullable=True)
    cantidad = Column(Numeric(15, 4), default=0, nullable=False)
    precio_unitario = Column(Numeric(15, 2), default=0, nullable=False)
    importe = Column(Numeric(15, 2), default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_ahora, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_ahora, onupdate=_ahora, nullable=False)

    partida_ejecutivo = relationship(
        "PresupuestoEjecutivoPartida", back_populates="subpartidas", lazy="joined"
    )
    subpartida = relationship("CuentaSubpartida", lazy="joined")
