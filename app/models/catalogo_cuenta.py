"""Chart-of-accounts catalog — mayor → partida → subpartida."""

import uuid

from sqlalchemy import Boolean, Column, ForeignKey, String
from sqlalchemy.orm import relationship

from app.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class CuentaMayor(Base):
    """Ledger "mayor" (major account) used to group budget lines.

    Attributes:
        id: UUID primary key.
        codigo: Display code, e.g. "01".
        nombre: Display name, e.g. "Preliminares".
        departamento: Department the mayor belongs to.
        activo: Soft-delete flag.
    """

    __tablename__ = "chart_of_accounts_mayor"

    id = Column(String(36), primary_key=True, default=_uuid)
    codigo = Column(String(20), nullable=False)
    nombre = Column(String(255), nullable=False)
    departamento = Column(String(100), nullable=True)
    activo = Column(Boolean, default=True, nullable=False)

    partidas = relationship("CuentaPartida", back_populates="mayor", lazy="select")


class CuentaPartida(Base):
    """Budget line ("partida") inside a mayor."""

    __tablename__ = "chart_of_accounts_partidas"

    id = Column(String(36), primary_key=True, default=_uuid)
    mayor_id = Column(String(36), ForeignKey("chart_of_accounts_mayor.id"), nullable=False)
    codigo = Column(String(20), nullable=False)
    nombre = Column(String(255), nullable=False)
    activo = Column(Boolean, default=True, nullable=False)

    mayor = relationship("CuentaMayor", back_populates="partidas", lazy="select")
    subpartidas = relationship("CuentaSubpartida", back_populates="partida", lazy="select")


class CuentaSubpartida(Base):
    """Catalog subpartida.

    Global subpartidas (``es_global``) have no parent partida and apply to
    every partida of ``departamento_aplicable``.
    """

    __tablename__ = "chart_of_accounts_subpartidas"

    id = Column(String(36), primary_key=True, default=_uuid)
    partida_id = Column(String(36), ForeignKey("chart_of_accounts_partidas.id"), nullable=True)
    codigo = Column(String(20), nullable=False)
    nombre = Column(String(255), nullable=False)
    departamento_aplicable = Column(String(100), nullable=True)
    es_global = Column(Boolean, default=False, nullable=False)
    activo = Column(Boolean, default=True, nullable=False)

    partida = relationship("CuentaPartida", back_populates="subpartidas", lazy="select")
