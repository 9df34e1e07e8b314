"""
Configuración central de pytest y fixtures compartidas.

Proporciona:
- Base de datos SQLite en memoria (una por test)
- Cliente HTTP de prueba con ``get_db`` sobreescrito
- Fábricas de filas de entrada para la conciliación
"""
import os

# Must be set before ``app.config`` is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime, timedelta, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.models import (  # noqa: E402
    CuentaMayor,
    CuentaPartida,
    CuentaSubpartida,
    PresupuestoParametrico,
)
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# ==================== BASE DE DATOS ====================

@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def db(engine):
    """Sesión de base de datos aislada por test."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def client(engine):
    """Cliente HTTP con la dependencia ``get_db`` apuntando a SQLite en memoria."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ==================== FÁBRICAS DE ENTRADA ====================

@pytest.fixture
def parametrico():
    """Fábrica de partidas paramétricas (dict) con valores por defecto."""

    def _crear(id="p1", monto_total=1000, mayor_id="m1", **extra):
        fila = {
            "id": id,
            "departamento": "CONSTRUCCIÓN",
            "mayor_id": mayor_id,
            "mayor_codigo": "01",
            "mayor_nombre": "Preliminares",
            "partida_id": f"partida-{id}",
            "partida_codigo": "01.01",
            "partida_nombre": f"Partida {id}",
            "monto_total": monto_total,
        }
        fila.update(extra)
        return fila

    return _crear


@pytest.fixture
def subpartida():
    """Fábrica de subpartidas ejecutivas (dict) enlazadas por dos saltos."""

    def _crear(id, parametrico_id="p1", importe=0, minutos=0, **extra):
        fila = {
            "id": id,
            "partida_ejecutivo": (
                {"id": f"pe-{parametrico_id}", "parametrico": {"id": parametrico_id}}
                if parametrico_id is not None
                else None
            ),
            "subpartida": {"codigo": f"C-{id}", "nombre": f"Catálogo {id}"},
            "unidad": "m2",
            "cantidad": 1,
            "precio_unitario": importe,
            "importe": importe,
            "created_at": (T0 + timedelta(minutes=minutos)).isoformat(),
        }
        fila.update(extra)
        return fila

    return _crear



# ==================== DATOS EN BASE DE DATOS ====================

CLIENTE = "cliente-1"
PROYECTO = "proyecto-1"


@pytest.fixture
def proyecto_db(db):
    """Catálogo mínimo y dos partidas paramétricas del proyecto de prueba.

    Returns:
        dict con los registros creados, por nombre corto.
    """
    mayor = CuentaMayor(codigo="01", nombre="Preliminares", departamento="CONSTRUCCIÓN")
    db.add(mayor)
    db.flush()

    limpieza = CuentaPartida(mayor_id=mayor.id, codigo="01.01", nombre="Limpieza de terreno")
    trazo = CuentaPartida(mayor_id=mayor.id, codigo="01.02", nombre="Trazo y nivelación")
    db.add_all([limpieza, trazo])
    db.flush()

    desmonte = CuentaSubpartida(partida_id=limpieza.id, codigo="01.01.01", nombre="Desmonte")
    db.add(desmonte)

    p_limpieza = PresupuestoParametrico(
        cliente_id=CLIENTE,
        proyecto_id=PROYECTO,
        mayor_id=mayor.id,
        partida_id=limpieza.id,
        monto_total=Decimal("1000.00"),
        created_at=T0,
    )
    p_trazo = PresupuestoParametrico(
        cliente_id=CLIENTE,
        proyecto_id=PROYECTO,
        mayor_id=mayor.id,
        partida_id=trazo.id,
        monto_total=Decimal("500.00"),
        created_at=T0 + timedelta(minutes=1),
    )
    otro_proyecto = PresupuestoParametrico(
        cliente_id=CLIENTE,
        proyecto_id="proyecto-2",
        mayor_id=mayor.id,
        partida_id=trazo.id,
        monto_total=Decimal("999.00"),
    )
    db.add_all([p_limpieza, p_trazo, otro_proyecto])
    db.commit()

    return {
        "cliente": CLIENTE,
        "proyecto": PROYECTO,
        "mayor": mayor,
        "desmonte": desmonte,
        "limpieza": p_limpieza,
        "trazo": p_trazo,
        "otro_proyecto": otro_proyecto,
    }
