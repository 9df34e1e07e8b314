"""Seed data script for the Presupuesto Ejecutivo database.

Populates a demo client project with a small chart of accounts, a
parametric budget and an executive breakdown that exercises every row
state of the final view (within budget, exceeded, untouched).
The script is idempotent: it checks for existing records before inserting.

Usage (from the repository root):
    python seed_data.py
"""

from __future__ import annotations

import sys
import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# Ensure the backend package is importable when running from the repo root
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.database import Base, SessionLocal, engine  # noqa: E402
from app.models import (  # noqa: E402
    CuentaMayor,
    CuentaPartida,
    CuentaSubpartida,
    PresupuestoEjecutivoPartida,
    PresupuestoEjecutivoSubpartida,
    PresupuestoParametrico,
)
from app.utils.montos import calcular_importe  # noqa: E402

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

CLIENTE_DEMO = "00000000-0000-0000-0000-00000000c001"
PROYECTO_DEMO = "00000000-0000-0000-0000-00000000a001"
DEPARTAMENTO = "CONSTRUCCIÓN"

_INICIO = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def _dec(value: float) -> Decimal:
    """Convert float to Decimal for Numeric columns."""
    return Decimal(str(round(value, 2)))


# ---------------------------------------------------------------------------
# Seed functions
# ---------------------------------------------------------------------------


def seed_catalogo(session) -> dict[str, CuentaPartida]:
    """Insert two mayores with their partidas and a few subpartidas."""
    if session.query(CuentaMayor).count() > 0:
        print("  [SKIP] Catálogo de cuentas — table already has data.")
        return {p.codigo: p for p in session.query(CuentaPartida).all()}

    preliminares = CuentaMayor(codigo="01", nombre="Preliminares", departamento=DEPARTAMENTO)
    cimentacion = CuentaMayor(codigo="02", nombre="Cimentación", departamento=DEPARTAMENTO)
    session.add_all([preliminares, cimentacion])
    session.flush()

    partidas = [
        CuentaPartida(mayor_id=preliminares.id, codigo="01.01", nombre="Limpieza de terreno"),
        CuentaPartida(mayor_id=preliminares.id, codigo="01.02", nombre="Trazo y nivelación"),
        CuentaPartida(mayor_id=cimentacion.id, codigo="02.01", nombre="Excavación"),
        CuentaPartida(mayor_id=cimentacion.id, codigo="02.02", nombre="Zapatas"),
    ]
    session.add_all(partidas)
    session.flush()
    por_codigo = {p.codigo: p for p in partidas}

    session.add_all([
        CuentaSubpartida(partida_id=por_codigo["01.01"].id, codigo="01.01.01", nombre="Desmonte"),
        CuentaSubpartida(partida_id=por_codigo["02.01"].id, codigo="02.01.01", nombre="Excavación a máquina"),
        CuentaSubpartida(partida_id=por_codigo["02.01"].id, codigo="02.01.02", nombre="Acarreo de material"),
        CuentaSubpartida(codigo="99.01", nombre="Mano de obra", departamento_aplicable=DEPARTAMENTO, es_global=True),
    ])
    session.flush()
    print(f"  [OK] Catálogo — 2 mayores, {len(partidas)} partidas, 4 subpartidas.")
    return por_codigo


def seed_parametrico(session, partidas: dict[str, CuentaPartida]) -> dict[str, PresupuestoParametrico]:
    """Insert the parametric ceiling of each partida for the demo project."""
    existentes = session.query(PresupuestoParametrico).filter_by(proyecto_id=PROYECTO_DEMO).all()
    if existentes:
        print("  [SKIP] PresupuestoParametrico — demo project already has data.")
        return {p.partida.codigo: p for p in existentes if p.partida}

    montos = {"01.01": 25_000, "01.02": 8_000, "02.01": 60_000, "02.02": 120_000}
    registros: dict[str, PresupuestoParametrico] = {}
    for orden, (codigo, monto) in enumerate(montos.items()):
        partida = partidas[codigo]
        registros[codigo] = PresupuestoParametrico(
            cliente_id=CLIENTE_DEMO,
            proyecto_id=PROYECTO_DEMO,
            departamento=DEPARTAMENTO,
            mayor_id=partida.mayor_id,
            partida_id=partida.id,
            cantidad_requerida=_dec(1),
            precio_unitario=_dec(monto),
            monto_total=_dec(monto),
            created_at=_INICIO + timedelta(minutes=orden),
        )
    session.add_all(registros.values())
    session.flush()
    print(f"  [OK] PresupuestoParametrico — {len(registros)} registros insertados.")
    return registros


def seed_ejecutivo(session, parametricos: dict[str, PresupuestoParametrico]) -> None:
    """Break down two partidas: one stays within budget, one is exceeded."""
    if session.query(PresupuestoEjecutivoSubpartida).filter_by(proyecto_id=PROYECTO_DEMO).count() > 0:
        print("  [SKIP] PresupuestoEjecutivo — demo project already has data.")
        return

    catalogo = {s.codigo: s for s in session.query(CuentaSubpartida).all()}
    desglose = [
        # (partida paramétrica, subpartida catálogo, unidad, cantidad, precio unitario)
        ("01.01", "01.01.01", "m2", 1_200, 15.5),
        ("01.01", "99.01", "jor", 5, 450),
        ("02.01", "02.01.01", "m3", 310, 145.75),
        ("02.01", "02.01.02", "viaje", 40, 520),
    ]

    partidas_ejecutivo: dict[str, PresupuestoEjecutivoPartida] = {}
    for orden, (codigo_partida, codigo_sub, unidad, cantidad, precio) in enumerate(desglose):
        parametrico = parametricos[codigo_partida]
        partida_ejecutivo = partidas_ejecutivo.get(codigo_partida)
        if partida_ejecutivo is None:
            partida_ejecutivo = PresupuestoEjecutivoPartida(
                cliente_id=CLIENTE_DEMO,
                proyecto_id=PROYECTO_DEMO,
                parametrico_id=parametrico.id,
            )
            session.add(partida_ejecutivo)
            session.flush()
            partidas_ejecutivo[codigo_partida] = partida_ejecutivo

        sub = catalogo[codigo_sub]
        session.add(PresupuestoEjecutivoSubpartida(
            cliente_id=CLIENTE_DEMO,
            proyecto_id=PROYECTO_DEMO,
            partida_ejecutivo_id=partida_ejecutivo.id,
            subpartida_id=sub.id,
            codigo_snapshot=sub.codigo,
            nombre_snapshot=sub.nombre,
            unidad=unidad,
            cantidad=_dec(cantidad),
            precio_unitario=_dec(precio),
            importe=calcular_importe(cantidad, precio),
            created_at=_INICIO + timedelta(days=1, minutes=orden),
        ))
    session.flush()
    print(f"  [OK] PresupuestoEjecutivo — {len(desglose)} subpartidas insertadas.")


def main() -> None:
    print("=" * 60)
    print("  Presupuesto Ejecutivo — Seed Data Script")
    print(f"  Cliente: {CLIENTE_DEMO}  Proyecto: {PROYECTO_DEMO}")
    print("=" * 60)

    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        print("\n[1/3] Catálogo de cuentas...")
        partidas = seed_catalogo(session)

        print("\n[2/3] Presupuesto paramétrico...")
        parametricos = seed_parametrico(session, partidas)

        print("\n[3/3] Presupuesto ejecutivo...")
        seed_ejecutivo(session, parametricos)

        session.commit()
        print("\n" + "=" * 60)
        print("  Seed completado exitosamente.")
        print("=" * 60)

    except Exception as exc:
        session.rollback()
        print("\n[ERROR] Seed fallido — se hizo rollback.")
        print(f"  Detalle: {exc}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
