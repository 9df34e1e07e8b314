"""Tests for the database-backed service of executive subpartidas."""

from decimal import Decimal

import pytest
from fastapi import HTTPException

from app.models import PresupuestoEjecutivoPartida, PresupuestoEjecutivoSubpartida
from app.schemas.presupuesto_ejecutivo import (
    EstadoResidual,
    SubpartidaEjecutivaCreate,
    SubpartidaEjecutivaUpdate,
    TipoFila,
)
from app.services import presupuesto_ejecutivo_service as service


def _crear(db, datos_proyecto, parametrico="limpieza", **kwargs):
    payload = {
        "cliente_id": datos_proyecto["cliente"],
        "proyecto_id": datos_proyecto["proyecto"],
        "parametrico_id": datos_proyecto[parametrico].id,
        "unidad": "m2",
        "cantidad": Decimal("10"),
        "precio_unitario": Decimal("12.25"),
    }
    payload.update(kwargs)
    return service.crear_subpartida(db, SubpartidaEjecutivaCreate(**payload))


# ==================== LECTURAS ====================

class TestLecturas:

    def test_listar_partidas_parametricas(self, db, proyecto_db):
        partidas = service.listar_partidas_parametricas(db, "cliente-1", "proyecto-1")

        assert [p.id for p in partidas] == [proyecto_db["limpieza"].id, proyecto_db["trazo"].id]
        primera = partidas[0]
        assert primera.mayor_codigo == "01"
        assert primera.mayor_nombre == "Preliminares"
        assert primera.partida_codigo == "01.01"
        assert primera.partida_nombre == "Limpieza de terreno"
        assert primera.monto_total == Decimal("1000")

    def test_listar_filtra_por_proyecto(self, db, proyecto_db):
        partidas = service.listar_partidas_parametricas(db, "cliente-1", "proyecto-2")
        assert [p.id for p in partidas] == [proyecto_db["otro_proyecto"].id]
        assert service.listar_partidas_parametricas(db, "otro-cliente", "proyecto-1") == []

    def test_listar_subpartidas_resuelve_enlace(self, db, proyecto_db):
        creada = _crear(db, proyecto_db, subpartida_id=proyecto_db["desmonte"].id)

        subpartidas = service.listar_subpartidas_ejecutivas(db, "cliente-1", "proyecto-1")

        assert len(subpartidas) == 1
        assert subpartidas[0].id == creada.id
        assert subpartidas[0].parametrico_id == proyecto_db["limpieza"].id
        assert subpartidas[0].subpartida.nombre == "Desmonte"

    def test_vista_final_vacia(self, db):
        vista = service.obtener_vista_final(db, "cliente-1", "proyecto-1")
        assert vista.filas == []
        assert vista.totales.partidas_count == 0

    def test_vista_final_desde_base_de_datos(self, db, proyecto_db):
        _crear(db, proyecto_db, cantidad=Decimal("100"), precio_unitario=Decimal("11"))

        vista = service.obtener_vista_final(db, "cliente-1", "proyecto-1")

        assert [f.tipo for f in vista.filas] == [
            TipoFila.RESIDUAL, TipoFila.SUBPARTIDA, TipoFila.RESIDUAL,
        ]
        residual = vista.filas[0]
        assert residual.importe == Decimal("-100")
        assert residual.estado is EstadoResidual.EXCEDIDO
        assert vista.totales.total_parametrico == Decimal("1500")
        assert vista.totales.total_ejecutivo == Decimal("1100")
        assert vista.totales.residuales_excedidos == 1
        assert list(vista.agrupado) == [proyecto_db["mayor"].id]

    def test_subpartida_sin_partida_ejecutivo_cuenta_como_huerfana(self, db, proyecto_db):
        db.add(PresupuestoEjecutivoSubpartida(
            cliente_id="cliente-1",
            proyecto_id="proyecto-1",
            partida_ejecutivo_id=None,
            importe=Decimal("42.00"),
        ))
        db.commit()

        vista = service.obtener_vista_final(db, "cliente-1", "proyecto-1")

        assert vista.totales.total_ejecutivo == Decimal("42")
        assert vista.totales.total_residual == Decimal("1500")
        assert all(f.tipo is TipoFila.RESIDUAL for f in vista.filas)


# ==================== ALTAS ====================

class TestCrearSubpartida:

    def test_calcula_importe_half_up(self, db, proyecto_db):
        registro = _crear(db, proyecto_db, cantidad=Decimal("0.5"))
        # 0.5 × 12.25 = 6.125
        assert registro.importe == Decimal("6.13")

    def test_congela_etiqueta_del_catalogo(self, db, proyecto_db):
        registro = _crear(
            db, proyecto_db,
            subpartida_id=proyecto_db["desmonte"].id,
            codigo="IGNORADO", nombre="Ignorado",
        )
        assert registro.codigo_snapshot == "01.01.01"
        assert registro.nombre_snapshot == "Desmonte"

        proyecto_db["desmonte"].nombre = "Desmonte renombrado"
        db.commit()

        vista = service.obtener_vista_final(db, "cliente-1", "proyecto-1")
        assert vista.filas[1].subpartida_nombre == "Desmonte"

    def test_etiqueta_libre_sin_catalogo(self, db, proyecto_db):
        registro = _crear(db, proyecto_db, codigo="X.01", nombre="Partida libre")
        assert registro.subpartida_id is None
        assert registro.codigo_snapshot == "X.01"
        assert registro.nombre_snapshot == "Partida libre"

    def test_reutiliza_partida_ejecutivo(self, db, proyecto_db):
        primera = _crear(db, proyecto_db)
        segunda = _crear(db, proyecto_db)
        assert primera.partida_ejecutivo_id == segunda.partida_ejecutivo_id
        assert db.query(PresupuestoEjecutivoPartida).count() == 1

    def test_parametrico_inexistente_404(self, db, proyecto_db):
        with pytest.raises(HTTPException) as exc_info:
            _crear(db, proyecto_db, parametrico_id="no-existe")
        assert exc_info.value.status_code == 404

    def test_parametrico_de_otro_proyecto_404(self, db, proyecto_db):
        with pytest.raises(HTTPException) as exc_info:
            _crear(db, proyecto_db, parametrico="otro_proyecto")
        assert exc_info.value.status_code == 404

    def test_subpartida_catalogo_inexistente_422(self, db, proyecto_db):
        with pytest.raises(HTTPException) as exc_info:
            _crear(db, proyecto_db, subpartida_id="no-existe")
        assert exc_info.value.status_code == 422
        assert db.query(PresupuestoEjecutivoSubpartida).count() == 0


# ==================== CAMBIOS Y BAJAS ====================

class TestActualizarYEliminar:

    def test_actualizar_recalcula_importe(self, db, proyecto_db):
        registro = _crear(db, proyecto_db)

        actualizado = service.actualizar_subpartida(
            db, registro.id, SubpartidaEjecutivaUpdate(cantidad=Decimal("2.5"))
        )

        # 2.5 × 12.25 = 30.625
        assert actualizado.importe == Decimal("30.63")
        assert actualizado.unidad == "m2"

    def test_actualizar_solo_unidad_conserva_importe(self, db, proyecto_db):
        registro = _crear(db, proyecto_db)
        actualizado = service.actualizar_subpartida(
            db, registro.id, SubpartidaEjecutivaUpdate(unidad="m3")
        )
        assert actualizado.unidad == "m3"
        assert actualizado.importe == Decimal("122.50")

    def test_actualizar_unidad_nula_la_limpia(self, db, proyecto_db):
        registro = _crear(db, proyecto_db)
        actualizado = service.actualizar_subpartida(
            db, registro.id, SubpartidaEjecutivaUpdate(unidad=None)
        )
        assert actualizado.unidad is None
        assert actualizado.importe == Decimal("122.50")

    def test_actualizar_cantidad_nula_se_ignora(self, db, proyecto_db):
        registro = _crear(db, proyecto_db)
        actualizado = service.actualizar_subpartida(
            db, registro.id, SubpartidaEjecutivaUpdate(cantidad=None, precio_unitario=None)
        )
        assert actualizado.cantidad == Decimal("10")
        assert actualizado.precio_unitario == Decimal("12.25")
        assert actualizado.importe == Decimal("122.50")

    def test_actualizar_inexistente_404(self, db):
        with pytest.raises(HTTPException) as exc_info:
            service.actualizar_subpartida(db, "no-existe", SubpartidaEjecutivaUpdate(unidad="m"))
        assert exc_info.value.status_code == 404

    def test_eliminar(self, db, proyecto_db):
        registro = _crear(db, proyecto_db)
        service.eliminar_subpartida(db, registro.id)
        assert db.get(PresupuestoEjecutivoSubpartida, registro.id) is None

    def test_eliminar_inexistente_404(self, db):
        with pytest.raises(HTTPException) as exc_info:
            service.eliminar_subpartida(db, "no-existe")
        assert exc_info.value.status_code == 404
