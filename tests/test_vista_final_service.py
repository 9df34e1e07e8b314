"""Tests for filtering, sorting, grouping and the summary card of the final view."""

from decimal import Decimal

import pytest

from app.schemas.presupuesto_ejecutivo import (
    EstadoFiltro,
    EstadoResumen,
    FiltrosVistaFinal,
    Orden,
    OrdenarPor,
    TipoFila,
    TotalesVistaFinal,
)
from app.services import vista_final_service
from app.services.conciliacion_service import conciliar


@pytest.fixture
def vista(parametrico, subpartida):
    """Two mayores, two departments, one excedido and one untouched partida."""
    return conciliar(
        [
            parametrico(
                "p1", monto_total=1000, mayor_id="m1", mayor_codigo="01",
                mayor_nombre="Preliminares", partida_codigo="01.01", partida_nombre="Limpieza",
            ),
            parametrico(
                "p2", monto_total=500, mayor_id="m2", mayor_codigo="02",
                mayor_nombre="Cimentación", partida_codigo="02.01", partida_nombre="Excavación",
            ),
            parametrico(
                "p3", monto_total=200, mayor_id="m1", mayor_codigo="01",
                mayor_nombre="Preliminares", partida_codigo="01.02", partida_nombre="Trazo",
                departamento="INSTALACIONES",
            ),
        ],
        [
            subpartida("s1", "p1", importe=300, nombre_snapshot="Desmonte"),
            subpartida("s2", "p2", importe=700, nombre_snapshot="Excavación a máquina"),
        ],
    )


def _ids(filas):
    return [f.id for f in filas]


# ==================== FILTROS ====================

class TestFiltrarFilas:

    def test_sin_filtros_ordena_por_mayor_y_partida(self, vista):
        filas = vista_final_service.filtrar_filas(vista.filas, FiltrosVistaFinal())
        assert _ids(filas) == [
            "residual-p2", "subpartida-s2",
            "residual-p1", "subpartida-s1",
            "residual-p3",
        ]

    def test_busqueda_sin_distinguir_mayusculas(self, vista):
        filas = vista_final_service.filtrar_filas(
            vista.filas, FiltrosVistaFinal(busqueda="  DESMONTE ")
        )
        assert _ids(filas) == ["subpartida-s1"]

    def test_busqueda_por_codigo(self, vista):
        filas = vista_final_service.filtrar_filas(vista.filas, FiltrosVistaFinal(busqueda="02.01"))
        assert set(_ids(filas)) == {"residual-p2", "subpartida-s2"}

    def test_busqueda_vacia_no_filtra(self, vista):
        filas = vista_final_service.filtrar_filas(vista.filas, FiltrosVistaFinal(busqueda="   "))
        assert len(filas) == len(vista.filas)

    def test_departamento_exacto(self, vista):
        filas = vista_final_service.filtrar_filas(
            vista.filas, FiltrosVistaFinal(departamento="INSTALACIONES")
        )
        assert _ids(filas) == ["residual-p3"]

    @pytest.mark.parametrize(
        "estado, esperado",
        [
            (EstadoFiltro.DENTRO, {"residual-p1", "residual-p3"}),
            (EstadoFiltro.EXCEDIDO, {"residual-p2"}),
            (EstadoFiltro.RESIDUAL, {"residual-p1", "residual-p2", "residual-p3"}),
            (EstadoFiltro.SUBPARTIDAS, {"subpartida-s1", "subpartida-s2"}),
        ],
    )
    def test_filtro_por_estado(self, vista, estado, esperado):
        filas = vista_final_service.filtrar_filas(vista.filas, FiltrosVistaFinal(estado=estado))
        assert set(_ids(filas)) == esperado

    def test_solo_residuales_negativos(self, vista):
        filas = vista_final_service.filtrar_filas(
            vista.filas, FiltrosVistaFinal(solo_residuales_negativos=True)
        )
        residuales = [f for f in filas if f.tipo is TipoFila.RESIDUAL]
        assert _ids(residuales) == ["residual-p2"]
        assert {"subpartida-s1", "subpartida-s2"} <= set(_ids(filas))

    def test_solo_negativos_ignorado_con_otro_estado(self, vista):
        filas = vista_final_service.filtrar_filas(
            vista.filas,
            FiltrosVistaFinal(estado=EstadoFiltro.DENTRO, solo_residuales_negativos=True),
        )
        assert set(_ids(filas)) == {"residual-p1", "residual-p3"}

    def test_orden_por_importe_absoluto_desc(self, vista):
        filas = vista_final_service.filtrar_filas(
            vista.filas,
            FiltrosVistaFinal(ordenar_por=OrdenarPor.IMPORTE, orden=Orden.DESC),
        )
        assert [f.importe for f in filas] == [
            Decimal("700"), Decimal("700"), Decimal("300"), Decimal("-200"), Decimal("200"),
        ]

    def test_orden_por_partida(self, vista):
        filas = vista_final_service.filtrar_filas(
            vista.filas, FiltrosVistaFinal(ordenar_por=OrdenarPor.PARTIDA)
        )
        assert [f.partida_nombre for f in filas] == [
            "Excavación", "Excavación", "Limpieza", "Limpieza", "Trazo",
        ]

    def test_no_modifica_la_entrada(self, vista):
        originales = _ids(vista.filas)
        vista_final_service.filtrar_filas(
            vista.filas, FiltrosVistaFinal(orden=Orden.DESC, busqueda="x")
        )
        assert _ids(vista.filas) == originales


# ==================== AGRUPACIÓN Y TABLA ====================

class TestAgrupacionYTabla:

    def test_agrupar_filas(self, vista):
        grupos = vista_final_service.agrupar_filas(vista.filas)
        assert [g.clave for g in grupos] == ["m1-Preliminares", "m2-Cimentación"]
        assert grupos[0].mayor == "01 - Preliminares"
        # 700 residual p1 + 300 s1 + 200 residual p3
        assert grupos[0].total == Decimal("1200")
        assert grupos[1].total == Decimal("500")

    def test_listar_departamentos(self, vista):
        assert vista_final_service.listar_departamentos(vista.filas) == [
            "CONSTRUCCIÓN", "INSTALACIONES",
        ]

    def test_subpartidas_de(self, vista):
        filas = vista_final_service.subpartidas_de(vista.filas, "p1")
        assert _ids(filas) == ["subpartida-s1"]
        assert vista_final_service.subpartidas_de(vista.filas, "p3") == []

    def test_tabla_sin_agrupar(self, vista):
        tabla = vista_final_service.tabla_vista_final(vista, FiltrosVistaFinal())
        assert tabla.grupos == []
        assert len(tabla.filas) == 5
        assert tabla.totales == vista.totales

    def test_tabla_agrupada_respeta_filtros(self, vista):
        tabla = vista_final_service.tabla_vista_final(
            vista,
            FiltrosVistaFinal(estado=EstadoFiltro.RESIDUAL, agrupar_por_mayor=True),
        )
        assert [g.clave for g in tabla.grupos] == ["m2-Cimentación", "m1-Preliminares"]
        assert tabla.grupos[0].total == Decimal("-200")
        # departamentos se listan sobre todas las filas, no las filtradas
        assert tabla.departamentos == ["CONSTRUCCIÓN", "INSTALACIONES"]


# ==================== RESUMEN ====================

class TestResumenPresupuestal:

    @staticmethod
    def _totales(parametrico, ejecutivo):
        return TotalesVistaFinal(
            total_parametrico=Decimal(parametrico), total_ejecutivo=Decimal(ejecutivo)
        )

    def test_balanceado(self):
        resumen = vista_final_service.resumen_presupuestal(self._totales("1000", "1000.005"))
        assert resumen.estado is EstadoResumen.BALANCEADO
        assert resumen.progreso_porcentaje == 100.0

    def test_sobrepresupuesto(self):
        resumen = vista_final_service.resumen_presupuestal(self._totales("1000", "1250"))
        assert resumen.estado is EstadoResumen.SOBREPRESUPUESTO
        assert resumen.diferencia == Decimal("250")
        assert resumen.progreso_porcentaje == 125.0

    def test_en_progreso(self):
        resumen = vista_final_service.resumen_presupuestal(self._totales("3000", "1000"))
        assert resumen.estado is EstadoResumen.EN_PROGRESO
        assert resumen.progreso_porcentaje == 33.33
        assert resumen.diferencia == Decimal("-2000")

    def test_parametrico_cero(self):
        resumen = vista_final_service.resumen_presupuestal(self._totales("0", "0"))
        assert resumen.progreso_porcentaje == 0.0
        assert resumen.estado is EstadoResumen.BALANCEADO

    def test_progreso_nunca_negativo(self):
        resumen = vista_final_service.resumen_presupuestal(self._totales("100", "-50"))
        assert resumen.progreso_porcentaje == 0.0
        assert resumen.estado is EstadoResumen.EN_PROGRESO
