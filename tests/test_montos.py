"""Tests for the money helpers in ``app.utils.montos``."""

from decimal import Decimal

import pytest

from app.utils.montos import a_decimal, calcular_importe, redondear


class TestADecimal:

    @pytest.mark.parametrize(
        "valor, esperado",
        [
            (Decimal("12.34"), Decimal("12.34")),
            (10, Decimal("10")),
            (0.1, Decimal("0.1")),
            ("  250.5 ", Decimal("250.5")),
            ("-3", Decimal("-3")),
        ],
    )
    def test_valores_numericos(self, valor, esperado):
        assert a_decimal(valor) == esperado

    @pytest.mark.parametrize(
        "valor",
        [None, "", "   ", "abc", "1,000", "NaN", "Infinity", float("nan"), float("inf"), True, [], object()],
    )
    def test_valores_invalidos_son_cero(self, valor):
        assert a_decimal(valor) == Decimal("0")

    def test_float_no_arrastra_expansion_binaria(self):
        assert a_decimal(0.1) + a_decimal(0.2) == Decimal("0.3")


class TestCalcularImporte:

    @pytest.mark.parametrize(
        "cantidad, precio, esperado",
        [
            (2, "10.50", Decimal("21.00")),
            ("2.5", "0.01", Decimal("0.03")),
            ("1.005", 1, Decimal("1.01")),
            ("3.3333", "3", Decimal("10.00")),
            (1200, 15.5, Decimal("18600.00")),
            (0, "999.99", Decimal("0.00")),
        ],
    )
    def test_redondeo_half_up(self, cantidad, precio, esperado):
        assert calcular_importe(cantidad, precio) == esperado

    def test_resultado_con_dos_decimales(self):
        assert calcular_importe("1", "1").as_tuple().exponent == -2

    def test_entradas_invalidas(self):
        assert calcular_importe(None, "10") == Decimal("0")
        assert calcular_importe("x", "10") == Decimal("0")


def test_redondear_negativos_half_up():
    assert redondear("-0.005") == Decimal("-0.01")
    assert redondear("-0.004") == Decimal("0.00")
