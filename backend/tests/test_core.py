"""
Tests for money parsing/formatting and name normalisation.
"""

import pytest
from pydantic import BaseModel, ValidationError

from precifica.core.text import normalize_string, singular
from precifica.core.types import Money, NonNegativeMoney, Percentage


class TestParseBrl:
    @pytest.mark.parametrize("raw, expected", [
        ("R$ 2.024,88", 2024.88),
        ("R$ 30,68", 30.68),
        ("R$1.234.567,89", 1234567.89),
        ("12,5kg", 12.5),
        ("90", 90.0),
        ("", 0.0),
        (None, 0.0),
        ("abc", 0.0),
        ("R$ -", 0.0),
    ])
    def test_parse(self, raw, expected):
        assert Money.parse_brl(raw) == pytest.approx(expected)


class TestParseQuantity:
    @pytest.mark.parametrize("raw, expected", [
        ("65", 65),
        (" 65 ", 65),
        ("1.250", 1250),
        ("12,5", 12),
        ("x", 0),
        ("", 0),
        (None, 0),
    ])
    def test_parse(self, raw, expected):
        assert Money.parse_quantity(raw) == expected


class TestFormatBrl:
    def test_thousands_and_decimals(self):
        assert Money.format_brl(1234.561) == "1.234,57"

    def test_float_noise_not_rounded_up(self):
        assert Money.format_brl(13.4) == "13,40"

    def test_symbol(self):
        assert Money.format_brl(5, symbol=True) == "R$ 5,00"


class TestValidatedTypes:
    class Row(BaseModel):
        percent: Percentage
        amount: NonNegativeMoney = 0.0

    def test_accepts_numeric_strings(self):
        row = self.Row(percent="12.5", amount="10")
        assert row.percent == 12.5
        assert row.amount == 10

    @pytest.mark.parametrize("value", [-1, 101, "abc", True, float("nan")])
    def test_rejects_bad_percentages(self, value):
        with pytest.raises(ValidationError):
            self.Row(percent=value)

    def test_rejects_negative_amount(self):
        with pytest.raises(ValidationError):
            self.Row(percent=10, amount=-0.01)


class TestNormalizeString:
    @pytest.mark.parametrize("raw, expected", [
        ("  X-Tudo  Especial ", "xtudo especial"),
        ("Pão de Queijo", "pao de queijo"),
        ("Preço Médio", "preco medio"),
        ("Coca-Cola 2L (lata)", "cocacola 2l lata"),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_string(raw) == expected

    def test_singular(self):
        assert singular("coxinhas") == "coxinha"
        assert singular("pastel") == "pastel"
