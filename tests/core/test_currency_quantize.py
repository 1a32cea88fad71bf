"""
Tests for currency quantization and MonetaryAmount.
"""

from decimal import Decimal

import pytest
from monchantier.core.currency import (
    BASE_CURRENCY,
    CURRENCIES,
    Currency,
    MonetaryAmount,
    RoundingPolicy,
    create_amount,
    get_currency,
)


class TestCurrency:
    """Test Currency quantization."""

    def test_dnt_has_three_decimals(self):
        dnt = get_currency("DNT")
        assert dnt.decimals == 3
        assert dnt.quantize(Decimal("1.23456")) == Decimal("1.235")

    def test_default_policy_is_bankers(self):
        """Registry currencies round half to even unless told otherwise."""
        assert Currency("TST").rounding is RoundingPolicy.BANKERS
        eur = CURRENCIES["EUR"]
        assert eur.rounding is RoundingPolicy.BANKERS
        assert eur.quantize(Decimal("2.675")) == Decimal("2.68")
        assert eur.quantize(Decimal("2.665")) == Decimal("2.66")
        assert eur.quantize(1.005) == Decimal("1.00")

    def test_dnt_bankers_on_millimes(self):
        assert get_currency("DNT").quantize(Decimal("0.0125")) == Decimal("0.012")

    def test_half_up_rounding(self):
        cur = Currency("TST", 2, RoundingPolicy.HALF_UP)
        assert cur.quantize(Decimal("0.125")) == Decimal("0.13")
        assert cur.quantize(Decimal("-0.125")) == Decimal("-0.13")

    def test_unknown_code_defaults(self):
        cur = get_currency("chf")
        assert cur.code == "CHF"
        assert cur.decimals == 2

    def test_base_currency(self):
        assert BASE_CURRENCY == "DNT"


class TestMonetaryAmount:
    def test_currency_upper_cased(self):
        assert MonetaryAmount(1, "eur").currency == "EUR"

    def test_default_currency_is_base(self):
        assert MonetaryAmount(1).currency == BASE_CURRENCY

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_rejected(self, bad):
        with pytest.raises(ValueError):
            MonetaryAmount(bad, "EUR")

    def test_negative_allowed(self):
        assert MonetaryAmount(-5, "EUR").value == -5

    def test_create_amount(self):
        assert create_amount(12.5, "usd") == MonetaryAmount(12.5, "USD")
