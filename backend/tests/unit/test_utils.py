from decimal import Decimal

import pytest

from invoicedesk.config import Settings
from invoicedesk.utils.ids import generate_id
from invoicedesk.utils.money import (
    format_currency, format_number, parse_decimal, round_money, to_decimal,
)
from invoicedesk.utils.vat import default_tax_rate, resolve_tax_rate, vat_rate_to_percent


class TestMoney:
    def test_to_decimal(self):
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("") == Decimal("0")
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal("12.50") == Decimal("12.50")

    @pytest.mark.parametrize("raw", ["abc", "1,5", "NaN", "Infinity", Decimal("NaN")])
    def test_to_decimal_treats_garbage_as_zero(self, raw):
        assert to_decimal(raw) == Decimal("0")

    @pytest.mark.parametrize("raw", ["abc", "1,5", "nan", "-Infinity", Decimal("Infinity")])
    def test_parse_decimal_rejects_non_numbers(self, raw):
        with pytest.raises(ValueError):
            parse_decimal(raw)

    def test_parse_decimal(self):
        assert parse_decimal(" 2.5 ") == Decimal("2.5")
        assert parse_decimal(None) == Decimal("0")

    def test_round_half_up(self):
        assert round_money(Decimal("2.345")) == Decimal("2.35")
        assert round_money(Decimal("24.633")) == Decimal("24.63")

    @pytest.mark.parametrize("locale,expected", [
        ("de-DE", "1.234,56"),
        ("en-US", "1,234.56"),
        ("fr-FR", "1\u202f234,56"),
    ])
    def test_format_number(self, locale, expected):
        assert format_number(Decimal("1234.56"), locale) == expected

    def test_format_currency(self):
        assert format_currency(Decimal("27.37"), "de-DE") == "27,37 €"
        assert format_currency(Decimal("1234.5"), "en-US") == "$1,234.50"
        assert format_currency(Decimal("-3"), "en-US") == "-$3.00"


class TestVat:
    def test_fraction_and_percentage(self):
        assert vat_rate_to_percent(0.19) == Decimal("19.00")
        assert vat_rate_to_percent(19) == Decimal("19")
        assert vat_rate_to_percent(None) == Decimal("0")

    def test_small_business_always_zero(self):
        assert default_tax_rate(is_small_business=True) == Decimal("0")
        assert resolve_tax_rate(7, is_small_business=True) == Decimal("0")

    def test_missing_rate_falls_back_to_default(self):
        assert resolve_tax_rate(None, is_small_business=False) == default_tax_rate(False)
        assert resolve_tax_rate(7, is_small_business=False) == Decimal("7")


class TestSettings:
    """Settings read from the environment."""

    def test_defaults(self):
        s = Settings()

        assert s.UNRANKED_POSITION == 999
        assert s.api_base_url.startswith("http")
        assert not s.api_base_url.endswith("/")

    def test_unknown_locale_falls_back(self):
        assert Settings(LOCALE="xx-XX").LOCALE == "de-DE"

    def test_tax_rate_range(self):
        with pytest.raises(ValueError):
            Settings(DEFAULT_TAX_RATE=150)

    def test_trailing_slash_stripped(self):
        assert Settings(API_BASE_URL="http://example.test/api/").api_base_url == "http://example.test/api"


def test_generate_id_is_unique():
    assert generate_id() != generate_id()
    assert len(generate_id()) == 36
