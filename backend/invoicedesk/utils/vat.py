"""
VAT rate resolution for German invoicing.

Templates, legacy jobs and API payloads may omit the tax rate or store it as a
fraction:
- Missing rate -> company default (19%)
- Fraction: 0.19 (meaning 19%)
- Percentage: 19

Small businesses (Kleinunternehmerregelung, § 19 UStG) never charge VAT, so
every rate resolves to 0 for them.
"""

from decimal import Decimal
from typing import Optional, Union

from invoicedesk.config import settings
from invoicedesk.utils.money import ZERO, to_decimal

RateInput = Union[None, int, float, str, Decimal]


def vat_rate_to_percent(value: RateInput) -> Decimal:
    """
    Normalize a tax rate to percentage.

    - 0 or None -> 0
    - 0.19 (fraction) -> 19
    - 19 (percentage) -> 19
    - Values in (0, 1) are treated as fractions; 1 itself stays 1%.
    """
    if value is None or value == "":
        return ZERO
    v = to_decimal(value)
    if v <= 0:
        return ZERO
    if v < 1:
        return v * 100
    return v


def default_tax_rate(is_small_business: Optional[bool] = None) -> Decimal:
    """Tax rate for a fresh line item: 0 for small businesses, else the configured default."""
    if is_small_business is None:
        is_small_business = settings.IS_SMALL_BUSINESS
    if is_small_business:
        return ZERO
    return to_decimal(settings.DEFAULT_TAX_RATE)


def resolve_tax_rate(value: RateInput, is_small_business: Optional[bool] = None) -> Decimal:
    """
    Tax rate to apply to a line: template/entry rate if present, company default otherwise.

    A rate of 0 coming from a template counts as "not set" (templates store 0 when
    the field was left empty); small businesses always get 0.
    """
    if is_small_business is None:
        is_small_business = settings.IS_SMALL_BUSINESS
    if is_small_business:
        return ZERO
    rate = vat_rate_to_percent(value)
    if rate == 0:
        return default_tax_rate(is_small_business)
    return rate
