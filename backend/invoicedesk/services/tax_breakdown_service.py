"""
Tax breakdown per VAT rate (for the totals box of quote/invoice PDFs and
e-invoice exports) and for job sheets.
"""
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from pydantic import BaseModel

from invoicedesk.config import settings
from invoicedesk.schemas.job import JobEntry
from invoicedesk.services.discount_service import calculate_item_discount, gross_amount
from invoicedesk.services.job_service import LEGACY_TAX_RATE, calculate_total_hours
from invoicedesk.utils.money import HUNDRED, ZERO, non_negative, to_decimal


class TaxRateBucket(BaseModel):
    """Taxable base and tax for one VAT rate"""
    taxable_amount: Decimal = ZERO
    tax_amount: Decimal = ZERO


TaxBreakdown = Dict[Decimal, TaxRateBucket]


def _add(breakdown: Dict[Decimal, Dict[str, Decimal]], rate: Decimal, taxable: Decimal) -> None:
    bucket = breakdown.setdefault(rate, {"taxable_amount": ZERO, "tax_amount": ZERO})
    bucket["taxable_amount"] += taxable
    bucket["tax_amount"] += taxable * rate / HUNDRED


def _freeze(breakdown: Dict[Decimal, Dict[str, Decimal]]) -> TaxBreakdown:
    return {rate: TaxRateBucket(**bucket) for rate, bucket in sorted(breakdown.items())}


def calculate_tax_breakdown(items: Iterable, global_discount_amount: Any = ZERO) -> TaxBreakdown:
    """
    Group post-item-discount amounts by tax rate.

    A global discount is spread over the rates in proportion to their share of
    the item-discounted subtotal, and each rate's tax is recomputed on the
    reduced base.
    """
    items = list(items)
    raw: Dict[Decimal, Dict[str, Decimal]] = {}
    for item in items:
        net = gross_amount(item.quantity, item.unit_price) - calculate_item_discount(
            item.quantity, item.unit_price, item.discount
        )
        _add(raw, non_negative(item.tax_rate), net)

    global_discount_amount = non_negative(global_discount_amount)
    if global_discount_amount > 0:
        subtotal_after_items = sum((b["taxable_amount"] for b in raw.values()), ZERO)
        if subtotal_after_items > 0:
            for rate, bucket in raw.items():
                reduced = bucket["taxable_amount"] - bucket["taxable_amount"] * global_discount_amount / subtotal_after_items
                bucket["taxable_amount"] = reduced
                bucket["tax_amount"] = reduced * rate / HUNDRED

    return _freeze(raw)


def calculate_job_tax_breakdown(job: JobEntry, is_small_business: Optional[bool] = None) -> TaxBreakdown:
    """
    Tax breakdown for a job sheet: time entries (or the legacy hours/rate pair)
    plus materials. Entries without a rate use 19%; small businesses use 0%.
    """
    if is_small_business is None:
        is_small_business = settings.IS_SMALL_BUSINESS

    def rate_for(value) -> Decimal:
        if is_small_business:
            return ZERO
        return to_decimal(value) if value is not None else LEGACY_TAX_RATE

    raw: Dict[Decimal, Dict[str, Decimal]] = {}
    if job.time_entries:
        for entry in job.time_entries:
            _add(raw, rate_for(entry.tax_rate), gross_amount(entry.hours_worked, entry.hourly_rate))
    else:
        _add(raw, rate_for(None), gross_amount(calculate_total_hours(job), job.hourly_rate))

    for material in job.materials:
        _add(raw, rate_for(material.tax_rate), gross_amount(material.quantity, material.unit_price))

    return _freeze(raw)


def has_discounts(items: Iterable) -> bool:
    """True if any line carries a discount (computed or configured)."""
    return any(
        to_decimal(item.discount_amount) > 0 or to_decimal(item.discount.value) > 0
        for item in items
    )


def has_only_zero_tax_rate(items: Iterable) -> bool:
    """True for a non-empty list where every line is taxed at 0%."""
    items = list(items)
    return bool(items) and all(to_decimal(item.tax_rate) == 0 for item in items)
