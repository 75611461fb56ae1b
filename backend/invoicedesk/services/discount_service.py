"""
Discount & totals calculator for quotes and invoices.

Pure functions, no I/O. Layering:

1. Per line: gross = quantity * unit_price, minus the line discount
   (percentage of gross, or a fixed amount capped at gross).
2. Document: subtotal = sum(gross), item discounts summed,
   discounted_subtotal = subtotal - item discounts.
3. Global discount applied to discounted_subtotal (percentage, or fixed capped
   at discounted_subtotal).
4. Tax per line on its post-discount amount, reduced by the line's
   proportional share of the global discount. Small businesses: no tax.

All arithmetic is Decimal; nothing is rounded here. Round with
``TotalsBreakdown.rounded()`` or the money formatters at the display/payload
boundary.
"""
from decimal import Decimal
from typing import Any, Iterable, Optional, TypeVar

from invoicedesk.config import settings
from invoicedesk.schemas.discount import (
    DiscountKind, FixedDiscount, NoDiscount, PercentageDiscount, parse_discount_kind,
)
from invoicedesk.schemas.document import TotalsBreakdown, ValidationResult
from invoicedesk.utils.money import (
    HUNDRED, ZERO, clamp, format_currency, non_negative, parse_decimal, to_decimal,
)

Row = TypeVar("Row")


def gross_amount(quantity: Any, unit_price: Any) -> Decimal:
    """quantity * unit_price with negative inputs clamped to 0."""
    return non_negative(quantity) * non_negative(unit_price)


def _discount_on(amount: Decimal, discount) -> Decimal:
    if discount is None or discount.kind == DiscountKind.NONE.value:
        return ZERO
    value = to_decimal(discount.value)
    if value <= 0:
        return ZERO
    if discount.kind == DiscountKind.PERCENTAGE.value:
        return amount * clamp(value, ZERO, HUNDRED) / HUNDRED
    if discount.kind == DiscountKind.FIXED.value:
        return min(value, amount)
    return ZERO


def calculate_item_discount(quantity: Any, unit_price: Any, discount) -> Decimal:
    """
    Discount amount for one line.

    percentage: gross * value / 100 (value clamped to 0..100)
    fixed:      min(value, gross), so a line total never goes negative
    none:       0
    """
    return _discount_on(gross_amount(quantity, unit_price), discount)


def calculate_global_discount(basis: Any, discount) -> Decimal:
    """Global discount on the (item-discounted) subtotal; never exceeds the basis."""
    return _discount_on(non_negative(basis), discount)


def apply_discount(row: Row, quantity: Any, unit_price: Any) -> Row:
    """Copy of ``row`` with discount_amount and total recomputed from the given quantity/price."""
    gross = gross_amount(quantity, unit_price)
    discount_amount = _discount_on(gross, row.discount)
    return row.model_copy(update={
        "discount_amount": discount_amount,
        "total": gross - discount_amount,
    })


def update_item_with_discount(item: Row) -> Row:
    """Copy of a line item with its derived discount_amount and total refreshed."""
    return apply_discount(item, item.quantity, item.unit_price)


def calculate_document_totals(
    items: Iterable,
    global_discount=None,
    is_small_business: Optional[bool] = None,
) -> TotalsBreakdown:
    """
    Full totals breakdown for a list of line items plus an optional global discount.

    Deterministic: the same items in the same order always give identical Decimals.
    """
    if is_small_business is None:
        is_small_business = settings.IS_SMALL_BUSINESS
    items = list(items)

    subtotal = ZERO
    item_discount_amount = ZERO
    net_lines = []  # (post-item-discount amount, tax rate)

    for item in items:
        gross = gross_amount(item.quantity, item.unit_price)
        discount_amount = _discount_on(gross, item.discount)
        subtotal += gross
        item_discount_amount += discount_amount
        net_lines.append((gross - discount_amount, non_negative(item.tax_rate)))

    discounted_subtotal = subtotal - item_discount_amount
    global_discount_amount = calculate_global_discount(discounted_subtotal, global_discount)

    tax_amount = ZERO
    if not is_small_business:
        for net, tax_rate in net_lines:
            if global_discount_amount > 0 and discounted_subtotal > 0:
                # line's share of the global discount
                net = net - net * global_discount_amount / discounted_subtotal
            tax_amount += net * tax_rate / HUNDRED

    return TotalsBreakdown(
        subtotal=subtotal,
        item_discount_amount=item_discount_amount,
        discounted_subtotal=discounted_subtotal,
        global_discount_amount=global_discount_amount,
        total_discount_amount=item_discount_amount + global_discount_amount,
        tax_amount=tax_amount,
        total=discounted_subtotal - global_discount_amount + tax_amount,
    )


def validate_discount(discount_type: Any, discount_value: Any, basis: Any = None) -> ValidationResult:
    """
    Check a discount entered by the user.

    Returns a failed ValidationResult for values that are not numbers or are
    out of range (negative, percentage above 100, fixed amount above
    ``basis``). Raises ValueError only for caller bugs: an unknown discount
    type, or a type without a value.
    """
    kind = parse_discount_kind(discount_type)
    if kind == DiscountKind.NONE:
        return ValidationResult.ok()
    if discount_value is None or discount_value == "":
        raise ValueError(f"discount_value is required for discount type {kind.value!r}")

    try:
        value = parse_decimal(discount_value)
    except ValueError:
        return ValidationResult.fail("Discount value must be a number")
    if value < 0:
        return ValidationResult.fail("Discount value cannot be negative")
    if kind == DiscountKind.PERCENTAGE and value > HUNDRED:
        return ValidationResult.fail("Percentage discount cannot exceed 100%")
    if kind == DiscountKind.FIXED and basis is not None:
        basis = to_decimal(basis)
        if value > basis:
            return ValidationResult.fail(f"Fixed discount cannot exceed {format_currency(basis)}")
    return ValidationResult.ok()


def format_discount_display(discount, discount_amount: Any = None, locale: str = None) -> str:
    """
    Short discount label for item rows and PDFs.

    percentage -> "10% (2,30 €)", fixed -> "2,00 €", none -> "".
    """
    if discount is None or isinstance(discount, NoDiscount):
        return ""
    value = to_decimal(discount.value)
    if value <= 0:
        return ""
    if isinstance(discount, PercentageDiscount):
        return f"{value.normalize():f}% ({format_currency(discount_amount or ZERO, locale)})"
    if isinstance(discount, FixedDiscount):
        return format_currency(value, locale)
    return ""
