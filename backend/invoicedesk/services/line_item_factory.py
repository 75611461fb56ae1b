"""
Factories for new quote/invoice line items (empty, or prefilled from a template)
"""
from decimal import Decimal
from typing import Optional

from invoicedesk.schemas.line_item import LineItem
from invoicedesk.schemas.template import HourlyRate, MaterialTemplate
from invoicedesk.utils.ids import generate_id
from invoicedesk.utils.money import ZERO
from invoicedesk.utils.vat import default_tax_rate, resolve_tax_rate


def create_empty_item(order: int, is_small_business: Optional[bool] = None) -> LineItem:
    """Blank position: quantity 1, price 0, default tax rate (0 for small businesses)."""
    return LineItem(
        id=generate_id(),
        description="",
        quantity=Decimal("1"),
        unit_price=ZERO,
        tax_rate=default_tax_rate(is_small_business),
        order=order,
        total=ZERO,
    )


def create_item_from_material(
    template: MaterialTemplate,
    order: int,
    is_small_business: Optional[bool] = None,
) -> LineItem:
    return LineItem(
        id=generate_id(),
        description=template.name,
        quantity=Decimal("1"),
        unit_price=template.unit_price,
        tax_rate=resolve_tax_rate(template.tax_rate, is_small_business),
        unit=template.unit or None,
        order=order,
        total=template.unit_price,
    )


def create_item_from_hourly_rate(
    template: HourlyRate,
    order: int,
    is_small_business: Optional[bool] = None,
) -> LineItem:
    """Description is "name - description" when the rate has a description."""
    description = template.name
    if template.description:
        description = f"{template.name} - {template.description}"
    return LineItem(
        id=generate_id(),
        description=description,
        quantity=Decimal("1"),
        unit_price=template.rate,
        tax_rate=resolve_tax_rate(template.tax_rate, is_small_business),
        order=order,
        total=template.rate,
    )
