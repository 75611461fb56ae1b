"""
Line item schemas (quote and invoice positions)
"""
from decimal import Decimal
from typing import Optional

from pydantic import Field

from invoicedesk.schemas.discount import DiscountedLineBase
from invoicedesk.utils.ids import generate_id
from invoicedesk.utils.money import ZERO


class LineItem(DiscountedLineBase):
    """
    One priced row within a quote or invoice.

    ``discount_amount`` and ``total`` are derived (see discount_service) and are
    refreshed whenever quantity, unit price or the discount changes. ``order``
    is unique within the parent document only.
    """
    id: str = Field(default_factory=generate_id)
    description: str = ""
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = ZERO
    tax_rate: Decimal = ZERO
    order: int = 0
    unit: Optional[str] = None
    job_number: Optional[str] = None  # linked Auftragsnummer
    external_job_number: Optional[str] = None


# The API keeps separate types for quote and invoice positions; the shape is identical.
QuoteItem = LineItem
InvoiceItem = LineItem
