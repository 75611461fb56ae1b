"""
Document schemas: global discount, totals breakdown, validation result and the
quote/invoice payloads sent to the persistence API
"""
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from invoicedesk.config import settings
from invoicedesk.schemas.discount import (
    Discount, FixedDiscount, NoDiscount, PercentageDiscount, discount_to_fields,
)
from invoicedesk.schemas.line_item import LineItem
from invoicedesk.utils.money import ZERO, round_money

# Applied to the sum of the per-item discounted subtotals
DocumentDiscount = Discount
DocumentDiscountValue = Union[NoDiscount, PercentageDiscount, FixedDiscount]


class QuoteStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"
    BILLED = "billed"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    REMINDED_1X = "reminded_1x"
    REMINDED_2X = "reminded_2x"
    REMINDED_3X = "reminded_3x"


class TotalsBreakdown(BaseModel):
    """Derived monetary breakdown of a document (never stored as-is)."""
    subtotal: Decimal = ZERO
    item_discount_amount: Decimal = ZERO
    discounted_subtotal: Decimal = ZERO
    global_discount_amount: Decimal = ZERO
    total_discount_amount: Decimal = ZERO
    tax_amount: Decimal = ZERO
    total: Decimal = ZERO

    @property
    def net_amount(self) -> Decimal:
        """Taxable base after item and global discounts."""
        return self.discounted_subtotal - self.global_discount_amount

    def rounded(self) -> "TotalsBreakdown":
        """Copy with every amount rounded to cents, for display and payloads."""
        return TotalsBreakdown(**{name: round_money(value) for name, value in self.model_dump().items()})

    class Config:
        frozen = True


class ValidationResult(BaseModel):
    """Structured validity result; validation never raises for bad user input."""
    is_valid: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def fail(cls, error: str) -> "ValidationResult":
        return cls(is_valid=False, error=error)

    def __bool__(self) -> bool:
        return self.is_valid


DiscountValidation = ValidationResult


class CompanySettings(BaseModel):
    """Company flags the calculator and editors depend on"""
    is_small_business: bool = Field(default_factory=lambda: settings.IS_SMALL_BUSINESS)
    show_combined_dropdowns: bool = Field(default_factory=lambda: settings.SHOW_COMBINED_DROPDOWNS)
    locale: str = Field(default_factory=lambda: settings.LOCALE)
    default_payment_days: int = Field(default_factory=lambda: settings.DEFAULT_PAYMENT_DAYS)


class DocumentBase(BaseModel):
    """Fields shared by quote and invoice payloads"""
    customer_id: str
    customer_name: str = ""
    issue_date: date
    items: List[LineItem] = Field(..., min_length=1)
    subtotal: Decimal = ZERO
    tax_amount: Decimal = ZERO
    total: Decimal = ZERO
    notes: str = ""
    global_discount: Discount = Field(default_factory=NoDiscount)
    global_discount_amount: Decimal = ZERO
    attachments: List[Dict[str, Any]] = []

    def _common_api_fields(self) -> Dict[str, Any]:
        discount_type, discount_value = discount_to_fields(self.global_discount)
        return {
            "customerId": self.customer_id,
            "customerName": self.customer_name,
            "issueDate": self.issue_date.isoformat(),
            "items": [item.to_api_dict() for item in self.items],
            "subtotal": float(round_money(self.subtotal)),
            "taxAmount": float(round_money(self.tax_amount)),
            "total": float(round_money(self.total)),
            "notes": self.notes,
            "globalDiscountType": discount_type,
            "globalDiscountValue": discount_value,
            "globalDiscountAmount": float(round_money(self.global_discount_amount)),
            "attachments": self.attachments,
        }


class QuoteCreate(DocumentBase):
    """Quote payload (create and full update)"""
    quote_number: str = ""  # empty for new quotes, generated by the backend
    valid_until: date
    status: QuoteStatus = QuoteStatus.DRAFT

    def to_api_dict(self) -> Dict[str, Any]:
        data = self._common_api_fields()
        data.update({
            "quoteNumber": self.quote_number,
            "validUntil": self.valid_until.isoformat(),
            "status": self.status.value,
        })
        return data


class InvoiceCreate(DocumentBase):
    """Invoice payload (create and full update)"""
    invoice_number: str = ""
    due_date: date
    status: InvoiceStatus = InvoiceStatus.DRAFT

    def to_api_dict(self) -> Dict[str, Any]:
        data = self._common_api_fields()
        data.update({
            "invoiceNumber": self.invoice_number,
            "dueDate": self.due_date.isoformat(),
            "status": self.status.value,
        })
        return data
