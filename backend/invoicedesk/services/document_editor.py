"""
Quote / invoice editor state.

Holds the line items and global discount of one document while it is being
edited, routes every structural change through the ordering engine and every
price change through the discount calculator, and submits the finished
document through the persistence collaborator.
"""
import logging
from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Union

from invoicedesk.config import settings
from invoicedesk.schemas.discount import DiscountKind, discount_from_fields, parse_discount_kind
from invoicedesk.schemas.document import (
    CompanySettings, InvoiceCreate, InvoiceStatus, QuoteCreate, QuoteStatus,
    TotalsBreakdown, ValidationResult,
)
from invoicedesk.schemas.job import parse_day
from invoicedesk.schemas.line_item import LineItem
from invoicedesk.services import ordering_service
from invoicedesk.services.discount_service import (
    calculate_document_totals, update_item_with_discount, validate_discount,
)
from invoicedesk.services.line_item_factory import (
    create_empty_item, create_item_from_hourly_rate, create_item_from_material,
)
from invoicedesk.services.template_lookup import TemplateCatalog
from invoicedesk.utils.money import parse_decimal

logger = logging.getLogger(__name__)


class DocumentType(str, Enum):
    QUOTE = "quote"
    INVOICE = "invoice"


class DocumentPersistence(Protocol):
    def create_quote(self, quote: Dict[str, Any]) -> Any: ...
    def update_quote(self, quote_id: str, quote: Dict[str, Any]) -> Any: ...
    def create_invoice(self, invoice: Dict[str, Any]) -> Any: ...
    def update_invoice(self, invoice_id: str, invoice: Dict[str, Any]) -> Any: ...


# Editing one of these refreshes discount_amount and total
RECALCULATING_FIELDS = {"quantity", "unit_price", "discount"}
EDITABLE_FIELDS = {"description", "quantity", "unit_price", "tax_rate", "unit", "discount"}
_DECIMAL_FIELDS = {"quantity", "unit_price", "tax_rate"}


def _as_date(value: Any) -> Optional[date]:
    value = parse_day(value)
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return date.fromisoformat(value)
    return value


def validate_line_item(item: LineItem, position: int) -> ValidationResult:
    """Required fields of one position: description, quantity > 0, unit price >= 0."""
    if not item.description or not item.description.strip():
        return ValidationResult.fail(f"Item {position}: description is required")
    if item.quantity <= 0:
        return ValidationResult.fail(f"Item {position}: quantity must be greater than 0")
    if item.unit_price < 0:
        return ValidationResult.fail(f"Item {position}: unit price cannot be negative")
    return ValidationResult.ok()


class DocumentEditor:
    """Editing session for a single quote or invoice"""

    def __init__(
        self,
        persistence: DocumentPersistence,
        document_type: DocumentType = DocumentType.QUOTE,
        company: Optional[CompanySettings] = None,
        catalog: Optional[TemplateCatalog] = None,
        issue_date: Optional[date] = None,
    ):
        self.persistence = persistence
        self.document_type = DocumentType(document_type)
        self.company = company or CompanySettings()
        self.catalog = catalog or TemplateCatalog(show_combined_dropdowns=self.company.show_combined_dropdowns)

        self.document_id: Optional[str] = None
        self.document_number = ""
        self.status: Union[QuoteStatus, InvoiceStatus] = (
            QuoteStatus.DRAFT if self.document_type == DocumentType.QUOTE else InvoiceStatus.DRAFT
        )
        self.customer_id = ""
        self.notes = ""
        self.attachments: List[Dict[str, Any]] = []
        self.issue_date = issue_date or date.today()
        self.end_date = self._default_end_date(self.issue_date)
        # raw form values; validated at submit, clamped by the calculator meanwhile
        self.global_discount_type: Optional[str] = None
        self.global_discount_value = None
        self.items: List[LineItem] = [create_empty_item(1, self.company.is_small_business)]

    @classmethod
    def from_document(
        cls,
        data: Dict[str, Any],
        persistence: DocumentPersistence,
        document_type: DocumentType = DocumentType.QUOTE,
        company: Optional[CompanySettings] = None,
        catalog: Optional[TemplateCatalog] = None,
    ) -> "DocumentEditor":
        """Editor for an existing document as returned by the API (camelCase)."""
        editor = cls(persistence, document_type, company, catalog, issue_date=_as_date(data.get("issueDate")))
        editor.document_id = data.get("id")
        if editor.document_type == DocumentType.QUOTE:
            editor.document_number = data.get("quoteNumber") or ""
            editor.status = QuoteStatus(data.get("status") or QuoteStatus.DRAFT.value)
            end_date = _as_date(data.get("validUntil"))
        else:
            editor.document_number = data.get("invoiceNumber") or ""
            editor.status = InvoiceStatus(data.get("status") or InvoiceStatus.DRAFT.value)
            end_date = _as_date(data.get("dueDate"))
        if end_date:
            editor.end_date = end_date
        editor.customer_id = data.get("customerId") or ""
        editor.notes = data.get("notes") or ""
        editor.attachments = list(data.get("attachments") or [])
        editor.global_discount_type = data.get("globalDiscountType") or None
        editor.global_discount_value = data.get("globalDiscountValue")
        items = [LineItem.model_validate(row) for row in data.get("items") or []]
        editor.items = ordering_service.sort_by_order(items)
        return editor

    # --- dates ---------------------------------------------------------------

    def _default_end_date(self, issue_date: date) -> date:
        if self.document_type == DocumentType.QUOTE:
            return issue_date + timedelta(days=settings.QUOTE_VALIDITY_DAYS)
        return issue_date + timedelta(days=self.company.default_payment_days)

    def set_issue_date(self, issue_date: date) -> None:
        """Change the issue date; validity / due date follow it."""
        self.issue_date = issue_date
        self.end_date = self._default_end_date(issue_date)

    # --- items -----------------------------------------------------------------

    def _index(self, item_id: str) -> int:
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        raise ValueError(f"No item with id {item_id}")

    def get_item(self, item_id: str) -> LineItem:
        return self.items[self._index(item_id)]

    def add_item(self) -> LineItem:
        item = create_empty_item(ordering_service.next_order(self.items), self.company.is_small_business)
        self.items = self.items + [item]
        return item

    def add_item_from_template(self, template_type: str, template_id: str) -> Optional[LineItem]:
        """
        Append a position prefilled from a material ("material") or hourly rate
        ("hourly") template. Returns None if the template is not available for
        the selected customer.
        """
        order = ordering_service.next_order(self.items)
        if template_type == "material":
            template = self.catalog.find_material(self.customer_id, template_id)
            item = create_item_from_material(template, order, self.company.is_small_business) if template else None
        elif template_type == "hourly":
            template = self.catalog.find_hourly_rate(self.customer_id, template_id)
            item = create_item_from_hourly_rate(template, order, self.company.is_small_business) if template else None
        else:
            raise ValueError(f"Unknown template type: {template_type!r}")
        if item is None:
            logger.warning(f"{template_type} template {template_id} not found for customer {self.customer_id!r}")
            return None
        self.items = self.items + [item]
        return item

    def update_item(self, item_id: str, field: str, value: Any) -> LineItem:
        """
        Set one field of a position; price-relevant fields refresh the discount.

        Raises ValueError for an unknown field or item, or a numeric field given
        something that is not a number. The item is left unchanged in that case.
        """
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Field {field!r} cannot be edited")
        index = self._index(item_id)
        if field in _DECIMAL_FIELDS:
            try:
                value = parse_decimal(value)
            except ValueError:
                raise ValueError(f"{field} must be a number, got {value!r}")
        updated = self.items[index].model_copy(update={field: value})
        if field in RECALCULATING_FIELDS:
            updated = update_item_with_discount(updated)
        self.items = self.items[:index] + [updated] + self.items[index + 1:]
        return updated

    def set_item_discount(self, item_id: str, discount_type: Optional[str], discount_value: Any) -> LineItem:
        return self.update_item(item_id, "discount", discount_from_fields(discount_type, discount_value))

    def remove_item(self, item_id: str) -> None:
        self.items = ordering_service.remove_item(self.items, item_id)

    def move_item_up(self, item_id: str) -> None:
        self.items = ordering_service.move_item_up(self.items, item_id)

    def move_item_down(self, item_id: str) -> None:
        self.items = ordering_service.move_item_down(self.items, item_id)

    def reorder_items(self, active_id: str, over_id: Optional[str]) -> None:
        """Drag end of the sortable item list."""
        self.items = ordering_service.reorder_by_drag(self.items, active_id, over_id)

    # --- totals & validation -----------------------------------------------------

    def set_global_discount(self, discount_type: Optional[str], discount_value: Any) -> None:
        kind = parse_discount_kind(discount_type)
        self.global_discount_type = None if kind == DiscountKind.NONE else kind.value
        self.global_discount_value = discount_value

    @property
    def global_discount(self):
        return discount_from_fields(self.global_discount_type, self.global_discount_value)

    def calculate_totals(self) -> TotalsBreakdown:
        return calculate_document_totals(self.items, self.global_discount, self.company.is_small_business)

    def validate(self) -> ValidationResult:
        if not self.customer_id:
            return ValidationResult.fail("Please select a customer")
        if not self.items:
            return ValidationResult.fail("Please add at least one item")
        for position, item in enumerate(self.items, start=1):
            result = validate_line_item(item, position)
            if not result:
                return result
        if self.global_discount_type and self.global_discount_value not in (None, ""):
            return validate_discount(
                self.global_discount_type,
                self.global_discount_value,
                self.calculate_totals().discounted_subtotal,
            )
        return ValidationResult.ok()

    # --- submission --------------------------------------------------------------

    def build_payload(self) -> Union[QuoteCreate, InvoiceCreate]:
        items = [update_item_with_discount(item) for item in self.items]
        totals = calculate_document_totals(items, self.global_discount, self.company.is_small_business)
        customer = self.catalog.get_customer(self.customer_id)
        common = dict(
            customer_id=self.customer_id,
            customer_name=customer.name if customer else "",
            issue_date=self.issue_date,
            items=items,
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            total=totals.total,
            notes=self.notes,
            global_discount=self.global_discount,
            global_discount_amount=totals.global_discount_amount,
            attachments=self.attachments,
        )
        if self.document_type == DocumentType.QUOTE:
            return QuoteCreate(
                quote_number=self.document_number if self.document_id else "",
                valid_until=self.end_date,
                status=self.status,
                **common,
            )
        return InvoiceCreate(
            invoice_number=self.document_number if self.document_id else "",
            due_date=self.end_date,
            status=self.status,
            **common,
        )

    def submit(self) -> ValidationResult:
        """
        Validate and save. Validation problems come back as a failed result;
        persistence errors are logged and re-raised with the editor unchanged.
        """
        result = self.validate()
        if not result:
            return result

        payload = self.build_payload().to_api_dict()
        label = "Quote" if self.document_type == DocumentType.QUOTE else "Invoice"
        try:
            if self.document_type == DocumentType.QUOTE:
                if self.document_id:
                    saved = self.persistence.update_quote(self.document_id, payload)
                else:
                    saved = self.persistence.create_quote(payload)
            else:
                if self.document_id:
                    saved = self.persistence.update_invoice(self.document_id, payload)
                else:
                    saved = self.persistence.create_invoice(payload)
        except Exception as e:
            logger.error(f"Error saving {label.lower()} {self.document_number or '(new)'}: {e}")
            raise

        action = "updated" if self.document_id else "created"
        if isinstance(saved, dict):
            self.document_id = saved.get("id") or self.document_id
            self.document_number = saved.get("quoteNumber") or saved.get("invoiceNumber") or self.document_number
        logger.info(f"{label} {action}: {self.document_number}")
        return ValidationResult.ok()
