"""
Business logic services for InvoiceDesk
"""
from .discount_service import (
    apply_discount,
    calculate_document_totals,
    calculate_global_discount,
    calculate_item_discount,
    format_discount_display,
    update_item_with_discount,
    validate_discount,
)
from .ordering_service import PositionMap
from .api_client import ApiClient, ApiError
from .calendar_board import CalendarBoard
from .template_lookup import TemplateCatalog
from .document_editor import DocumentEditor, DocumentType

__all__ = [
    "apply_discount",
    "calculate_document_totals",
    "calculate_global_discount",
    "calculate_item_discount",
    "format_discount_display",
    "update_item_with_discount",
    "validate_discount",
    "PositionMap",
    "ApiClient",
    "ApiError",
    "CalendarBoard",
    "TemplateCatalog",
    "DocumentEditor",
    "DocumentType",
]
