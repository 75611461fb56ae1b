"""
Pydantic schemas for documents, line items, jobs and templates
"""
from .discount import (
    Discount, DiscountKind, NoDiscount, PercentageDiscount, FixedDiscount,
    discount_from_fields, discount_to_fields,
)
from .line_item import LineItem, QuoteItem, InvoiceItem
from .document import (
    DocumentDiscount, TotalsBreakdown, ValidationResult, DiscountValidation,
    CompanySettings, QuoteCreate, InvoiceCreate, QuoteStatus, InvoiceStatus,
)
from .job import JobEntry, JobMaterial, JobTimeEntry, JobStatus, JobPriority
from .template import HourlyRate, MaterialTemplate, Customer, TemplateOption

__all__ = [
    # Discount
    "Discount",
    "DiscountKind",
    "NoDiscount",
    "PercentageDiscount",
    "FixedDiscount",
    "discount_from_fields",
    "discount_to_fields",
    # Line items
    "LineItem",
    "QuoteItem",
    "InvoiceItem",
    # Documents
    "DocumentDiscount",
    "TotalsBreakdown",
    "ValidationResult",
    "DiscountValidation",
    "CompanySettings",
    "QuoteCreate",
    "InvoiceCreate",
    "QuoteStatus",
    "InvoiceStatus",
    # Jobs
    "JobEntry",
    "JobMaterial",
    "JobTimeEntry",
    "JobStatus",
    "JobPriority",
    # Templates
    "HourlyRate",
    "MaterialTemplate",
    "Customer",
    "TemplateOption",
]
