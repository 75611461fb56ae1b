"""
Recompute quote and invoice totals from their line items and report documents
whose stored total drifts from the calculator by more than one cent.
Run from backend: python scripts/audit_document_totals.py [--url API_BASE_URL] [--kind quotes|invoices|all]
"""
import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path

from pydantic import ValidationError

backend_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_dir))

from invoicedesk.config import settings
from invoicedesk.schemas.discount import discount_from_fields
from invoicedesk.schemas.line_item import LineItem
from invoicedesk.services.api_client import ApiClient, ApiError
from invoicedesk.services.discount_service import calculate_document_totals
from invoicedesk.utils.money import round_money, to_decimal

logger = logging.getLogger(__name__)

TOLERANCE = Decimal("0.01")


def audit_document(document, is_small_business=None):
    """Return (stored_total, recomputed_total) for one API document."""
    items = [LineItem.model_validate(row) for row in document.get("items") or []]
    global_discount = discount_from_fields(
        document.get("globalDiscountType"), document.get("globalDiscountValue")
    )
    totals = calculate_document_totals(items, global_discount, is_small_business)
    return round_money(to_decimal(document.get("total"))), totals.rounded().total


def find_drift(documents, number_field, is_small_business=None):
    drift = []
    for document in documents:
        number = document.get(number_field) or document.get("id")
        try:
            stored, recomputed = audit_document(document, is_small_business)
        except ValidationError as e:
            logger.error(f"Skipping {number}: malformed line items: {e}")
            continue
        if abs(stored - recomputed) > TOLERANCE:
            drift.append((number, stored, recomputed))
    return drift


def main():
    parser = argparse.ArgumentParser(description="Audit stored quote/invoice totals against line items")
    parser.add_argument("--url", "-u", help="API base URL (default: API_BASE_URL env)")
    parser.add_argument("--kind", choices=("quotes", "invoices", "all"), default="all")
    parser.add_argument("--small-business", action="store_true", default=settings.IS_SMALL_BUSINESS,
                        help="Recompute without VAT")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    client = ApiClient(base_url=args.url)

    sources = []
    if args.kind in ("quotes", "all"):
        sources.append(("quotes", client.get_quotes, "quoteNumber"))
    if args.kind in ("invoices", "all"):
        sources.append(("invoices", client.get_invoices, "invoiceNumber"))

    found = 0
    for label, fetch, number_field in sources:
        try:
            documents = fetch()
        except ApiError as e:
            logger.error(f"Could not load {label}: {e}")
            sys.exit(2)
        drift = find_drift(documents, number_field, args.small_business)
        found += len(drift)
        if drift:
            print(f"DRIFT: {len(drift)} of {len(documents)} {label} with stored total != recomputed total")
            for number, stored, recomputed in drift[:20]:
                print(f"  {number}: stored={stored} recomputed={recomputed}")
        else:
            print(f"OK: {len(documents)} {label} in sync with their line items")

    sys.exit(1 if found else 0)


if __name__ == "__main__":
    main()
