# backend/tests/conftest.py
from datetime import date, datetime
from decimal import Decimal

import pytest

from invoicedesk.schemas.discount import discount_from_fields
from invoicedesk.schemas.job import JobEntry
from invoicedesk.schemas.line_item import LineItem
from invoicedesk.schemas.template import Customer, HourlyRate, MaterialTemplate


@pytest.fixture
def make_item():
    """Factory for line items: make_item(2, 10, discount=("fixed", 2), tax_rate=19)"""
    counter = {"n": 0}

    def _make(quantity, unit_price, discount=None, tax_rate=19, order=None, item_id=None, description="Item"):
        counter["n"] += 1
        discount_type, discount_value = discount or (None, None)
        return LineItem(
            id=item_id or f"item-{counter['n']}",
            description=description,
            quantity=Decimal(str(quantity)),
            unit_price=Decimal(str(unit_price)),
            tax_rate=Decimal(str(tax_rate)),
            discount=discount_from_fields(discount_type, discount_value),
            order=order if order is not None else counter["n"],
        )

    return _make


@pytest.fixture
def sample_items(make_item):
    """2 x 10.00 without discount and 1 x 5.00 with 2.00 fixed discount, both 19%"""
    return [
        make_item(2, 10, item_id="a"),
        make_item(1, 5, discount=("fixed", 2), item_id="b"),
    ]


@pytest.fixture
def make_job():
    def _make(job_id, day, created_at=None, title=None):
        return JobEntry(
            id=job_id,
            job_number=f"A-{job_id}",
            title=title or f"Job {job_id}",
            date=day,
            created_at=created_at,
        )

    return _make


@pytest.fixture
def monday():
    return date(2025, 3, 10)


@pytest.fixture
def tuesday():
    return date(2025, 3, 11)


@pytest.fixture
def created(monday):
    """created(n) -> datetime n minutes after 08:00 on monday"""
    def _created(minutes):
        return datetime(monday.year, monday.month, monday.day, 8, minutes)

    return _created


@pytest.fixture
def general_rate():
    return HourlyRate(id="rate-general", name="Geselle", description="Standard", rate=Decimal("55"), tax_rate=Decimal("19"))


@pytest.fixture
def general_material():
    return MaterialTemplate(id="mat-general", name="Kupferrohr", unit_price=Decimal("12.50"), unit="m", tax_rate=Decimal("19"))


@pytest.fixture
def customer_with_templates():
    return Customer(
        id="cust-1",
        customer_number="K-0001",
        name="Muster GmbH",
        hourly_rates=[HourlyRate(id="rate-special", name="Meister", rate=Decimal("70"), tax_rate=Decimal("7"))],
        materials=[MaterialTemplate(id="mat-special", name="Fitting", unit_price=Decimal("3.20"), unit="Stk")],
    )


@pytest.fixture
def plain_customer():
    return Customer(id="cust-2", customer_number="K-0002", name="Erika Mustermann")
