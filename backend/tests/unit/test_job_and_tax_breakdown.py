from datetime import date
from decimal import Decimal

from invoicedesk.schemas.discount import FixedDiscount, PercentageDiscount
from invoicedesk.schemas.job import JobEntry, JobMaterial, JobTimeEntry
from invoicedesk.services.discount_service import calculate_document_totals
from invoicedesk.services.job_service import (
    LEGACY_ENTRY_ID,
    apply_material_discount,
    apply_time_entry_discount,
    calculate_total_cost,
    calculate_total_hours,
    create_default_time_entry,
    get_time_entries,
)
from invoicedesk.services.tax_breakdown_service import (
    calculate_job_tax_breakdown,
    calculate_tax_breakdown,
    has_discounts,
    has_only_zero_tax_rate,
)

DAY = date(2025, 3, 10)


def legacy_job(**extra):
    return JobEntry(id="j-legacy", date=DAY, hours_worked=Decimal("3"), hourly_rate=Decimal("50"), **extra)


def entry_job(**extra):
    return JobEntry(
        id="j-entries",
        date=DAY,
        time_entries=[
            JobTimeEntry(id="t1", hours_worked=Decimal("2"), hourly_rate=Decimal("60"), total=Decimal("120"), tax_rate=Decimal("19")),
            JobTimeEntry(id="t2", hours_worked=Decimal("1.5"), hourly_rate=Decimal("40"), total=Decimal("60"), tax_rate=Decimal("7")),
        ],
        **extra,
    )


class TestJobService:
    """Hours and cost over time entries with the legacy fallback."""

    def test_hours_and_cost_from_entries(self):
        job = entry_job()

        assert calculate_total_hours(job) == Decimal("3.5")
        assert calculate_total_cost(job) == Decimal("180")

    def test_legacy_job(self):
        job = legacy_job()

        assert calculate_total_hours(job) == Decimal("3")
        assert calculate_total_cost(job) == Decimal("150")

    def test_legacy_job_gets_synthesised_entry(self):
        entries = get_time_entries(legacy_job())

        assert len(entries) == 1
        assert entries[0].id == LEGACY_ENTRY_ID
        assert entries[0].total == Decimal("150")
        assert entries[0].tax_rate == Decimal("19")

    def test_job_without_time(self):
        assert get_time_entries(JobEntry(id="empty", date=DAY)) == []

    def test_default_time_entry(self):
        entry = create_default_time_entry(hourly_rate=55, hourly_rate_id="rate-1")

        assert entry.hourly_rate == Decimal("55")
        assert entry.tax_rate == Decimal("19")
        assert entry.hours_worked == Decimal("0")

    def test_material_discount(self):
        material = JobMaterial(quantity=Decimal("4"), unit_price=Decimal("2.50"), discount=PercentageDiscount(value=Decimal("20")))

        updated = apply_material_discount(material)

        assert updated.discount_amount == Decimal("2")
        assert updated.total == Decimal("8")

    def test_time_entry_discount(self):
        entry = JobTimeEntry(hours_worked=Decimal("2"), hourly_rate=Decimal("50"), discount=FixedDiscount(value=Decimal("15")))

        assert apply_time_entry_discount(entry).total == Decimal("85")


class TestTaxBreakdown:
    def test_grouped_by_rate(self, make_item):
        items = [make_item(1, 100, tax_rate=19), make_item(2, 50, tax_rate=19), make_item(1, 10, tax_rate=7)]

        breakdown = calculate_tax_breakdown(items)

        assert list(breakdown) == [Decimal("7"), Decimal("19")]
        assert breakdown[Decimal("19")].taxable_amount == Decimal("200")
        assert breakdown[Decimal("19")].tax_amount == Decimal("38")
        assert breakdown[Decimal("7")].tax_amount == Decimal("0.7")

    def test_global_discount_spread_proportionally(self, make_item):
        items = [make_item(1, 75, tax_rate=19), make_item(1, 25, tax_rate=7)]

        breakdown = calculate_tax_breakdown(items, global_discount_amount=Decimal("10"))

        assert breakdown[Decimal("19")].taxable_amount == Decimal("67.5")
        assert breakdown[Decimal("7")].taxable_amount == Decimal("22.5")

    def test_matches_document_totals(self, sample_items):
        totals = calculate_document_totals(sample_items, PercentageDiscount(value=Decimal("10")), False)
        breakdown = calculate_tax_breakdown(sample_items, totals.global_discount_amount)

        assert sum(bucket.tax_amount for bucket in breakdown.values()) == totals.tax_amount

    def test_job_breakdown_with_entries_and_materials(self):
        job = entry_job(materials=[JobMaterial(quantity=Decimal("2"), unit_price=Decimal("10"))])

        breakdown = calculate_job_tax_breakdown(job, is_small_business=False)

        assert breakdown[Decimal("19")].taxable_amount == Decimal("140")
        assert breakdown[Decimal("7")].taxable_amount == Decimal("60")

    def test_legacy_job_breakdown_small_business(self):
        breakdown = calculate_job_tax_breakdown(legacy_job(), is_small_business=True)

        assert list(breakdown) == [Decimal("0")]
        assert breakdown[Decimal("0")].tax_amount == Decimal("0")

    def test_flags(self, make_item):
        plain = [make_item(1, 10, tax_rate=0)]
        discounted = [make_item(1, 10, discount=("fixed", 1))]

        assert has_only_zero_tax_rate(plain)
        assert not has_only_zero_tax_rate([])
        assert not has_discounts(plain)
        assert has_discounts(discounted)
