"""
Job helpers: hours/cost over time entries (with the legacy single-block
fallback) and discount refresh for job materials and time entries.
"""
from decimal import Decimal
from typing import List, Optional

from invoicedesk.schemas.job import JobEntry, JobMaterial, JobTimeEntry
from invoicedesk.services.discount_service import apply_discount
from invoicedesk.utils.ids import generate_id
from invoicedesk.utils.money import ZERO, to_decimal

# Jobs created before per-entry tax rates existed are taxed at the standard rate
LEGACY_TAX_RATE = Decimal("19")
LEGACY_ENTRY_ID = "legacy"
LEGACY_ENTRY_DESCRIPTION = "Arbeitszeit"


def calculate_total_hours(job: JobEntry) -> Decimal:
    """Sum of hours over time entries, or the job's own hours_worked for legacy jobs."""
    if job.time_entries:
        return sum((entry.hours_worked for entry in job.time_entries), ZERO)
    return job.hours_worked or ZERO


def calculate_total_cost(job: JobEntry) -> Decimal:
    """Sum of time entry totals, or hours_worked * hourly_rate for legacy jobs."""
    if job.time_entries:
        return sum((entry.total for entry in job.time_entries), ZERO)
    return (job.hours_worked or ZERO) * (job.hourly_rate or ZERO)


def get_time_entries(job: JobEntry) -> List[JobTimeEntry]:
    """
    Time entries of a job. Legacy jobs with hours but no entries get one
    synthesised entry so callers can treat both shapes the same way.
    """
    if job.time_entries:
        return list(job.time_entries)
    if job.hours_worked > 0:
        return [JobTimeEntry(
            id=LEGACY_ENTRY_ID,
            description=LEGACY_ENTRY_DESCRIPTION,
            start_time=job.start_time,
            end_time=job.end_time,
            hours_worked=job.hours_worked,
            hourly_rate=job.hourly_rate,
            hourly_rate_id=job.hourly_rate_id,
            tax_rate=LEGACY_TAX_RATE,
            total=job.hours_worked * job.hourly_rate,
        )]
    return []


def create_default_time_entry(
    hourly_rate=None,
    hourly_rate_id: Optional[str] = None,
    tax_rate=None,
) -> JobTimeEntry:
    """Empty time entry prefilled with a rate; tax defaults to 19%."""
    return JobTimeEntry(
        id=generate_id(),
        hours_worked=ZERO,
        hourly_rate=to_decimal(hourly_rate),
        hourly_rate_id=hourly_rate_id or "",
        tax_rate=to_decimal(tax_rate) if tax_rate is not None else LEGACY_TAX_RATE,
        total=ZERO,
    )


def apply_material_discount(material: JobMaterial) -> JobMaterial:
    return apply_discount(material, material.quantity, material.unit_price)


def apply_time_entry_discount(entry: JobTimeEntry) -> JobTimeEntry:
    return apply_discount(entry, entry.hours_worked, entry.hourly_rate)
