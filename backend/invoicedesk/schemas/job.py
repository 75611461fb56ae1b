"""
Job (Auftrag) schemas for the calendar and job-to-invoice flow
"""
import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from invoicedesk.schemas.discount import DiscountedLineBase
from invoicedesk.utils.ids import generate_id
from invoicedesk.utils.money import ZERO


class JobStatus(str, Enum):
    DRAFT = "draft"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    INVOICED = "invoiced"


class JobPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class JobMaterial(DiscountedLineBase):
    """Material used on a job"""
    id: str = Field(default_factory=generate_id)
    description: str = ""
    quantity: Decimal = ZERO
    unit_price: Decimal = ZERO
    tax_rate: Optional[Decimal] = None
    unit: Optional[str] = None
    template_id: Optional[str] = None


class JobTimeEntry(DiscountedLineBase):
    """One block of worked time on a job"""
    id: str = Field(default_factory=generate_id)
    description: str = ""
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    hours_worked: Decimal = ZERO
    hourly_rate: Decimal = ZERO
    hourly_rate_id: Optional[str] = None
    tax_rate: Optional[Decimal] = None


def parse_day(value: Any) -> Any:
    """
    Reduce API date values to a calendar day.

    The API returns either "2025-03-14" or a full ISO timestamp; only the day
    part is relevant for grouping jobs.
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    return value


class JobEntry(BaseModel):
    """Job entry as returned by /jobs"""
    id: str
    job_number: str = ""
    external_job_number: Optional[str] = None
    customer_id: str = ""
    customer_name: str = ""
    customer_address: Optional[str] = None
    title: str = ""
    description: str = ""
    date: dt.date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    # Legacy single time block, used when time_entries is empty
    hours_worked: Decimal = ZERO
    hourly_rate: Decimal = ZERO
    hourly_rate_id: Optional[str] = None
    time_entries: List[JobTimeEntry] = []
    materials: List[JobMaterial] = []
    status: JobStatus = JobStatus.DRAFT
    priority: Optional[JobPriority] = None
    notes: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @field_validator("date", mode="before")
    @classmethod
    def _day_only(cls, value: Any) -> Any:
        return parse_day(value)

    def to_api_dict(self) -> Dict[str, Any]:
        """camelCase payload for PUT /jobs/{id}"""
        data = self.model_dump(
            by_alias=True,
            exclude={"time_entries", "materials"},
            exclude_none=True,
            mode="json",
        )
        data["hoursWorked"] = float(self.hours_worked)
        data["hourlyRate"] = float(self.hourly_rate)
        data["timeEntries"] = [entry.to_api_dict() for entry in self.time_entries]
        data["materials"] = [material.to_api_dict() for material in self.materials]
        return data

    class Config:
        alias_generator = to_camel
        populate_by_name = True
