"""Pydantic models for the upstream availability document and slot results.

Upstream speaks PascalCase JSON; every field carries its upstream alias and
accepts the snake_case name as well.
"""
from datetime import date as date_type, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Upstream numbering
WEEKDAY_NUMBERS = {
    "Sunday": 0,
    "Monday": 1,
    "Tuesday": 2,
    "Wednesday": 3,
    "Thursday": 4,
    "Friday": 5,
    "Saturday": 6,
}


class UpstreamModel(BaseModel):
    """Base for immutable models decoded from upstream JSON."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Facility(UpstreamModel):
    facility_id: Optional[str] = Field(None, alias="FacilityId")
    name: Optional[str] = Field(None, alias="Name")
    address: Optional[str] = Field(None, alias="Address")


class WorkPeriod(UpstreamModel):
    """Daily opening hours and lunch window. Hours are not validated upstream."""
    start_hour: int = Field(..., alias="StartHour")
    end_hour: int = Field(..., alias="EndHour")
    lunch_start_hour: int = Field(..., alias="LunchStartHour")
    lunch_end_hour: int = Field(..., alias="LunchEndHour")


class BusyInterval(UpstreamModel):
    """Already booked span, half-open [start, end)."""
    start: Optional[datetime] = Field(None, alias="Start")
    end: Optional[datetime] = Field(None, alias="End")

    @field_validator("start", "end")
    @classmethod
    def drop_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Keep facility wall-clock time; offsets are not converted."""
        if value is not None and value.tzinfo is not None:
            return value.replace(tzinfo=None)
        return value

    def contains(self, moment: datetime) -> bool:
        if self.start is None or self.end is None:
            return False
        return self.start <= moment < self.end


class DayAvailability(UpstreamModel):
    work_period: WorkPeriod = Field(..., alias="WorkPeriod")
    busy_slots: Optional[List[BusyInterval]] = Field(None, alias="BusySlots")


class WeekAvailability(UpstreamModel):
    """Weekly availability document, days kept in upstream order."""
    facility: Optional[Facility] = Field(None, alias="Facility")
    slot_duration_minutes: int = Field(..., alias="SlotDurationMinutes")
    days: Dict[str, DayAvailability] = Field(default_factory=dict)

    @field_validator("days")
    @classmethod
    def keep_weekdays(cls, value: Dict[str, DayAvailability]) -> Dict[str, DayAvailability]:
        """Only English weekday names are day entries; other keys are dropped."""
        return {name: day for name, day in value.items() if name in WEEKDAY_NUMBERS}


class DaySlots(BaseModel):
    """Bookable slot starts for one day, chronological."""
    day: str = Field(..., examples=["Tuesday"])
    available_slots: List[str] = Field(
        default_factory=list,
        examples=[["2024-03-11 09:00:00", "2024-03-11 10:00:00"]]
    )


class WeekResult(BaseModel):
    """Slots for every day in the upstream document, in document order."""
    date: date_type
    facility_id: Optional[str] = None
    days: List[DaySlots] = Field(default_factory=list)


class Patient(UpstreamModel):
    name: str = Field(..., alias="Name")
    second_name: str = Field(..., alias="SecondName")
    email: str = Field(..., alias="Email")
    phone: str = Field(..., alias="Phone")


class BookingRequest(UpstreamModel):
    """Slot reservation forwarded verbatim to upstream."""
    facility_id: str = Field(..., alias="FacilityId")
    start: str = Field(..., alias="Start", examples=["2024-03-11 09:00:00"])
    end: str = Field(..., alias="End", examples=["2024-03-11 10:00:00"])
    comments: str = Field("", alias="Comments")
    patient: Patient = Field(..., alias="Patient")

    def to_upstream(self) -> dict:
        """Serialize with upstream PascalCase keys."""
        return self.model_dump(by_alias=True)
