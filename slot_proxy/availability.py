"""Weekly slot generation and filtering.

Turns an upstream weekly work schedule into concrete bookable slot starts:
- Step through each day's work period by the slot duration
- Drop slots inside the lunch window or any busy interval
- Degenerate days (closed, bad hours, bad duration) yield no slots
"""
from datetime import date, datetime, timedelta
from typing import List, Optional

from slot_proxy import config
from slot_proxy.logging_config import get_logger
from slot_proxy.models import (
    WEEKDAY_NUMBERS,
    BusyInterval,
    DayAvailability,
    DaySlots,
    WeekAvailability,
    WeekResult,
    WorkPeriod,
)

logger = get_logger(__name__)

HOURS_PER_DAY = 24


class AvailabilityTransformer:
    """Compute bookable slots for every day of an upstream week document."""

    def __init__(
        self,
        day_offset: int = config.DAY_OFFSET,
        timestamp_format: str = config.SLOT_TIMESTAMP_FORMAT
    ):
        """
        Args:
            day_offset: Subtracted from the upstream day number when
                resolving a day's calendar date from the anchor
            timestamp_format: strftime pattern for emitted slots
        """
        self.day_offset = day_offset
        self.timestamp_format = timestamp_format

    def compute(self, anchor_date: date, week: WeekAvailability) -> WeekResult:
        """
        Build the slot listing for a week.

        Args:
            anchor_date: Week anchor requested by the caller (a Monday)
            week: Upstream weekly availability

        Returns:
            WeekResult with one DaySlots per upstream day, in document order
        """
        days = [
            DaySlots(
                day=day_name,
                available_slots=self.day_slots(
                    self.resolve_date(anchor_date, day_name),
                    day,
                    week.slot_duration_minutes
                )
            )
            for day_name, day in week.days.items()
        ]

        facility_id = week.facility.facility_id if week.facility else None
        return WeekResult(date=anchor_date, facility_id=facility_id, days=days)

    def resolve_date(self, anchor_date: date, day_name: str) -> date:
        """Calendar date of an upstream day entry relative to the anchor."""
        return anchor_date + timedelta(days=WEEKDAY_NUMBERS[day_name] - self.day_offset)

    def day_slots(
        self,
        day_date: date,
        day: DayAvailability,
        slot_duration_minutes: int
    ) -> List[str]:
        """Formatted, filtered slot starts for a single day."""
        candidates = self.generate_candidates(day_date, day.work_period, slot_duration_minutes)
        available = self.filter_candidates(candidates, day.work_period, day.busy_slots)
        return [slot.strftime(self.timestamp_format) for slot in available]

    def generate_candidates(
        self,
        day_date: date,
        work_period: WorkPeriod,
        slot_duration_minutes: int
    ) -> List[datetime]:
        """
        Step from the opening hour to the closing hour.

        Returns an empty list for a non-positive duration or an invalid
        work period; upstream reports closed days that way.
        """
        if slot_duration_minutes <= 0:
            logger.warning(
                "invalid_slot_duration",
                slot_duration_minutes=slot_duration_minutes,
                date=day_date.isoformat()
            )
            return []

        if not self.is_valid_work_period(work_period):
            logger.warning(
                "invalid_work_period",
                start_hour=work_period.start_hour,
                end_hour=work_period.end_hour,
                date=day_date.isoformat()
            )
            return []

        midnight = datetime.combine(day_date, datetime.min.time())
        current = midnight + timedelta(hours=work_period.start_hour)
        closing = midnight + timedelta(hours=work_period.end_hour)
        # A slot longer than the work period still opens once at start_hour
        open_minutes = (work_period.end_hour - work_period.start_hour) * 60
        step = timedelta(minutes=min(slot_duration_minutes, open_minutes))

        candidates = []
        while current < closing:
            candidates.append(current)
            current += step
        return candidates

    @staticmethod
    def filter_candidates(
        candidates: List[datetime],
        work_period: WorkPeriod,
        busy_slots: Optional[List[BusyInterval]]
    ) -> List[datetime]:
        """Drop candidates in the lunch window or in any busy interval."""
        busy_slots = busy_slots or []

        return [
            slot for slot in candidates
            if not (work_period.lunch_start_hour <= slot.hour < work_period.lunch_end_hour)
            and not any(busy.contains(slot) for busy in busy_slots)
        ]

    @staticmethod
    def is_valid_work_period(work_period: WorkPeriod) -> bool:
        """Hours must be non-negative, ordered, and end no later than midnight."""
        if work_period.start_hour < 0 or work_period.end_hour < 0:
            return False
        if work_period.start_hour >= work_period.end_hour:
            return False
        return work_period.end_hour <= HOURS_PER_DAY
