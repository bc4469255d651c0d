"""Application service joining the upstream gateway and slot generation."""
from datetime import date
from typing import Optional

from slot_proxy.availability import AvailabilityTransformer
from slot_proxy.errors import SlotsNotFound
from slot_proxy.gateway import UpstreamGateway
from slot_proxy.logging_config import get_logger
from slot_proxy.models import BookingRequest, WeekResult

logger = get_logger(__name__)


class SlotService:
    """Weekly slot listing and slot booking on behalf of an inbound caller."""

    def __init__(
        self,
        gateway: UpstreamGateway,
        transformer: Optional[AvailabilityTransformer] = None
    ):
        self.gateway = gateway
        self.transformer = transformer or AvailabilityTransformer()

    def get_week_slots(self, anchor_date: date, authorization: Optional[str]) -> WeekResult:
        """
        Available slots for the week starting at anchor_date.

        Raises:
            SlotsNotFound: Upstream returned no availability document
            SlotProxyError: Propagated from the gateway
        """
        logger.info("fetching_weekly_slots", date=anchor_date.isoformat())

        week = self.gateway.fetch_week_availability(anchor_date, authorization)
        if week is None:
            logger.warning("no_availability_document", date=anchor_date.isoformat())
            raise SlotsNotFound()

        result = self.transformer.compute(anchor_date, week)
        logger.info(
            "weekly_slots_computed",
            date=anchor_date.isoformat(),
            days=len(result.days),
            slots=sum(len(day.available_slots) for day in result.days)
        )
        return result

    def take_slot(self, booking: BookingRequest, authorization: Optional[str]) -> bool:
        """Forward a booking upstream and report whether it was accepted."""
        logger.info("taking_slot", facility_id=booking.facility_id, start=booking.start)
        return self.gateway.submit_booking(booking, authorization)
