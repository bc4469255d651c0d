"""Shared test fixtures."""
import base64

import pytest

from slot_proxy import config
from slot_proxy.models import (
    BookingRequest,
    BusyInterval,
    DayAvailability,
    Facility,
    Patient,
    WeekAvailability,
    WorkPeriod,
)


@pytest.fixture
def auth_header() -> str:
    """Basic credentials accepted by the mock upstream."""
    raw = f"{config.MOCK_API_USERNAME}:{config.MOCK_API_PASSWORD}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


@pytest.fixture
def make_week():
    """Build a WeekAvailability from (day, work period, busy slots) tuples."""
    def _create(days, slot_duration_minutes=60, facility_id="fac-001"):
        return WeekAvailability(
            facility=Facility(facility_id=facility_id, name="Facility Example"),
            slot_duration_minutes=slot_duration_minutes,
            days={
                name: DayAvailability(
                    work_period=WorkPeriod(
                        start_hour=period[0],
                        end_hour=period[1],
                        lunch_start_hour=period[2],
                        lunch_end_hour=period[3]
                    ),
                    busy_slots=[BusyInterval(start=s, end=e) for s, e in busy] if busy is not None else None
                )
                for name, period, busy in days
            }
        )
    return _create


@pytest.fixture
def booking() -> BookingRequest:
    return BookingRequest(
        facility_id="fac-001",
        start="2024-03-12 10:00:00",
        end="2024-03-12 11:00:00",
        comments="arm pain",
        patient=Patient(
            name="Mario",
            second_name="Neta",
            email="mario.neta@example.com",
            phone="555 44 33 22"
        )
    )


@pytest.fixture(autouse=True)
def reset_mock_upstream():
    """Start every test with an empty mock upstream."""
    from slot_proxy import mock_api

    mock_api.reset_state()
    yield
    mock_api.reset_state()
