"""Tests for the upstream gateway: parsing, status mapping, header pass-through."""
import json
from datetime import date
from unittest.mock import Mock

import pytest
import requests

from slot_proxy.errors import (
    BadUpstreamRequest,
    MalformedUpstreamResponse,
    Unauthorized,
    UnexpectedFailure,
    UpstreamNotFound,
    UpstreamServerError,
    WeekAnchorNotMonday,
)
from slot_proxy.gateway import UpstreamGateway, parse_week_availability

BASE_URL = "https://upstream.test/api/availability"
AUTH = "Basic dGVjaHVzZXI6c2VjcmV0cGFzc1dvcmQ="

WEEK_DOCUMENT = {
    "Facility": {
        "FacilityId": "fac-001",
        "Name": "Facility Example",
        "Address": "Josep Pla 2, Edifici B2 08019 Barcelona"
    },
    "SlotDurationMinutes": 60,
    "Tuesday": {
        "WorkPeriod": {"StartHour": 10, "EndHour": 13, "LunchStartHour": 17, "LunchEndHour": 19}
    },
    "Thursday": {
        "WorkPeriod": {"StartHour": 10, "EndHour": 13, "LunchStartHour": 17, "LunchEndHour": 19},
        "BusySlots": [
            {"Start": "2024-03-14T10:00:00", "End": "2024-03-14T11:00:00"},
            {"Start": "2024-03-14T11:00:00+02:00", "End": "2024-03-14T12:00:00+02:00"}
        ]
    },
    "Holiday": {"anything": True},
    "Notes": "ignored"
}


def make_response(status_code=200, body=""):
    if not isinstance(body, str):
        body = json.dumps(body)
    return Mock(status_code=status_code, text=body)


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def gateway(session):
    return UpstreamGateway(base_url=BASE_URL + "/", session=session)


class TestParseWeekAvailability:
    """Permissive decoding of the dynamic day keys."""

    def test_parses_fixed_fields_and_weekdays(self):
        week = parse_week_availability(WEEK_DOCUMENT)

        assert week.facility.facility_id == "fac-001"
        assert week.facility.address == "Josep Pla 2, Edifici B2 08019 Barcelona"
        assert week.slot_duration_minutes == 60
        assert list(week.days) == ["Tuesday", "Thursday"]
        assert week.days["Tuesday"].work_period.start_hour == 10
        assert week.days["Tuesday"].busy_slots is None
        assert len(week.days["Thursday"].busy_slots) == 2

    def test_busy_slot_offsets_are_dropped(self):
        week = parse_week_availability(WEEK_DOCUMENT)

        busy = week.days["Thursday"].busy_slots[1]
        assert busy.start.tzinfo is None
        assert busy.start.hour == 11

    def test_document_without_days(self):
        week = parse_week_availability({"SlotDurationMinutes": 30})

        assert week.days == {}
        assert week.facility is None

    def test_day_names_are_case_sensitive(self):
        week = parse_week_availability({
            "SlotDurationMinutes": 30,
            "monday": {"WorkPeriod": {"StartHour": 9, "EndHour": 10, "LunchStartHour": 0, "LunchEndHour": 0}}
        })

        assert week.days == {}

    @pytest.mark.parametrize("payload", [
        [],
        "text",
        {"Facility": {"FacilityId": "fac-001"}},
        {"SlotDurationMinutes": "sixty"},
        {"SlotDurationMinutes": 60, "Monday": {"BusySlots": []}},
        {"SlotDurationMinutes": 60, "Monday": "closed"},
    ])
    def test_shape_mismatch_is_malformed(self, payload):
        with pytest.raises(MalformedUpstreamResponse):
            parse_week_availability(payload)


class TestFetchWeekAvailability:
    """GET /GetWeeklyAvailability/{yyyyMMdd}."""

    def test_requests_week_with_forwarded_authorization(self, gateway, session):
        session.get.return_value = make_response(200, WEEK_DOCUMENT)

        week = gateway.fetch_week_availability(date(2024, 3, 11), AUTH)

        session.get.assert_called_once_with(
            f"{BASE_URL}/GetWeeklyAvailability/20240311",
            headers={"Authorization": AUTH}
        )
        assert list(week.days) == ["Tuesday", "Thursday"]

    @pytest.mark.parametrize("body", ["", "   ", "null"])
    def test_missing_document_returns_none(self, gateway, session, body):
        session.get.return_value = make_response(200, body)

        assert gateway.fetch_week_availability(date(2024, 3, 11), AUTH) is None

    def test_invalid_json_is_malformed(self, gateway, session):
        session.get.return_value = make_response(200, "<html>oops</html>")

        with pytest.raises(MalformedUpstreamResponse) as exc_info:
            gateway.fetch_week_availability(date(2024, 3, 11), AUTH)

        assert exc_info.value.message == "Invalid JSON response format."
        assert exc_info.value.status_code == 502

    @pytest.mark.parametrize("authorization", [None, "", "   "])
    def test_missing_authorization_never_reaches_upstream(self, gateway, session, authorization):
        with pytest.raises(Unauthorized) as exc_info:
            gateway.fetch_week_availability(date(2024, 3, 11), authorization)

        assert exc_info.value.message == "Authorization header is missing or invalid."
        session.get.assert_not_called()

    def test_not_monday_rejection(self, gateway, session):
        session.get.return_value = make_response(400, {"error": "datetime must be a Monday"})

        with pytest.raises(WeekAnchorNotMonday) as exc_info:
            gateway.fetch_week_availability(date(2024, 3, 12), AUTH)

        assert isinstance(exc_info.value, BadUpstreamRequest)
        assert exc_info.value.message == "Datetime must be a Monday."
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("status_code,error_class,message", [
        (400, BadUpstreamRequest, "Bad Request: The request was invalid."),
        (401, Unauthorized, "Unauthorized: Authentication failed."),
        (404, UpstreamNotFound, "Not Found: The requested resource could not be found."),
        (500, UpstreamServerError, "Internal Server Error: There was a problem with the server."),
        (503, UpstreamServerError, "Internal Server Error: There was a problem with the server."),
        (403, UnexpectedFailure, "An unexpected error occurred."),
        (409, UnexpectedFailure, "An unexpected error occurred."),
    ])
    def test_error_statuses_map_to_taxonomy(self, gateway, session, status_code, error_class, message):
        session.get.return_value = make_response(status_code, "")

        with pytest.raises(error_class) as exc_info:
            gateway.fetch_week_availability(date(2024, 3, 11), AUTH)

        assert type(exc_info.value) is error_class
        assert exc_info.value.message == message

    def test_transport_failure_is_unexpected(self, gateway, session):
        session.get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(UnexpectedFailure) as exc_info:
            gateway.fetch_week_availability(date(2024, 3, 11), AUTH)

        assert exc_info.value.status_code == 500
        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)


class TestSubmitBooking:
    """POST /TakeSlot."""

    def test_posts_pascal_case_body(self, gateway, session, booking):
        session.post.return_value = make_response(200, "")

        assert gateway.submit_booking(booking, AUTH) is True

        session.post.assert_called_once_with(
            f"{BASE_URL}/TakeSlot",
            headers={"Authorization": AUTH},
            json={
                "FacilityId": "fac-001",
                "Start": "2024-03-12 10:00:00",
                "End": "2024-03-12 11:00:00",
                "Comments": "arm pain",
                "Patient": {
                    "Name": "Mario",
                    "SecondName": "Neta",
                    "Email": "mario.neta@example.com",
                    "Phone": "555 44 33 22"
                }
            }
        )

    @pytest.mark.parametrize("status_code", [201, 202, 204, 302])
    def test_non_200_success_is_not_confirmed(self, gateway, session, booking, status_code):
        session.post.return_value = make_response(status_code, "")

        assert gateway.submit_booking(booking, AUTH) is False

    def test_rejected_booking_raises_bad_request(self, gateway, session, booking):
        session.post.return_value = make_response(400, {"error": "This time slot is no longer available"})

        with pytest.raises(BadUpstreamRequest):
            gateway.submit_booking(booking, AUTH)

    def test_missing_authorization(self, gateway, session, booking):
        with pytest.raises(Unauthorized):
            gateway.submit_booking(booking, None)

        session.post.assert_not_called()

    def test_timeout_is_unexpected(self, gateway, session, booking):
        session.post.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(UnexpectedFailure):
            gateway.submit_booking(booking, AUTH)
