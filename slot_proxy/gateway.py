"""Gateway to the upstream availability API.

The only place where transport and protocol failures are translated into
the slot_proxy error taxonomy.
"""
import json
from datetime import date
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from slot_proxy import config
from slot_proxy.errors import (
    BadUpstreamRequest,
    MalformedUpstreamResponse,
    SlotProxyError,
    Unauthorized,
    UnexpectedFailure,
    UpstreamNotFound,
    UpstreamServerError,
    WeekAnchorNotMonday,
)
from slot_proxy.http_client import create_http_session
from slot_proxy.logging_config import get_logger
from slot_proxy.models import (
    WEEKDAY_NUMBERS,
    BookingRequest,
    DayAvailability,
    Facility,
    WeekAvailability,
)

logger = get_logger(__name__)

NOT_MONDAY_MARKER = "datetime must be a Monday"
FIXED_FIELDS = ("Facility", "SlotDurationMinutes")


def parse_week_availability(payload: Any) -> WeekAvailability:
    """
    Decode the upstream weekly document.

    Fixed fields are read first; every remaining top-level key that names a
    weekday is decoded as a day entry and anything else is ignored.

    Raises:
        MalformedUpstreamResponse: If the payload does not match the shape
    """
    if not isinstance(payload, dict):
        raise MalformedUpstreamResponse("Unexpected response shape: expected a JSON object.")

    remaining = dict(payload)
    facility_raw = remaining.pop("Facility", None)
    duration = remaining.pop("SlotDurationMinutes", None)

    try:
        facility = Facility.model_validate(facility_raw) if facility_raw is not None else None
        days: Dict[str, DayAvailability] = {
            key: DayAvailability.model_validate(value)
            for key, value in remaining.items()
            if key in WEEKDAY_NUMBERS
        }
        return WeekAvailability(
            facility=facility,
            slot_duration_minutes=duration,
            days=days
        )
    except ValidationError as exc:
        logger.error("malformed_week_availability", errors=exc.errors(include_url=False))
        raise MalformedUpstreamResponse(
            "Unexpected response shape: weekly availability could not be decoded."
        ) from exc


class UpstreamGateway:
    """Fetch weekly availability and submit bookings upstream."""

    def __init__(
        self,
        base_url: str = config.UPSTREAM_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: int = config.UPSTREAM_TIMEOUT,
        max_attempts: int = config.UPSTREAM_MAX_ATTEMPTS
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or create_http_session(
            max_attempts=max_attempts,
            timeout=timeout
        )

    def fetch_week_availability(
        self,
        anchor_date: date,
        authorization: Optional[str]
    ) -> Optional[WeekAvailability]:
        """
        GET the weekly availability document for the week starting at anchor_date.

        Args:
            anchor_date: Week anchor (upstream requires a Monday)
            authorization: Inbound Authorization header, forwarded as-is

        Returns:
            WeekAvailability, or None when upstream has no document

        Raises:
            SlotProxyError: Typed failure for auth, transport or protocol errors
        """
        headers = self._auth_headers(authorization)
        url = f"{self.base_url}/GetWeeklyAvailability/{anchor_date.strftime(config.API_DATE_FORMAT)}"
        logger.info("fetching_week_availability", date=anchor_date.isoformat(), url=url)

        response = self._send("GET", url, headers=headers)

        if response.status_code == 400 and NOT_MONDAY_MARKER in (response.text or ""):
            logger.error("week_anchor_not_monday", date=anchor_date.isoformat())
            raise WeekAnchorNotMonday()
        self._raise_for_status(response)

        body = (response.text or "").strip()
        if not body:
            logger.warning("empty_week_availability", date=anchor_date.isoformat())
            return None

        try:
            payload = json.loads(body)
        except ValueError as exc:
            logger.error("invalid_json_response", date=anchor_date.isoformat())
            raise MalformedUpstreamResponse() from exc

        if payload is None:
            logger.warning("empty_week_availability", date=anchor_date.isoformat())
            return None

        week = parse_week_availability(payload)
        logger.info(
            "week_availability_retrieved",
            date=anchor_date.isoformat(),
            days=list(week.days)
        )
        return week

    def submit_booking(self, booking: BookingRequest, authorization: Optional[str]) -> bool:
        """
        POST a slot reservation upstream.

        Returns:
            True only when upstream answers 200, False for any other
            non-error status

        Raises:
            SlotProxyError: Typed failure for auth, transport or protocol errors
        """
        headers = self._auth_headers(authorization)
        url = f"{self.base_url}/TakeSlot"
        logger.info(
            "submitting_booking",
            facility_id=booking.facility_id,
            start=booking.start,
            end=booking.end,
            url=url
        )

        response = self._send("POST", url, headers=headers, json=booking.to_upstream())
        self._raise_for_status(response)

        if response.status_code == 200:
            logger.info("booking_accepted", start=booking.start)
            return True

        logger.warning("booking_not_confirmed", start=booking.start, status=response.status_code)
        return False

    @staticmethod
    def _auth_headers(authorization: Optional[str]) -> Dict[str, str]:
        if not authorization or not authorization.strip():
            raise Unauthorized("Authorization header is missing or invalid.")
        return {"Authorization": authorization}

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        """Single logical request; transport failures become UnexpectedFailure."""
        try:
            if method == "GET":
                return self.session.get(url, **kwargs)
            return self.session.post(url, **kwargs)
        except requests.exceptions.RequestException as exc:
            logger.error("upstream_request_failed", method=method, url=url, error=str(exc))
            raise UnexpectedFailure() from exc

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        """Map upstream error statuses to the error taxonomy."""
        status = response.status_code
        if status < 400:
            return

        error: SlotProxyError
        if status == 400:
            error = BadUpstreamRequest()
        elif status == 401:
            error = Unauthorized()
        elif status == 404:
            error = UpstreamNotFound()
        elif status >= 500:
            error = UpstreamServerError()
        else:
            error = UnexpectedFailure()

        logger.error("upstream_error_status", status=status, code=error.code)
        raise error
