"""Mock upstream availability API.

Flask server imitating the upstream scheduling API for local development:
- Weekly availability document (Monday-anchored weeks only)
- Slot booking, recorded as busy intervals

Run with: python -m slot_proxy.mock_api
"""
import base64
import binascii
from datetime import datetime, timedelta

from flask import Flask, jsonify, request
from flask_cors import CORS

from slot_proxy import config

app = Flask(__name__)
CORS(app)
# Upstream documents list days in week order
app.json.sort_keys = False

UPSTREAM_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
BOOKING_DATETIME_FORMATS = ("%Y-%m-%d %H:%M:%S", UPSTREAM_DATETIME_FORMAT)

# In-memory storage: [{"start": datetime, "end": datetime, "booking": dict}]
bookings = []


def reset_state():
    """Forget all bookings."""
    bookings.clear()


def is_authorized(request_obj) -> bool:
    """Check Basic credentials against the configured mock user."""
    header = request_obj.headers.get("Authorization", "")
    if not header.lower().startswith("basic "):
        return False
    try:
        decoded = base64.b64decode(header[6:].strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return False
    username, _, password = decoded.partition(":")
    return username == config.MOCK_API_USERNAME and password == config.MOCK_API_PASSWORD


def parse_booking_datetime(value):
    """Parse a booking timestamp, returning None if unrecognized."""
    for fmt in BOOKING_DATETIME_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except (TypeError, ValueError):
            continue
    return None


def build_week_document(monday: datetime) -> dict:
    """Assemble the weekly availability document for the week starting at monday."""
    document = {
        "Facility": config.MOCK_FACILITY,
        "SlotDurationMinutes": config.MOCK_SLOT_DURATION_MINUTES,
    }

    for offset, day_name in enumerate(
        ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
    ):
        if day_name not in config.MOCK_WORK_DAYS:
            continue

        day_date = (monday + timedelta(days=offset)).date()
        busy = [
            {
                "Start": entry["start"].strftime(UPSTREAM_DATETIME_FORMAT),
                "End": entry["end"].strftime(UPSTREAM_DATETIME_FORMAT)
            }
            for entry in bookings
            if entry["start"].date() == day_date
        ]

        day = {"WorkPeriod": config.MOCK_WORK_PERIOD}
        if busy:
            day["BusySlots"] = busy
        document[day_name] = day

    return document


@app.route('/api/availability/GetWeeklyAvailability/<date>', methods=['GET'])
def get_weekly_availability(date):
    """GET /api/availability/GetWeeklyAvailability/20240311

    Weekly availability for the week starting at the given Monday.
    """
    if not is_authorized(request):
        return jsonify({"error": "Unauthorized"}), 401

    try:
        monday = datetime.strptime(date, "%Y%m%d")
    except ValueError:
        return jsonify({"error": "Invalid date format. Use yyyyMMdd"}), 400

    if monday.weekday() != 0:
        return jsonify({"error": "datetime must be a Monday"}), 400

    return jsonify(build_week_document(monday))


@app.route('/api/availability/TakeSlot', methods=['POST'])
def take_slot():
    """POST /api/availability/TakeSlot - Reserve a slot.

    Expected JSON body:
    {
        "FacilityId": "fac-001",
        "Start": "2024-03-11 09:00:00",
        "End": "2024-03-11 09:30:00",
        "Comments": "arm pain",
        "Patient": {"Name": "Mario", "SecondName": "Neta",
                    "Email": "mario.neta@example.com", "Phone": "555 44 33 22"}
    }
    """
    if not is_authorized(request):
        return jsonify({"error": "Unauthorized"}), 401

    data = request.get_json(silent=True)
    if not data:
        return jsonify({"error": "Request body is required"}), 400

    for field in ("FacilityId", "Start", "End", "Patient"):
        if not data.get(field):
            return jsonify({"error": f"Missing required field: {field}"}), 400

    start = parse_booking_datetime(data["Start"])
    end = parse_booking_datetime(data["End"])
    if start is None or end is None or start >= end:
        return jsonify({"error": "Invalid slot interval"}), 400

    if any(entry["start"] < end and start < entry["end"] for entry in bookings):
        return jsonify({"error": "This time slot is no longer available"}), 400

    bookings.append({"start": start, "end": end, "booking": data})
    return jsonify({"success": True}), 200


if __name__ == '__main__':
    print(f"Mock upstream running on http://localhost:{config.MOCK_API_PORT}")
    app.run(port=config.MOCK_API_PORT, debug=True)
