"""Configuration for the slot proxy service.

All runtime settings centralized here - override through environment
variables or a local .env file.
"""
import os

from dotenv import load_dotenv

load_dotenv()

# Upstream availability API
UPSTREAM_BASE_URL = os.getenv(
    "SLOT_PROXY_UPSTREAM_BASE_URL", "http://localhost:5000/api/availability"
)
UPSTREAM_TIMEOUT = int(os.getenv("SLOT_PROXY_UPSTREAM_TIMEOUT", "15"))
# One attempt per logical operation; raise only when the deployment asks for it
UPSTREAM_MAX_ATTEMPTS = int(os.getenv("SLOT_PROXY_UPSTREAM_MAX_ATTEMPTS", "1"))

# Upstream numbers days Sunday=0 ... Saturday=6; the slot date is
# anchor + (day_number - DAY_OFFSET)
DAY_OFFSET = int(os.getenv("SLOT_PROXY_DAY_OFFSET", "1"))

# Wire formats
API_DATE_FORMAT = "%Y%m%d"
SLOT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Server
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
HOST = os.getenv("SLOT_PROXY_HOST", "0.0.0.0")
PORT = int(os.getenv("SLOT_PROXY_PORT", "8000"))

# Mock upstream (local development)
MOCK_API_PORT = int(os.getenv("MOCK_API_PORT", "5000"))
MOCK_API_USERNAME = os.getenv("MOCK_API_USERNAME", "techuser")
MOCK_API_PASSWORD = os.getenv("MOCK_API_PASSWORD", "secretpassWord")

# Schedule served by the mock upstream
MOCK_FACILITY = {
    "FacilityId": "fac-001",
    "Name": "Facility Example",
    "Address": "Josep Pla 2, Edifici B2 08019 Barcelona"
}
MOCK_SLOT_DURATION_MINUTES = 30
MOCK_WORK_PERIOD = {
    "StartHour": 9,
    "EndHour": 17,
    "LunchStartHour": 13,
    "LunchEndHour": 14
}
MOCK_WORK_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
