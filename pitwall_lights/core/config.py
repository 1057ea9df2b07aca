import os

from dotenv import load_dotenv

load_dotenv()

GOVEE_API_KEY: str = os.getenv("GOVEE_API_KEY")
GOVEE_DEVICE_ID: str = os.getenv("GOVEE_DEVICE_ID")
GOVEE_SKU: str = os.getenv("GOVEE_SKU", "H6061")
GOVEE_API_URL: str = os.getenv(
    "GOVEE_API_URL", "https://openapi.api.govee.com/router/api/v1/device/control"
)

OPENF1_BASE_URL: str = os.getenv("OPENF1_BASE_URL", "https://api.openf1.org/v1")
OPENF1_SESSION_KEY: str = os.getenv("OPENF1_SESSION_KEY", "latest")

STALENESS_THRESHOLD_MINUTES: int = int(os.getenv("STALENESS_THRESHOLD_MINUTES", 120))
# The lighting API misbehaves when called faster than this
PACING_INTERVAL_MS: int = min(max(int(os.getenv("PACING_INTERVAL_MS", 500)), 500), 1000)
RECONCILE_POLICY: str = os.getenv("RECONCILE_POLICY", "group_by_colour").lower()

POLL_INTERVAL_SECONDS: int = int(os.getenv("POLL_INTERVAL_SECONDS", 60))
# Python weekday numbers (Monday=0), default is Saturday through Monday
ACTIVE_WEEKDAYS: frozenset = frozenset(
    int(day) for day in os.getenv("ACTIVE_WEEKDAYS", "5,6,0").split(",") if day.strip()
)
REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", 15))
RUN_ONCE: bool = os.getenv("RUN_ONCE", "false").lower() in ("1", "true", "yes")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

if RECONCILE_POLICY not in ("group_by_colour", "per_driver"):
    raise ValueError("RECONCILE_POLICY must be group_by_colour or per_driver")

if not ACTIVE_WEEKDAYS or not ACTIVE_WEEKDAYS <= set(range(7)):
    raise ValueError("ACTIVE_WEEKDAYS must be comma separated weekday numbers 0-6")
