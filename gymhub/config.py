import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./gymhub.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# CORS - comma separated list of dashboard / member app origins
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")

# Plan duration mapping, resolved to a day count when a subscription is created
MONTHLY_DURATION_DAYS = int(os.getenv("MONTHLY_DURATION_DAYS", "30"))
YEARLY_DURATION_DAYS = int(os.getenv("YEARLY_DURATION_DAYS", "365"))

# Membership change notifications (best-effort, out-of-band)
NOTIFICATION_WEBHOOK_URL = os.getenv("NOTIFICATION_WEBHOOK_URL")
NOTIFICATION_TIMEOUT = float(os.getenv("NOTIFICATION_TIMEOUT", "5"))
NOTIFY_MEMBERSHIP_EVENTS = os.getenv("NOTIFY_MEMBERSHIP_EVENTS", "true").lower() == "true"
NOTIFY_ATTENDANCE_EVENTS = os.getenv("NOTIFY_ATTENDANCE_EVENTS", "true").lower() == "true"

# Reporting
EXPIRING_SOON_DAYS = int(os.getenv("EXPIRING_SOON_DAYS", "7"))
