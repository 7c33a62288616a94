import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./revops.db")

# Fallback TaskFlow owner when no user header is sent
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "owner@revelateops.com")

# Frontend base URL for CORS defaults
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Timezone used for Cal.com bookings when the client does not send one
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "UTC")
# Timezone for the timestamp shown on contact form Slack messages
CONTACT_TIMEZONE = os.getenv("CONTACT_TIMEZONE", "America/New_York")

# Slack / Calendly / Cal.com credentials are read at call time through these helpers
# so a rotated secret only needs an env change.


def get_slack_bot_token():
    return os.getenv("SLACK_BOT_TOKEN")


def get_slack_user_id():
    return os.getenv("SLACK_USER_ID")


def get_slack_signing_secret():
    return os.getenv("SLACK_SIGNING_SECRET")


def get_calendly_api_token():
    return os.getenv("CALENDLY_API_TOKEN")


def get_calcom_api_key():
    return os.getenv("CALCOM_API_KEY")


def get_admin_api_key():
    return os.getenv("ADMIN_API_KEY")
