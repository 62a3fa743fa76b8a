from __future__ import annotations

import os
import pathlib
from datetime import datetime
from zoneinfo import ZoneInfo

SYNC_DEBUG = os.getenv("SYNC_DEBUG", "0") == "1"

# -------------------------
# Google Calendar settings
# -------------------------
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
GOOGLE_REDIRECT_URI = os.getenv("GOOGLE_REDIRECT_URI",
                                "http://localhost:8000/auth/google/callback")
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/v2/auth"
GCAL_SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/calendar.readonly",
]

BASE_DIR = pathlib.Path(__file__).resolve().parent.parent
SESSION_FILE = pathlib.Path(
    os.getenv("SESSION_FILE", str(BASE_DIR / "todosync_session.json")))

# -------------------------
# Todo document store
# -------------------------
TODO_VAULT_DIR = pathlib.Path(
    os.getenv("TODO_VAULT_DIR", str(BASE_DIR / "vault")))
TODO_ROOT_FOLDER = os.getenv("TODO_ROOT_FOLDER", "Todo")
TODO_TARGET_YEAR = os.getenv("TODO_TARGET_YEAR",
                             str(datetime.now().year)).strip()
TODO_TARGET_MONTH = os.getenv("TODO_TARGET_MONTH",
                              f"{datetime.now().month:02d}").strip()

SECTION_MARKER = "## "
OPEN_TASK_MARKER = "- [ ]"
DONE_TASK_MARKER = "- [x]"
NOTES_SECTION = "Notes"
MONTH_SUFFIX = "月"

# -------------------------
# Sync runtime
# -------------------------
SYNC_TIMEZONE_NAME = os.getenv("SYNC_TIMEZONE", "Asia/Tokyo")
SYNC_TIMEZONE = ZoneInfo(SYNC_TIMEZONE_NAME)
SYNC_INTERVAL_SECONDS = int(os.getenv("SYNC_INTERVAL_SECONDS", str(10 * 60)))
SYNC_TIMER_ENABLED = os.getenv("SYNC_TIMER_ENABLED", "1") == "1"
DEFAULT_EVENT_DURATION_MINUTES = 60
CALENDAR_SELECTION_MAX_ATTEMPTS = int(
    os.getenv("CALENDAR_SELECTION_MAX_ATTEMPTS", "3"))
WRITABLE_ACCESS_ROLES = ("owner", "writer")

API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
