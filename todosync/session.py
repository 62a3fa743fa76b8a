from __future__ import annotations

import json
import logging
import pathlib
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from .config import GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, SESSION_FILE
from .utils import _clean_optional_str, _log_debug

logger = logging.getLogger(__name__)


class MissingConfigurationError(RuntimeError):
    pass


@dataclass
class SyncSession:
    """OAuth token payload and destination calendar, persisted as one JSON file.

    Loaded once at process start, updated when the token is refreshed or a
    calendar is picked, and written back on every change.
    """

    path: pathlib.Path
    token: Optional[Dict[str, Any]] = None
    calendar_id: Optional[str] = None
    client_id: Optional[str] = field(default=GOOGLE_CLIENT_ID, repr=False)
    client_secret: Optional[str] = field(default=GOOGLE_CLIENT_SECRET,
                                         repr=False)

    @property
    def has_token(self) -> bool:
        return bool(self.token and (self.token.get("token")
                                    or self.token.get("refresh_token")))

    def require_ready(self) -> None:
        if not (self.client_id and self.client_secret):
            raise MissingConfigurationError(
                "GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET are not configured.")
        if not self.has_token:
            raise MissingConfigurationError(
                "Google OAuth token not found. Run /auth/google/login first.")
        if not self.calendar_id:
            raise MissingConfigurationError(
                "Calendar ID is not set. Select a calendar first.")

    def update_token(self, token: Dict[str, Any]) -> None:
        merged = dict(token)
        if not merged.get("refresh_token") and self.token:
            merged["refresh_token"] = self.token.get("refresh_token")
        self.token = merged
        save_session(self)

    def select_calendar(self, calendar_id: str) -> None:
        self.calendar_id = calendar_id
        save_session(self)

    def clear(self) -> None:
        self.token = None
        self.calendar_id = None
        try:
            if self.path.exists():
                self.path.unlink()
        except OSError as exc:
            logger.warning("Could not remove session file %s: %s", self.path,
                           exc)


def load_session(path: Union[str, pathlib.Path, None] = None) -> SyncSession:
    session_path = pathlib.Path(path or SESSION_FILE)
    session = SyncSession(path=session_path)
    if not session_path.exists():
        return session
    try:
        data = json.loads(session_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable session file %s: %s", session_path,
                       exc)
        return session
    if not isinstance(data, dict):
        return session
    token = data.get("token")
    if isinstance(token, dict):
        session.token = token
    session.calendar_id = _clean_optional_str(data.get("calendar_id"))
    _log_debug(f"[SESSION] loaded has_token={session.has_token} "
               f"calendar={session.calendar_id}")
    return session


def save_session(session: SyncSession) -> None:
    payload = {"token": session.token, "calendar_id": session.calendar_id}
    session.path.parent.mkdir(parents=True, exist_ok=True)
    session.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2),
                            encoding="utf-8")
