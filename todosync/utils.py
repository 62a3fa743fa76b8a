from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from .config import SYNC_DEBUG, SYNC_TIMEZONE


def _log_debug(message: str) -> None:
    if SYNC_DEBUG:
        print(message, flush=True)


def _now_iso_second() -> str:
    return datetime.now(SYNC_TIMEZONE).isoformat(timespec="seconds")


def _clean_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None
