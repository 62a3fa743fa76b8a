from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .config import CALENDAR_SELECTION_MAX_ATTEMPTS
from .models import CalendarInfo

logger = logging.getLogger(__name__)


class CalendarSelectionError(ValueError):
    pass


def validate_calendar_choice(calendars: List[CalendarInfo],
                             calendar_id: str) -> CalendarInfo:
    wanted = (calendar_id or "").strip()
    for calendar in calendars:
        if calendar.id == wanted:
            return calendar
    raise CalendarSelectionError(f"Unknown or read-only calendar: {wanted!r}")


def _parse_choice(answer: str, count: int) -> Optional[int]:
    try:
        index = int(answer.strip()) - 1
    except ValueError:
        return None
    if 0 <= index < count:
        return index
    return None


def prompt_calendar_selection(
        calendars: List[CalendarInfo],
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
        max_attempts: int = CALENDAR_SELECTION_MAX_ATTEMPTS) -> str:
    """Ask for a calendar by number, re-asking at most ``max_attempts`` times."""
    if not calendars:
        raise CalendarSelectionError("No calendars found.")

    output_fn("Available calendars:")
    for position, calendar in enumerate(calendars, start=1):
        output_fn(f"{position}: {calendar.summary} (ID: {calendar.id})")

    for attempt in range(1, max_attempts + 1):
        answer = input_fn(
            "Enter the number of the calendar you want to use: ")
        index = _parse_choice(answer or "", len(calendars))
        if index is not None:
            return calendars[index].id
        logger.warning("Invalid calendar selection %r (attempt %d/%d)",
                       answer, attempt, max_attempts)
        output_fn("Invalid selection. Please try again.")
    raise CalendarSelectionError(
        f"No valid calendar selected after {max_attempts} attempts.")
