from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Dict, Optional
import re

from .models import EventTime, TimeRange

# 2025-1-27, 2025/01/27
_FULL_DATE_RE = re.compile(r"^(\d{4})([-/])(\d{1,2})\2(\d{1,2})$")
# 1/27, 01-27, 1月27日, 2025/1/27日
_MONTH_DAY_RE = re.compile(r"^(?:\d{4}[/-])?(\d{1,2})(?:[/-]|月)(\d{1,2})日?$")
# 9:00~10:30, 14:00 - 15:00, 9-10, 9:00~
_TIME_RANGE_RE = re.compile(
    r"(?<![\d:])(\d{1,2}(?::\d{2})?)\s*[~\-]\s*(\d{1,2}(?::\d{2})?)?(?![\d:])")


def parse_date_header(header: str) -> Optional[Dict[str, str]]:
  """Normalize a section header to ``{"month": "MM", "day": "DD"}``.

  Returns None when the header matches none of the accepted notations.
  A year written in the header is ignored; the configured year wins.
  """
  if not isinstance(header, str):
    return None
  value = header.strip()
  if not value:
    return None

  match = _FULL_DATE_RE.match(value)
  if match:
    return {"month": match.group(3).zfill(2), "day": match.group(4).zfill(2)}

  match = _MONTH_DAY_RE.match(value)
  if match:
    return {"month": match.group(1).zfill(2), "day": match.group(2).zfill(2)}
  return None


def compose_date_key(year: str, parsed: Dict[str, str]) -> Optional[str]:
  try:
    value = date(int(year), int(parsed["month"]), int(parsed["day"]))
  except (KeyError, TypeError, ValueError):
    return None
  return value.isoformat()


def extract_time_range(body: str) -> Optional[TimeRange]:
  if not isinstance(body, str):
    return None
  match = _TIME_RANGE_RE.search(body)
  if not match:
    return None
  return TimeRange(start=match.group(1), end=match.group(2))


def normalize_clock(value: Optional[str]) -> Optional[str]:
  # 9 -> 09:00, 9:05 -> 09:05, 24:00 -> None
  if not isinstance(value, str):
    return None
  raw = value.strip()
  if not raw:
    return None
  hour_str, _, minute_str = raw.partition(":")
  try:
    hour = int(hour_str)
    minute = int(minute_str) if minute_str else 0
  except ValueError:
    return None
  if not (0 <= hour <= 23 and 0 <= minute <= 59):
    return None
  return f"{hour:02d}:{minute:02d}"


def event_date_component(value: Optional[EventTime],
                         tz: Optional[tzinfo] = None) -> Optional[str]:
  if value is None:
    return None
  if value.date_time:
    raw = value.date_time.strip()
    try:
      dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
      return raw.split("T")[0] or None
    if dt.tzinfo is not None and tz is not None:
      dt = dt.astimezone(tz)
    return dt.date().isoformat()
  if value.date:
    return value.date.strip()[:10] or None
  return None
