"""Converge a calendar onto the open tasks of a parsed todo document.

A pass has two strictly ordered phases:

* create: every open task without a remote twin (same trimmed summary on the
  same date) becomes an event. The remote listing is re-read before each
  create because the twin check is the only thing keeping repeated runs
  idempotent.
* delete: after re-reading the listing, every event that no open task
  asserts any more is deleted, whether its task was completed or removed.

The calendar collaborator needs ``list_events(calendar_id)``,
``create_event(calendar_id, body)`` and ``delete_event(calendar_id, event_id)``.
Any of them may raise; a failure costs one operation, never the pass.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Dict, Iterable, Optional

from .config import DEFAULT_EVENT_DURATION_MINUTES, SYNC_TIMEZONE
from .dates import event_date_component, normalize_clock
from .models import RemoteEvent, SyncReport, Task, TaskIndex
from .utils import _log_debug

logger = logging.getLogger(__name__)


def _tz_name(tz: tzinfo) -> str:
  return getattr(tz, "key", None) or str(tz)


def _task_label(date_key: str, task: Task) -> str:
  return f"{date_key} {task.key}"


def _event_label(event: RemoteEvent) -> str:
  return f"{event.id} {event.summary.strip()}"


def build_event_body(task: Task,
                     date_key: str,
                     tz: tzinfo = SYNC_TIMEZONE) -> Dict[str, Any]:
  body: Dict[str, Any] = {"summary": task.description}
  time_range = task.time_range
  start_clock = normalize_clock(time_range.start) if time_range else None

  if start_clock is None:
    day = date.fromisoformat(date_key)
    # Google treats the end date as exclusive
    body["start"] = {"date": day.isoformat()}
    body["end"] = {"date": (day + timedelta(days=1)).isoformat()}
    return body

  start_dt = datetime.fromisoformat(f"{date_key}T{start_clock}:00")
  end_clock = normalize_clock(time_range.end)
  if end_clock is not None:
    end_dt = datetime.fromisoformat(f"{date_key}T{end_clock}:00")
    if end_dt <= start_dt:
      end_dt += timedelta(days=1)
  else:
    end_dt = start_dt + timedelta(minutes=DEFAULT_EVENT_DURATION_MINUTES)

  tz_value = _tz_name(tz)
  body["start"] = {"dateTime": start_dt.isoformat(), "timeZone": tz_value}
  body["end"] = {"dateTime": end_dt.isoformat(), "timeZone": tz_value}
  return body


def find_duplicate(events: Iterable[RemoteEvent],
                   task: Task,
                   date_key: str,
                   tz: tzinfo = SYNC_TIMEZONE) -> Optional[RemoteEvent]:
  for event in events:
    if event.summary.strip() != task.key:
      continue
    if event_date_component(event.start, tz) == date_key:
      return event
  return None


def find_matching_task(index: TaskIndex,
                       event: RemoteEvent,
                       tz: tzinfo = SYNC_TIMEZONE) -> Optional[Task]:
  """Task backing ``event``; an open match wins over a completed one."""
  date_key = event_date_component(event.start, tz)
  if not date_key:
    return None
  summary = event.summary.strip()
  matches = [task for task in index.get(date_key, []) if task.key == summary]
  for task in matches:
    if not task.completed:
      return task
  return matches[0] if matches else None


def create_phase(index: TaskIndex,
                 calendar,
                 calendar_id: str,
                 report: SyncReport,
                 tz: tzinfo = SYNC_TIMEZONE) -> None:
  for date_key, tasks in index.items():
    for task in tasks:
      if task.completed:
        continue
      label = _task_label(date_key, task)
      try:
        snapshot = calendar.list_events(calendar_id)
      except Exception as exc:
        logger.exception("Listing events failed, not creating %s", label)
        report.errors.append(f"list before create {label}: {exc}")
        continue

      if find_duplicate(snapshot, task, date_key, tz) is not None:
        _log_debug(f"[SYNC] skipping duplicate event: {label}")
        report.skipped_duplicates.append(label)
        continue

      body = build_event_body(task, date_key, tz)
      try:
        calendar.create_event(calendar_id, body)
      except Exception as exc:
        logger.exception("Failed to add event: %s", label)
        report.errors.append(f"create {label}: {exc}")
        continue
      kind = "all-day" if "date" in body["start"] else "timed"
      _log_debug(f"[SYNC] added {kind} event: {label}")
      report.created.append(label)


def delete_phase(index: TaskIndex,
                 calendar,
                 calendar_id: str,
                 report: SyncReport,
                 tz: tzinfo = SYNC_TIMEZONE) -> bool:
  """Return False when the listing could not be fetched."""
  try:
    snapshot = calendar.list_events(calendar_id)
  except Exception as exc:
    logger.exception("Listing events failed, delete phase aborted")
    report.errors.append(f"list before delete: {exc}")
    return False

  for event in snapshot:
    task = find_matching_task(index, event, tz)
    if task is not None and not task.completed:
      continue
    if not event.id:
      logger.warning("Event without id cannot be deleted: %r on %s",
                     event.summary, event_date_component(event.start, tz))
      report.anomalies.append(
          f"no id: {event.summary.strip()} "
          f"{event_date_component(event.start, tz)}")
      continue
    try:
      calendar.delete_event(calendar_id, event.id)
    except Exception as exc:
      logger.exception("Failed to delete event with ID: %s", event.id)
      report.errors.append(f"delete {_event_label(event)}: {exc}")
      continue
    reason = "completed" if task is not None else "no matching task"
    _log_debug(f"[SYNC] deleted event {_event_label(event)} ({reason})")
    report.deleted.append(_event_label(event))
  return True


def reconcile(index: TaskIndex,
              calendar,
              calendar_id: str,
              tz: tzinfo = SYNC_TIMEZONE,
              report: Optional[SyncReport] = None) -> SyncReport:
  report = report or SyncReport()
  create_phase(index, calendar, calendar_id, report, tz)
  listed = delete_phase(index, calendar, calendar_id, report, tz)
  if not listed:
    report.status = "failed"
  elif report.errors:
    report.status = "partial"
  else:
    report.status = "ok"
  return report
