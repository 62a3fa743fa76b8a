from __future__ import annotations

import asyncio
import logging
import threading
from datetime import tzinfo
from typing import Callable, Optional

from .config import (
    SYNC_INTERVAL_SECONDS,
    SYNC_TIMEZONE,
    TODO_TARGET_MONTH,
    TODO_TARGET_YEAR,
)
from .models import SyncReport
from .parser import parse_tasks_from_text
from .reconciler import reconcile
from .session import MissingConfigurationError, SyncSession
from .utils import _log_debug, _now_iso_second
from .vault import DocumentNotFoundError, VaultStore

logger = logging.getLogger(__name__)


class SyncRunner:
  """Runs reconciliation passes, at most one at a time per process.

  A pass requested while another is in flight is dropped and reported as
  ``busy``; the timer and manual triggers share this runner.
  """

  def __init__(self,
               session: SyncSession,
               vault: VaultStore,
               calendar_factory: Callable[[SyncSession], object],
               year: str = TODO_TARGET_YEAR,
               month: str = TODO_TARGET_MONTH,
               tz: tzinfo = SYNC_TIMEZONE) -> None:
    self.session = session
    self.vault = vault
    self.calendar_factory = calendar_factory
    self.year = year
    self.month = month
    self.tz = tz
    self.last_report: Optional[SyncReport] = None
    self._pass_lock = threading.Lock()

  def is_running(self) -> bool:
    return self._pass_lock.locked()

  def run_pass(self,
               trigger: str = "manual",
               year: Optional[str] = None,
               month: Optional[str] = None) -> SyncReport:
    """Run one pass. Raises MissingConfigurationError before any I/O."""
    self.session.require_ready()

    if not self._pass_lock.acquire(blocking=False):
      logger.info("Sync pass already running, %s request dropped", trigger)
      return SyncReport(status="busy",
                        trigger=trigger,
                        started_at=_now_iso_second(),
                        finished_at=_now_iso_second())
    try:
      report = self._run_locked(trigger, year or self.year,
                                month or self.month)
      self.last_report = report
      return report
    finally:
      self._pass_lock.release()

  def _run_locked(self, trigger: str, year: str, month: str) -> SyncReport:
    report = SyncReport(trigger=trigger, started_at=_now_iso_second())
    _log_debug(f"[SYNC] pass start trigger={trigger} target={year}/{month}")
    try:
      path = self.vault.resolve_monthly_todo_path(year, month)
      content = self.vault.read_text(path)
    except DocumentNotFoundError as exc:
      logger.error("Sync aborted: %s", exc)
      report.status = "failed"
      report.errors.append(str(exc))
      report.finished_at = _now_iso_second()
      return report

    index = parse_tasks_from_text(content, year)
    calendar = self.calendar_factory(self.session)
    reconcile(index, calendar, self.session.calendar_id, self.tz, report)
    report.finished_at = _now_iso_second()
    logger.info(
        "Tasks for %s/%s synced (%s): %d created, %d deleted, %d errors",
        year, month, report.status, len(report.created), len(report.deleted),
        len(report.errors))
    return report


async def periodic_sync(runner: SyncRunner,
                        interval_seconds: int = SYNC_INTERVAL_SECONDS) -> None:
  """Timer trigger: one pass per interval until cancelled."""
  while True:
    await asyncio.sleep(interval_seconds)
    _log_debug("[SYNC] timer fired")
    try:
      await asyncio.to_thread(runner.run_pass, "timer")
    except MissingConfigurationError as exc:
      logger.warning("Scheduled sync skipped: %s", exc)
    except Exception:
      logger.exception("Error in scheduled sync")
