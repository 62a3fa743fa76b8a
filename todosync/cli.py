from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import (
    API_HOST,
    API_PORT,
    CALENDAR_SELECTION_MAX_ATTEMPTS,
    SYNC_DEBUG,
)
from .gcal import GoogleCalendar
from .selection import CalendarSelectionError, prompt_calendar_selection
from .session import MissingConfigurationError, load_session


def _configure_logging() -> None:
  logging.basicConfig(
      level=logging.DEBUG if SYNC_DEBUG else logging.INFO,
      format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _cmd_sync(args: argparse.Namespace) -> int:
  from .app import build_default_runner

  runner = build_default_runner()
  try:
    report = runner.run_pass("manual", year=args.year, month=args.month)
  except MissingConfigurationError as exc:
    print(f"Sync refused: {exc}", file=sys.stderr)
    return 2
  print(json.dumps(report.model_dump(), ensure_ascii=False, indent=2))
  return 0 if report.status in ("ok", "busy") else 1


def _cmd_select_calendar(args: argparse.Namespace) -> int:
  session = load_session()
  try:
    calendars = GoogleCalendar(session).list_calendars()
    calendar_id = prompt_calendar_selection(calendars,
                                            max_attempts=args.attempts)
  except (MissingConfigurationError, CalendarSelectionError) as exc:
    print(str(exc), file=sys.stderr)
    return 2
  session.select_calendar(calendar_id)
  print(f"Selected calendar ID: {calendar_id}")
  return 0


def _cmd_serve(args: argparse.Namespace) -> int:
  import uvicorn

  from .app import create_app

  uvicorn.run(create_app(), host=args.host, port=args.port)
  return 0


def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(
      prog="todosync",
      description="Sync a monthly todo note with Google Calendar.")
  sub = parser.add_subparsers(dest="command", required=True)

  sync = sub.add_parser("sync", help="run one reconciliation pass now")
  sync.add_argument("--year", default=None)
  sync.add_argument("--month", default=None)
  sync.set_defaults(func=_cmd_sync)

  select = sub.add_parser("select-calendar",
                          help="choose the destination calendar")
  select.add_argument("--attempts",
                      type=int,
                      default=CALENDAR_SELECTION_MAX_ATTEMPTS)
  select.set_defaults(func=_cmd_select_calendar)

  serve = sub.add_parser("serve", help="run the HTTP API and the sync timer")
  serve.add_argument("--host", default=API_HOST)
  serve.add_argument("--port", type=int, default=API_PORT)
  serve.set_defaults(func=_cmd_serve)
  return parser


def main(argv: Optional[List[str]] = None) -> int:
  _configure_logging()
  args = build_parser().parse_args(argv)
  return args.func(args)


if __name__ == "__main__":
  sys.exit(main())
