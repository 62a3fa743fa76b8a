from __future__ import annotations

import logging
from typing import List, Tuple

from .config import (
    DONE_TASK_MARKER,
    NOTES_SECTION,
    OPEN_TASK_MARKER,
    SECTION_MARKER,
)
from .dates import compose_date_key, extract_time_range, parse_date_header
from .models import Task, TaskIndex
from .utils import _log_debug

logger = logging.getLogger(__name__)


def split_sections(content: str) -> List[Tuple[str, List[str]]]:
  """Split a document into ``(header, lines)`` pairs in document order.

  Lines before the first ``## `` header land in the reserved Notes bucket.
  Repeated headers stay separate entries; merging happens per DateKey.
  """
  sections: List[Tuple[str, List[str]]] = []
  current: List[str] = []
  notes: List[str] = []
  in_section = False

  for line in (content or "").splitlines():
    if line.startswith(SECTION_MARKER):
      current = []
      sections.append((line[len(SECTION_MARKER):].strip(), current))
      in_section = True
    elif in_section:
      current.append(line)
    else:
      notes.append(line)

  if notes:
    sections.insert(0, (NOTES_SECTION, notes))
  return sections


def extract_tasks(lines: List[str]) -> List[Task]:
  tasks: List[Task] = []
  for line in lines:
    if line.startswith(OPEN_TASK_MARKER):
      completed = False
      body = line[len(OPEN_TASK_MARKER):]
    elif line.startswith(DONE_TASK_MARKER):
      completed = True
      body = line[len(DONE_TASK_MARKER):]
    else:
      continue
    body = body.strip()
    # the time annotation stays in the description
    tasks.append(
        Task(description=body,
             completed=completed,
             time_range=extract_time_range(body)))
  return tasks


def parse_tasks_from_text(content: str, year: str) -> TaskIndex:
  index: TaskIndex = {}
  for header, lines in split_sections(content):
    if header == NOTES_SECTION:
      continue
    tasks = extract_tasks(lines)
    if not tasks:
      continue
    parsed = parse_date_header(header)
    date_key = compose_date_key(year, parsed) if parsed else None
    if date_key is None:
      logger.warning("Skipping invalid date section: %r", header)
      continue
    _log_debug(f"[PARSE] {header!r} -> {date_key} ({len(tasks)} tasks)")
    index.setdefault(date_key, []).extend(tasks)
  return index
