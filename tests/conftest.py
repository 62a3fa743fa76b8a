"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add the repo root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from todosync.gcal import normalize_gcal_event  # noqa: E402
from todosync.models import CalendarInfo, RemoteEvent  # noqa: E402
from todosync.runner import SyncRunner  # noqa: E402
from todosync.session import SyncSession  # noqa: E402
from todosync.vault import VaultStore  # noqa: E402

CALENDAR_ID = "todo@group.calendar.google.com"


class FakeCalendar:
    """In-memory calendar speaking the same raw dicts as the Google API."""

    def __init__(self, events: Optional[List[Dict[str, Any]]] = None):
        self.raw: Dict[str, Dict[str, Any]] = {}
        self.anonymous: List[Dict[str, Any]] = []
        self.created_bodies: List[Dict[str, Any]] = []
        self.deleted_ids: List[str] = []
        self.list_calls = 0
        self.fail_list_on_call: Optional[int] = None
        self.fail_create_for: set = set()
        self.fail_delete_for: set = set()
        self.on_list = None
        self._next_id = 1
        for event in events or []:
            self.add_raw(event)

    def add_raw(self, event: Dict[str, Any]) -> None:
        if event.get("id"):
            self.raw[event["id"]] = dict(event)
        else:
            self.anonymous.append(dict(event))

    def list_calendars(self) -> List[CalendarInfo]:
        return [
            CalendarInfo(id="primary@example.com", summary="Me", primary=True,
                         access_role="owner"),
            CalendarInfo(id=CALENDAR_ID, summary="Todo", access_role="writer"),
        ]

    def list_events(self, calendar_id: str) -> List[RemoteEvent]:
        self.list_calls += 1
        if self.on_list is not None:
            self.on_list()
        if self.fail_list_on_call == self.list_calls:
            raise ConnectionError("listing failed")
        items = list(self.raw.values()) + self.anonymous
        return [normalize_gcal_event(item) for item in items]

    def create_event(self, calendar_id: str, body: Dict[str, Any]) -> RemoteEvent:
        if body["summary"].strip() in self.fail_create_for:
            raise ConnectionError("insert failed")
        event_id = f"evt{self._next_id}"
        self._next_id += 1
        raw = {"id": event_id, **body}
        self.raw[event_id] = raw
        self.created_bodies.append(body)
        return normalize_gcal_event(raw)

    def delete_event(self, calendar_id: str, event_id: str) -> None:
        if event_id in self.fail_delete_for:
            raise ConnectionError("delete failed")
        del self.raw[event_id]
        self.deleted_ids.append(event_id)

    def summaries(self) -> List[str]:
        return sorted(item.get("summary", "") for item in self.raw.values())


@pytest.fixture
def calendar():
    return FakeCalendar()


@pytest.fixture
def vault(tmp_path):
    return VaultStore(tmp_path / "vault")


@pytest.fixture
def session(tmp_path):
    return SyncSession(
        path=tmp_path / "session.json",
        token={"token": "access", "refresh_token": "refresh"},
        calendar_id=CALENDAR_ID,
        client_id="client-id.apps.googleusercontent.com",
        client_secret="secret",
    )


@pytest.fixture
def sample_document():
    return "\n".join([
        "# January",
        "- [ ] not a task, it sits above every header",
        "",
        "## 2025-1-27",
        "- [ ] Dentist (14:00-15:00)",
        "- [x] Gym",
        "some prose",
        "",
        "## 1/28",
        "- [ ] Pay rent",
        "  - [ ] indented sub item",
        "",
        "## Ideas",
        "- [ ] Learn the cello",
    ])


@pytest.fixture
def runner(session, vault, calendar, sample_document):
    vault.write_text("Todo/2025/01月.md", sample_document)
    return SyncRunner(session=session,
                      vault=vault,
                      calendar_factory=lambda _session: calendar,
                      year="2025",
                      month="01")
