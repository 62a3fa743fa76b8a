from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from google.auth.transport.requests import Request as GoogleRequest
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from .config import GCAL_SCOPES, GOOGLE_TOKEN_URI, WRITABLE_ACCESS_ROLES
from .models import CalendarInfo, EventTime, RemoteEvent
from .session import MissingConfigurationError, SyncSession
from .utils import _log_debug

logger = logging.getLogger(__name__)


def is_gcal_configured(session: SyncSession) -> bool:
  return bool(session.client_id and session.client_secret)


def _authorized_user_info(session: SyncSession) -> Dict[str, Any]:
  token_data = dict(session.token or {})
  token_data.setdefault("client_id", session.client_id)
  token_data.setdefault("client_secret", session.client_secret)
  token_data.setdefault("token_uri", GOOGLE_TOKEN_URI)
  return token_data


def get_gcal_service(session: SyncSession):
  if not is_gcal_configured(session):
    raise MissingConfigurationError("Google Calendar is not configured.")
  if not session.has_token:
    raise MissingConfigurationError(
        "Google OAuth token not found. Run /auth/google/login first.")

  creds = Credentials.from_authorized_user_info(_authorized_user_info(session),
                                                GCAL_SCOPES)

  if creds.expired and creds.refresh_token:
    creds.refresh(GoogleRequest())
    session.update_token(json.loads(creds.to_json()))
    _log_debug("[GCAL] access token refreshed")

  return build("calendar", "v3", credentials=creds, cache_discovery=False)


def list_google_calendars(service) -> List[CalendarInfo]:
  calendars: List[CalendarInfo] = []
  page_token: Optional[str] = None
  while True:
    response = service.calendarList().list(pageToken=page_token).execute()
    for raw in response.get("items", []):
      if not isinstance(raw, dict):
        continue
      if raw.get("deleted"):
        continue
      calendar_id = raw.get("id")
      if not isinstance(calendar_id, str) or not calendar_id.strip():
        continue
      access_role = raw.get("accessRole")
      if access_role not in WRITABLE_ACCESS_ROLES:
        continue
      calendars.append(
          CalendarInfo(id=calendar_id,
                       summary=raw.get("summary"),
                       primary=bool(raw.get("primary")),
                       access_role=access_role))
    page_token = response.get("nextPageToken")
    if not page_token:
      break
  return calendars


def _convert_gcal_time(obj: Any) -> Optional[EventTime]:
  if not isinstance(obj, dict):
    return None
  date_time = obj.get("dateTime")
  date_value = obj.get("date")
  if not isinstance(date_time, str) or not date_time.strip():
    date_time = None
  if not isinstance(date_value, str) or not date_value.strip():
    date_value = None
  if date_time is None and date_value is None:
    return None
  return EventTime(date=date_value,
                   date_time=date_time,
                   time_zone=obj.get("timeZone"))


def normalize_gcal_event(raw: Dict[str, Any]) -> Optional[RemoteEvent]:
  start = _convert_gcal_time(raw.get("start"))
  if start is None:
    return None
  event_id = raw.get("id")
  return RemoteEvent(id=event_id if isinstance(event_id, str) and event_id else None,
                     summary=raw.get("summary") or "",
                     start=start,
                     end=_convert_gcal_time(raw.get("end")))


def _fetch_google_events_raw(service, calendar_id: str) -> List[Dict[str, Any]]:
  events_data: List[Dict[str, Any]] = []
  page_token: Optional[str] = None
  while True:
    response = service.events().list(calendarId=calendar_id,
                                     singleEvents=True,
                                     pageToken=page_token).execute()
    items = response.get("items", [])
    if isinstance(items, list):
      events_data.extend(items)
    page_token = response.get("nextPageToken")
    if not page_token:
      break
  return events_data


def list_events(service, calendar_id: str) -> List[RemoteEvent]:
  events: List[RemoteEvent] = []
  for raw in _fetch_google_events_raw(service, calendar_id):
    if not isinstance(raw, dict) or raw.get("status") == "cancelled":
      continue
    normalized = normalize_gcal_event(raw)
    if normalized is None:
      _log_debug(f"[GCAL] skipping event without start: {raw.get('id')}")
      continue
    events.append(normalized)
  return events


def create_event(service, calendar_id: str, body: Dict[str, Any]) -> RemoteEvent:
  created = service.events().insert(calendarId=calendar_id, body=body).execute()
  return normalize_gcal_event(created) or RemoteEvent(
      id=created.get("id"),
      summary=body.get("summary") or "",
      start=EventTime(**_event_time_kwargs(body.get("start"))))


def _event_time_kwargs(obj: Any) -> Dict[str, Any]:
  if not isinstance(obj, dict):
    return {}
  return {
      "date": obj.get("date"),
      "date_time": obj.get("dateTime"),
      "time_zone": obj.get("timeZone"),
  }


def delete_event(service, calendar_id: str, event_id: str) -> None:
  if not event_id:
    raise ValueError("event_id is empty")
  service.events().delete(calendarId=calendar_id, eventId=event_id).execute()


class GoogleCalendar:
  """Calendar collaborator bound to one session.

  The discovery service is built lazily and reused until ``reset`` so a
  pass talks to Google through a single authorized client.
  """

  def __init__(self, session: SyncSession) -> None:
    self.session = session
    self._service = None

  @property
  def service(self):
    if self._service is None:
      self._service = get_gcal_service(self.session)
    return self._service

  def reset(self) -> None:
    self._service = None

  def list_calendars(self) -> List[CalendarInfo]:
    return list_google_calendars(self.service)

  def list_events(self, calendar_id: str) -> List[RemoteEvent]:
    return list_events(self.service, calendar_id)

  def create_event(self, calendar_id: str, body: Dict[str, Any]) -> RemoteEvent:
    return create_event(self.service, calendar_id, body)

  def delete_event(self, calendar_id: str, event_id: str) -> None:
    delete_event(self.service, calendar_id, event_id)
