from __future__ import annotations

import logging
import secrets
import time
import urllib.parse
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import requests
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse

from .config import (
    GCAL_SCOPES,
    GOOGLE_AUTH_URI,
    GOOGLE_REDIRECT_URI,
    GOOGLE_TOKEN_URI,
)
from .models import CalendarSelectRequest, SyncRequest
from .runner import SyncRunner
from .selection import CalendarSelectionError, validate_calendar_choice
from .session import MissingConfigurationError
from .utils import _log_debug

router = APIRouter()
logger = logging.getLogger(__name__)

OAUTH_STATE_COOKIE_NAME = "todosync_oauth_state"
OAUTH_STATE_MAX_AGE_SECONDS = 600
oauth_state_store: Dict[str, float] = {}


def _get_runner(request: Request) -> SyncRunner:
  return request.app.state.runner


def _store_oauth_state(state_value: str) -> None:
  oauth_state_store[state_value] = time.time()


def _pop_oauth_state(state_value: Optional[str]) -> bool:
  if not state_value:
    return False
  created_at = oauth_state_store.pop(state_value, None)
  if created_at is None:
    return False
  return (time.time() - created_at) <= OAUTH_STATE_MAX_AGE_SECONDS


# -------------------------
# Google OAuth endpoints
# -------------------------
@router.get("/auth/google/login")
def google_login(request: Request):
  session = _get_runner(request).session
  if not (session.client_id and session.client_secret and GOOGLE_REDIRECT_URI):
    raise HTTPException(
        status_code=500,
        detail=
        "Google OAuth environment variables (GOOGLE_CLIENT_ID/SECRET/REDIRECT_URI) are not configured.",
    )
  state_value = secrets.token_urlsafe(16)
  params = {
      "client_id": session.client_id,
      "redirect_uri": GOOGLE_REDIRECT_URI,
      "response_type": "code",
      "scope": " ".join(GCAL_SCOPES),
      "access_type": "offline",
      "prompt": "consent",
      "state": state_value,
  }
  url = f"{GOOGLE_AUTH_URI}?{urllib.parse.urlencode(params)}"
  _log_debug(f"[GCAL] login redirect url={url}")
  _store_oauth_state(state_value)
  resp = RedirectResponse(url)
  resp.set_cookie(OAUTH_STATE_COOKIE_NAME,
                  state_value,
                  httponly=True,
                  samesite="lax",
                  max_age=OAUTH_STATE_MAX_AGE_SECONDS,
                  path="/")
  return resp


@router.get("/auth/google/callback")
def google_callback(request: Request):
  code = request.query_params.get("code")
  error = request.query_params.get("error")
  state = request.query_params.get("state")
  if error:
    _log_debug(f"[GCAL] callback error={error}")
    return JSONResponse({"ok": False, "error": error})
  if not code:
    raise HTTPException(status_code=400, detail="Missing code.")
  expected_state = request.cookies.get(OAUTH_STATE_COOKIE_NAME)
  if not _pop_oauth_state(state) or (expected_state and state != expected_state):
    raise HTTPException(status_code=400, detail="State verification failed.")

  session = _get_runner(request).session
  resp = requests.post(GOOGLE_TOKEN_URI,
                       data={
                           "code": code,
                           "client_id": session.client_id,
                           "client_secret": session.client_secret,
                           "redirect_uri": GOOGLE_REDIRECT_URI,
                           "grant_type": "authorization_code",
                       },
                       timeout=10)
  if not resp.ok:
    logger.error("Token exchange failed: %s %s", resp.status_code, resp.text)
    raise HTTPException(status_code=502,
                        detail=f"Token exchange failed: {resp.status_code}")

  token_json = resp.json()
  access_token = token_json.get("access_token")
  refresh_token = token_json.get("refresh_token")
  if not refresh_token and session.token:
    refresh_token = session.token.get("refresh_token")
  if not access_token or not refresh_token:
    raise HTTPException(
        status_code=502,
        detail="access_token/refresh_token missing. Retry /auth/google/login",
    )

  expiry_dt = datetime.now(timezone.utc) + timedelta(
      seconds=int(token_json.get("expires_in") or 0))
  session.update_token({
      "token": access_token,
      "refresh_token": refresh_token,
      "token_uri": GOOGLE_TOKEN_URI,
      "scopes": GCAL_SCOPES,
      "expiry": expiry_dt.isoformat().replace("+00:00", "Z"),
  })
  _log_debug("[GCAL] token exchange success")
  result = JSONResponse({
      "ok": True,
      "calendar_selected": bool(session.calendar_id),
      "next": "/api/calendars",
  })
  result.delete_cookie(OAUTH_STATE_COOKIE_NAME, path="/")
  return result


@router.get("/auth/google/status")
def google_status(request: Request):
  session = _get_runner(request).session
  return {
      "configured": bool(session.client_id and session.client_secret),
      "has_token": session.has_token,
      "calendar_id": session.calendar_id,
  }


@router.post("/auth/google/logout")
def logout(request: Request):
  _get_runner(request).session.clear()
  return {"ok": True}


# -------------------------
# Calendar selection
# -------------------------
def _list_writable_calendars(runner: SyncRunner):
  calendar = runner.calendar_factory(runner.session)
  try:
    return calendar.list_calendars()
  except MissingConfigurationError as exc:
    raise HTTPException(status_code=412, detail=str(exc))
  except Exception:
    logger.exception("Google calendar list error")
    raise HTTPException(status_code=502, detail="Failed to list calendars.")


@router.get("/api/calendars")
def list_calendars(request: Request):
  runner = _get_runner(request)
  calendars = _list_writable_calendars(runner)
  return {
      "selected": runner.session.calendar_id,
      "items": [calendar.model_dump() for calendar in calendars],
  }


@router.post("/api/calendars/select")
def select_calendar(request: Request, payload: CalendarSelectRequest):
  runner = _get_runner(request)
  calendars = _list_writable_calendars(runner)
  try:
    chosen = validate_calendar_choice(calendars, payload.calendar_id)
  except CalendarSelectionError as exc:
    raise HTTPException(status_code=400, detail=str(exc))
  runner.session.select_calendar(chosen.id)
  logger.info("Selected calendar %s", chosen.id)
  return {"ok": True, "calendar": chosen.model_dump()}


# -------------------------
# Sync triggers
# -------------------------
@router.post("/api/sync")
def trigger_sync(request: Request, payload: Optional[SyncRequest] = None):
  runner = _get_runner(request)
  payload = payload or SyncRequest()
  try:
    report = runner.run_pass("manual", year=payload.year, month=payload.month)
  except MissingConfigurationError as exc:
    raise HTTPException(status_code=412, detail=str(exc))
  if report.status == "busy":
    return JSONResponse(report.model_dump(), status_code=409)
  return report.model_dump()


@router.get("/api/sync/status")
def sync_status(request: Request) -> Dict[str, Any]:
  runner = _get_runner(request)
  last = runner.last_report
  return {
      "running": runner.is_running(),
      "target": {"year": runner.year, "month": runner.month},
      "last_report": last.model_dump() if last else None,
  }
