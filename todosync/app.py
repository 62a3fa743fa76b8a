from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from fastapi import FastAPI

from .config import SYNC_INTERVAL_SECONDS, SYNC_TIMER_ENABLED
from .gcal import GoogleCalendar
from .routes import router
from .runner import SyncRunner, periodic_sync
from .session import load_session
from .vault import VaultStore

logger = logging.getLogger(__name__)


def build_default_runner() -> SyncRunner:
  return SyncRunner(session=load_session(),
                    vault=VaultStore(),
                    calendar_factory=GoogleCalendar)


def create_app(runner: Optional[SyncRunner] = None,
               timer_enabled: bool = SYNC_TIMER_ENABLED,
               interval_seconds: int = SYNC_INTERVAL_SECONDS) -> FastAPI:

  @contextlib.asynccontextmanager
  async def lifespan(app: FastAPI):
    timer: Optional[asyncio.Task] = None
    if timer_enabled:
      timer = asyncio.create_task(
          periodic_sync(app.state.runner, interval_seconds))
      logger.info("Periodic sync every %ss", interval_seconds)
    try:
      yield
    finally:
      if timer is not None:
        timer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
          await timer

  app = FastAPI(title="todosync", lifespan=lifespan)
  app.state.runner = runner or build_default_runner()
  app.include_router(router)
  return app
