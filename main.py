from __future__ import annotations

import logging

from todosync.app import create_app
from todosync.config import API_HOST, API_PORT, SYNC_DEBUG

logging.basicConfig(
    level=logging.DEBUG if SYNC_DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = create_app()

if __name__ == "__main__":
  import uvicorn

  uvicorn.run(app, host=API_HOST, port=API_PORT)
