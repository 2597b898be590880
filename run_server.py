"""Entry point for running the FastAPI and Socket.IO application with Uvicorn."""
from __future__ import annotations

import os

import uvicorn


def main() -> None:
  port = int(os.getenv("TRIPSYNC_SERVER_PORT", "8000"))
  reload = os.getenv("UVICORN_RELOAD", "true").lower() == "true"
  uvicorn.run("tripsync.main:asgi_app", host="0.0.0.0", port=port, reload=reload)


if __name__ == "__main__":
  main()
