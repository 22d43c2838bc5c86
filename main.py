"""ReadAlong tracker – FastAPI application entry point."""

from __future__ import annotations

import logging
import sys

from fastapi import FastAPI

from readalong.config import settings

# --- Configure logging so readalong.* loggers are visible alongside uvicorn ---
logging.basicConfig(
    level=settings.log_level,
    format="%(levelname)s:    %(name)s - %(message)s",
    stream=sys.stdout,
    force=True,  # override uvicorn's config
)

log = logging.getLogger(__name__)

app = FastAPI(title="ReadAlong Tracker", version="0.1.0")


@app.get("/health")
async def health():
    return {"status": "ok"}


# --- Register routers ---
from readalong.routes.sessions import router as sessions_router  # noqa: E402

app.include_router(sessions_router, prefix="/api")

log.info("ReadAlong tracker ready (default difficulty: %s)", settings.default_difficulty)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
