"""Reading session APIs, including a WebSocket for streaming transcripts."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from readalong.config import settings
from readalong.models import Difficulty, Feedback
from readalong.services.texts import LibraryTextProvider
from readalong.services.tracker import ReadingTracker

logger = logging.getLogger(__name__)

router = APIRouter()

# ---------------------------------------------------------------------------
# In-memory session registry
# ---------------------------------------------------------------------------

_provider = LibraryTextProvider()
_sessions: dict[str, ReadingTracker] = {}
_last_seen: dict[str, float] = {}
_clock = time.monotonic


def _get(session_id: str) -> ReadingTracker | None:
    tracker = _sessions.get(session_id)
    if tracker is not None:
        _last_seen[session_id] = _clock()
    return tracker


def _drop(session_id: str) -> ReadingTracker | None:
    _last_seen.pop(session_id, None)
    return _sessions.pop(session_id, None)


def _prune_idle() -> None:
    """Forget sessions nobody has touched for ``session_idle_seconds``."""
    now = _clock()
    stale = [
        sid for sid, seen in _last_seen.items()
        if now - seen > settings.session_idle_seconds
    ]
    for sid in stale:
        _drop(sid)
    if stale:
        logger.info("Dropped %d idle session(s)", len(stale))


def _not_found(session_id: str) -> JSONResponse:
    return JSONResponse({"error": f"Session {session_id} not found"}, status_code=404)


async def _json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _listening_flag(payload: dict) -> bool:
    """``listening`` must be a JSON boolean; absent means listening."""
    value = payload.get("listening", True)
    if not isinstance(value, bool):
        raise ValueError(f"'listening' must be true or false, got {value!r}")
    return value


# ---- Create / read / delete ----


@router.post("/sessions")
async def create_session(request: Request):
    """Start a session. Body: {difficulty?: str, text_index?: int}."""
    body = await _json_body(request)
    try:
        difficulty = Difficulty.parse(body["difficulty"]) if body.get("difficulty") else None
        text_index = int(body.get("text_index", 0))
    except (TypeError, ValueError) as e:
        logger.warning("Rejected session request: %s", e)
        return JSONResponse({"error": str(e)}, status_code=400)

    _prune_idle()

    tracker = ReadingTracker(provider=_provider, difficulty=difficulty, text_index=text_index)
    session_id = uuid.uuid4().hex
    _sessions[session_id] = tracker
    _last_seen[session_id] = _clock()
    logger.info(
        "Session %s created (difficulty=%s, text_index=%d)",
        session_id,
        tracker.difficulty.value,
        tracker.text_index,
    )
    return JSONResponse(
        {"session_id": session_id, "snapshot": tracker.snapshot().to_dict()},
        status_code=201,
    )


@router.get("/sessions/{session_id}")
async def get_session(session_id: str):
    tracker = _get(session_id)
    if tracker is None:
        return _not_found(session_id)
    return JSONResponse(tracker.snapshot().to_dict())


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    if _drop(session_id) is None:
        return _not_found(session_id)
    logger.info("Session %s closed", session_id)
    return JSONResponse({"deleted": session_id})


@router.get("/sessions/{session_id}/summary")
async def session_summary(session_id: str):
    tracker = _get(session_id)
    if tracker is None:
        return _not_found(session_id)
    return JSONResponse(tracker.summary())


# ---- Updates ----


@router.post("/sessions/{session_id}/transcript")
async def push_transcript(session_id: str, request: Request):
    """Apply one transcript update. Body: {text: str, listening?: bool}."""
    tracker = _get(session_id)
    if tracker is None:
        return _not_found(session_id)
    body = await _json_body(request)
    try:
        listening = _listening_flag(body)
    except ValueError as e:
        logger.warning("Rejected transcript for %s: %s", session_id, e)
        return JSONResponse({"error": str(e)}, status_code=400)
    snap = tracker.apply_transcript(str(body.get("text") or ""), listening)
    return JSONResponse(snap.to_dict())


@router.post("/sessions/{session_id}/reset")
async def reset_session(session_id: str):
    tracker = _get(session_id)
    if tracker is None:
        return _not_found(session_id)
    return JSONResponse(tracker.reset().to_dict())


@router.post("/sessions/{session_id}/next")
async def next_text(session_id: str):
    tracker = _get(session_id)
    if tracker is None:
        return _not_found(session_id)
    return JSONResponse(tracker.advance_reference().to_dict())


@router.post("/sessions/{session_id}/difficulty")
async def change_difficulty(session_id: str, request: Request):
    """Switch difficulty. Body: {difficulty: str}."""
    tracker = _get(session_id)
    if tracker is None:
        return _not_found(session_id)
    body = await _json_body(request)
    try:
        snap = tracker.set_difficulty(body.get("difficulty", ""))
    except ValueError as e:
        logger.warning("Rejected difficulty change for %s: %s", session_id, e)
        return JSONResponse({"error": str(e)}, status_code=400)
    return JSONResponse(snap.to_dict())


# ---- WebSocket for a live reading session ----


@router.websocket("/ws/sessions/{session_id}")
async def reading_session_ws(websocket: WebSocket, session_id: str):
    """
    Stream transcript updates from the browser's speech recogniser.

    Client messages (JSON, in text or UTF-8 binary frames):
      {"type": "transcript", "text": str, "listening": bool}
      {"type": "reset"} | {"type": "next"}
      {"type": "difficulty", "difficulty": str}

    Server messages:
      {"type": "snapshot", ...}            after every message, and again
                                           when a feedback banner expires
      {"type": "complete", "message": str} once the passage is finished
      {"type": "error", "message": str}
    """
    await websocket.accept()

    tracker = _get(session_id)
    if tracker is None:
        await websocket.send_json({"type": "error", "message": "Session not found"})
        await websocket.close()
        return

    dismiss_tasks: set[asyncio.Task] = set()

    async def send_error(message: str) -> None:
        await websocket.send_json({"type": "error", "message": message})

    async def send_snapshot() -> None:
        await websocket.send_json({"type": "snapshot", **tracker.snapshot().to_dict()})

    async def dismiss_later(feedback: Feedback) -> None:
        """Push a fresh snapshot once the feedback banner has expired."""
        await asyncio.sleep(tracker.feedback_selector.duration_seconds)
        # a newer banner schedules its own push
        if tracker.feedback is feedback:
            try:
                await send_snapshot()
            except (WebSocketDisconnect, RuntimeError):
                pass

    await send_snapshot()

    try:
        while True:
            data = await websocket.receive()
            if data.get("type") == "websocket.disconnect":
                logger.info("Session %s: WebSocket disconnected", session_id)
                break

            raw = data.get("text")
            if raw is None and data.get("bytes") is not None:
                try:
                    raw = data["bytes"].decode("utf-8")
                except UnicodeDecodeError:
                    logger.warning("Session %s: binary frame is not UTF-8", session_id)
                    await send_error("Binary frames must be UTF-8 encoded JSON")
                    continue
            if raw is None:
                continue

            try:
                msg = json.loads(raw)
            except ValueError:
                logger.warning("Session %s: bad WebSocket frame %r", session_id, raw[:200])
                await send_error("Messages must be JSON")
                continue
            msg_type = msg.get("type", "") if isinstance(msg, dict) else ""
            _last_seen[session_id] = _clock()
            feedback_before = tracker.feedback
            was_finished = tracker.finished

            if msg_type == "transcript":
                try:
                    listening = _listening_flag(msg)
                except ValueError as e:
                    await send_error(str(e))
                    continue
                tracker.apply_transcript(str(msg.get("text") or ""), listening)
            elif msg_type == "reset":
                tracker.reset()
            elif msg_type == "next":
                tracker.advance_reference()
            elif msg_type == "difficulty":
                try:
                    tracker.set_difficulty(msg.get("difficulty", ""))
                except ValueError as e:
                    await send_error(str(e))
                    continue
            else:
                logger.warning("Session %s: unknown message type %r", session_id, msg_type)
                await send_error(f"Unknown message type {msg_type!r}")
                continue

            await send_snapshot()

            if tracker.feedback is not None and tracker.feedback is not feedback_before:
                task = asyncio.create_task(dismiss_later(tracker.feedback))
                dismiss_tasks.add(task)
                task.add_done_callback(dismiss_tasks.discard)

            if tracker.finished and not was_finished:
                await websocket.send_json({
                    "type": "complete",
                    "message": "Great job! You finished the passage!",
                    "summary": tracker.summary(),
                })
    except WebSocketDisconnect:
        logger.info("Session %s: WebSocket disconnected", session_id)
    finally:
        for task in dismiss_tasks:
            task.cancel()
