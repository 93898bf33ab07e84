from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, FastAPI, HTTPException, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field
from sse_starlette.sse import EventSourceResponse  # type: ignore

from notilog import views
from notilog.capture import EventCapture, build_capture
from notilog.errors import LogStoreReadError, LogStoreWriteError
from notilog.log_store import LogStore
from notilog.models import NotificationEntry, PostedNotification
from notilog.notifier import ChangeNotifier
from notilog.ops.metrics import REGISTRY
from notilog.utils.log import logger

# Seconds between disconnect checks on an idle event stream.
EVENT_STREAM_POLL_S = 15.0


class PostedBody(BaseModel):
    package: str = Field(min_length=1)
    post_time: int
    clearable: bool = True
    extras: dict[str, Any] = Field(default_factory=dict)
    key: str = ""

    def to_payload(self) -> PostedNotification:
        return PostedNotification(
            package=self.package.strip(),
            post_time=int(self.post_time),
            is_clearable=bool(self.clearable),
            extras=dict(self.extras),
            key=self.key,
        )


def _entry_json(e: NotificationEntry) -> dict[str, Any]:
    d = e.to_dict()
    d["time"] = e.formatted_time()
    return d


def _get_capture(request: Request) -> EventCapture:
    cap = getattr(request.app.state, "capture", None)
    if cap is None:
        raise HTTPException(status_code=500, detail="Capture not initialized")
    return cap


def _get_store(request: Request) -> LogStore:
    return _get_capture(request).store


def _get_notifier(request: Request) -> ChangeNotifier:
    return _get_capture(request).notifier


def _load(request: Request) -> list[NotificationEntry]:
    try:
        return _get_store(request).load()
    except LogStoreReadError as ex:
        logger.warning("api_load_failed", error=str(ex))
        raise HTTPException(status_code=503, detail="Log store unavailable") from ex


router = APIRouter(prefix="/api", tags=["notifications"])


@router.post("/notifications/posted")
def notification_posted(body: PostedBody, request: Request) -> dict[str, Any]:
    entry = _get_capture(request).handle(body.to_payload())
    return {"captured": entry is not None}


@router.post("/notifications/removed")
def notification_removed(body: PostedBody, request: Request) -> dict[str, Any]:
    _get_capture(request).on_removed(body.to_payload())
    return {"ok": True}


@router.get("/notifications")
def list_notifications(
    request: Request,
    source: str | None = None,
    distinct: bool = False,
    limit: int | None = None,
) -> dict[str, Any]:
    entries = _load(request)
    if source:
        entries = views.filter_by_source(entries, source)
    if distinct:
        entries = views.distinct_by_source(entries)
    if limit is not None:
        entries = entries[: max(0, int(limit))]
    return {"items": [_entry_json(e) for e in entries], "count": len(entries)}


@router.get("/sources")
def list_sources(request: Request) -> dict[str, Any]:
    return {"items": views.sources(_load(request))}


@router.delete("/notifications")
def clear_notifications(request: Request) -> dict[str, Any]:
    try:
        _get_store(request).clear()
    except LogStoreWriteError as ex:
        logger.warning("api_clear_failed", error=str(ex))
        raise HTTPException(status_code=503, detail="Log store unavailable") from ex
    _get_notifier(request).publish()
    return {"ok": True}


@router.get("/events")
async def change_events(request: Request):
    """
    Server-sent change signals. Each event means "re-read /api/notifications".
    Signals that arrive while one is already pending are coalesced.
    """
    notifier = _get_notifier(request)
    loop = asyncio.get_running_loop()
    pending: asyncio.Queue[None] = asyncio.Queue(maxsize=1)

    def _offer() -> None:
        if not pending.full():
            pending.put_nowait(None)

    def _on_change() -> None:
        # Runs on the notifier's dispatch thread.
        loop.call_soon_threadsafe(_offer)

    sub = notifier.subscribe(_on_change)

    async def gen():
        try:
            yield {"event": "ready", "data": json.dumps({"channel": notifier.name})}
            while True:
                if await request.is_disconnected():
                    return
                try:
                    await asyncio.wait_for(pending.get(), timeout=EVENT_STREAM_POLL_S)
                except asyncio.TimeoutError:
                    continue
                yield {"event": notifier.name, "data": "{}"}
        except asyncio.CancelledError:
            return
        finally:
            notifier.unsubscribe(sub)

    return EventSourceResponse(gen())


def create_app(capture: EventCapture | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cap = capture if capture is not None else build_capture()
        app.state.capture = cap
        logger.info(
            "server_started",
            signal=cap.notifier.name,
            max_entries=cap.store.max_entries,
        )
        try:
            yield
        finally:
            if capture is None:
                cap.notifier.close()
            logger.info("server_stopped")

    app = FastAPI(title="notilog", lifespan=lifespan)
    app.include_router(router)

    @app.get("/metrics")
    async def metrics():
        return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)

    @app.get("/healthz")
    async def healthz() -> dict[str, Any]:
        return {"ok": True}

    return app


app = create_app()
