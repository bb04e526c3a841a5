from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Request

from task_manager.app.responses import ok

router = APIRouter(prefix="/api/v1", tags=["health"])


def format_uptime(delta: timedelta) -> str:
    seconds = delta.total_seconds()
    if seconds < 60:
        return "less than a minute"
    if seconds < 3600:
        n, unit = int(seconds // 60), "minute"
    elif seconds < 86400:
        n, unit = int(seconds // 3600), "hour"
    else:
        n, unit = int(seconds // 86400), "day"
    return f"1 {unit}" if n == 1 else f"{n} {unit}s"


def _uptime(request: Request) -> str:
    return format_uptime(datetime.now(timezone.utc) - request.app.state.started_at)


@router.get("/health")
def health(request: Request):
    settings = request.app.state.settings
    return ok({
        "status": "healthy",
        "version": settings.app.version,
        "timestamp": datetime.now(timezone.utc),
        "uptime": _uptime(request),
    })


@router.get("/ready")
def ready(request: Request):
    # Nothing external to probe; the store lives in-process.
    checks = {"task_store": "ok"}
    return ok({"status": "ready", "checks": checks, "timestamp": datetime.now(timezone.utc)})


@router.get("/live")
def live(request: Request):
    return ok({"status": "alive", "timestamp": datetime.now(timezone.utc), "uptime": _uptime(request)})
