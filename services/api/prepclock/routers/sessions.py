"""Time tracking session API router.

Endpoints:
- GET /api/sessions - Today's or recent entries
- GET /api/sessions/summary - Open entries and total tracked time today
- POST /api/sessions/start - Open a new active session (400 if one is active)
- POST /api/sessions/pause - Pause the active session
- POST /api/sessions/resume - Resume the latest paused session
- POST /api/sessions/stop - Complete the open session
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..deps import get_current_user_id, get_db
from ..errors import failure_message
from ..infra.idempotency import idempotency_precheck, idempotency_store_result, idempotency_clear_key
from ..limits import limiter
from ..schemas import TimeEntryResponse, TimeEntryListResponse, TimeSummaryResponse
from ..services import time_tracking
from ..settings import settings

router = APIRouter(prefix="/sessions")
logger = logging.getLogger("prepclock.sessions")


@router.get("", response_model=TimeEntryListResponse)
def list_time_entries(
    period: str = Query("recent"),
    limit: int = Query(settings.recent_entries_limit, ge=1, le=500),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """``period=today`` for entries started today; anything else means recent."""
    with failure_message("retrieve time entries"):
        if period == "today":
            entries = time_tracking.entries_for_today(db, user_id)
        else:
            entries = time_tracking.recent_entries(db, user_id, limit=limit)
        return TimeEntryListResponse(time_entries=entries, period=period, count=len(entries))


@router.get("/summary", response_model=TimeSummaryResponse)
def get_today_summary(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    with failure_message("retrieve time summary"):
        summary = time_tracking.summarize_today(db, user_id)
        return TimeSummaryResponse(
            active_entry=summary.active_entry,
            paused_entry=summary.paused_entry,
            total_seconds=summary.total_seconds,
            count=summary.count,
        )


@router.post("/start", response_model=TimeEntryResponse)
@limiter.limit(settings.session_rate_limit)
async def start_session(
    request: Request,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Start tracking. Fails with the current entry attached if one is already active."""
    pre = await idempotency_precheck(request, user_id=user_id, route_key="session_start")
    if isinstance(pre, JSONResponse):
        return pre

    try:
        with failure_message("start time tracking session"):
            entry = time_tracking.start_session(db, user_id)
            resp = TimeEntryResponse(message="Time tracking session started", time_entry=entry)
    except Exception:
        if pre:
            await idempotency_clear_key(pre[0])
        raise

    if pre:
        await idempotency_store_result(
            pre[0], pre[1], status=200, body=resp.model_dump(mode="json", by_alias=True)
        )
    return resp


@router.post("/pause", response_model=TimeEntryResponse)
@limiter.limit(settings.session_rate_limit)
def pause_session(
    request: Request,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    with failure_message("pause time tracking session"):
        entry = time_tracking.pause_session(db, user_id)
        return TimeEntryResponse(message="Time tracking session paused", time_entry=entry)


@router.post("/resume", response_model=TimeEntryResponse)
@limiter.limit(settings.session_rate_limit)
def resume_session(
    request: Request,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    with failure_message("resume time tracking session"):
        entry = time_tracking.resume_session(db, user_id)
        return TimeEntryResponse(message="Time tracking session resumed", time_entry=entry)


@router.post("/stop", response_model=TimeEntryResponse)
@limiter.limit(settings.session_rate_limit)
def stop_session(
    request: Request,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    with failure_message("stop time tracking session"):
        entry = time_tracking.stop_session(db, user_id)
        return TimeEntryResponse(message="Time tracking session completed", time_entry=entry)
