"""Clock-in/clock-out session lifecycle.

States: ACTIVE, PAUSED, COMPLETED (terminal). A user has at most one ACTIVE
entry; ``start_session`` checks and inserts inside one transaction and the
partial unique index on ``time_entries`` catches the concurrent case.

Transitions:
- start:  (no ACTIVE)        -> ACTIVE
- pause:  ACTIVE             -> PAUSED
- resume: PAUSED, no end     -> ACTIVE
- stop:   ACTIVE | PAUSED    -> COMPLETED, end_time = now
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db import unit_of_work
from ..errors import Conflict, NotFound
from ..models import TimeEntry, ACTIVE, PAUSED, COMPLETED, utcnow
from ..schemas import TimeEntryOut
from ..settings import settings
from .ownership import owned_by, scoped

logger = logging.getLogger("prepclock.sessions")

ALREADY_ACTIVE = "You already have an active time tracking session"


@dataclass
class TimeSummary:
    active_entry: Optional[TimeEntry]
    paused_entry: Optional[TimeEntry]
    total_seconds: int
    count: int


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """[local midnight, next local midnight) of ``day``, expressed in UTC."""
    start = datetime.combine(day, time.min)
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def entry_duration_seconds(entry, now: Optional[datetime] = None) -> int:
    """Elapsed whole seconds for one entry.

    Completed entries run to ``end_time`` and active ones to ``now``. A paused
    entry is counted up to its ``updated_at``, i.e. the moment it was paused.
    """
    now = _as_utc(now or utcnow())
    start = _as_utc(entry.start_time)
    if entry.end_time is not None:
        end = _as_utc(entry.end_time)
    elif entry.status == ACTIVE:
        end = now
    else:
        end = _as_utc(entry.updated_at) if entry.updated_at else now
    return max(0, int((end - start).total_seconds()))


def total_seconds(entries: Iterable, now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    return sum(entry_duration_seconds(e, now) for e in entries)


def _entry_payload(entry: TimeEntry) -> dict:
    return TimeEntryOut.model_validate(entry).model_dump(mode="json", by_alias=True)


# --- Queries ---

def get_active_entry(db: Session, user_id: str) -> Optional[TimeEntry]:
    return scoped(db, TimeEntry, user_id).filter(TimeEntry.status == ACTIVE).first()


def get_open_paused_entry(db: Session, user_id: str) -> Optional[TimeEntry]:
    return (
        scoped(db, TimeEntry, user_id)
        .filter(TimeEntry.status == PAUSED, TimeEntry.end_time.is_(None))
        .order_by(TimeEntry.start_time.desc())
        .first()
    )


def recent_entries(db: Session, user_id: str, limit: int = 50) -> list[TimeEntry]:
    return (
        scoped(db, TimeEntry, user_id)
        .order_by(TimeEntry.start_time.desc())
        .limit(limit)
        .all()
    )


def entries_for_today(
    db: Session, user_id: str, today: Optional[date] = None
) -> list[TimeEntry]:
    start, end = day_bounds(today or date.today())
    return (
        scoped(db, TimeEntry, user_id)
        .filter(TimeEntry.start_time >= start, TimeEntry.start_time < end)
        .order_by(TimeEntry.start_time.desc())
        .all()
    )


def current_entries(
    db: Session, user_id: str
) -> tuple[Optional[TimeEntry], Optional[TimeEntry]]:
    """The active entry and the open paused one, whenever they started."""
    return get_active_entry(db, user_id), get_open_paused_entry(db, user_id)


def summarize_today(db: Session, user_id: str) -> TimeSummary:
    entries = entries_for_today(db, user_id)
    active, paused = current_entries(db, user_id)
    return TimeSummary(
        active_entry=active,
        paused_entry=paused,
        total_seconds=total_seconds(entries),
        count=len(entries),
    )


# --- Transitions ---

def _conflict_with(entry: Optional[TimeEntry]) -> Conflict:
    extra = {"activeSession": _entry_payload(entry)} if entry else {}
    return Conflict(ALREADY_ACTIVE, extra=extra)


def _transition(
    db: Session, user_id: str, entry: TimeEntry, status: str, *, close: bool = False
) -> TimeEntry:
    if not owned_by(entry, user_id):
        raise NotFound("Time entry not found")

    previous = entry.status
    with unit_of_work(db):
        now = utcnow()
        entry.status = status
        entry.updated_at = now
        if close:
            entry.end_time = now
    db.refresh(entry)

    logger.info(f"Time entry {entry.id}: {previous} -> {status}")
    return entry


def start_session(
    db: Session, user_id: str, description: Optional[str] = None
) -> TimeEntry:
    """Open a new ACTIVE entry, refusing if one is already active."""
    try:
        with unit_of_work(db):
            existing = get_active_entry(db, user_id)
            if existing:
                raise _conflict_with(existing)
            entry = TimeEntry(
                user_id=user_id,
                start_time=utcnow(),
                end_time=None,
                status=ACTIVE,
                description=description,
            )
            db.add(entry)
            db.flush()
    except IntegrityError:
        # Lost the race to a concurrent start for the same user
        logger.warning(f"Concurrent session start rejected for user {user_id}")
        raise _conflict_with(get_active_entry(db, user_id))

    db.refresh(entry)
    logger.info(f"Started time entry {entry.id}")
    return entry


def pause_session(db: Session, user_id: str) -> TimeEntry:
    entry = get_active_entry(db, user_id)
    if not entry:
        raise NotFound("No active time tracking session found")
    return _transition(db, user_id, entry, PAUSED)


def resume_session(db: Session, user_id: str) -> TimeEntry:
    """Reactivate the most recently started paused entry.

    Only the latest ``settings.resume_lookback`` entries are considered.
    """
    recent = recent_entries(db, user_id, limit=settings.resume_lookback)
    paused = next(
        (e for e in recent if e.status == PAUSED and e.end_time is None), None
    )
    if not paused:
        raise NotFound("No paused time tracking session found")

    active = get_active_entry(db, user_id)
    if active:
        raise _conflict_with(active)

    try:
        return _transition(db, user_id, paused, ACTIVE)
    except IntegrityError:
        raise _conflict_with(get_active_entry(db, user_id))


def stop_session(db: Session, user_id: str) -> TimeEntry:
    """Complete the open entry: the active one, else the latest paused one."""
    entry = get_active_entry(db, user_id) or get_open_paused_entry(db, user_id)
    if not entry:
        raise NotFound("No open time tracking session found")
    return _transition(db, user_id, entry, COMPLETED, close=True)
