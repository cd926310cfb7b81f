import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db import unit_of_work
from ..errors import require_text
from ..models import DailyNote, utcnow
from .ownership import scoped

logger = logging.getLogger("prepclock.notes")

CONTENT_REQUIRED = "Content is required and must be a string"


def get_note(db: Session, user_id: str, on: Optional[date] = None) -> Optional[DailyNote]:
    """Note for the given calendar day (today by default), or None."""
    on = on or date.today()
    return scoped(db, DailyNote, user_id).filter(DailyNote.date == on).first()


def _write(db: Session, user_id: str, content: str, on: date) -> DailyNote:
    with unit_of_work(db):
        note = scoped(db, DailyNote, user_id).filter(DailyNote.date == on).first()
        if note:
            note.content = content
            note.updated_at = utcnow()
        else:
            note = DailyNote(user_id=user_id, date=on, content=content)
            db.add(note)
    return note


def save_note(
    db: Session, user_id: str, content: str, on: Optional[date] = None
) -> DailyNote:
    """Upsert the note for (user, day); the latest content wins."""
    content = require_text(content, CONTENT_REQUIRED)
    on = on or date.today()

    try:
        note = _write(db, user_id, content, on)
    except IntegrityError:
        # A concurrent request inserted the row first; overwrite it instead
        logger.info(f"Daily note for {on} created concurrently, retrying as update")
        note = _write(db, user_id, content, on)

    db.refresh(note)
    return note
