from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..deps import get_current_user_id, get_db
from ..errors import failure_message
from ..schemas import CalendarDay, DailyNoteIn, DailyNoteResponse, DailyNoteSavedResponse
from ..services import notes as note_service

router = APIRouter(prefix="/notes")


@router.get("", response_model=DailyNoteResponse)
def get_daily_note(
    on: Optional[CalendarDay] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Note for the day containing ``date`` (today by default).

    ``date`` may be a plain date or a full ISO timestamp. ``dailyNote`` is
    null when none exists.
    """
    on = on or date.today()
    with failure_message("retrieve daily note"):
        return DailyNoteResponse(daily_note=note_service.get_note(db, user_id, on), date=on)


@router.post("", response_model=DailyNoteSavedResponse)
def save_daily_note(
    payload: DailyNoteIn,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    with failure_message("save daily note"):
        note = note_service.save_note(db, user_id, payload.content, payload.date)
        return DailyNoteSavedResponse(message="Daily note saved successfully", daily_note=note)
