"""Study time API routes."""

from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from learnscore.database import get_db
from learnscore.dependencies import require_student
from learnscore.models.study_time import StudyTime
from learnscore.models.user import User
from learnscore.services.study_time import (
    get_study_stats,
    start_study,
    stop_study,
    stored_seconds,
)

router = APIRouter(prefix="/api/student/study", tags=["study"])


class StopRequest(BaseModel):
    seconds: int


class StudyTimeItem(BaseModel):
    id: int
    date: date
    total_seconds: int
    total_minutes: int


class StudyStatsResponse(BaseModel):
    today_seconds: int
    today_minutes: int
    today_hours: float
    week_total_seconds: int
    week_total_minutes: int
    total_seconds: int
    total_minutes: int
    total_hours: float
    study_days: int
    recent_study_times: list[StudyTimeItem]


def _to_item(row: StudyTime) -> StudyTimeItem:
    seconds = stored_seconds(row)
    return StudyTimeItem(
        id=row.id, date=row.study_date, total_seconds=seconds, total_minutes=seconds // 60
    )


@router.post("/start", response_model=StudyTimeItem)
async def start_session(
    user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """Open (or reuse) today's study-time row."""
    return _to_item(await start_study(db, user.id))


@router.post("/stop", response_model=StudyTimeItem)
async def stop_session(
    body: StopRequest,
    user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """Add a finished session to today's total."""
    return _to_item(await stop_study(db, user.id, body.seconds))


@router.get("/stats", response_model=StudyStatsResponse)
async def study_stats(
    user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """Return today, last-week and all-time study totals."""
    stats = await get_study_stats(db, user.id)
    return StudyStatsResponse(
        today_seconds=stats.today_seconds,
        today_minutes=stats.today_minutes,
        today_hours=stats.today_hours,
        week_total_seconds=stats.week_total_seconds,
        week_total_minutes=stats.week_total_minutes,
        total_seconds=stats.total_seconds,
        total_minutes=stats.total_minutes,
        total_hours=stats.total_hours,
        study_days=stats.study_days,
        recent_study_times=[_to_item(r) for r in stats.recent_study_times],
    )
