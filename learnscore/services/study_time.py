"""Daily study-time tracking."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learnscore.models.study_time import StudyTime
from learnscore.services.errors import InvariantViolationError, NotFoundError
from learnscore.services.units import SECONDS_UNIT, normalize_study_seconds

logger = logging.getLogger(__name__)

RECENT_WINDOW_DAYS = 7


@dataclass
class StudyStats:
    today_seconds: int
    week_total_seconds: int
    total_seconds: int
    study_days: int
    recent_study_times: list[StudyTime] = field(default_factory=list)

    @property
    def today_minutes(self) -> int:
        return self.today_seconds // 60

    @property
    def today_hours(self) -> float:
        return self.today_seconds / 3600

    @property
    def week_total_minutes(self) -> int:
        return self.week_total_seconds // 60

    @property
    def total_minutes(self) -> int:
        return self.total_seconds // 60

    @property
    def total_hours(self) -> float:
        return self.total_seconds / 3600


def stored_seconds(row: StudyTime) -> int:
    return normalize_study_seconds(row.total_seconds, row.unit)


async def start_study(
    db: AsyncSession, student_id: int, today: date | None = None
) -> StudyTime:
    """Find or create today's study-time row."""
    today = today or date.today()
    existing = await _find_study_time(db, student_id, today)
    if existing is not None:
        return existing

    row = StudyTime(
        student_id=student_id, study_date=today, total_seconds=0, unit=SECONDS_UNIT
    )
    db.add(row)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        existing = await _find_study_time(db, student_id, today)
        if existing is None:
            raise
        return existing

    await db.refresh(row)
    return row


async def stop_study(
    db: AsyncSession, student_id: int, seconds: int, today: date | None = None
) -> StudyTime:
    """Add a finished session's seconds to today's row."""
    if seconds < 0:
        raise InvariantViolationError(f"Invalid session length: {seconds} seconds")

    today = today or date.today()
    row = await _find_study_time(db, student_id, today)
    if row is None:
        raise NotFoundError("No study session started today")

    row.total_seconds = stored_seconds(row) + seconds
    row.unit = SECONDS_UNIT
    await db.commit()
    await db.refresh(row)

    logger.info(
        "Study time saved: %d seconds for student %d on %s",
        row.total_seconds, student_id, today,
    )
    return row


async def get_study_stats(
    db: AsyncSession, student_id: int, today: date | None = None
) -> StudyStats:
    """Today, last-week and all-time study totals for a student."""
    today = today or date.today()
    week_start = today - timedelta(days=RECENT_WINDOW_DAYS)

    result = await db.execute(
        select(StudyTime)
        .where(StudyTime.student_id == student_id)
        .order_by(StudyTime.study_date)
    )
    rows = result.scalars().all()
    recent = [row for row in rows if week_start <= row.study_date <= today]

    return StudyStats(
        today_seconds=sum(stored_seconds(r) for r in rows if r.study_date == today),
        week_total_seconds=sum(stored_seconds(r) for r in recent),
        total_seconds=sum(stored_seconds(r) for r in rows),
        study_days=len({r.study_date for r in rows}),
        recent_study_times=recent,
    )


async def _find_study_time(
    db: AsyncSession, student_id: int, day: date
) -> StudyTime | None:
    result = await db.execute(
        select(StudyTime).where(
            StudyTime.student_id == student_id, StudyTime.study_date == day
        )
    )
    return result.scalar_one_or_none()
