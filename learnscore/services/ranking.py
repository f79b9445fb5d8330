"""Ranking engine - converts lesson progress into stars and a leaderboard.

Every 5 points of a student's average lesson percentage is worth one star.
Rows whose lesson no longer resolves are left out of the average.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnscore.models.lesson import Lesson
from learnscore.models.lesson_progress import LessonProgress
from learnscore.models.user import User
from learnscore.services.auth import STUDENT_ROLE
from learnscore.services.progress import lesson_percentage

logger = logging.getLogger(__name__)

PERCENT_PER_STAR = 5


@dataclass
class RankingEntry:
    id: int
    name: str
    email: str
    stars: int

    def to_dict(self) -> dict:
        return asdict(self)


def stars_for_progress(
    progress_rows: Iterable[LessonProgress],
    lesson_durations: Mapping[int, int | None],
) -> int:
    """Star count from a student's progress rows.

    *lesson_durations* maps each resolvable lesson id to its total duration.
    """
    percentages = []
    for progress in progress_rows:
        if progress.lesson_id not in lesson_durations:
            logger.warning(
                "Skipping progress %s: lesson %s not found",
                progress.id, progress.lesson_id,
            )
            continue
        percentages.append(
            lesson_percentage(progress, lesson_durations[progress.lesson_id])
        )

    if not percentages:
        return 0
    average = sum(percentages) / len(percentages)
    return math.floor(average / PERCENT_PER_STAR)


def sort_ranking(entries: Iterable[RankingEntry]) -> list[RankingEntry]:
    """Order by stars descending, then student id ascending."""
    return sorted(entries, key=lambda entry: (-entry.stars, entry.id))


async def calculate_stars(db: AsyncSession, student_id: int) -> int:
    """Star rating for one student."""
    result = await db.execute(
        select(LessonProgress).where(LessonProgress.student_id == student_id)
    )
    rows = result.scalars().all()
    if not rows:
        return 0

    lesson_ids = sorted({row.lesson_id for row in rows})
    lessons = await db.execute(
        select(Lesson.id, Lesson.total_duration).where(Lesson.id.in_(lesson_ids))
    )
    return stars_for_progress(rows, dict(lessons.all()))


async def get_student_ranking(db: AsyncSession) -> list[RankingEntry]:
    """Leaderboard of every student, best first."""
    students = (
        await db.execute(
            select(User).where(func.lower(User.role) == STUDENT_ROLE)
        )
    ).scalars().all()

    lessons = await db.execute(select(Lesson.id, Lesson.total_duration))
    lesson_durations = dict(lessons.all())

    progress_by_student: dict[int, list[LessonProgress]] = {}
    progress_rows = await db.execute(select(LessonProgress))
    for row in progress_rows.scalars().all():
        progress_by_student.setdefault(row.student_id, []).append(row)

    entries = []
    for student in students:
        stars = stars_for_progress(
            progress_by_student.get(student.id, []), lesson_durations
        )
        logger.debug("Student %d: %d stars", student.id, stars)
        entries.append(
            RankingEntry(
                id=student.id, name=student.name, email=student.email, stars=stars
            )
        )

    return sort_ranking(entries)
