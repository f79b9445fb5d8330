"""Progress aggregator - per-lesson completion percentage and progress upserts.

A lesson's percentage combines three signals:

- video playback (50%): position relative to the lesson duration, capped at 1
- in-video checkpoints (30%): completed / total
- final quiz (20%): quiz score on a 0-100 scale

A progress row marked ``completed`` is always worth 100.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learnscore.models.lesson import Lesson
from learnscore.models.lesson_progress import LessonProgress
from learnscore.services.auth import Caller
from learnscore.services.errors import (
    InvariantViolationError,
    NotFoundError,
    PermissionDeniedError,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Component weights (percentage points)
# ---------------------------------------------------------------------------
VIDEO_WEIGHT = 50.0
CHECKPOINT_WEIGHT = 30.0
QUIZ_FACTOR = 0.2  # quiz score is already 0-100
COMPLETED_PERCENTAGE = 100.0

PROGRESS_FIELDS = (
    "video_progress_seconds",
    "quiz_score",
    "completed",
    "checkpoints_completed",
    "total_checkpoints",
)

NEW_PROGRESS_DEFAULTS = {
    "video_progress_seconds": 0,
    "quiz_score": None,
    "completed": False,
    "checkpoints_completed": 0,
    "total_checkpoints": 0,
}


class ProgressUpdate(BaseModel):
    """Partial progress update.

    Only fields present in the payload are applied; an explicit ``null``
    counts as not supplied.
    """

    video_progress_seconds: int | None = None
    quiz_score: float | None = None
    completed: bool | None = None
    checkpoints_completed: int | None = None
    total_checkpoints: int | None = None

    def changes(self) -> dict:
        """Return the change-set: supplied, non-null fields only."""
        return {
            field: value
            for field, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }


@dataclass
class ProgressSummary:
    progress: LessonProgress
    percentage: float


# ===================================================================
# Percentage
# ===================================================================


def lesson_percentage(progress: LessonProgress, total_duration: int | None) -> float:
    """Return the 0-100 completion percentage of one progress row.

    The sum is not re-capped: a quiz score above 100 inflates the result.
    """
    if progress.completed:
        return COMPLETED_PERCENTAGE

    return (
        _video_component(progress.video_progress_seconds, total_duration)
        + _checkpoint_component(progress.checkpoints_completed, progress.total_checkpoints)
        + _quiz_component(progress.quiz_score)
    )


def _video_component(video_seconds: int | None, total_duration: int | None) -> float:
    if not total_duration or total_duration <= 0 or not video_seconds:
        return 0.0
    return min(video_seconds / total_duration, 1.0) * VIDEO_WEIGHT


def _checkpoint_component(completed: int | None, total: int | None) -> float:
    if not total:
        return 0.0
    return (completed or 0) / total * CHECKPOINT_WEIGHT


def _quiz_component(quiz_score: float | None) -> float:
    if quiz_score is None:
        return 0.0
    return quiz_score * QUIZ_FACTOR


# ===================================================================
# Store operations
# ===================================================================


async def update_progress(
    db: AsyncSession,
    lesson_id: int,
    student_id: int,
    update: ProgressUpdate,
) -> LessonProgress:
    """Upsert the progress row for (lesson, student) with a partial update.

    The merged record is validated before anything is written; a rejected
    update leaves the stored row untouched.
    """
    lesson = await db.get(Lesson, lesson_id)
    if lesson is None:
        raise NotFoundError(f"Lesson {lesson_id} not found")

    changes = update.changes()
    progress = await _find_progress(db, lesson_id, student_id)

    if progress is None:
        values = {**NEW_PROGRESS_DEFAULTS, **changes}
        validate_progress_values(values)
        progress = LessonProgress(lesson_id=lesson_id, student_id=student_id, **values)
        db.add(progress)
        try:
            await db.commit()
        except IntegrityError:
            # A concurrent first write created the row; apply on top of it.
            await db.rollback()
            progress = await _find_progress(db, lesson_id, student_id)
            if progress is None:
                raise
            await _apply_changes(db, progress, changes)
    else:
        await _apply_changes(db, progress, changes)

    await db.refresh(progress)
    logger.info(
        "Progress updated: lesson=%d student=%d fields=%s",
        lesson_id, student_id, sorted(changes),
    )
    return progress


async def get_lesson_progress(
    db: AsyncSession,
    lesson_id: int,
    student_id: int,
    *,
    create: bool = False,
) -> LessonProgress:
    """Return the progress row for (lesson, student).

    With *create*, a missing row is created with zero/false defaults.
    """
    progress = await _find_progress(db, lesson_id, student_id)
    if progress is not None:
        return progress

    if not create:
        raise NotFoundError(
            f"No progress for lesson {lesson_id} and student {student_id}"
        )
    return await update_progress(db, lesson_id, student_id, ProgressUpdate())


async def list_student_progress(
    db: AsyncSession, student_id: int
) -> list[ProgressSummary]:
    """All progress rows of one student, with their percentages."""
    result = await db.execute(
        select(LessonProgress, Lesson.total_duration)
        .join(Lesson, Lesson.id == LessonProgress.lesson_id)
        .where(LessonProgress.student_id == student_id)
        .order_by(LessonProgress.lesson_id)
    )
    return [
        ProgressSummary(progress=row, percentage=lesson_percentage(row, duration))
        for row, duration in result.all()
    ]


async def list_lesson_progress(
    db: AsyncSession, caller: Caller, lesson_id: int
) -> list[ProgressSummary]:
    """All students' progress on a lesson; lesson teacher or admin only."""
    lesson = await db.get(Lesson, lesson_id)
    if lesson is None:
        raise NotFoundError(f"Lesson {lesson_id} not found")
    if not caller.owns(lesson.teacher_id):
        raise PermissionDeniedError(
            "Only the lesson's teacher can view student progress"
        )

    result = await db.execute(
        select(LessonProgress)
        .where(LessonProgress.lesson_id == lesson_id)
        .order_by(LessonProgress.student_id)
    )
    return [
        ProgressSummary(progress=row, percentage=lesson_percentage(row, lesson.total_duration))
        for row in result.scalars().all()
    ]


def validate_progress_values(values: dict) -> None:
    """Reject a merged progress record that breaks a domain invariant."""
    for field in ("video_progress_seconds", "checkpoints_completed", "total_checkpoints"):
        value = values.get(field)
        if value is not None and value < 0:
            raise InvariantViolationError(f"{field} must not be negative")

    quiz_score = values.get("quiz_score")
    if quiz_score is not None and not 0 <= quiz_score <= 100:
        raise InvariantViolationError("quiz_score must be between 0 and 100")

    completed = values.get("checkpoints_completed") or 0
    total = values.get("total_checkpoints") or 0
    if completed > total:
        raise InvariantViolationError(
            f"checkpoints_completed ({completed}) exceeds total_checkpoints ({total})"
        )


# ===================================================================
# Internal helpers
# ===================================================================


async def _find_progress(
    db: AsyncSession, lesson_id: int, student_id: int
) -> LessonProgress | None:
    result = await db.execute(
        select(LessonProgress).where(
            LessonProgress.lesson_id == lesson_id,
            LessonProgress.student_id == student_id,
        )
    )
    return result.scalar_one_or_none()


async def _apply_changes(
    db: AsyncSession, progress: LessonProgress, changes: dict
) -> None:
    current = {field: getattr(progress, field) for field in PROGRESS_FIELDS}
    validate_progress_values({**current, **changes})
    for field, value in changes.items():
        setattr(progress, field, value)
    await db.commit()
