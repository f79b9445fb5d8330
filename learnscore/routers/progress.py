"""Lesson progress API routes."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from learnscore.database import get_db
from learnscore.dependencies import get_teacher_caller, require_student
from learnscore.models.lesson_progress import LessonProgress
from learnscore.models.user import User
from learnscore.services.auth import Caller
from learnscore.services.progress import (
    ProgressSummary,
    ProgressUpdate,
    get_lesson_progress,
    list_lesson_progress,
    list_student_progress,
    update_progress,
)

router = APIRouter(prefix="/api", tags=["progress"])


class ProgressResponse(BaseModel):
    id: int
    lesson_id: int
    student_id: int
    video_progress_seconds: int | None
    quiz_score: float | None
    completed: bool
    checkpoints_completed: int
    total_checkpoints: int
    percentage: float | None = None


def _to_response(progress: LessonProgress, percentage: float | None = None) -> ProgressResponse:
    return ProgressResponse(
        id=progress.id,
        lesson_id=progress.lesson_id,
        student_id=progress.student_id,
        video_progress_seconds=progress.video_progress_seconds,
        quiz_score=progress.quiz_score,
        completed=progress.completed,
        checkpoints_completed=progress.checkpoints_completed,
        total_checkpoints=progress.total_checkpoints,
        percentage=percentage,
    )


def _summaries(summaries: list[ProgressSummary]) -> list[ProgressResponse]:
    return [_to_response(s.progress, s.percentage) for s in summaries]


@router.get("/student/lessons/progress", response_model=list[ProgressResponse])
async def my_progress(
    user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """Return all of the user's lesson progress rows."""
    return _summaries(await list_student_progress(db, user.id))


@router.get("/student/lessons/{lesson_id}/progress", response_model=ProgressResponse)
async def my_lesson_progress(
    lesson_id: int,
    user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """Return the user's progress on one lesson."""
    return _to_response(await get_lesson_progress(db, lesson_id, user.id))


@router.post("/student/lessons/{lesson_id}/progress", response_model=ProgressResponse)
async def save_lesson_progress(
    lesson_id: int,
    body: ProgressUpdate,
    user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """Apply a partial progress update for the user on one lesson."""
    return _to_response(await update_progress(db, lesson_id, user.id, body))


@router.get("/teacher/lessons/{lesson_id}/progress", response_model=list[ProgressResponse])
async def lesson_progress_for_teacher(
    lesson_id: int,
    caller: Caller = Depends(get_teacher_caller),
    db: AsyncSession = Depends(get_db),
):
    """Return every student's progress on a lesson the caller teaches."""
    return _summaries(await list_lesson_progress(db, caller, lesson_id))
