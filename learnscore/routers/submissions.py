"""Assignment submission API routes."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from learnscore.database import get_db
from learnscore.dependencies import get_teacher_caller, require_student
from learnscore.models.assignment_submission import AssignmentSubmission
from learnscore.models.user import User
from learnscore.services.auth import Caller
from learnscore.services.grading import (
    get_submission,
    list_questions_for_student,
    list_submissions,
    set_manual_score,
    submit_assignment,
)

router = APIRouter(tags=["submissions"])


class SubmitRequest(BaseModel):
    # Either a {question_id: answer} map or pre-serialized text
    answers: dict[str, Any] | str | None = None


class GradeRequest(BaseModel):
    score: float


class QuestionItem(BaseModel):
    id: int
    question: str
    options: list[str]
    question_type: str | None
    order_index: int


class SubmissionResponse(BaseModel):
    id: int
    assignment_id: int
    student_id: int
    content: str | None
    score: float | None
    graded_manually: bool
    submitted_at: datetime


def _to_response(submission: AssignmentSubmission) -> SubmissionResponse:
    return SubmissionResponse(
        id=submission.id,
        assignment_id=submission.assignment_id,
        student_id=submission.student_id,
        content=submission.content,
        score=submission.score,
        graded_manually=submission.graded_manually,
        submitted_at=submission.submitted_at,
    )


@router.get(
    "/api/student/assignments/{assignment_id}/questions",
    response_model=list[QuestionItem],
)
async def assignment_questions(
    assignment_id: int,
    user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """Return the assignment's questions without their answer keys."""
    questions = await list_questions_for_student(db, assignment_id)
    return [QuestionItem(**vars(q)) for q in questions]


@router.post(
    "/api/student/assignments/{assignment_id}/submit",
    response_model=SubmissionResponse,
)
async def submit(
    assignment_id: int,
    body: SubmitRequest,
    user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """Submit (or resubmit) answers; the submission is auto-graded."""
    return _to_response(await submit_assignment(db, assignment_id, user.id, body.answers))


@router.get(
    "/api/student/assignments/{assignment_id}/submission",
    response_model=SubmissionResponse,
)
async def my_submission(
    assignment_id: int,
    user: User = Depends(require_student),
    db: AsyncSession = Depends(get_db),
):
    """Return the user's own submission."""
    return _to_response(await get_submission(db, assignment_id, user.id))


@router.get(
    "/api/teacher/assignments/{assignment_id}/submissions",
    response_model=list[SubmissionResponse],
)
async def assignment_submissions(
    assignment_id: int,
    caller: Caller = Depends(get_teacher_caller),
    db: AsyncSession = Depends(get_db),
):
    """Return all submissions of an assignment the caller teaches."""
    return [_to_response(s) for s in await list_submissions(db, caller, assignment_id)]


@router.put(
    "/api/teacher/assignments/submissions/{submission_id}/grade",
    response_model=SubmissionResponse,
)
async def grade(
    submission_id: int,
    body: GradeRequest,
    caller: Caller = Depends(get_teacher_caller),
    db: AsyncSession = Depends(get_db),
):
    """Set a manual grade on a submission."""
    return _to_response(await set_manual_score(db, caller, submission_id, body.score))
