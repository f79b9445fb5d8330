"""Assignment auto-grading and submission handling.

Grading is an exact, case-sensitive match of each submitted answer against
the question's ``correct_answer``. The score is on a 0-10 scale.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learnscore.config import settings
from learnscore.models.assignment import Assignment, AssignmentQuestion
from learnscore.models.assignment_submission import AssignmentSubmission
from learnscore.services.auth import Caller
from learnscore.services.errors import (
    InvariantViolationError,
    MalformedInputError,
    NotFoundError,
    PermissionDeniedError,
)

logger = logging.getLogger(__name__)

MAX_SCORE = 10.0


@dataclass
class StudentQuestion:
    """A question as shown to a student: no answer key."""

    id: int
    question: str
    options: list[str]
    question_type: str | None
    order_index: int


# ===================================================================
# Pure grading
# ===================================================================


def grade_answers(
    questions: Sequence[AssignmentQuestion], answers: Mapping[str, str | None]
) -> float | None:
    """Score *answers* against *questions*.

    Returns ``None`` for an empty question list. Question ids are matched
    as strings; a missing id counts as unanswered.
    """
    if not questions:
        return None

    correct = sum(
        1
        for question in questions
        if answers.get(str(question.id)) == question.correct_answer
    )
    return correct / len(questions) * MAX_SCORE


def parse_answer_content(content: str | None) -> dict[str, str | None] | None:
    """Parse stored submission content into a question-id -> answer map.

    Scalar answers are read as their JSON text (``5`` -> ``"5"``,
    ``true`` -> ``"true"``). Returns ``None`` when the content is not a JSON
    object, or when an answer is itself a list or object.
    """
    if content is None:
        return None
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Submission content is not valid JSON")
        return None

    if not isinstance(data, dict):
        logger.warning("Submission content is not an answer map")
        return None

    answers: dict[str, str | None] = {}
    for question_id, value in data.items():
        if isinstance(value, (list, dict)):
            logger.warning("Submission answer %s is not a scalar", question_id)
            return None
        if value is None or isinstance(value, str):
            answers[question_id] = value
        else:
            answers[question_id] = json.dumps(value)
    return answers


def parse_options(raw: str | None) -> list[str]:
    """Parse a question's serialized options list; malformed text yields []."""
    if not raw:
        return []
    try:
        options = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Invalid options JSON: %.50s", raw)
        return []
    if not isinstance(options, list):
        logger.warning("Options JSON is not a list: %.50s", raw)
        return []
    return [str(option) for option in options]


def serialize_answers(answers: Mapping[str, Any] | str | None) -> str | None:
    """Encode an answer payload as submission content.

    Mappings become JSON; text is stored verbatim.
    """
    if answers is None or isinstance(answers, str):
        return answers
    if not isinstance(answers, Mapping):
        raise MalformedInputError(
            f"Answers must be a mapping or text, got {type(answers).__name__}"
        )
    return json.dumps(dict(answers), ensure_ascii=False)


# ===================================================================
# Store operations
# ===================================================================


async def submit_assignment(
    db: AsyncSession,
    assignment_id: int,
    student_id: int,
    answers: Mapping[str, Any] | str | None,
) -> AssignmentSubmission:
    """Create or overwrite the student's submission, then auto-grade it.

    Content that cannot be graded is still stored, with the score left for
    manual grading.
    """
    assignment = await db.get(Assignment, assignment_id)
    if assignment is None:
        raise NotFoundError(f"Assignment {assignment_id} not found")

    content = serialize_answers(answers)
    questions = await _ordered_questions(db, assignment_id)

    submission = await _find_submission(db, assignment_id, student_id)
    if submission is None:
        submission = AssignmentSubmission(
            assignment_id=assignment_id, student_id=student_id
        )
        db.add(submission)
    _apply_submission(submission, content, questions)

    try:
        await db.commit()
    except IntegrityError:
        # A concurrent first submission won the natural key; overwrite it.
        # The rollback expired every loaded instance, questions included.
        await db.rollback()
        submission = await _find_submission(db, assignment_id, student_id)
        if submission is None:
            raise
        questions = await _ordered_questions(db, assignment_id)
        _apply_submission(submission, content, questions)
        await db.commit()

    await db.refresh(submission)
    logger.info(
        "Submission stored: assignment=%d student=%d score=%s",
        assignment_id, student_id, submission.score,
    )
    return submission


async def grade_submission(
    db: AsyncSession,
    assignment_id: int,
    student_id: int,
    answers: Mapping[str, Any] | str | None,
) -> float | None:
    """Submit *answers* and return the resulting score (``None`` if ungraded)."""
    submission = await submit_assignment(db, assignment_id, student_id, answers)
    return submission.score


async def get_submission(
    db: AsyncSession, assignment_id: int, student_id: int
) -> AssignmentSubmission:
    """Return the student's submission for an assignment."""
    if await db.get(Assignment, assignment_id) is None:
        raise NotFoundError(f"Assignment {assignment_id} not found")
    submission = await _find_submission(db, assignment_id, student_id)
    if submission is None:
        raise NotFoundError("No submission for this assignment yet")
    return submission


async def list_submissions(
    db: AsyncSession, caller: Caller, assignment_id: int
) -> list[AssignmentSubmission]:
    """All submissions of an assignment; its teacher or an admin only."""
    assignment = await db.get(Assignment, assignment_id)
    if assignment is None:
        raise NotFoundError(f"Assignment {assignment_id} not found")
    if not caller.owns(assignment.teacher_id):
        raise PermissionDeniedError(
            "Only the assignment's teacher can view submissions"
        )

    result = await db.execute(
        select(AssignmentSubmission)
        .where(AssignmentSubmission.assignment_id == assignment_id)
        .order_by(AssignmentSubmission.submitted_at, AssignmentSubmission.id)
    )
    return list(result.scalars().all())


async def set_manual_score(
    db: AsyncSession, caller: Caller, submission_id: int, score: float
) -> AssignmentSubmission:
    """Record a teacher's grade on a submission."""
    if not 0 <= score <= MAX_SCORE:
        raise InvariantViolationError(f"score must be between 0 and {MAX_SCORE:g}")

    submission = await db.get(AssignmentSubmission, submission_id)
    if submission is None:
        raise NotFoundError(f"Submission {submission_id} not found")
    assignment = await db.get(Assignment, submission.assignment_id)
    if assignment is None or not caller.owns(assignment.teacher_id):
        raise PermissionDeniedError("Only the assignment's teacher can grade it")

    submission.score = score
    submission.graded_manually = True
    await db.commit()
    await db.refresh(submission)
    logger.info("Submission %d graded manually: %s", submission_id, score)
    return submission


async def list_questions_for_student(
    db: AsyncSession, assignment_id: int
) -> list[StudentQuestion]:
    """Ordered questions of an assignment, without answer keys."""
    if await db.get(Assignment, assignment_id) is None:
        raise NotFoundError(f"Assignment {assignment_id} not found")
    return [
        StudentQuestion(
            id=q.id,
            question=q.question,
            options=parse_options(q.options),
            question_type=q.question_type,
            order_index=q.order_index,
        )
        for q in await _ordered_questions(db, assignment_id)
    ]


# ===================================================================
# Internal helpers
# ===================================================================


async def _ordered_questions(
    db: AsyncSession, assignment_id: int
) -> list[AssignmentQuestion]:
    result = await db.execute(
        select(AssignmentQuestion)
        .where(AssignmentQuestion.assignment_id == assignment_id)
        .order_by(AssignmentQuestion.order_index, AssignmentQuestion.id)
    )
    return list(result.scalars().all())


async def _find_submission(
    db: AsyncSession, assignment_id: int, student_id: int
) -> AssignmentSubmission | None:
    result = await db.execute(
        select(AssignmentSubmission).where(
            AssignmentSubmission.assignment_id == assignment_id,
            AssignmentSubmission.student_id == student_id,
        )
    )
    return result.scalar_one_or_none()


def _apply_submission(
    submission: AssignmentSubmission,
    content: str | None,
    questions: list[AssignmentQuestion],
) -> None:
    submission.content = content
    submission.submitted_at = datetime.now(timezone.utc)

    if submission.graded_manually and not settings.AUTO_GRADE_OVERRIDES_MANUAL:
        logger.info("Keeping manual grade on submission %s", submission.id)
        return

    answers = parse_answer_content(content)
    if answers is None:
        return
    score = grade_answers(questions, answers)
    if score is None:
        return

    submission.score = score
    submission.graded_manually = False
