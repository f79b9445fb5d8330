"""Service layer - the progress and competency scoring engine."""

from learnscore.services.grading import grade_answers, grade_submission
from learnscore.services.progress import (
    ProgressUpdate,
    get_lesson_progress,
    lesson_percentage,
    update_progress,
)
from learnscore.services.ranking import calculate_stars, get_student_ranking
from learnscore.services.units import normalize_study_seconds

__all__ = [
    "ProgressUpdate",
    "calculate_stars",
    "get_lesson_progress",
    "get_student_ranking",
    "grade_answers",
    "grade_submission",
    "lesson_percentage",
    "normalize_study_seconds",
    "update_progress",
]
