"""ORM models package - exports all models and Base."""

from learnscore.database import Base
from learnscore.models.user import User
from learnscore.models.lesson import Lesson
from learnscore.models.lesson_progress import LessonProgress
from learnscore.models.study_time import StudyTime
from learnscore.models.assignment import Assignment, AssignmentQuestion
from learnscore.models.assignment_submission import AssignmentSubmission

__all__ = [
    "Base",
    "User",
    "Lesson",
    "LessonProgress",
    "StudyTime",
    "Assignment",
    "AssignmentQuestion",
    "AssignmentSubmission",
]
