"""LessonProgress ORM model."""

from datetime import datetime, timezone

from sqlalchemy import Integer, Float, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnscore.database import Base


class LessonProgress(Base):
    __tablename__ = "lesson_progress"
    __table_args__ = (
        UniqueConstraint("lesson_id", "student_id", name="uq_lesson_progress_lesson_student"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lesson_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False
    )
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # Raw playback position; may exceed the lesson duration.
    video_progress_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    quiz_score: Mapped[float | None] = mapped_column(Float, nullable=True)  # 0-100
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    checkpoints_completed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_checkpoints: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    lesson: Mapped["Lesson"] = relationship("Lesson", back_populates="progresses")
    student: Mapped["User"] = relationship("User", back_populates="lesson_progress")
