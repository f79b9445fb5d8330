"""StudyTime ORM model."""

from datetime import date, datetime, timezone

from sqlalchemy import Integer, String, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnscore.database import Base


class StudyTime(Base):
    __tablename__ = "study_time"
    __table_args__ = (
        UniqueConstraint("student_id", "date", name="uq_study_time_student_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    study_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    # Column keeps its legacy name; rows written before the switch to
    # seconds hold minutes and have no unit stamp.
    total_seconds: Mapped[int] = mapped_column(
        "total_minutes", Integer, nullable=False, default=0
    )
    unit: Mapped[str | None] = mapped_column(String(16), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    student: Mapped["User"] = relationship("User", back_populates="study_times")
