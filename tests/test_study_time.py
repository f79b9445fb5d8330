"""Tests for daily study-time tracking."""

from datetime import date, timedelta

import pytest
from sqlalchemy import func, select

import learnscore.services.study_time as study_time_service
from learnscore.models.study_time import StudyTime
from learnscore.services.errors import InvariantViolationError, NotFoundError
from learnscore.services.study_time import get_study_stats, start_study, stop_study

TODAY = date(2026, 3, 10)


async def test_start_is_find_or_create(db_session, make_user):
    student = await make_user()

    first = await start_study(db_session, student.id, today=TODAY)
    second = await start_study(db_session, student.id, today=TODAY)

    assert first.id == second.id
    assert first.total_seconds == 0
    count = await db_session.scalar(select(func.count(StudyTime.id)))
    assert count == 1


async def test_lost_start_race_returns_winner_row(db_session, make_user, lose_first_lookup):
    student = await make_user()
    student_id = student.id
    winner = await start_study(db_session, student_id, today=TODAY)
    winner_id = winner.id
    await stop_study(db_session, student_id, 120, today=TODAY)
    lose_first_lookup(study_time_service, "_find_study_time")

    row = await start_study(db_session, student_id, today=TODAY)

    assert row.id == winner_id
    assert row.total_seconds == 120
    count = await db_session.scalar(select(func.count(StudyTime.id)))
    assert count == 1


async def test_stop_accumulates_seconds(db_session, make_user):
    student = await make_user()
    await start_study(db_session, student.id, today=TODAY)

    await stop_study(db_session, student.id, 90, today=TODAY)
    row = await stop_study(db_session, student.id, 45, today=TODAY)

    assert row.total_seconds == 135
    assert row.unit == "seconds"


async def test_stop_converts_legacy_minutes_row(db_session, make_user):
    student = await make_user()
    db_session.add(StudyTime(student_id=student.id, study_date=TODAY, total_seconds=30))
    await db_session.commit()

    row = await stop_study(db_session, student.id, 60, today=TODAY)

    assert row.total_seconds == 30 * 60 + 60
    assert row.unit == "seconds"


async def test_stop_without_start(db_session, make_user):
    student = await make_user()
    with pytest.raises(NotFoundError):
        await stop_study(db_session, student.id, 10, today=TODAY)


async def test_stop_rejects_negative_seconds(db_session, make_user):
    student = await make_user()
    await start_study(db_session, student.id, today=TODAY)
    with pytest.raises(InvariantViolationError):
        await stop_study(db_session, student.id, -5, today=TODAY)


async def test_stats_normalize_legacy_rows(db_session, make_user):
    student = await make_user()
    db_session.add_all([
        # legacy minutes
        StudyTime(student_id=student.id, study_date=TODAY - timedelta(days=2), total_seconds=60),
        # legacy, large enough to be seconds
        StudyTime(student_id=student.id, study_date=TODAY - timedelta(days=30), total_seconds=12_000),
        StudyTime(student_id=student.id, study_date=TODAY, total_seconds=600, unit="seconds"),
    ])
    await db_session.commit()

    stats = await get_study_stats(db_session, student.id, today=TODAY)

    assert stats.today_seconds == 600
    assert stats.today_minutes == 10
    assert stats.week_total_seconds == 3600 + 600
    assert stats.total_seconds == 3600 + 12_000 + 600
    assert stats.total_hours == pytest.approx(16_200 / 3600)
    assert stats.study_days == 3
    assert len(stats.recent_study_times) == 2
