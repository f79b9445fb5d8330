"""Tests for star computation and the student leaderboard."""

from learnscore.models.lesson_progress import LessonProgress
from learnscore.services.progress import ProgressUpdate, update_progress
from learnscore.services.ranking import (
    RankingEntry,
    calculate_stars,
    get_student_ranking,
    sort_ranking,
)

HALF_DONE = ProgressUpdate(
    video_progress_seconds=500, total_checkpoints=4, checkpoints_completed=2, quiz_score=80
)  # 56%
MOSTLY_DONE = ProgressUpdate(
    video_progress_seconds=1000, total_checkpoints=4, checkpoints_completed=4, quiz_score=20
)  # 84%


def test_sort_orders_by_stars_descending():
    entries = [
        RankingEntry(id=1, name="a", email="a@x", stars=14),
        RankingEntry(id=2, name="b", email="b@x", stars=0),
        RankingEntry(id=3, name="c", email="c@x", stars=30),
    ]
    assert [e.stars for e in sort_ranking(entries)] == [30, 14, 0]


def test_ties_break_by_student_id():
    entries = [
        RankingEntry(id=9, name="a", email="a@x", stars=3),
        RankingEntry(id=2, name="b", email="b@x", stars=3),
        RankingEntry(id=5, name="c", email="c@x", stars=3),
    ]
    assert [e.id for e in sort_ranking(entries)] == [2, 5, 9]


async def test_stars_average_across_lessons(db_session, make_user, make_lesson):
    student = await make_user()
    first = await make_lesson(total_duration=1000)
    second = await make_lesson(total_duration=1000)
    await update_progress(db_session, first.id, student.id, HALF_DONE)
    await update_progress(db_session, second.id, student.id, MOSTLY_DONE)

    assert await calculate_stars(db_session, student.id) == 14


async def test_no_progress_is_zero_stars(db_session, make_user):
    student = await make_user()
    assert await calculate_stars(db_session, student.id) == 0


async def test_dangling_lesson_rows_are_skipped(db_session, make_user, make_lesson):
    student = await make_user()
    lesson = await make_lesson()
    await update_progress(db_session, lesson.id, student.id, ProgressUpdate(completed=True))
    db_session.add(LessonProgress(lesson_id=9999, student_id=student.id, completed=False))
    await db_session.commit()

    assert await calculate_stars(db_session, student.id) == 20


async def test_only_dangling_rows_is_zero_stars(db_session, make_user):
    student = await make_user()
    db_session.add(LessonProgress(lesson_id=9999, student_id=student.id, completed=True))
    await db_session.commit()

    assert await calculate_stars(db_session, student.id) == 0


async def test_leaderboard(db_session, make_user, make_lesson):
    teacher = await make_user(name="Teacher", role="teacher")
    average = await make_user(name="Average")
    idle = await make_user(name="Idle")
    finisher = await make_user(name="Finisher")
    first = await make_lesson(total_duration=1000, teacher=teacher)
    second = await make_lesson(total_duration=1000, teacher=teacher)

    await update_progress(db_session, first.id, average.id, HALF_DONE)
    await update_progress(db_session, second.id, average.id, MOSTLY_DONE)
    await update_progress(db_session, first.id, finisher.id, ProgressUpdate(completed=True))

    ranking = await get_student_ranking(db_session)

    assert [(e.name, e.stars) for e in ranking] == [
        ("Finisher", 20),
        ("Average", 14),
        ("Idle", 0),
    ]
    assert ranking[2].id == idle.id
    assert ranking[0].to_dict() == {
        "id": finisher.id,
        "name": "Finisher",
        "email": finisher.email,
        "stars": 20,
    }


async def test_leaderboard_role_match_is_case_insensitive(db_session, make_user):
    await make_user(name="Legacy", role="STUDENT")
    await make_user(name="Admin", role="admin")

    ranking = await get_student_ranking(db_session)

    assert [e.name for e in ranking] == ["Legacy"]
