"""Seed the database with demo users, lessons and an assignment.

Usage: python scripts/seed_data.py
"""

import asyncio
import json
import sys
from pathlib import Path

# Ensure project root is on sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from learnscore.config import settings
from learnscore.database import init_db, async_session
from learnscore.models import Assignment, AssignmentQuestion, Lesson, User


SEED_USERS = [
    {"name": "Teacher Demo", "email": "teacher@example.com", "role": "teacher"},
    {"name": "Student One", "email": "student1@example.com", "role": "student"},
    {"name": "Student Two", "email": "student2@example.com", "role": "student"},
]

SEED_LESSONS = [
    {"title": "Variables and Types", "total_duration": 900},
    {"title": "Control Flow", "total_duration": 1200},
    {"title": "Functions", "total_duration": 1500},
]

SEED_QUESTIONS = [
    {
        "question": "Which keyword defines a function?",
        "options": json.dumps(["func", "def", "fn", "lambda"]),
        "correct_answer": "def",
        "question_type": "MCQ",
        "order_index": 1,
    },
    {
        "question": "Is a tuple mutable?",
        "options": json.dumps(["True", "False"]),
        "correct_answer": "False",
        "question_type": "TRUE_FALSE",
        "order_index": 2,
    },
]


async def _get_or_create_user(session, data: dict) -> User:
    result = await session.execute(select(User).where(User.email == data["email"]))
    user = result.scalar_one_or_none()
    if user:
        for key, value in data.items():
            setattr(user, key, value)
        print(f"  Updated user: {data['email']}")
    else:
        user = User(**data)
        session.add(user)
        print(f"  Inserted user: {data['email']}")
    await session.flush()
    return user


async def seed() -> None:
    # Ensure data directory exists
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)

    # Create tables
    await init_db()
    print("Database tables created.")

    async with async_session() as session:
        users = [await _get_or_create_user(session, data) for data in SEED_USERS]
        teacher = users[0]

        for lesson_data in SEED_LESSONS:
            result = await session.execute(
                select(Lesson).where(Lesson.title == lesson_data["title"])
            )
            if result.scalar_one_or_none() is None:
                session.add(Lesson(teacher_id=teacher.id, **lesson_data))
                print(f"  Inserted lesson: {lesson_data['title']}")

        result = await session.execute(
            select(Assignment).where(Assignment.title == "Python Basics Quiz")
        )
        if result.scalar_one_or_none() is None:
            assignment = Assignment(teacher_id=teacher.id, title="Python Basics Quiz")
            assignment.questions = [AssignmentQuestion(**q) for q in SEED_QUESTIONS]
            session.add(assignment)
            print("  Inserted assignment: Python Basics Quiz")

        await session.commit()

    print("Seed data complete.")


if __name__ == "__main__":
    asyncio.run(seed())
