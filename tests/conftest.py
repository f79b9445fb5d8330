"""Shared pytest fixtures for the LearnScore test suite."""

import itertools
import json
from collections.abc import AsyncGenerator

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from learnscore.config import settings
from learnscore.database import Base, get_db
from learnscore.models import Assignment, AssignmentQuestion, Lesson, User
from main import app

# ---------------------------------------------------------------------------
# Async engine & session fixtures (in-memory SQLite)
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite://"

_email_seq = itertools.count(1)


@pytest.fixture()
async def async_engine():
    """Create a fresh in-memory async engine per test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async session bound to the per-test database."""
    session_factory = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTPX async client wired to the FastAPI app with test DB override."""

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Data factories
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_user(db_session: AsyncSession):
    async def _make(name: str = "Student", role: str = "student", email: str | None = None) -> User:
        user = User(
            name=name,
            email=email or f"user{next(_email_seq)}@example.com",
            role=role,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture()
def make_lesson(db_session: AsyncSession, make_user):
    async def _make(total_duration: int | None = 1000, teacher: User | None = None) -> Lesson:
        teacher = teacher or await make_user(name="Teacher", role="teacher")
        lesson = Lesson(teacher_id=teacher.id, title="Lesson", total_duration=total_duration)
        db_session.add(lesson)
        await db_session.commit()
        return lesson

    return _make


@pytest.fixture()
def make_assignment(db_session: AsyncSession, make_user):
    async def _make(
        correct_answers: list[str], teacher: User | None = None
    ) -> tuple[Assignment, list[AssignmentQuestion]]:
        teacher = teacher or await make_user(name="Teacher", role="teacher")
        assignment = Assignment(teacher_id=teacher.id, title="Quiz")
        db_session.add(assignment)
        await db_session.flush()

        questions = [
            AssignmentQuestion(
                assignment_id=assignment.id,
                question=f"Question {i}",
                options=json.dumps(["A", "B", "C", "D"]),
                correct_answer=answer,
                question_type="MCQ",
                order_index=i,
            )
            for i, answer in enumerate(correct_answers, start=1)
        ]
        db_session.add_all(questions)
        await db_session.commit()
        return assignment, questions

    return _make


@pytest.fixture()
def auth_headers():
    """Build the proxy identity header for a user."""

    def _headers(user: User) -> dict[str, str]:
        return {settings.AUTH_HEADER: user.email}

    return _headers


@pytest.fixture()
def lose_first_lookup(monkeypatch):
    """Make a module's natural-key lookup miss once, as if a concurrent
    writer inserted the row between our lookup and our commit."""

    def _patch(module, name: str) -> None:
        real_lookup = getattr(module, name)
        calls = itertools.count()

        async def _lookup(*args, **kwargs):
            if next(calls) == 0:
                return None
            return await real_lookup(*args, **kwargs)

        monkeypatch.setattr(module, name, _lookup)

    return _patch
