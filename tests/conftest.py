"""
Tutor Selection Test Configuration

Shared fixtures for all tests. Every test gets its own SQLite database.
"""

import os
import tempfile

# --- Test DB setup (before imports that read settings) ---

_TEST_DB_DIR = tempfile.mkdtemp()
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR}/app.db"
os.environ["LOG_FORMAT"] = "console"
os.environ["SENTRY_DSN"] = ""

from types import SimpleNamespace
from typing import Dict

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.pool import NullPool

from app.db.base import Base
from app.db.session import build_engine, build_session_factory
from app.models import Application, ApplicationType, Course, SelectedApplication, User, UserRole
from app.services.selection_engine import SelectionEngine


# =============================================================================
# FIXTURES: Database
# =============================================================================

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Fresh SQLite database with all tables."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture
def selection_engine(session_factory) -> SelectionEngine:
    return SelectionEngine.from_session_factory(session_factory)


# =============================================================================
# FIXTURES: Sample Data
# =============================================================================

async def seed_sample_data(session_factory) -> SimpleNamespace:
    """
    One lecturer, three candidates, two courses.

    COSC0001 gets four applications, COSC0002 gets two.
    """
    async with session_factory() as session:
        lecturer = User(
            first_name="Grace", last_name="Hopper",
            email="grace@uni.example.edu", role=UserRole.LECTURER,
        )
        candidates = [
            User(first_name="Alan", last_name="Turing", email="alan@student.example.edu", role=UserRole.CANDIDATE),
            User(first_name="Ada", last_name="Lovelace", email="ada@student.example.edu", role=UserRole.CANDIDATE),
            User(first_name="Edsger", last_name="Dijkstra", email="edsger@student.example.edu", role=UserRole.CANDIDATE),
        ]
        session.add(lecturer)
        session.add_all(candidates)
        await session.flush()

        session.add_all([
            Course(code="COSC0001", name="Full Stack Development", lecturer_id=lecturer.id),
            Course(code="COSC0002", name="Algorithms and Analysis", lecturer_id=lecturer.id),
        ])
        await session.flush()

        course_apps = [
            Application(course_code="COSC0001", user_id=candidates[i % 3].id, type=ApplicationType.TUTOR)
            for i in range(4)
        ]
        other_apps = [
            Application(course_code="COSC0002", user_id=candidates[i].id, type=ApplicationType.LAB_ASSISTANT)
            for i in range(2)
        ]
        session.add_all(course_apps + other_apps)
        await session.commit()

        return SimpleNamespace(
            lecturer_id=lecturer.id,
            candidate_ids=[c.id for c in candidates],
            course="COSC0001",
            other_course="COSC0002",
            apps=[a.id for a in course_apps],
            other_apps=[a.id for a in other_apps],
        )


@pytest_asyncio.fixture
async def seeded(session_factory) -> SimpleNamespace:
    return await seed_sample_data(session_factory)


async def fetch_ranks(session_factory, course_code: str) -> Dict[int, int]:
    """application_id -> rank for every selection of the course."""
    async with session_factory() as session:
        result = await session.execute(
            select(SelectedApplication.application_id, SelectedApplication.rank)
            .join(Application, SelectedApplication.application_id == Application.id)
            .where(Application.course_code == course_code)
        )
        return {application_id: rank for application_id, rank in result.all()}


def assert_dense(ranks: Dict[int, int]) -> None:
    assert sorted(ranks.values()) == list(range(1, len(ranks) + 1))
