import os

os.environ.setdefault("DATABASE_DSN", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ironlog.core.exercise_catalog import builtin_exercise_id
from ironlog.db.base import Base
from ironlog.db.session import enable_sqlite_savepoints, get_db
from ironlog.main import app
from ironlog.schemas.workout import SetInput, WorkoutExerciseInput, WorkoutFinish, WorkoutStart
from ironlog.services import workout_store
from ironlog.services.catalog import resync_builtin_exercises


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_maker):
    """Session over a fresh in-memory database with the built-in catalog loaded."""
    async with session_maker() as session:
        await resync_builtin_exercises(session)
        await session.commit()
        yield session


@pytest.fixture
async def client(db, session_maker):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def log_workout(db):
    """Start and finish a workout in one go.

    ``exercises`` is a list of ``(slug, [set dicts])`` pairs using built-in slugs.
    """

    async def _log(exercises, started_at=None, minutes=60, name="Session"):
        started_at = started_at or datetime.now(timezone.utc) - timedelta(hours=2)
        workout = await workout_store.start_workout(db, WorkoutStart(name=name, started_at=started_at))
        payload = WorkoutFinish(
            completed_at=started_at + timedelta(minutes=minutes),
            exercises=[
                WorkoutExerciseInput(
                    exercise_id=builtin_exercise_id(slug),
                    sets=[SetInput(**s) for s in sets],
                )
                for slug, sets in exercises
            ],
        )
        workout = await workout_store.finish_workout(db, workout.id, payload)
        await db.commit()
        return workout

    return _log
