"""Re-apply the built-in exercise dataset and print table row counts.

Run after deploying a release that changes the catalog:

    python scripts/resync_catalog.py
"""

import asyncio

import structlog
from sqlalchemy import func, select

from ironlog.core.config import get_settings
from ironlog.core.logging import configure_logging
from ironlog.db.session import async_session_maker, engine
from ironlog.models import ExerciseDefinition, Workout, WorkoutSnapshot, WorkoutTemplate
from ironlog.services.catalog import resync_builtin_exercises

logger = structlog.get_logger(__name__)


async def main() -> None:
    configure_logging(get_settings())
    async with async_session_maker() as session:
        result = await resync_builtin_exercises(session)
        await session.commit()
        counts = {}
        for model in (ExerciseDefinition, Workout, WorkoutTemplate, WorkoutSnapshot):
            counts[model.__tablename__] = (await session.execute(select(func.count()).select_from(model))).scalar()
    logger.info("catalog_resync_complete", **result.model_dump(), row_counts=counts)
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
