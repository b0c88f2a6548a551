"""API v1 router aggregation."""

from fastapi import APIRouter

from ironlog.api.v1.endpoints import (
    analytics,
    exercises,
    export,
    health,
    previous_session,
    templates,
    workouts,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(exercises.router, prefix="/exercises", tags=["exercises"])
api_router.include_router(workouts.router, prefix="/workouts", tags=["workouts"])
api_router.include_router(previous_session.router, prefix="/previous-session", tags=["previous-session"])
api_router.include_router(templates.router, prefix="/templates", tags=["templates"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(export.router, prefix="/export", tags=["export"])
