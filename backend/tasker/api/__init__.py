"""API router package."""

from fastapi import APIRouter

from tasker.api.v1 import ai, blockers, export, projects, settings, tasks

router = APIRouter()

# Include all API routers
router.include_router(projects.router, prefix="/projects", tags=["Projects"])
router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
router.include_router(blockers.router, prefix="/tasks", tags=["Blockers"])
router.include_router(ai.router, prefix="/ai", tags=["AI"])
router.include_router(settings.router, prefix="/settings", tags=["Settings"])
router.include_router(export.router, tags=["Export"])
