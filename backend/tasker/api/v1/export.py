"""Full-dataset export and import endpoints."""

from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tasker.api.errors import handle_service_error
from tasker.db.session import get_db_session
from tasker.services.data_transfer import DataTransferService

router = APIRouter()
logger = structlog.get_logger()


class ProjectRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: UUID
    name: str
    description: str | None = None
    color: str | None = None
    ai_context: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TaskRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: UUID
    project_id: UUID | None = None
    parent_id: UUID | None = None
    label: str
    position: int = 0
    is_expanded: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BlockerRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: UUID
    task_id: UUID
    blocker_id: UUID
    note: str | None = None
    created_at: datetime | None = None


class ImportPayload(BaseModel):
    """Document produced by ``GET /export``."""

    model_config = ConfigDict(extra="ignore")

    version: int | None = None
    projects: list[ProjectRecord] | None = None
    tasks: list[TaskRecord] = Field(default_factory=list)
    task_blockers: list[BlockerRecord] = Field(default_factory=list)


class ImportResponse(BaseModel):
    imported: dict[str, int]


@router.get("/export")
async def export_data(
    db: AsyncSession = Depends(get_db_session),
) -> dict[str, Any]:
    """Dump every project, task and blocker."""
    try:
        return await DataTransferService(db).export_data()
    except Exception as e:
        raise handle_service_error(e, "Failed to export data")


@router.post("/import", response_model=ImportResponse)
async def import_data(
    payload: ImportPayload,
    db: AsyncSession = Depends(get_db_session),
) -> ImportResponse:
    """Replace all data with an export document; all or nothing."""
    try:
        imported = await DataTransferService(db).import_data(
            projects=None if payload.projects is None else [p.model_dump() for p in payload.projects],
            tasks=[t.model_dump() for t in payload.tasks],
            task_blockers=[b.model_dump() for b in payload.task_blockers],
        )
    except Exception as e:
        raise handle_service_error(e, "Import failed")
    return ImportResponse(imported=imported)
