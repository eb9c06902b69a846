"""Task blocker API endpoints."""

from datetime import datetime
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from tasker.api.errors import handle_service_error
from tasker.db.session import get_db_session
from tasker.services.blockers import BlockerService

router = APIRouter()
logger = structlog.get_logger()


class BlockerCreate(BaseModel):
    """Mark a task as blocked by another task."""

    blocker_id: UUID
    note: str | None = None


class BlockerResponse(BaseModel):
    """Blocker relation."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    task_id: UUID
    blocker_id: UUID
    note: str | None
    created_at: datetime


class BlockerListItem(BlockerResponse):
    """Blocker relation with the blocking task's label."""

    blocker_label: str


@router.get("/{task_id}/blockers", response_model=list[BlockerListItem])
async def list_blockers(
    task_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> list[dict]:
    """List what blocks a task, oldest first."""
    try:
        return await BlockerService(db).list_blockers(task_id)
    except Exception as e:
        raise handle_service_error(e, "Failed to fetch blockers")


@router.post(
    "/{task_id}/blockers",
    response_model=BlockerResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_blocker(
    task_id: UUID,
    blocker_in: BlockerCreate,
    db: AsyncSession = Depends(get_db_session),
) -> BlockerResponse:
    """Add a blocker to a task."""
    try:
        relation = await BlockerService(db).add_blocker(
            task_id=task_id,
            blocker_id=blocker_in.blocker_id,
            note=blocker_in.note,
        )
    except Exception as e:
        raise handle_service_error(e, "Failed to add blocker")
    return BlockerResponse.model_validate(relation)


@router.delete("/{task_id}/blockers/{blocker_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_blocker(
    task_id: UUID,
    blocker_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> None:
    """Remove a blocker from a task."""
    try:
        await BlockerService(db).remove_blocker(task_id, blocker_id)
    except Exception as e:
        raise handle_service_error(e, "Failed to remove blocker")
