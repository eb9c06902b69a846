"""Tasks API endpoints."""

from datetime import datetime
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tasker.api.errors import handle_service_error
from tasker.db.session import get_db_session
from tasker.services.task_tree import TaskTreeService

router = APIRouter()
logger = structlog.get_logger()


# Request/Response Models
class TaskCreate(BaseModel):
    """Create a task.

    Root tasks need ``project_id``; child tasks need ``parent_id`` and
    inherit the parent's project.
    """

    label: str
    project_id: UUID | None = None
    parent_id: UUID | None = None


class TaskUpdate(BaseModel):
    """Update a task; omitted fields are left unchanged."""

    label: str | None = None
    position: int | None = Field(None, ge=0)
    is_expanded: bool | None = None


class TaskResponse(BaseModel):
    """Task response model."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID | None
    parent_id: UUID | None
    label: str
    position: int
    is_expanded: bool
    created_at: datetime
    updated_at: datetime


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    """Create a task at the end of its sibling list."""
    try:
        task = await TaskTreeService(db).create_task(
            label=task_in.label,
            project_id=task_in.project_id,
            parent_id=task_in.parent_id,
        )
    except Exception as e:
        raise handle_service_error(e, "Failed to create task")
    return TaskResponse.model_validate(task)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID,
    updates: TaskUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    """Update a task's label, position or expansion state."""
    try:
        task = await TaskTreeService(db).update_task(task_id, updates.model_dump(exclude_unset=True))
    except Exception as e:
        raise handle_service_error(e, "Failed to update task")
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> None:
    """Delete a task, its subtree and every blocker touching them."""
    try:
        await TaskTreeService(db).delete_task(task_id)
    except Exception as e:
        raise handle_service_error(e, "Failed to delete task")
