"""Projects API endpoints."""

from datetime import datetime
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from tasker.api.errors import handle_service_error
from tasker.db.session import get_db_session
from tasker.services.projects import ProjectService
from tasker.services.task_tree import TaskTreeService

router = APIRouter()
logger = structlog.get_logger()


# Request/Response Models
class ProjectCreate(BaseModel):
    """Create a new project."""

    name: str = Field(..., max_length=255)
    description: str | None = None
    color: str | None = Field(None, pattern="^#[0-9a-fA-F]{6}$")
    ai_context: str | None = None


class ProjectUpdate(BaseModel):
    """Update a project.

    Omitted or null ``name``/``description``/``color`` are left unchanged;
    ``ai_context`` is written whenever it is sent, so null clears it.
    """

    name: str | None = Field(None, max_length=255)
    description: str | None = None
    color: str | None = Field(None, pattern="^#[0-9a-fA-F]{6}$")
    ai_context: str | None = None


class ProjectResponse(BaseModel):
    """Project response model."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None
    color: str
    ai_context: str | None
    created_at: datetime
    updated_at: datetime


class TaskTreeNode(BaseModel):
    """A task with its depth and ordered children."""

    id: UUID
    project_id: UUID | None
    parent_id: UUID | None
    label: str
    position: int
    is_expanded: bool
    created_at: datetime
    updated_at: datetime
    depth: int
    children: list["TaskTreeNode"] = Field(default_factory=list)


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    db: AsyncSession = Depends(get_db_session),
) -> list[ProjectResponse]:
    """List all projects, newest first."""
    try:
        projects = await ProjectService(db).list_projects()
    except Exception as e:
        raise handle_service_error(e, "Failed to fetch projects")
    return [ProjectResponse.model_validate(p) for p in projects]


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_in: ProjectCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ProjectResponse:
    """Create a new project."""
    try:
        project = await ProjectService(db).create_project(
            name=project_in.name,
            description=project_in.description,
            color=project_in.color,
            ai_context=project_in.ai_context,
        )
    except Exception as e:
        raise handle_service_error(e, "Failed to create project")
    return ProjectResponse.model_validate(project)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: UUID,
    updates: ProjectUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ProjectResponse:
    """Update a project."""
    try:
        project = await ProjectService(db).update_project(
            project_id, updates.model_dump(exclude_unset=True)
        )
    except Exception as e:
        raise handle_service_error(e, "Failed to update project")
    return ProjectResponse.model_validate(project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> None:
    """Delete a project together with its whole task forest."""
    try:
        await ProjectService(db).delete_project(project_id)
    except Exception as e:
        raise handle_service_error(e, "Failed to delete project")


@router.get("/{project_id}/tasks", response_model=list[TaskTreeNode])
async def get_project_tasks(
    project_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> list[dict]:
    """Get a project's tasks as a nested tree."""
    try:
        project = await ProjectService(db).get_project(project_id)
        tree = None if project is None else await TaskTreeService(db).get_tree(project_id)
    except Exception as e:
        raise handle_service_error(e, "Failed to fetch tasks")

    if project is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found",
        )
    return tree
