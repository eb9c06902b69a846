"""Project service."""

from typing import Any, Sequence
from uuid import UUID

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tasker.exceptions import InvalidArgumentError, NotFoundError
from tasker.models.project import DEFAULT_PROJECT_COLOR, Project

logger = structlog.get_logger()


class ProjectService:
    """CRUD for projects; deletes cascade to the project's task forest."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_projects(self) -> Sequence[Project]:
        result = await self.db.execute(select(Project).order_by(Project.created_at.desc()))
        return result.scalars().all()

    async def get_project(self, project_id: UUID) -> Project | None:
        return await self.db.get(Project, project_id)

    async def create_project(
        self,
        name: str,
        description: str | None = None,
        color: str | None = None,
        ai_context: str | None = None,
    ) -> Project:
        if not name or not name.strip():
            raise InvalidArgumentError("Name is required")

        project = Project(
            name=name,
            description=description or None,
            color=color or DEFAULT_PROJECT_COLOR,
            ai_context=ai_context or None,
        )
        self.db.add(project)
        await self.db.commit()
        await self.db.refresh(project)

        logger.info("project_created", project_id=str(project.id))
        return project

    async def update_project(self, project_id: UUID, updates: dict[str, Any]) -> Project:
        """Apply a partial update.

        ``name``, ``description`` and ``color`` keep their value when the
        update carries ``None``. ``ai_context`` is written whenever the key is
        present, so an empty or null value clears it.
        """
        project = await self.get_project(project_id)
        if project is None:
            raise NotFoundError("Project", project_id)

        name = updates.get("name")
        if name is not None and not name.strip():
            raise InvalidArgumentError("Name cannot be empty")

        for field in ("name", "description", "color"):
            value = updates.get(field)
            if value is not None:
                setattr(project, field, value)

        if "ai_context" in updates:
            project.ai_context = updates["ai_context"] or None

        await self.db.commit()
        await self.db.refresh(project)

        logger.info("project_updated", project_id=str(project_id), fields=sorted(updates))
        return project

    async def delete_project(self, project_id: UUID) -> None:
        result = await self.db.execute(delete(Project).where(Project.id == project_id))
        if result.rowcount == 0:
            raise NotFoundError("Project", project_id)

        await self.db.commit()
        logger.info("project_deleted", project_id=str(project_id))
