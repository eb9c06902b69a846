"""Blocker graph service: blocked-by edges between tasks."""

from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import and_, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tasker.config import Settings, get_settings
from tasker.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from tasker.models.project import Task, TaskBlocker
from tasker.services.task_tree import TaskTreeService

logger = structlog.get_logger()


class BlockerService:
    """Service for listing, adding and removing task blockers."""

    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()

    async def list_blockers(self, task_id: UUID) -> list[dict[str, Any]]:
        """Blockers of a task with the blocking task's label, oldest first."""
        result = await self.db.execute(
            select(
                TaskBlocker.id,
                TaskBlocker.task_id,
                TaskBlocker.blocker_id,
                TaskBlocker.note,
                TaskBlocker.created_at,
                Task.label.label("blocker_label"),
            )
            .join(Task, Task.id == TaskBlocker.blocker_id)
            .where(TaskBlocker.task_id == task_id)
            .order_by(TaskBlocker.created_at)
        )
        return [dict(row._mapping) for row in result.all()]

    async def get_blocker(self, task_id: UUID, blocker_id: UUID) -> TaskBlocker | None:
        """Get the relation for a (blocked, blocker) pair."""
        result = await self.db.execute(
            select(TaskBlocker).where(
                and_(
                    TaskBlocker.task_id == task_id,
                    TaskBlocker.blocker_id == blocker_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def add_blocker(
        self,
        task_id: UUID,
        blocker_id: UUID,
        note: str | None = None,
    ) -> TaskBlocker:
        """Record that ``task_id`` is blocked by ``blocker_id``."""
        if task_id == blocker_id:
            raise InvalidArgumentError("A task cannot block itself")

        tree = TaskTreeService(self.db)
        if await tree.get_task(task_id) is None:
            raise NotFoundError("Task", task_id)
        if await tree.get_task(blocker_id) is None:
            raise NotFoundError("Blocker task", blocker_id)

        if await self.get_blocker(task_id, blocker_id) is not None:
            raise ConflictError("This blocker already exists")

        if not self.settings.allow_cross_project_blockers:
            task_project = await tree.resolve_project_id(task_id)
            blocker_project = await tree.resolve_project_id(blocker_id)
            if task_project != blocker_project:
                raise InvalidArgumentError("Blockers must belong to the same project")

        if self.settings.reject_blocker_cycles and await self.would_create_cycle(
            task_id, blocker_id
        ):
            raise InvalidArgumentError("Blocker would create a cycle")

        relation = TaskBlocker(task_id=task_id, blocker_id=blocker_id, note=note or None)
        self.db.add(relation)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race against an identical insert
            await self.db.rollback()
            logger.warning(
                "blocker_insert_conflict",
                task_id=str(task_id),
                blocker_id=str(blocker_id),
            )
            raise ConflictError("This blocker already exists")

        await self.db.refresh(relation)
        logger.info("blocker_added", task_id=str(task_id), blocker_id=str(blocker_id))
        return relation

    async def remove_blocker(self, task_id: UUID, blocker_id: UUID) -> None:
        """Remove the relation for a (blocked, blocker) pair."""
        result = await self.db.execute(
            delete(TaskBlocker).where(
                TaskBlocker.task_id == task_id,
                TaskBlocker.blocker_id == blocker_id,
            )
        )
        if result.rowcount == 0:
            raise NotFoundError("Blocker")

        await self.db.commit()
        logger.info("blocker_removed", task_id=str(task_id), blocker_id=str(blocker_id))

    async def would_create_cycle(self, task_id: UUID, blocker_id: UUID) -> bool:
        """Check whether ``blocker_id`` is already, transitively, blocked by ``task_id``.

        Follows blocked-by edges outward from the proposed blocker. The walk
        visits each task at most once and is bounded by the edge count.
        """
        edge_count = (
            await self.db.execute(select(func.count()).select_from(TaskBlocker))
        ).scalar_one()

        visited: set[UUID] = set()
        frontier = {blocker_id}
        steps = 0
        while frontier and steps <= edge_count:
            if task_id in frontier:
                return True
            visited |= frontier
            result = await self.db.execute(
                select(TaskBlocker.blocker_id).where(TaskBlocker.task_id.in_(frontier))
            )
            frontier = set(result.scalars().all()) - visited
            steps += 1
        return False
