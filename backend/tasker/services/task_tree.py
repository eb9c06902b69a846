"""Task tree service: recursive retrieval, ordering and cascading mutation."""

from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import Integer, delete, func, literal_column, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from tasker.exceptions import InvalidArgumentError, NotFoundError
from tasker.models.project import Project, Task

logger = structlog.get_logger()

# Fields a task update may touch; anything else is ignored
UPDATABLE_FIELDS = ("label", "position", "is_expanded")


def build_tree(rows: list[tuple[Task, int]]) -> list[dict[str, Any]]:
    """Fold depth-ordered ``(task, depth)`` rows into nested dictionaries.

    Rows must arrive ordered by depth, then position, then creation time, so
    every parent is seen before its children and sibling order is kept
    without a second sort.
    """
    nodes: dict[UUID, dict[str, Any]] = {}
    roots: list[dict[str, Any]] = []

    for task, depth in rows:
        nodes[task.id] = {**task.to_dict(), "depth": depth, "children": []}

    for task, _ in rows:
        node = nodes[task.id]
        if task.parent_id is None:
            roots.append(node)
        elif task.parent_id in nodes:
            nodes[task.parent_id]["children"].append(node)

    return roots


class TaskTreeService:
    """Service for the per-project task forest."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_tree(self, project_id: UUID) -> list[dict[str, Any]]:
        """Fetch every task under a project's roots as a nested structure.

        Runs as one recursive query regardless of depth. An unknown project
        simply yields an empty list.
        """
        columns = list(Task.__table__.c)

        task_tree = (
            select(*columns, literal_column("0", Integer).label("depth"))
            .where(Task.project_id == project_id, Task.parent_id.is_(None))
            .cte("task_tree", recursive=True)
        )
        task_tree = task_tree.union_all(
            select(*columns, (task_tree.c.depth + 1).label("depth"))
            .join(task_tree, Task.parent_id == task_tree.c.id)
        )

        tree_task = aliased(Task, task_tree)
        result = await self.db.execute(
            select(tree_task, task_tree.c.depth).order_by(
                task_tree.c.depth,
                task_tree.c.position,
                task_tree.c.created_at,
            )
        )
        rows = [(task, depth) for task, depth in result.all()]

        logger.debug("task_tree_fetched", project_id=str(project_id), task_count=len(rows))
        return build_tree(rows)

    async def get_task(self, task_id: UUID) -> Task | None:
        """Get a task by ID."""
        result = await self.db.execute(select(Task).where(Task.id == task_id))
        return result.scalar_one_or_none()

    async def resolve_project_id(self, task_id: UUID) -> UUID | None:
        """Walk up the ancestor chain and return the owning project ID."""
        ancestors = (
            select(Task.id, Task.parent_id, Task.project_id)
            .where(Task.id == task_id)
            .cte("ancestors", recursive=True)
        )
        ancestors = ancestors.union_all(
            select(Task.id, Task.parent_id, Task.project_id)
            .join(ancestors, Task.id == ancestors.c.parent_id)
        )
        result = await self.db.execute(
            select(ancestors.c.project_id)
            .where(ancestors.c.parent_id.is_(None))
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def next_position(
        self,
        project_id: UUID | None,
        parent_id: UUID | None,
    ) -> int:
        """One past the highest position among exact siblings, or 0."""
        query = select(func.coalesce(func.max(Task.position), -1) + 1)
        if parent_id is not None:
            query = query.where(Task.parent_id == parent_id)
        else:
            query = query.where(Task.project_id == project_id, Task.parent_id.is_(None))

        result = await self.db.execute(query)
        return int(result.scalar_one())

    # =========================================================================
    # Mutations
    # =========================================================================

    async def create_task(
        self,
        label: str,
        project_id: UUID | None = None,
        parent_id: UUID | None = None,
    ) -> Task:
        """Create a task at the end of its sibling list.

        Children do not store a project reference; roots require one.
        Concurrent creators under one parent may end up sharing a position,
        which display ordering resolves by creation time.
        """
        if not label or not label.strip():
            raise InvalidArgumentError("Label is required")

        if parent_id is not None:
            if await self.get_task(parent_id) is None:
                raise NotFoundError("Parent task", parent_id)
            project_id = None
        else:
            if project_id is None:
                raise InvalidArgumentError("project_id is required for root tasks")
            project = await self.db.get(Project, project_id)
            if project is None:
                raise NotFoundError("Project", project_id)

        position = await self.next_position(project_id, parent_id)

        task = Task(
            label=label,
            project_id=project_id,
            parent_id=parent_id,
            position=position,
        )
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)

        logger.info(
            "task_created",
            task_id=str(task.id),
            project_id=str(project_id) if project_id else None,
            parent_id=str(parent_id) if parent_id else None,
            position=position,
        )
        return task

    async def update_task(self, task_id: UUID, updates: dict[str, Any]) -> Task:
        """Merge-patch label, position and/or expansion flag.

        Keys that are absent or ``None`` leave the stored value unchanged.
        """
        task = await self.get_task(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)

        changes = {
            field: value
            for field, value in updates.items()
            if field in UPDATABLE_FIELDS and value is not None
        }
        if "label" in changes and not str(changes["label"]).strip():
            raise InvalidArgumentError("Label cannot be empty")

        for field, value in changes.items():
            setattr(task, field, value)

        await self.db.commit()
        await self.db.refresh(task)

        logger.info("task_updated", task_id=str(task_id), fields=sorted(changes))
        return task

    async def delete_task(self, task_id: UUID) -> None:
        """Delete a task; the store cascades to its subtree and blockers."""
        result = await self.db.execute(delete(Task).where(Task.id == task_id))
        if result.rowcount == 0:
            raise NotFoundError("Task", task_id)

        await self.db.commit()
        logger.info("task_deleted", task_id=str(task_id))
