"""Full-dataset export and import.

Import replaces every project, task and blocker in one transaction. Tasks
reference their parents, so they are inserted in passes: each pass takes
the tasks whose parent is already present, until nothing is left or the
pass ceiling is hit.
"""

from datetime import datetime
from typing import Any, Iterable, Optional

import structlog
from sqlalchemy import delete, insert, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tasker.config import Settings, get_settings
from tasker.db.base import utcnow
from tasker.exceptions import InternalError, InvalidArgumentError
from tasker.models.project import DEFAULT_PROJECT_COLOR, Project, Task, TaskBlocker

logger = structlog.get_logger()

EXPORT_VERSION = 1


def _timestamps(row: dict[str, Any]) -> tuple[datetime, datetime]:
    created_at = row.get("created_at") or utcnow()
    return created_at, row.get("updated_at") or created_at


def _project_values(row: dict[str, Any]) -> dict[str, Any]:
    created_at, updated_at = _timestamps(row)
    return {
        "id": row["id"],
        "name": row["name"],
        "description": row.get("description"),
        "color": row.get("color") or DEFAULT_PROJECT_COLOR,
        "ai_context": row.get("ai_context"),
        "created_at": created_at,
        "updated_at": updated_at,
    }


def _task_values(row: dict[str, Any]) -> dict[str, Any]:
    created_at, updated_at = _timestamps(row)
    return {
        "id": row["id"],
        "project_id": row.get("project_id"),
        "parent_id": row.get("parent_id"),
        "label": row["label"],
        "position": row.get("position") or 0,
        "is_expanded": bool(row.get("is_expanded")),
        "created_at": created_at,
        "updated_at": updated_at,
    }


def _blocker_values(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": row["id"],
        "task_id": row["task_id"],
        "blocker_id": row["blocker_id"],
        "note": row.get("note"),
        "created_at": row.get("created_at") or utcnow(),
    }


def order_tasks_for_insert(tasks: Iterable[dict[str, Any]], max_passes: int) -> list[list[dict[str, Any]]]:
    """Split tasks into insert batches so every parent precedes its children.

    Within a pass a task becomes available to the tasks after it, so a
    payload already in parent-first order needs a single pass.

    Raises:
        InvalidArgumentError: Tasks whose parent never appears (orphans or
            parent cycles) remain after ``max_passes`` passes
    """
    # Roots first; the sort is stable so payload order is otherwise kept
    remaining = sorted(tasks, key=lambda t: t.get("parent_id") is not None)
    inserted: set[Any] = set()
    batches: list[list[dict[str, Any]]] = []
    passes = 0

    while remaining and passes < max_passes:
        passes += 1
        batch: list[dict[str, Any]] = []
        pending: list[dict[str, Any]] = []
        for task in remaining:
            parent_id = task.get("parent_id")
            if parent_id is None or parent_id in inserted:
                batch.append(task)
                inserted.add(task["id"])
            else:
                pending.append(task)
        if not batch:
            break
        batches.append(batch)
        remaining = pending

    if remaining:
        raise InvalidArgumentError(
            f"Import failed: {len(remaining)} tasks reference a missing or cyclic parent"
        )
    return batches


class DataTransferService:
    """Export the whole dataset as JSON-ready dicts, or replace it from one."""

    def __init__(self, db: AsyncSession, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()

    async def export_data(self) -> dict[str, Any]:
        """Snapshot of all projects, tasks and blockers, oldest first."""
        if self.db.get_bind().dialect.name == "postgresql":
            # Must run before any other statement in the transaction
            await self.db.execute(text("SET TRANSACTION ISOLATION LEVEL REPEATABLE READ"))

        projects = await self.db.execute(select(Project).order_by(Project.created_at))
        tasks = await self.db.execute(select(Task).order_by(Task.created_at))
        blockers = await self.db.execute(select(TaskBlocker).order_by(TaskBlocker.created_at))

        data = {
            "version": EXPORT_VERSION,
            "exported_at": utcnow(),
            "projects": [p.to_dict() for p in projects.scalars().all()],
            "tasks": [t.to_dict() for t in tasks.scalars().all()],
            "task_blockers": [b.to_dict() for b in blockers.scalars().all()],
        }
        logger.info(
            "data_exported",
            projects=len(data["projects"]),
            tasks=len(data["tasks"]),
            task_blockers=len(data["task_blockers"]),
        )
        return data

    async def import_data(
        self,
        projects: Optional[list[dict[str, Any]]],
        tasks: Optional[list[dict[str, Any]]] = None,
        task_blockers: Optional[list[dict[str, Any]]] = None,
    ) -> dict[str, int]:
        """Replace every project, task and blocker with the given rows.

        All or nothing: any failure rolls the whole import back.

        Returns:
            Inserted row counts per table
        """
        if not isinstance(projects, list):
            raise InvalidArgumentError("Invalid format: projects array required")
        tasks = tasks or []
        task_blockers = task_blockers or []

        try:
            batches = order_tasks_for_insert(tasks, self.settings.import_max_passes)

            await self.db.execute(delete(TaskBlocker))
            await self.db.execute(delete(Task))
            await self.db.execute(delete(Project))

            if projects:
                await self.db.execute(insert(Project), [_project_values(p) for p in projects])
            for batch in batches:
                await self.db.execute(insert(Task), [_task_values(t) for t in batch])
            if task_blockers:
                await self.db.execute(insert(TaskBlocker), [_blocker_values(b) for b in task_blockers])

            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("data_import_rejected", error=str(e.orig))
            raise InvalidArgumentError("Import failed: rows violate schema constraints") from None
        except InvalidArgumentError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("data_import_failed", error=str(e))
            raise InternalError("Import failed") from None

        imported = {
            "projects": len(projects),
            "tasks": sum(len(batch) for batch in batches),
            "task_blockers": len(task_blockers),
        }
        logger.info("data_imported", passes=len(batches), **imported)
        return imported
