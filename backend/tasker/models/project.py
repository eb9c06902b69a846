"""Project, task tree and blocker models."""

from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from tasker.db.base import Base, BaseModel, CreatedAtMixin, UUIDMixin

DEFAULT_PROJECT_COLOR = "#6c8cff"


class Project(BaseModel):
    """A named container owning a forest of root tasks."""

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Color for visual identification
    color: Mapped[str] = mapped_column(
        String(7), nullable=False, default=DEFAULT_PROJECT_COLOR
    )  # hex color

    # Free-text context appended to AI breakdown prompts
    ai_context: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Project {self.name[:30]}>"


class Task(BaseModel):
    """Node of a project's task tree.

    Only root tasks carry ``project_id``; descendants inherit their project
    through the parent chain. Deleting a task removes its whole subtree via
    the ``parent_id`` cascade.
    """

    __tablename__ = "tasks"

    project_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    parent_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    label: Mapped[str] = mapped_column(Text, nullable=False)

    # Ordering among siblings; advisory, not unique
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # UI hint persisted for the tree view
    is_expanded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Task {self.label[:30]}>"


class TaskBlocker(Base, UUIDMixin, CreatedAtMixin):
    """Directed edge: ``task_id`` is blocked by ``blocker_id``."""

    __tablename__ = "task_blockers"
    __table_args__ = (
        UniqueConstraint("task_id", "blocker_id", name="uq_task_blocker"),
        CheckConstraint("task_id != blocker_id", name="ck_task_blocker_not_self"),
    )

    task_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    blocker_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Optional notes about this blocking relationship
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<TaskBlocker task={self.task_id} blocked_by={self.blocker_id}>"
