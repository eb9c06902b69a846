"""SQLAlchemy models package."""

from tasker.models.ai import AILog, ProviderConfig
from tasker.models.project import DEFAULT_PROJECT_COLOR, Project, Task, TaskBlocker

__all__ = [
    "AILog",
    "DEFAULT_PROJECT_COLOR",
    "Project",
    "ProviderConfig",
    "Task",
    "TaskBlocker",
]
