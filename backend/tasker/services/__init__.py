"""Services package."""

from tasker.services.blockers import BlockerService
from tasker.services.data_transfer import DataTransferService
from tasker.services.projects import ProjectService
from tasker.services.provider_config import ProviderConfigService, ProviderSettings
from tasker.services.task_tree import TaskTreeService

__all__ = [
    "BlockerService",
    "DataTransferService",
    "ProjectService",
    "ProviderConfigService",
    "ProviderSettings",
    "TaskTreeService",
]
