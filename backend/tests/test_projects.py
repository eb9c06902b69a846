"""Tests for the project service."""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from tasker.exceptions import InvalidArgumentError, NotFoundError
from tasker.models.project import DEFAULT_PROJECT_COLOR, Task
from tasker.services.projects import ProjectService
from tasker.services.task_tree import TaskTreeService


@pytest.fixture
def projects(db) -> ProjectService:
    return ProjectService(db)


class TestProjectService:
    """Project CRUD."""

    @pytest.mark.asyncio
    async def test_create_applies_defaults(self, projects):
        project = await projects.create_project(name="Launch", description="")

        assert project.id is not None
        assert project.color == DEFAULT_PROJECT_COLOR
        assert project.description is None
        assert project.ai_context is None

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, projects):
        with pytest.raises(InvalidArgumentError):
            await projects.create_project(name="  ")

    @pytest.mark.asyncio
    async def test_list_newest_first(self, projects):
        await projects.create_project(name="first")
        await projects.create_project(name="second")

        names = [p.name for p in await projects.list_projects()]

        assert names == ["second", "first"]

    @pytest.mark.asyncio
    async def test_update_keeps_omitted_fields(self, projects):
        project = await projects.create_project(
            name="Launch", description="Q3", color="#112233", ai_context="B2B SaaS"
        )

        updated = await projects.update_project(project.id, {"name": "Launch v2", "color": None})

        assert updated.name == "Launch v2"
        assert updated.description == "Q3"
        assert updated.color == "#112233"
        assert updated.ai_context == "B2B SaaS"

    @pytest.mark.asyncio
    async def test_update_clears_ai_context(self, projects):
        project = await projects.create_project(name="Launch", ai_context="B2B SaaS")

        updated = await projects.update_project(project.id, {"ai_context": None})

        assert updated.ai_context is None

    @pytest.mark.asyncio
    async def test_update_unknown_project(self, projects):
        with pytest.raises(NotFoundError):
            await projects.update_project(uuid4(), {"name": "x"})

    @pytest.mark.asyncio
    async def test_delete_cascades_to_task_forest(self, projects, db):
        keep = await projects.create_project(name="keep")
        doomed = await projects.create_project(name="doomed")
        tree = TaskTreeService(db)
        root = await tree.create_task("root", project_id=doomed.id)
        await tree.create_task("child", parent_id=root.id)
        await tree.create_task("kept", project_id=keep.id)

        await projects.delete_project(doomed.id)

        assert await projects.get_project(doomed.id) is None
        count = (await db.execute(select(func.count()).select_from(Task))).scalar_one()
        assert count == 1

    @pytest.mark.asyncio
    async def test_delete_unknown_project(self, projects):
        with pytest.raises(NotFoundError):
            await projects.delete_project(uuid4())
