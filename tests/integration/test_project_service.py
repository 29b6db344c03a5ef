"""Integration tests for projects."""

import asyncio
from uuid import uuid4

import pytest

from taskhive.core.audit import AuditLogger
from taskhive.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    QuotaExceededError,
    ValidationFailedError,
)
from taskhive.core.types import ProjectStatus, TaskStatus
from taskhive.db.models import Project, Task
from taskhive.db.repositories import ProjectRepository
from taskhive.services import ProjectService


@pytest.fixture
def projects(svc_session):
    return ProjectService(svc_session)


class TestCreateProject:
    """Tests for project creation."""

    async def test_member_creates_in_own_tenant(self, projects, tenant_a, member_a, identity):
        response = await projects.create_project(identity(member_a), {"name": "Roadmap"})

        assert response.tenant_id == tenant_a.id
        assert response.created_by == member_a.id
        assert response.status == ProjectStatus.ACTIVE
        assert response.task_count == 0

    async def test_tenant_in_payload_ignored(self, projects, tenant_a, tenant_b, member_a, identity):
        response = await projects.create_project(
            identity(member_a), {"name": "Sneaky", "tenantId": str(tenant_b.id)}
        )

        assert response.tenant_id == tenant_a.id

    async def test_name_required(self, projects, member_a, identity):
        with pytest.raises(ValidationFailedError, match="Missing required fields: name"):
            await projects.create_project(identity(member_a), {"description": "no name"})

    async def test_quota(self, projects, seed, tenant_a, admin_a, member_a, identity, fetch):
        for name in ("One", "Two", "Three"):
            await seed.project(tenant_a, admin_a, name=name)

        with pytest.raises(QuotaExceededError) as exc_info:
            await projects.create_project(identity(member_a), {"name": "Four"})

        assert exc_info.value.resource_kind == "projects"
        assert exc_info.value.limit == 3

    async def test_zero_ceiling_blocks_first_project(self, projects, seed, tenant_a, admin_a, identity):
        tenant_a.max_projects = 0
        await seed.session.commit()

        with pytest.raises(QuotaExceededError):
            await projects.create_project(identity(admin_a), {"name": "First"})

    async def test_concurrent_creates_stop_at_ceiling(self, seed, session_factory, tenant_a, admin_a, identity):
        tenant_a.max_projects = 1
        await seed.session.commit()
        requester = identity(admin_a)

        async def attempt(name: str) -> str:
            async with session_factory() as session:
                try:
                    await ProjectService(session).create_project(requester, {"name": name})
                except QuotaExceededError:
                    return "blocked"
                return "created"

        outcomes = await asyncio.gather(*(attempt(f"Parallel {i}") for i in range(4)))

        assert sorted(outcomes) == ["blocked", "blocked", "blocked", "created"]
        async with session_factory() as session:
            assert await ProjectRepository(session).count_for_tenant(tenant_a.id) == 1

    async def test_platform_super_admin_needs_tenant(self, projects, super_admin, identity):
        with pytest.raises(ForbiddenError, match="A tenant is required"):
            await projects.create_project(identity(super_admin), {"name": "Ops"})


class TestListProjects:
    async def test_counts(self, projects, seed, tenant_a, admin_a, identity):
        project = await seed.project(tenant_a, admin_a)
        await seed.task(project, admin_a, status=TaskStatus.COMPLETED.value)
        await seed.task(project, admin_a, status=TaskStatus.IN_PROGRESS.value)
        await seed.task(project, admin_a)

        (response,) = await projects.list_projects(identity(admin_a))

        assert response.task_count == 3
        assert response.completed_task_count == 1

    async def test_scoped_to_tenant(self, projects, seed, tenant_a, tenant_b, admin_a, admin_b, identity):
        await seed.project(tenant_a, admin_a, name="A")
        await seed.project(tenant_b, admin_b, name="B")

        response = await projects.list_projects(identity(admin_a))

        assert [p.name for p in response] == ["A"]

    async def test_super_admin_sees_all(self, projects, seed, tenant_a, tenant_b, admin_a, admin_b, super_admin, identity):
        await seed.project(tenant_a, admin_a, name="A")
        await seed.project(tenant_b, admin_b, name="B")

        response = await projects.list_projects(identity(super_admin))

        assert {p.name for p in response} == {"A", "B"}


class TestUpdateProject:
    """Tests for project updates."""

    async def test_creator_updates(self, projects, seed, tenant_a, member_a, identity):
        project = await seed.project(tenant_a, member_a)

        response = await projects.update_project(
            identity(member_a), project.id, {"name": "Renamed", "status": "archived"}
        )

        assert response.name == "Renamed"
        assert response.status == ProjectStatus.ARCHIVED

    async def test_admin_updates_any(self, projects, seed, tenant_a, admin_a, member_a, identity):
        project = await seed.project(tenant_a, member_a)

        response = await projects.update_project(identity(admin_a), project.id, {"description": "Q3"})

        assert response.description == "Q3"

    async def test_non_creator_member_denied(self, projects, seed, tenant_a, admin_a, member_a, identity, fetch):
        project = await seed.project(tenant_a, admin_a)

        with pytest.raises(ForbiddenError):
            await projects.update_project(identity(member_a), project.id, {"name": "Mine now"})

        assert (await fetch(Project, project.id)).name == "Website"

    async def test_other_tenant_denied(self, projects, seed, tenant_b, admin_a, admin_b, identity):
        project = await seed.project(tenant_b, admin_b)

        with pytest.raises(ForbiddenError, match="Access denied to this tenant"):
            await projects.update_project(identity(admin_a), project.id, {"name": "Mine"})

    async def test_missing(self, projects, admin_a, identity):
        with pytest.raises(NotFoundError, match="Project not found"):
            await projects.update_project(identity(admin_a), uuid4(), {"name": "x"})

    async def test_invalid_status(self, projects, seed, tenant_a, admin_a, identity):
        project = await seed.project(tenant_a, admin_a)

        with pytest.raises(ValidationFailedError, match="Invalid status"):
            await projects.update_project(identity(admin_a), project.id, {"status": "paused"})

    async def test_no_recognized_fields_writes_nothing(
        self, projects, seed, tenant_a, admin_a, identity, fetch, session_factory
    ):
        project = await seed.project(tenant_a, admin_a)

        with pytest.raises(ValidationFailedError, match="No fields to update"):
            await projects.update_project(identity(admin_a), project.id, {"color": "blue"})

        assert (await fetch(Project, project.id)).name == "Website"
        async with session_factory() as session:
            assert await AuditLogger(session).query_entries(record_id=project.id) == []

    async def test_response_carries_counts(self, projects, seed, tenant_a, admin_a, identity):
        project = await seed.project(tenant_a, admin_a)
        await seed.task(project, admin_a, status=TaskStatus.COMPLETED.value)

        response = await projects.update_project(identity(admin_a), project.id, {"name": "Counted"})

        assert response.task_count == 1
        assert response.completed_task_count == 1


class TestDeleteProject:
    async def test_delete_removes_tasks(self, projects, seed, tenant_a, admin_a, identity, fetch, session_factory):
        project = await seed.project(tenant_a, admin_a)
        task = await seed.task(project, admin_a)

        await projects.delete_project(identity(admin_a), project.id)

        assert await fetch(Project, project.id) is None
        assert await fetch(Task, task.id) is None
        async with session_factory() as session:
            (entry,) = await AuditLogger(session).query_entries(record_id=project.id)
        assert entry.action == "DELETE"
        assert entry.details == {"name": "Website", "deleted_tasks": 1}

    async def test_member_cannot_delete_others_project(self, projects, seed, tenant_a, admin_a, member_a, identity):
        project = await seed.project(tenant_a, admin_a)

        with pytest.raises(ForbiddenError):
            await projects.delete_project(identity(member_a), project.id)
