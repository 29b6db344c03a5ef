"""Unit tests for database repositories."""

from uuid import uuid4

import pytest

from taskhive.core.exceptions import NotFoundError
from taskhive.core.types import TaskStatus
from taskhive.db.repositories import (
    ProjectRepository,
    TaskRepository,
    TenantRepository,
    UserRepository,
)
from taskhive.db.schemas import TaskFilters


class TestBaseRepository:
    async def test_get_or_raise(self, db_session, tenant_a):
        repo = TenantRepository(db_session)

        assert (await repo.get_or_raise(tenant_a.id)).subdomain == "acme"
        with pytest.raises(NotFoundError, match="Tenant not found"):
            await repo.get_or_raise(uuid4())

    async def test_get_many_skips_missing(self, db_session, tenant_a, tenant_b):
        found = await TenantRepository(db_session).get_many([tenant_a.id, uuid4(), tenant_b.id])

        assert {t.id for t in found} == {tenant_a.id, tenant_b.id}


class TestTenantRepository:
    async def test_get_by_subdomain(self, db_session, tenant_a):
        repo = TenantRepository(db_session)

        assert (await repo.get_by_subdomain("acme")).id == tenant_a.id
        assert await repo.get_by_subdomain("missing") is None

    async def test_stats_for_unknown_tenant_is_zero(self, db_session):
        unknown = uuid4()

        stats = await TenantRepository(db_session).stats_for([unknown])

        assert stats[unknown].total_users == 0


class TestUserRepository:
    async def test_email_scoped_by_tenant(self, db_session, tenant_a, tenant_b, admin_a, super_admin):
        repo = UserRepository(db_session)

        assert (await repo.get_by_email(tenant_a.id, admin_a.email)).id == admin_a.id
        assert await repo.get_by_email(tenant_b.id, admin_a.email) is None
        assert await repo.get_by_email(None, admin_a.email) is None
        assert (await repo.get_by_email(None, super_admin.email)).id == super_admin.id

    async def test_count(self, db_session, tenant_a, admin_a, member_a, super_admin):
        assert await UserRepository(db_session).count_for_tenant(tenant_a.id) == 2


class TestProjectRepository:
    async def test_task_counts(self, db_session, seed, tenant_a, admin_a):
        busy = await seed.project(tenant_a, admin_a, name="Busy")
        idle = await seed.project(tenant_a, admin_a, name="Idle")
        await seed.task(busy, admin_a, status=TaskStatus.COMPLETED.value)
        await seed.task(busy, admin_a)

        counts = await ProjectRepository(db_session).task_counts([busy.id, idle.id])

        assert counts == {busy.id: (2, 1), idle.id: (0, 0)}

    async def test_list_for_all_tenants(self, db_session, seed, tenant_a, tenant_b, admin_a, admin_b):
        await seed.project(tenant_a, admin_a, name="A")
        await seed.project(tenant_b, admin_b, name="B")

        repo = ProjectRepository(db_session)

        assert len(await repo.list_for_tenant(None)) == 2
        assert [p.name for p in await repo.list_for_tenant(tenant_b.id)] == ["B"]


class TestTaskRepository:
    async def test_search_is_scoped_to_tenant(self, db_session, seed, tenant_a, tenant_b, admin_a):
        project = await seed.project(tenant_a, admin_a)
        await seed.task(project, admin_a, title="Mine")

        repo = TaskRepository(db_session)
        filters = TaskFilters()

        _, total = await repo.search(project.id, tenant_a.id, filters)
        _, foreign_total = await repo.search(project.id, tenant_b.id, filters)

        assert total == 1
        assert foreign_total == 0

    async def test_assigned_and_created(self, db_session, seed, tenant_a, admin_a, member_a):
        project = await seed.project(tenant_a, admin_a)
        await seed.task(project, admin_a, assigned_to=member_a.id)
        await seed.task(project, member_a)

        repo = TaskRepository(db_session)

        assert len(await repo.assigned_to(member_a.id)) == 1
        assert len(await repo.created_by(member_a.id)) == 1
        assert len(await repo.list_for_project(project.id)) == 2
