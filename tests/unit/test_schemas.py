"""Unit tests for payload schemas and parsing."""

from uuid import uuid4

import pytest

from taskhive.core.exceptions import ForbiddenError, ValidationFailedError
from taskhive.core.types import Action, TaskStatus
from taskhive.db.schemas import (
    LoginRequest,
    ProjectUpdate,
    TaskCreate,
    TaskFilters,
    TaskUpdate,
    TenantRegistration,
    UserCreate,
    UserUpdate,
    parse_payload,
)
from taskhive.services.base import select_changes


class TestParsePayload:
    """Tests for converting pydantic errors into ValidationFailedError."""

    def test_missing_fields_summarized(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            parse_payload(TenantRegistration, {})

        assert exc_info.value.message.startswith("Missing required fields")
        assert {e["field"] for e in exc_info.value.errors} >= {"name", "subdomain", "admin"}

    def test_none_payload_is_empty(self):
        with pytest.raises(ValidationFailedError, match="Missing required fields"):
            parse_payload(TaskCreate, None)

    def test_invalid_field_named(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            parse_payload(TaskCreate, {"title": "Write docs", "priority": "urgent"})

        assert exc_info.value.message == "Invalid priority"

    def test_camel_case_accepted(self):
        assignee = uuid4()

        data = parse_payload(TaskCreate, {"title": "Write docs", "assignedTo": str(assignee)})

        assert data.assigned_to == assignee

    def test_snake_case_accepted(self):
        data = parse_payload(UserCreate, {"email": "a@b.io", "password": "pw", "first_name": "Ann"})

        assert data.first_name == "Ann"


class TestRegistrationSchema:
    """Tests for tenant registration input."""

    def _payload(self, **overrides):
        payload = {
            "name": "Acme",
            "subdomain": "acme",
            "admin": {"email": "admin@acme.io", "password": "password123"},
        }
        payload.update(overrides)
        return payload

    def test_subdomain_lowercased(self):
        data = parse_payload(TenantRegistration, self._payload(subdomain="AcMe"))

        assert data.subdomain == "acme"

    @pytest.mark.parametrize("subdomain", ["-acme", "acme-", "ac me", "ac_me"])
    def test_invalid_subdomains(self, subdomain):
        with pytest.raises(ValidationFailedError):
            parse_payload(TenantRegistration, self._payload(subdomain=subdomain))

    def test_invalid_admin_email(self):
        with pytest.raises(ValidationFailedError):
            parse_payload(TenantRegistration, self._payload(admin={"email": "nope", "password": "x"}))

    def test_unknown_plan(self):
        with pytest.raises(ValidationFailedError, match="Invalid plan"):
            parse_payload(TenantRegistration, self._payload(plan="platinum"))


class TestUserSchemas:
    """Tests for user payloads."""

    def test_super_admin_not_assignable(self):
        with pytest.raises(ValidationFailedError):
            parse_payload(UserCreate, {"email": "a@b.io", "password": "pw", "role": "super_admin"})

    def test_default_role(self):
        assert parse_payload(UserCreate, {"email": "a@b.io", "password": "pw"}).role == "user"

    def test_names_may_be_cleared(self):
        update = parse_payload(UserUpdate, {"firstName": None})

        assert update.changes() == {"first_name": None}


class TestUpdatePayloads:
    """Tests for partial update semantics."""

    def test_only_present_fields_change(self):
        update = parse_payload(ProjectUpdate, {"status": "archived"})

        assert update.changes() == {"status": "archived"}

    def test_null_for_required_column_rejected(self):
        with pytest.raises(ValidationFailedError, match="name cannot be null"):
            parse_payload(ProjectUpdate, {"name": None})

    def test_blank_assignee_clears(self):
        update = parse_payload(TaskUpdate, {"assignedTo": ""})

        assert update.changes() == {"assigned_to": None}

    def test_unknown_keys_ignored(self):
        assert parse_payload(TaskUpdate, {"tenantId": str(uuid4())}).changes() == {}


class TestSelectChanges:
    """Tests for field-level filtering of updates."""

    def test_empty_update(self):
        with pytest.raises(ValidationFailedError, match="No fields to update"):
            select_changes(TaskUpdate(), frozenset({"title"}), Action.TASK_UPDATE)

    def test_only_restricted_fields(self):
        update = parse_payload(UserUpdate, {"role": "tenant_admin"})

        with pytest.raises(ForbiddenError, match="No permitted fields"):
            select_changes(update, frozenset({"first_name", "last_name"}), Action.USER_UPDATE)

    def test_restricted_fields_dropped(self):
        update = parse_payload(UserUpdate, {"role": "tenant_admin", "lastName": "Lovelace"})

        changes = select_changes(update, frozenset({"first_name", "last_name"}), Action.USER_UPDATE)

        assert changes == {"last_name": "Lovelace"}

    def test_enums_become_values(self):
        update = parse_payload(TaskUpdate, {"status": "in_progress"})

        changes = select_changes(update, frozenset({"status"}), Action.TASK_UPDATE)

        assert changes == {"status": TaskStatus.IN_PROGRESS.value}


class TestTaskFilters:
    """Tests for listing filters and page clamping."""

    def test_defaults(self):
        filters = parse_payload(TaskFilters, {})

        assert filters.page == 1
        assert filters.page_size == 20
        assert filters.offset == 0
        assert not filters.filters_unassigned

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("500", 100), ("0", 20), ("-3", 1), ("abc", 20), ("7", 7)],
    )
    def test_page_size_clamped(self, raw, expected):
        assert parse_payload(TaskFilters, {"pageSize": raw}).page_size == expected

    @pytest.mark.parametrize(("raw", "expected"), [("0", 1), ("-2", 1), ("x", 1), ("3", 3)])
    def test_page_clamped(self, raw, expected):
        assert parse_payload(TaskFilters, {"page": raw}).page == expected

    def test_offset(self):
        filters = parse_payload(TaskFilters, {"page": "3", "page_size": "10"})

        assert filters.offset == 20

    def test_empty_assignee_selects_unassigned(self):
        assert parse_payload(TaskFilters, {"assignedTo": ""}).filters_unassigned

    def test_blank_status_ignored(self):
        assert parse_payload(TaskFilters, {"status": ""}).status is None


class TestLoginRequest:
    def test_blank_subdomain_is_none(self):
        assert parse_payload(LoginRequest, {"email": "a@b.io", "password": "x", "subdomain": " "}).subdomain is None

    def test_subdomain_lowercased(self):
        assert parse_payload(LoginRequest, {"email": "a@b.io", "password": "x", "subdomain": "ACME"}).subdomain == "acme"
