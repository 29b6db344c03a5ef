"""Role-based permission evaluation.

All authorization decisions are made by one pure function, ``evaluate``,
over a single rule table. A rule names the tenant roles that are granted an
action inside their own tenant, plus the ownership refinements that apply
to it. super_admin is granted every action on every tenant, except where a
rule forbids acting on oneself.

Example:
    decision = evaluate(ctx, Action.PROJECT_UPDATE, ResourceScope(project.tenant_id, project.created_by))
    if decision.allowed:
        fields = permitted_fields(Action.PROJECT_UPDATE, decision.basis)
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

import structlog

from taskhive.core.context import IdentityContext
from taskhive.core.exceptions import ForbiddenError
from taskhive.core.types import Action, Role

logger = structlog.get_logger("taskhive.permissions")

ADMINS = frozenset({Role.TENANT_ADMIN})
MEMBERS = frozenset({Role.TENANT_ADMIN, Role.USER})

TENANT_FIELDS = frozenset({"name", "plan", "status", "max_users", "max_projects"})
USER_NAME_FIELDS = frozenset({"first_name", "last_name"})
PROJECT_FIELDS = frozenset({"name", "description", "status"})
TASK_FIELDS = frozenset({"title", "description", "status", "priority", "assigned_to"})


class Grant(str, Enum):
    """Why an action was allowed. Field grants are keyed by this."""

    SUPER_ADMIN = "super_admin"
    TENANT_ADMIN = "tenant_admin"
    MEMBER = "member"
    OWNER = "owner"
    SELF = "self"


@dataclass(frozen=True)
class Rule:
    """Permission rule for a single action.

    Attributes:
        roles: Tenant roles allowed when the resource is in their tenant
        owner_allowed: The resource's creator may act on it within its tenant
        self_allowed: A user may act on their own user record
        self_forbidden: Nobody, super_admin included, may act on themselves
        fields: Mutable fields granted for any basis not listed in field_grants
        field_grants: Mutable fields per grant basis
    """

    roles: frozenset[Role] = frozenset()
    owner_allowed: bool = False
    self_allowed: bool = False
    self_forbidden: bool = False
    fields: frozenset[str] = frozenset()
    field_grants: Mapping[Grant, frozenset[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class ResourceScope:
    """Tenant and owner of the resource an action targets.

    For user records the owner is the user itself; for projects and tasks
    it is the creator. ``tenant_id`` is None only for platform-wide actions
    such as listing all tenants.
    """

    tenant_id: UUID | None
    owner_id: UUID | None = None


@dataclass(frozen=True)
class Decision:
    """Outcome of a permission evaluation."""

    allowed: bool
    reason: str | None = None
    basis: Grant | None = None

    @classmethod
    def allow(cls, basis: Grant) -> "Decision":
        return cls(allowed=True, basis=basis)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(allowed=False, reason=reason)


RULES: dict[Action, Rule] = {
    # Tenants
    Action.TENANT_LIST: Rule(),
    Action.TENANT_READ: Rule(roles=MEMBERS),
    Action.TENANT_UPDATE: Rule(
        roles=ADMINS,
        field_grants={
            Grant.SUPER_ADMIN: TENANT_FIELDS,
            Grant.TENANT_ADMIN: frozenset({"name"}),
        },
    ),
    # Users
    Action.USER_CREATE: Rule(roles=ADMINS),
    Action.USER_LIST: Rule(roles=MEMBERS),
    Action.USER_UPDATE: Rule(
        roles=ADMINS,
        self_allowed=True,
        fields=USER_NAME_FIELDS | {"role"},
        field_grants={Grant.SELF: USER_NAME_FIELDS},
    ),
    Action.USER_DELETE: Rule(roles=ADMINS, self_forbidden=True),
    # Projects
    Action.PROJECT_CREATE: Rule(roles=MEMBERS),
    Action.PROJECT_LIST: Rule(roles=MEMBERS),
    Action.PROJECT_UPDATE: Rule(roles=ADMINS, owner_allowed=True, fields=PROJECT_FIELDS),
    Action.PROJECT_DELETE: Rule(roles=ADMINS, owner_allowed=True),
    # Tasks
    Action.TASK_CREATE: Rule(roles=MEMBERS),
    Action.TASK_LIST: Rule(roles=MEMBERS),
    Action.TASK_UPDATE: Rule(roles=ADMINS, owner_allowed=True, fields=TASK_FIELDS),
    Action.TASK_UPDATE_STATUS: Rule(roles=MEMBERS, fields=frozenset({"status"})),
    Action.TASK_DELETE: Rule(roles=ADMINS, owner_allowed=True),
}


def evaluate(actor: IdentityContext, action: Action, resource: ResourceScope) -> Decision:
    """Decide whether ``actor`` may perform ``action`` on ``resource``.

    Pure: reads nothing but its arguments and the rule table. Checks run in
    a fixed order and the first one that decides wins.
    """
    rule = RULES[action]
    is_owner = resource.owner_id is not None and resource.owner_id == actor.user_id

    if rule.self_forbidden and is_owner:
        return Decision.deny("Cannot perform this action on your own account")

    if rule.self_allowed and is_owner:
        return Decision.allow(Grant.SELF)

    if actor.role == Role.SUPER_ADMIN:
        return Decision.allow(Grant.SUPER_ADMIN)

    if not rule.roles and not rule.owner_allowed:
        return Decision.deny("Super admin access required")

    if resource.tenant_id is None or actor.tenant_id != resource.tenant_id:
        return Decision.deny("Access denied to this tenant")

    if actor.role in rule.roles:
        return Decision.allow(
            Grant.TENANT_ADMIN if actor.role == Role.TENANT_ADMIN else Grant.MEMBER
        )

    if rule.owner_allowed and is_owner:
        return Decision.allow(Grant.OWNER)

    return Decision.deny("Insufficient permissions")


def authorize(actor: IdentityContext, action: Action, resource: ResourceScope) -> Decision:
    """Evaluate and raise on denial.

    Raises:
        ForbiddenError: If the evaluator denies the action
    """
    decision = evaluate(actor, action, resource)
    if not decision.allowed:
        logger.warning(
            "permission_denied",
            action=action.value,
            resource_tenant_id=str(resource.tenant_id) if resource.tenant_id else None,
            reason=decision.reason,
        )
        raise ForbiddenError(decision.reason or "Forbidden", action=action.value)
    return decision


def permitted_fields(action: Action, basis: Grant | None) -> frozenset[str]:
    """Fields the actor may change for an allowed mutation."""
    if basis is None:
        return frozenset()
    rule = RULES[action]
    return rule.field_grants.get(basis, rule.fields)
