"""
Role policy and tenant scope resolution.

Every authorization decision in TaskNest goes through ``can_perform``. The
rules live in one declarative table (``POLICY``) keyed by ``Action``; each
rule is evaluated in a fixed order:

1. authentication (an actor must be present)
2. self protection (an actor may never delete their own account)
3. tenant scope (non super admins act only inside their own tenant)
4. role permission, including ownership and self-only rules
5. field-level restriction for partial updates, including the fields that
   are frozen on the super admin account

The first failing check decides the ``DenyReason`` returned to the caller.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable
from uuid import UUID

from tasknest.models.user import UserRole

ALL_ROLES = frozenset(UserRole)
ADMIN_ROLES = frozenset({UserRole.SUPER_ADMIN, UserRole.TENANT_ADMIN})


class Action(str, Enum):
    VIEW_TENANT = "tenant:view"
    LIST_TENANTS = "tenant:list"
    UPDATE_TENANT = "tenant:update"
    DELETE_TENANT = "tenant:delete"
    CREATE_USER = "user:create"
    LIST_USERS = "user:list"
    UPDATE_USER = "user:update"
    DELETE_USER = "user:delete"
    CREATE_PROJECT = "project:create"
    LIST_PROJECTS = "project:list"
    VIEW_PROJECT = "project:view"
    UPDATE_PROJECT = "project:update"
    DELETE_PROJECT = "project:delete"
    CREATE_TASK = "task:create"
    LIST_TASKS = "task:list"
    UPDATE_TASK = "task:update"
    DELETE_TASK = "task:delete"


class DenyReason(str, Enum):
    UNAUTHENTICATED = "Unauthenticated"
    WRONG_TENANT = "Forbidden: wrong tenant"
    INSUFFICIENT_ROLE = "Forbidden: insufficient role"
    RESTRICTED_FIELD = "Forbidden: restricted field"
    SELF_DELETE = "Forbidden: cannot delete own account"


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, as recovered from the access token."""
    user_id: UUID
    tenant_id: UUID | None
    role: UserRole

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN


@dataclass(frozen=True)
class Target:
    """The resource an action addresses.

    ``tenant_id`` is the owning tenant, ``owner_id`` the creating user (for
    projects) and ``user_id`` the addressed account (for user management).
    ``role`` is the addressed account's role and ``fields`` names the
    attributes a partial update wants to set.
    """
    tenant_id: UUID | None = None
    owner_id: UUID | None = None
    user_id: UUID | None = None
    fields: frozenset[str] = frozenset()
    role: UserRole | None = None

    @classmethod
    def of(
        cls,
        tenant_id: UUID | None = None,
        owner_id: UUID | None = None,
        user_id: UUID | None = None,
        fields: Iterable[str] = (),
        role: UserRole | None = None,
    ) -> "Target":
        return cls(tenant_id, owner_id, user_id, frozenset(fields), role)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: DenyReason | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def deny(reason: DenyReason) -> Decision:
    return Decision(False, reason)


@dataclass(frozen=True)
class Rule:
    """Declarative permission for one action.

    roles:            roles that may perform the action at all
    tenant_scoped:    non super admins must share the target's tenant
    owner_only:       roles that may act only on resources they created
    self_only:        roles that may act only on their own account
    forbid_self:      the actor may never be the target account
    allowed_fields:   per-role field allow-list; roles absent here may set any
                      field the resource accepts
    super_admin_frozen: fields nobody may change on a super admin account
    """
    roles: frozenset[UserRole]
    tenant_scoped: bool = True
    owner_only: frozenset[UserRole] = frozenset()
    self_only: frozenset[UserRole] = frozenset()
    forbid_self: bool = False
    allowed_fields: dict[UserRole, frozenset[str]] = field(default_factory=dict)
    super_admin_frozen: frozenset[str] = frozenset()


TENANT_ADMIN_TENANT_FIELDS = frozenset({"name"})
USER_SELF_FIELDS = frozenset({"full_name"})
SUPER_ADMIN_FROZEN_FIELDS = frozenset({"role", "is_active"})

POLICY: dict[Action, Rule] = {
    Action.VIEW_TENANT: Rule(roles=ALL_ROLES),
    Action.LIST_TENANTS: Rule(
        roles=frozenset({UserRole.SUPER_ADMIN}),
        tenant_scoped=False,
    ),
    Action.UPDATE_TENANT: Rule(
        roles=ADMIN_ROLES,
        allowed_fields={UserRole.TENANT_ADMIN: TENANT_ADMIN_TENANT_FIELDS},
    ),
    Action.DELETE_TENANT: Rule(roles=frozenset({UserRole.SUPER_ADMIN})),
    Action.CREATE_USER: Rule(roles=ADMIN_ROLES),
    Action.LIST_USERS: Rule(roles=ALL_ROLES),
    Action.UPDATE_USER: Rule(
        roles=ALL_ROLES,
        self_only=frozenset({UserRole.USER}),
        allowed_fields={UserRole.USER: USER_SELF_FIELDS},
        super_admin_frozen=SUPER_ADMIN_FROZEN_FIELDS,
    ),
    Action.DELETE_USER: Rule(roles=ADMIN_ROLES, forbid_self=True),
    Action.CREATE_PROJECT: Rule(roles=ALL_ROLES),
    Action.LIST_PROJECTS: Rule(roles=ALL_ROLES),
    Action.VIEW_PROJECT: Rule(roles=ALL_ROLES),
    Action.UPDATE_PROJECT: Rule(
        roles=ALL_ROLES,
        owner_only=frozenset({UserRole.USER}),
    ),
    Action.DELETE_PROJECT: Rule(
        roles=ALL_ROLES,
        owner_only=frozenset({UserRole.USER}),
    ),
    Action.CREATE_TASK: Rule(roles=ALL_ROLES),
    Action.LIST_TASKS: Rule(roles=ALL_ROLES),
    Action.UPDATE_TASK: Rule(roles=ALL_ROLES),
    Action.DELETE_TASK: Rule(roles=ALL_ROLES),
}


def in_scope(actor: Actor, tenant_id: UUID | None) -> bool:
    """Whether ``actor`` may address resources owned by ``tenant_id``."""
    if actor.is_super_admin:
        return True
    return actor.tenant_id is not None and actor.tenant_id == tenant_id


def can_perform(actor: Actor | None, action: Action, target: Target | None = None) -> Decision:
    """Decide whether ``actor`` may perform ``action`` on ``target``."""
    if actor is None:
        return deny(DenyReason.UNAUTHENTICATED)

    rule = POLICY[action]
    target = target or Target()

    if rule.forbid_self and target.user_id is not None and target.user_id == actor.user_id:
        return deny(DenyReason.SELF_DELETE)

    if rule.tenant_scoped and not in_scope(actor, target.tenant_id):
        return deny(DenyReason.WRONG_TENANT)

    if actor.role not in rule.roles:
        return deny(DenyReason.INSUFFICIENT_ROLE)

    if actor.role in rule.owner_only and target.owner_id != actor.user_id:
        return deny(DenyReason.INSUFFICIENT_ROLE)

    if actor.role in rule.self_only and target.user_id != actor.user_id:
        return deny(DenyReason.INSUFFICIENT_ROLE)

    allowed_fields = rule.allowed_fields.get(actor.role)
    if allowed_fields is not None and not target.fields <= allowed_fields:
        return deny(DenyReason.RESTRICTED_FIELD)

    if target.role == UserRole.SUPER_ADMIN and target.fields & rule.super_admin_frozen:
        return deny(DenyReason.RESTRICTED_FIELD)

    return ALLOW
