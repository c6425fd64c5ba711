from __future__ import annotations

from typing import Any, Mapping, Optional

from ..core.enums import Action, ResourceKind, Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from .directory import ClassroomDirectory
from .model import AccessDecision, Principal, ScopeFilter
from .rules.base import AccessRule
from .rules.classroom_rules import AssignedTeacherRule, ClassroomRosterRule
from .rules.ownership_rule import OwnershipRule
from .rules.simple_rules import AllowAllRule, DenyRule

READ_ONLY = {Action.LIST, Action.READ}
RECORD_KEEPING = {Action.LIST, Action.READ, Action.CREATE, Action.UPDATE}
NOTE_TAKING = {Action.LIST, Action.READ, Action.CREATE}

USERS_ADMIN_ONLY = "Only administrators can manage users"


def _build_default_table() -> dict[tuple[Role, ResourceKind], AccessRule]:
    table: dict[tuple[Role, ResourceKind], AccessRule] = {
        (Role.ADMIN, kind): AllowAllRule() for kind in ResourceKind
    }
    table.update(
        {
            (Role.PARENT, ResourceKind.CHILD): OwnershipRule(
                message="Not authorized to access this child",
                actions={Action.LIST, Action.READ, Action.CREATE},
            ),
            (Role.PARENT, ResourceKind.CLASSROOM): DenyRule("Parents are not authorized to access classroom data"),
            (Role.PARENT, ResourceKind.ATTENDANCE): OwnershipRule(
                message="Not authorized to access this child",
                actions=READ_ONLY,
            ),
            (Role.PARENT, ResourceKind.MEDICAL_ALERT): OwnershipRule(
                message="Not authorized to access this child",
                actions=READ_ONLY,
            ),
            (Role.PARENT, ResourceKind.PAYMENT): OwnershipRule(
                message="Not authorized to process this payment",
                actions={Action.LIST, Action.READ, Action.PAY},
            ),
            (Role.PARENT, ResourceKind.ACTIVITY): OwnershipRule(
                message="Not authorized to access this child",
                actions=READ_ONLY,
            ),
            (Role.PARENT, ResourceKind.CHILD_NOTE): DenyRule("Only classroom staff can access child notes"),
            (Role.PARENT, ResourceKind.USER): DenyRule(USERS_ADMIN_ONLY),
            (Role.PARENT, ResourceKind.REPORT): DenyRule("Not authorized to generate reports"),
            (Role.EMPLOYEE, ResourceKind.CHILD): ClassroomRosterRule(actions=READ_ONLY),
            (Role.EMPLOYEE, ResourceKind.CLASSROOM): AssignedTeacherRule(actions=READ_ONLY),
            (Role.EMPLOYEE, ResourceKind.ATTENDANCE): ClassroomRosterRule(actions=RECORD_KEEPING),
            (Role.EMPLOYEE, ResourceKind.MEDICAL_ALERT): ClassroomRosterRule(actions=RECORD_KEEPING),
            (Role.EMPLOYEE, ResourceKind.ACTIVITY): ClassroomRosterRule(actions=RECORD_KEEPING | {Action.DELETE}),
            (Role.EMPLOYEE, ResourceKind.CHILD_NOTE): ClassroomRosterRule(actions=NOTE_TAKING),
            (Role.EMPLOYEE, ResourceKind.PAYMENT): DenyRule("Employees are not authorized to manage payments"),
            (Role.EMPLOYEE, ResourceKind.USER): DenyRule(USERS_ADMIN_ONLY),
            (Role.EMPLOYEE, ResourceKind.REPORT): ClassroomRosterRule(actions=READ_ONLY),
        }
    )
    return table


DEFAULT_POLICY_TABLE: Mapping[tuple[Role, ResourceKind], AccessRule] = _build_default_table()


def _allowed_roles_text(roles) -> str:
    return ", ".join(r.value for r in roles)


class AuthorizationPolicy:
    """Decides allow/deny for a principal and narrows list queries.

    The policy is a table keyed by ``(role, resource kind)``; the only
    collaborator is the classroom lookup used to resolve an employee's roster.
    """

    def __init__(
        self,
        classrooms: ClassroomDirectory,
        *,
        table: Optional[Mapping[tuple[Role, ResourceKind], AccessRule]] = None,
    ):
        self._classrooms = classrooms
        self._table = dict(table if table is not None else DEFAULT_POLICY_TABLE)

    @staticmethod
    def _role_of(principal: Optional[Principal]) -> Role | None:
        if principal is None or not principal.role:
            raise AuthenticationError("Not authorized to access this route")
        try:
            return Role(str(principal.role))
        except ValueError:
            return None

    def evaluate(
        self,
        principal: Optional[Principal],
        kind: ResourceKind,
        action: Action,
        resource: Any = None,
    ) -> AccessDecision:
        role = self._role_of(principal)
        if role is None:
            return AccessDecision.deny(
                f"Invalid user role '{principal.role}'. Allowed roles: {_allowed_roles_text(Role)}"
            )

        rule = self._table.get((role, kind))
        if rule is None:
            return AccessDecision.deny(f"User role '{role.value}' is not authorized to access {kind.value} resources")

        if not rule.permits(action):
            allowed = [r for r, k in self._table if k == kind and self._table[(r, k)].permits(action)]
            return AccessDecision.deny(
                f"User role '{role.value}' is not authorized to {action.value} {kind.value} resources. "
                f"Allowed roles: {_allowed_roles_text(allowed)}"
            )

        if resource is None:
            return rule.scope(principal, action, self._classrooms)
        return rule.check(principal, action, resource, self._classrooms)

    def require(
        self,
        principal: Optional[Principal],
        kind: ResourceKind,
        action: Action,
        resource: Any = None,
    ) -> AccessDecision:
        decision = self.evaluate(principal, kind, action, resource)
        if not decision.allowed:
            raise AuthorizationError(decision.reason or "Not authorized")
        return decision

    def scope_for(self, principal: Optional[Principal], kind: ResourceKind, action: Action = Action.LIST) -> Optional[ScopeFilter]:
        return self.require(principal, kind, action).scope

    def require_role(self, principal: Optional[Principal], *roles: Role) -> Role:
        role = self._role_of(principal)
        if role is None or role not in roles:
            raise AuthorizationError(
                f"User role '{principal.role}' is not authorized to access this route. "
                f"Allowed roles: {_allowed_roles_text(roles)}"
            )
        return role
