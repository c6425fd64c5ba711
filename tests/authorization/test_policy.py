import pytest

from src.daycare_system.daycare_system.authorization.model import Principal, ScopeFilter
from src.daycare_system.daycare_system.authorization.policy import AuthorizationPolicy
from src.daycare_system.daycare_system.authorization.rules.simple_rules import DenyRule
from src.daycare_system.daycare_system.core.enums import Action, ResourceKind, Role
from src.daycare_system.daycare_system.core.exceptions import AuthenticationError, AuthorizationError
from tests.fakes import ADMIN, OTHER_PARENT, PARENT, TEACHER, UNASSIGNED_TEACHER


def test_parent_reads_own_child(policy, world):
    child = world.children.get_by_id(10)
    assert policy.evaluate(PARENT, ResourceKind.CHILD, Action.READ, child).allowed


def test_parent_denied_other_child(policy, world):
    child = world.children.get_by_id(11)
    decision = policy.evaluate(PARENT, ResourceKind.CHILD, Action.READ, child)
    assert not decision.allowed
    assert decision.reason == "Not authorized to access this child"


def test_parent_list_is_scoped_to_own_children(policy):
    decision = policy.evaluate(PARENT, ResourceKind.CHILD, Action.LIST)
    assert decision.allowed
    assert decision.scope == ScopeFilter("parent_id", PARENT.user_id)


def test_parent_never_sees_classrooms(policy, world):
    classroom = world.classrooms.get_by_id(1)
    decision = policy.evaluate(PARENT, ResourceKind.CLASSROOM, Action.READ, classroom)
    assert not decision.allowed
    assert decision.reason == "Parents are not authorized to access classroom data"


def test_parent_attendance_is_read_only(policy, world):
    child = world.children.get_by_id(10)
    assert policy.evaluate(PARENT, ResourceKind.ATTENDANCE, Action.READ, child).allowed
    assert not policy.evaluate(PARENT, ResourceKind.ATTENDANCE, Action.CREATE, child).allowed


def test_parent_pays_only_own_invoices(policy):
    class Invoice:
        parent_id = PARENT.user_id

    assert policy.evaluate(PARENT, ResourceKind.PAYMENT, Action.PAY, Invoice()).allowed
    decision = policy.evaluate(OTHER_PARENT, ResourceKind.PAYMENT, Action.PAY, Invoice())
    assert decision.reason == "Not authorized to process this payment"
    assert not policy.evaluate(PARENT, ResourceKind.PAYMENT, Action.CREATE).allowed


def test_employee_reaches_children_in_roster(policy, world):
    assert policy.evaluate(TEACHER, ResourceKind.CHILD, Action.READ, world.children.get_by_id(11)).allowed


def test_employee_denied_child_outside_roster(policy, world):
    decision = policy.evaluate(TEACHER, ResourceKind.CHILD, Action.READ, world.children.get_by_id(12))
    assert not decision.allowed
    assert decision.reason == "Child not in your classroom"


def test_employee_without_classroom_is_denied(policy, world):
    decision = policy.evaluate(UNASSIGNED_TEACHER, ResourceKind.CHILD, Action.READ, world.children.get_by_id(10))
    assert decision.reason == "No classroom assigned"

    listing = policy.evaluate(UNASSIGNED_TEACHER, ResourceKind.ATTENDANCE, Action.LIST)
    assert not listing.allowed
    assert listing.reason == "No classroom assigned"


def test_employee_list_is_scoped_to_classroom(policy):
    decision = policy.evaluate(TEACHER, ResourceKind.ATTENDANCE, Action.LIST)
    assert decision.scope == ScopeFilter("classroom_id", 1)


def test_employee_classroom_access_needs_assignment(policy, world):
    assert policy.evaluate(TEACHER, ResourceKind.CLASSROOM, Action.READ, world.classrooms.get_by_id(1)).allowed
    assert not policy.evaluate(TEACHER, ResourceKind.CLASSROOM, Action.READ, world.classrooms.get_by_id(2)).allowed
    assert policy.evaluate(TEACHER, ResourceKind.CLASSROOM, Action.LIST).scope == ScopeFilter(
        "assigned_teacher_id", TEACHER.user_id
    )


def test_employee_denied_payments_even_for_roster_children(policy):
    class Invoice:
        parent_id = TEACHER.user_id

    decision = policy.evaluate(TEACHER, ResourceKind.PAYMENT, Action.READ, Invoice())
    assert not decision.allowed
    assert decision.reason == "Employees are not authorized to manage payments"


def test_employee_records_attendance_but_cannot_delete_children(policy, world):
    child = world.children.get_by_id(10)
    assert policy.evaluate(TEACHER, ResourceKind.ATTENDANCE, Action.CREATE, child).allowed
    decision = policy.evaluate(TEACHER, ResourceKind.CHILD, Action.DELETE, child)
    assert not decision.allowed
    assert decision.reason.startswith("User role 'employee' is not authorized to delete child resources")


@pytest.mark.parametrize("kind", list(ResourceKind))
def test_admin_is_allowed_everything_unscoped(policy, kind):
    decision = policy.evaluate(ADMIN, kind, Action.LIST)
    assert decision.allowed
    assert decision.scope is None


@pytest.mark.parametrize("principal", [None, Principal(user_id=9, role=None)])
def test_missing_principal_is_unauthenticated(policy, principal):
    with pytest.raises(AuthenticationError):
        policy.evaluate(principal, ResourceKind.CHILD, Action.LIST)


def test_unknown_role_is_denied_with_allowed_roles(policy):
    decision = policy.evaluate(Principal(user_id=9, role="janitor"), ResourceKind.CHILD, Action.LIST)
    assert not decision.allowed
    assert "parent, employee, admin" in decision.reason


def test_require_raises_forbidden(policy, world):
    with pytest.raises(AuthorizationError) as exc:
        policy.require(PARENT, ResourceKind.CHILD, Action.READ, world.children.get_by_id(11))
    assert str(exc.value) == "Not authorized to access this child"


def test_require_role_message(policy):
    with pytest.raises(AuthorizationError) as exc:
        policy.require_role(PARENT, Role.EMPLOYEE, Role.ADMIN)
    assert str(exc.value) == (
        "User role 'parent' is not authorized to access this route. Allowed roles: employee, admin"
    )
    assert policy.require_role(ADMIN, Role.ADMIN) == Role.ADMIN


def test_policy_table_can_be_replaced(world):
    policy = AuthorizationPolicy(world.classrooms, table={(Role.ADMIN, ResourceKind.REPORT): DenyRule("closed")})
    assert policy.evaluate(ADMIN, ResourceKind.REPORT, Action.READ).reason == "closed"
    assert not policy.evaluate(ADMIN, ResourceKind.CHILD, Action.READ).allowed


def test_evaluation_does_not_depend_on_call_order(policy, world):
    child = world.children.get_by_id(10)
    first = policy.evaluate(TEACHER, ResourceKind.CHILD, Action.READ, child)
    policy.evaluate(PARENT, ResourceKind.CHILD, Action.READ, world.children.get_by_id(11))
    assert policy.evaluate(TEACHER, ResourceKind.CHILD, Action.READ, child) == first


def test_parent_reads_activities_of_own_child_only(policy, world):
    assert policy.evaluate(PARENT, ResourceKind.ACTIVITY, Action.READ, world.children.get_by_id(10)).allowed
    assert not policy.evaluate(PARENT, ResourceKind.ACTIVITY, Action.READ, world.children.get_by_id(11)).allowed
    assert not policy.evaluate(PARENT, ResourceKind.ACTIVITY, Action.CREATE, world.children.get_by_id(10)).allowed
    assert policy.scope_for(PARENT, ResourceKind.ACTIVITY) == ScopeFilter("parent_id", PARENT.user_id)


def test_employee_activity_access_follows_classroom(policy, world):
    class Activity:
        def __init__(self, classroom_id):
            self.classroom_id = classroom_id

    assert policy.evaluate(TEACHER, ResourceKind.ACTIVITY, Action.DELETE, Activity(1)).allowed
    decision = policy.evaluate(TEACHER, ResourceKind.ACTIVITY, Action.UPDATE, Activity(2))
    assert decision.reason == "Not authorized to access another classroom's records"
    assert not policy.evaluate(TEACHER, ResourceKind.ACTIVITY, Action.CREATE, world.children.get_by_id(12)).allowed
    assert policy.scope_for(TEACHER, ResourceKind.ACTIVITY) == ScopeFilter("classroom_id", 1)


def test_child_notes_are_staff_only(policy, world):
    child = world.children.get_by_id(10)
    assert policy.evaluate(TEACHER, ResourceKind.CHILD_NOTE, Action.CREATE, child).allowed
    assert not policy.evaluate(TEACHER, ResourceKind.CHILD_NOTE, Action.DELETE, child).allowed
    decision = policy.evaluate(PARENT, ResourceKind.CHILD_NOTE, Action.READ, child)
    assert decision.reason == "Only classroom staff can access child notes"


def test_scope_for_raises_when_listing_is_denied(policy):
    assert policy.scope_for(ADMIN, ResourceKind.REPORT) is None
    with pytest.raises(AuthorizationError):
        policy.scope_for(PARENT, ResourceKind.REPORT)
