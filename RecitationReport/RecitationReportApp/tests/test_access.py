import itertools

import pytest

from RecitationReportApp.core.access import (
    ACTION_AREAS, AUTHOR_BOUND_ACTIONS, Actor, ResourceRef, decide, ensure_allowed, role_allows,
)
from RecitationReportApp.core.choices import AccessAction, AccessArea, ApprovalState, UserRole, Verdict
from rest_framework.exceptions import PermissionDenied

ALLOW, DENY = Verdict.ALLOW, Verdict.DENY


def make_actor(role, state=ApprovalState.APPROVED, identity=1):
    return Actor(identity=identity, role=role, approval_state=state)


def test_every_action_has_an_area():
    assert set(ACTION_AREAS) == set(AccessAction)


@pytest.mark.parametrize("action", [AccessAction.REGISTER, AccessAction.LOGIN, AccessAction.VIEW_PUBLIC_INFO])
def test_public_actions_allowed_for_anyone(action):
    assert decide(None, action) == ALLOW
    assert decide(make_actor(UserRole.STUDENT, ApprovalState.REJECTED), action) == ALLOW


@pytest.mark.parametrize("action", [a for a, area in ACTION_AREAS.items() if area != AccessArea.PUBLIC])
def test_anonymous_denied_outside_public_area(action):
    assert decide(None, action, ResourceRef(author_id=1, owner_id=1)) == DENY


@pytest.mark.parametrize("state", [ApprovalState.PENDING, ApprovalState.REJECTED])
@pytest.mark.parametrize("role", list(UserRole))
def test_unapproved_accounts_only_see_own_status(role, state):
    actor = make_actor(role, state)
    for action in AccessAction:
        verdict = decide(actor, action, ResourceRef(author_id=1, owner_id=1))
        if action == AccessAction.VIEW_OWN_STATUS or ACTION_AREAS[action] == AccessArea.PUBLIC:
            assert verdict == ALLOW
        else:
            assert verdict == DENY


@pytest.mark.parametrize("action,role,expected", [
    (AccessAction.LIST_ACCOUNTS, UserRole.ADMIN, ALLOW),
    (AccessAction.LIST_ACCOUNTS, UserRole.TEACHER, DENY),
    (AccessAction.APPROVE_ACCOUNT, UserRole.STUDENT, DENY),
    (AccessAction.VIEW_GLOBAL_STATS, UserRole.ADMIN, ALLOW),
    (AccessAction.CREATE_ASSESSMENT, UserRole.TEACHER, ALLOW),
    (AccessAction.CREATE_ASSESSMENT, UserRole.ADMIN, DENY),
    (AccessAction.CREATE_ASSESSMENT, UserRole.STUDENT, DENY),
    (AccessAction.LIST_AUTHORED_ASSESSMENTS, UserRole.ADMIN, DENY),
    (AccessAction.LIST_APPROVED_STUDENTS, UserRole.TEACHER, ALLOW),
    (AccessAction.LIST_OWN_ASSESSMENTS, UserRole.STUDENT, ALLOW),
    (AccessAction.LIST_OWN_ASSESSMENTS, UserRole.TEACHER, DENY),
    (AccessAction.VIEW_OWN_REPORT, UserRole.ADMIN, DENY),
    (AccessAction.VIEW_OWN_STATUS, UserRole.STUDENT, ALLOW),
])
def test_role_matrix(action, role, expected):
    assert decide(make_actor(role), action) == expected


def test_teacher_reads_only_authored_assessments():
    teacher = make_actor(UserRole.TEACHER, identity=7)
    for action in AUTHOR_BOUND_ACTIONS:
        assert decide(teacher, action, ResourceRef(author_id=7, owner_id=3)) == ALLOW
        assert decide(teacher, action, ResourceRef(author_id=8, owner_id=3)) == DENY
        assert decide(teacher, action) == DENY


def test_student_reads_only_own_assessments():
    student = make_actor(UserRole.STUDENT, identity=3)
    own = ResourceRef(author_id=7, owner_id=3)
    foreign = ResourceRef(author_id=7, owner_id=4)
    assert decide(student, AccessAction.READ_OWN_ASSESSMENT, own) == ALLOW
    assert decide(student, AccessAction.READ_OWN_ASSESSMENT, foreign) == DENY
    assert decide(student, AccessAction.READ_OWN_ASSESSMENT) == DENY
    assert decide(student, AccessAction.VIEW_OWN_STATS, ResourceRef.of_student(4)) == DENY


def test_role_allows_ignores_ownership():
    teacher = make_actor(UserRole.TEACHER, identity=7)
    assert role_allows(teacher, AccessAction.DELETE_ASSESSMENT)
    assert not role_allows(teacher, AccessAction.READ_OWN_ASSESSMENT)
    assert not role_allows(teacher, "archive-assessment")


def test_decide_is_total_and_deterministic():
    actors = [None] + [
        make_actor(role, state) for role, state in itertools.product(UserRole, ApprovalState)
    ]
    resources = [None, ResourceRef(author_id=1, owner_id=1), ResourceRef(author_id=2, owner_id=2)]
    for actor, action, resource in itertools.product(actors, AccessAction, resources):
        first = decide(actor, action, resource)
        assert first in (ALLOW, DENY)
        assert decide(actor, action, resource) == first


def test_ensure_allowed_raises_permission_denied():
    with pytest.raises(PermissionDenied):
        ensure_allowed(make_actor(UserRole.STUDENT), AccessAction.CREATE_ASSESSMENT)
    ensure_allowed(make_actor(UserRole.TEACHER), AccessAction.CREATE_ASSESSMENT)
