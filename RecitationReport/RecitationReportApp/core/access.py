"""Role, approval & ownership access decisions.

decide() is the single place that answers "may this actor do this here?".
It is pure and total: every (actor, action, resource) combination maps to
ALLOW or DENY, evaluated in a fixed order where the first matching rule wins:

1. public actions are always allowed;
2. anonymous actors are denied;
3. accounts that are not APPROVED may only view their own approval status;
4. otherwise the action's area decides: admin area needs the ADMIN role,
   teacher area the TEACHER role (plus authorship for single assessments),
   student area the STUDENT role (plus ownership when a resource is given);
5. anything left over is denied.
"""

from dataclasses import dataclass
from typing import Any

from rest_framework.exceptions import PermissionDenied

from RecitationReportApp.core.choices import (
    AccessAction, AccessArea, ApprovalState, UserRole, Verdict,
)

ACTION_AREAS: dict[AccessAction, AccessArea] = {
    AccessAction.REGISTER: AccessArea.PUBLIC,
    AccessAction.LOGIN: AccessArea.PUBLIC,
    AccessAction.VIEW_PUBLIC_INFO: AccessArea.PUBLIC,
    AccessAction.VIEW_OWN_STATUS: AccessArea.SELF,
    AccessAction.LIST_ACCOUNTS: AccessArea.ADMIN,
    AccessAction.APPROVE_ACCOUNT: AccessArea.ADMIN,
    AccessAction.REJECT_ACCOUNT: AccessArea.ADMIN,
    AccessAction.DELETE_ACCOUNT: AccessArea.ADMIN,
    AccessAction.VIEW_GLOBAL_STATS: AccessArea.ADMIN,
    AccessAction.CREATE_ASSESSMENT: AccessArea.TEACHER,
    AccessAction.LIST_AUTHORED_ASSESSMENTS: AccessArea.TEACHER,
    AccessAction.READ_AUTHORED_ASSESSMENT: AccessArea.TEACHER,
    AccessAction.DELETE_ASSESSMENT: AccessArea.TEACHER,
    AccessAction.LIST_APPROVED_STUDENTS: AccessArea.TEACHER,
    AccessAction.VIEW_TEACHER_STATS: AccessArea.TEACHER,
    AccessAction.LIST_OWN_ASSESSMENTS: AccessArea.STUDENT,
    AccessAction.READ_OWN_ASSESSMENT: AccessArea.STUDENT,
    AccessAction.VIEW_OWN_STATS: AccessArea.STUDENT,
    AccessAction.VIEW_OWN_REPORT: AccessArea.STUDENT,
}

AREA_ROLES: dict[AccessArea, UserRole] = {
    AccessArea.ADMIN: UserRole.ADMIN,
    AccessArea.TEACHER: UserRole.TEACHER,
    AccessArea.STUDENT: UserRole.STUDENT,
}

# Actions addressing one specific assessment; they are denied without a resource.
AUTHOR_BOUND_ACTIONS = frozenset({
    AccessAction.READ_AUTHORED_ASSESSMENT,
    AccessAction.DELETE_ASSESSMENT,
})
OWNER_BOUND_ACTIONS = frozenset({AccessAction.READ_OWN_ASSESSMENT})


@dataclass(frozen=True)
class Actor:
    """Authenticated caller as seen by the core: identity, role and approval state."""
    identity: int
    role: UserRole
    approval_state: ApprovalState

    @classmethod
    def from_user(cls, user: Any) -> "Actor | None":
        """Build an actor from a request user; anonymous users yield None."""
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return cls(
            identity=user.pk,
            role=UserRole(user.role),
            approval_state=ApprovalState(user.approval_state),
        )

    @property
    def is_approved(self) -> bool:
        return self.approval_state == ApprovalState.APPROVED


@dataclass(frozen=True)
class ResourceRef:
    """The specific record an action targets (assessment or stats subject)."""
    author_id: int | None = None
    owner_id: int | None = None

    @classmethod
    def of_assessment(cls, assessment: Any) -> "ResourceRef":
        return cls(author_id=assessment.teacher_id, owner_id=assessment.student_id)

    @classmethod
    def of_student(cls, student_id: int) -> "ResourceRef":
        return cls(owner_id=student_id)


def _area(action: Any) -> AccessArea | None:
    try:
        return ACTION_AREAS.get(AccessAction(action))
    except ValueError:
        return None


def role_allows(actor: Actor | None, action: Any) -> bool:
    """Rules 1-4 without the ownership clause: may this actor use the action's area at all?"""
    area = _area(action)
    if area is None:
        return False
    if area == AccessArea.PUBLIC:
        return True
    if actor is None:
        return False
    if not actor.is_approved:
        return action == AccessAction.VIEW_OWN_STATUS
    if area == AccessArea.SELF:
        return True
    return actor.role == AREA_ROLES[area]


def _owns(actor: Actor, action: AccessAction, resource: ResourceRef | None) -> bool:
    if action in AUTHOR_BOUND_ACTIONS:
        return resource is not None and resource.author_id == actor.identity
    if action in OWNER_BOUND_ACTIONS:
        return resource is not None and resource.owner_id == actor.identity
    if ACTION_AREAS[action] == AccessArea.STUDENT and resource is not None:
        return resource.owner_id == actor.identity
    return True


def decide(actor: Actor | None, action: Any, resource: ResourceRef | None = None) -> Verdict:
    """Return ALLOW or DENY for actor performing action on resource."""
    if not role_allows(actor, action):
        return Verdict.DENY
    action = AccessAction(action)
    if ACTION_AREAS[action] in (AccessArea.PUBLIC, AccessArea.SELF):
        return Verdict.ALLOW
    return Verdict.ALLOW if _owns(actor, action, resource) else Verdict.DENY


def is_allowed(actor: Actor | None, action: Any, resource: ResourceRef | None = None) -> bool:
    return decide(actor, action, resource) == Verdict.ALLOW


def ensure_allowed(actor: Actor | None, action: Any, resource: ResourceRef | None = None) -> None:
    """Raise PermissionDenied unless decide() allows the action."""
    if not is_allowed(actor, action, resource):
        raise PermissionDenied("You do not have permission to perform this action.")
