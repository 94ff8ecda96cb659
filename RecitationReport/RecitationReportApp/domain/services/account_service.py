"""Domain service functions for registration and the account approval lifecycle.

Enforces:
- Public registration creates TEACHER/STUDENT accounts in PENDING; students get a
  StudentProfile in the same transaction.
- Admin accounts are only created through the seed path and start APPROVED.
- Only admins approve, reject, list or delete accounts.
Approval transitions (see domain.lifecycle):
    PENDING -> APPROVED | REJECTED; repeated decisions are no-ops.
"""

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound, ValidationError

from RecitationReportApp.core.access import Actor, ensure_allowed
from RecitationReportApp.core.choices import AccessAction, ApprovalAction, ApprovalState, UserRole
from RecitationReportApp.core.exceptions import InternalError
from RecitationReportApp.domain.lifecycle import initial_approval_state, is_terminal, transition
from RecitationReportApp.users.models import StudentProfile

logger = logging.getLogger(__name__)

User = get_user_model()

ACCOUNT_FIELDS = ("name", "email", "password")
STUDENT_PROFILE_FIELDS = (
    "registration_number", "class_name", "track", "guardian_name", "phone_number", "address",
)


def _require(data: dict[str, Any], fields: tuple[str, ...]) -> None:
    missing = {field: "This field is required." for field in fields if not data.get(field)}
    if missing:
        raise ValidationError(missing)


def _ensure_email_free(email: str) -> None:
    if User.objects.filter(email__iexact=email).exists():
        raise ValidationError({"email": "An account with this email already exists."})


def _create_account(data: dict[str, Any], role: str) -> User:
    return User.objects.create_user(
        email=data["email"],
        password=data["password"],
        name=data["name"],
        role=role,
        approval_state=initial_approval_state(role),
    )


def register_student(data: dict[str, Any]) -> User:
    """Create a STUDENT account in PENDING together with its StudentProfile.

    Args:
        data: name, email, password plus registration_number, class_name, track,
            guardian_name, phone_number and address.

    Returns:
        The new (pending) account.

    Raises:
        ValidationError: Missing fields, duplicate email or registration number.
    """
    _require(data, ACCOUNT_FIELDS + STUDENT_PROFILE_FIELDS)
    _ensure_email_free(data["email"])
    if StudentProfile.objects.filter(registration_number=data["registration_number"]).exists():
        raise ValidationError({"registration_number": "This registration number is already registered."})
    try:
        with transaction.atomic():
            user = _create_account(data, UserRole.STUDENT)
            StudentProfile.objects.create(
                user=user, **{field: data[field] for field in STUDENT_PROFILE_FIELDS}
            )
    except IntegrityError as exc:
        raise ValidationError("Email or registration number is already registered.") from exc
    except DatabaseError as exc:
        logger.exception("Failed to register student %s", data["email"])
        raise InternalError() from exc
    logger.info("Registered student account %s (pending approval)", user.pk)
    return user


def register_teacher(data: dict[str, Any]) -> User:
    """Create a TEACHER account in PENDING; an admin must approve it before use."""
    _require(data, ACCOUNT_FIELDS)
    _ensure_email_free(data["email"])
    try:
        with transaction.atomic():
            user = _create_account(data, UserRole.TEACHER)
    except IntegrityError as exc:
        raise ValidationError({"email": "An account with this email already exists."}) from exc
    logger.info("Registered teacher account %s (pending approval)", user.pk)
    return user


@transaction.atomic
def create_admin(name: str, email: str, password: str) -> User:
    """Seed path: create an ADMIN account, approved from the start."""
    _require({"name": name, "email": email, "password": password}, ACCOUNT_FIELDS)
    _ensure_email_free(email)
    user = _create_account({"name": name, "email": email, "password": password}, UserRole.ADMIN)
    logger.info("Created admin account %s", user.pk)
    return user


def _get_account(account_id: int) -> User:
    try:
        return User.objects.get(pk=account_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFound("Account not found.") from None


@transaction.atomic
def _decide_account(actor: Actor | None, account_id: int, action: ApprovalAction) -> User:
    access_action = (
        AccessAction.APPROVE_ACCOUNT if action == ApprovalAction.APPROVE else AccessAction.REJECT_ACCOUNT
    )
    ensure_allowed(actor, access_action)
    account = _get_account(account_id)
    if is_terminal(account.approval_state):
        logger.info("Account %s already %s; %s ignored", account.pk, account.approval_state, action)
        return account
    new_state = transition(account.approval_state, action)
    account.approval_state = new_state
    account.save(update_fields=["approval_state"])
    logger.info("Account %s %s by admin %s", account.pk, new_state.label.lower(), actor.identity)
    return account


def approve_account(actor: Actor | None, account_id: int) -> User:
    """Approve a pending account (admin only); terminal accounts are left as they are."""
    return _decide_account(actor, account_id, ApprovalAction.APPROVE)


def reject_account(actor: Actor | None, account_id: int) -> User:
    """Reject a pending account (admin only); terminal accounts are left as they are."""
    return _decide_account(actor, account_id, ApprovalAction.REJECT)


@transaction.atomic
def delete_account(actor: Actor | None, account_id: int) -> None:
    """Delete an account with its profile and assessments (admin only, not oneself)."""
    ensure_allowed(actor, AccessAction.DELETE_ACCOUNT)
    account = _get_account(account_id)
    if account.pk == actor.identity:
        raise ValidationError("You cannot delete your own account.")
    account.delete()
    logger.info("Account %s deleted by admin %s", account_id, actor.identity)


def list_accounts(
    actor: Actor | None,
    role: str | None = None,
    approval_state: str | None = None,
) -> QuerySet[User]:
    """All accounts, newest first, optionally filtered (admin only)."""
    ensure_allowed(actor, AccessAction.LIST_ACCOUNTS)
    qs = User.objects.select_related("student_profile")
    if role:
        if role not in UserRole.values:
            raise ValidationError({"role": f"Unknown role '{role}'."})
        qs = qs.with_role(role)
    if approval_state:
        if approval_state not in ApprovalState.values:
            raise ValidationError({"approval_state": f"Unknown approval state '{approval_state}'."})
        qs = qs.in_state(approval_state)
    return qs.order_by("-date_joined", "-id")


def list_approved_students(actor: Actor | None) -> QuerySet[User]:
    """Approved students ordered by name (teacher only)."""
    ensure_allowed(actor, AccessAction.LIST_APPROVED_STUDENTS)
    return User.objects.approved_students().select_related("student_profile").order_by("name", "id")


def account_status(actor: Actor | None) -> User:
    """The caller's own account, available even while pending approval."""
    ensure_allowed(actor, AccessAction.VIEW_OWN_STATUS)
    return _get_account(actor.identity)
