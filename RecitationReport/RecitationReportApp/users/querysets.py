"""Custom querysets/managers for account filtering by role and approval state."""

from typing import Self

from django.contrib.auth.models import UserManager
from django.db.models import QuerySet

from RecitationReportApp.core.choices import ApprovalState, UserRole
from RecitationReportApp.domain.lifecycle import initial_approval_state


class AccountQuerySet(QuerySet):
    """QuerySet helpers for role and approval filtering."""

    def with_role(self, role: str) -> Self:
        return self.filter(role=role)

    def in_state(self, state: str) -> Self:
        return self.filter(approval_state=state)

    def pending(self) -> Self:
        """Accounts waiting for an admin decision."""
        return self.in_state(ApprovalState.PENDING)

    def approved_students(self) -> Self:
        """Students a teacher may assess."""
        return self.filter(role=UserRole.STUDENT, approval_state=ApprovalState.APPROVED)

    def admins(self) -> Self:
        return self.with_role(UserRole.ADMIN)


class AccountManager(UserManager.from_queryset(AccountQuerySet)):
    """User manager keyed by email; the initial approval state follows the role."""

    def _create_user(self, username, email, password, **extra_fields):
        # Login matches emails exactly, so they are stored lowercased.
        email = (email or "").strip().lower()
        extra_fields.setdefault("role", UserRole.STUDENT)
        extra_fields.setdefault("approval_state", initial_approval_state(extra_fields["role"]))
        username = (username or email).lower()
        return super()._create_user(username, email, password, **extra_fields)

    def create_user(self, email=None, password=None, username=None, **extra_fields):
        return super().create_user(username or email, email, password, **extra_fields)

    def create_superuser(self, email=None, password=None, username=None, **extra_fields):
        extra_fields["role"] = UserRole.ADMIN
        extra_fields["approval_state"] = ApprovalState.APPROVED
        return super().create_superuser(username or email, email, password, **extra_fields)
