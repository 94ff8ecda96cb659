"""Account domain models: User (role + approval state) and StudentProfile."""

from django.contrib.auth.models import AbstractUser
from django.db import models

from simple_history.models import HistoricalRecords

from RecitationReportApp.core.choices import ApprovalState, UserRole
from RecitationReportApp.core.validators import validate_phone_number, validate_registration_number
from RecitationReportApp.users.querysets import AccountManager


class User(AbstractUser):
    """An account that logs in by email.

    Fields:
        email: Unique contact address and login identifier.
        name: Display name.
        role: UserRole value, fixed at creation.
        approval_state: ApprovalState value; see domain.lifecycle for transitions.
        history: Audit history (django-simple-history).
    """
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150)
    role = models.CharField(max_length=16, choices=UserRole.choices)
    approval_state = models.CharField(
        max_length=16, choices=ApprovalState.choices, default=ApprovalState.PENDING
    )
    history = HistoricalRecords()

    objects = AccountManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    class Meta:
        ordering = ["-date_joined", "-id"]

    def __str__(self) -> str:
        return f"{self.name or self.email} ({self.role})"

    @property
    def is_approved(self) -> bool:
        return self.approval_state == ApprovalState.APPROVED


class StudentProfile(models.Model):
    """School data of a student account (1:1, created with the account).

    Fields:
        registration_number: Unique student number (NIS).
        class_name: School class.
        track: Recitation primer track (jilid) the student is on.
        guardian_name / phone_number / address: Guardian contact.
    """
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="student_profile")
    registration_number = models.CharField(
        max_length=32, unique=True, validators=[validate_registration_number]
    )
    class_name = models.CharField(max_length=64)
    track = models.CharField(max_length=64)
    guardian_name = models.CharField(max_length=150)
    phone_number = models.CharField(max_length=32, validators=[validate_phone_number])
    address = models.TextField()
    history = HistoricalRecords()

    def __str__(self) -> str:
        return f"{self.registration_number} - {self.user.name}"
