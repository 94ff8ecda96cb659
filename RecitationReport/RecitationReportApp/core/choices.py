"""Typed enumerations (TextChoices) for account roles, approval states and access actions."""
from django.db import models

class UserRole(models.TextChoices):
    """System-level role assigned to an account (fixed at creation)."""
    ADMIN = "ADMIN", "Admin"
    TEACHER = "TEACHER", "Teacher"
    STUDENT = "STUDENT", "Student"

class ApprovalState(models.TextChoices):
    """Review state of an account; APPROVED and REJECTED are terminal."""
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"

class ApprovalAction(models.TextChoices):
    """Admin decisions applicable to a pending account."""
    APPROVE = "APPROVE", "Approve"
    REJECT = "REJECT", "Reject"

class AccessArea(models.TextChoices):
    """Resource area an action belongs to; drives the access decision dispatch."""
    PUBLIC = "PUBLIC", "Public"
    SELF = "SELF", "Own account"
    ADMIN = "ADMIN", "Admin"
    TEACHER = "TEACHER", "Teacher"
    STUDENT = "STUDENT", "Student"

class AccessAction(models.TextChoices):
    """Every operation the access decision function can be asked about."""
    REGISTER = "register", "Register"
    LOGIN = "login", "Log in"
    VIEW_PUBLIC_INFO = "view-public-info", "View public information"

    VIEW_OWN_STATUS = "view-own-status", "View own approval status"

    LIST_ACCOUNTS = "list-accounts", "List accounts"
    APPROVE_ACCOUNT = "approve-account", "Approve account"
    REJECT_ACCOUNT = "reject-account", "Reject account"
    DELETE_ACCOUNT = "delete-account", "Delete account"
    VIEW_GLOBAL_STATS = "view-global-stats", "View global statistics"

    CREATE_ASSESSMENT = "create-assessment", "Create assessment"
    LIST_AUTHORED_ASSESSMENTS = "list-authored-assessments", "List authored assessments"
    READ_AUTHORED_ASSESSMENT = "read-authored-assessment", "Read authored assessment"
    DELETE_ASSESSMENT = "delete-assessment", "Delete assessment"
    LIST_APPROVED_STUDENTS = "list-approved-students", "List approved students"
    VIEW_TEACHER_STATS = "view-teacher-stats", "View teacher statistics"

    LIST_OWN_ASSESSMENTS = "list-own-assessments", "List own assessments"
    READ_OWN_ASSESSMENT = "read-own-assessment", "Read own assessment"
    VIEW_OWN_STATS = "view-own-stats", "View own statistics"
    VIEW_OWN_REPORT = "view-own-report", "View own report"

class Verdict(models.TextChoices):
    """Outcome of an access decision."""
    ALLOW = "ALLOW", "Allow"
    DENY = "DENY", "Deny"

class ScoreBand(models.TextChoices):
    """Display band for a score on reports."""
    GOOD = "GOOD", "Good"
    FAIR = "FAIR", "Fair"
    NEEDS_IMPROVEMENT = "NEEDS_IMPROVEMENT", "Needs improvement"
