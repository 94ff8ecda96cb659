"""Dashboard counters and the per-student report summary."""

from typing import Any

from django.contrib.auth import get_user_model
from django.db.models import Avg

from RecitationReportApp.assessments.models import Assessment
from RecitationReportApp.core.access import Actor, ResourceRef, ensure_allowed
from RecitationReportApp.core.choices import AccessAction, UserRole
from RecitationReportApp.domain import scoring

User = get_user_model()

RECENT_LIMIT = 5


def admin_stats(actor: Actor | None) -> dict[str, int]:
    """Aggregate counts only; admins never see assessment contents."""
    ensure_allowed(actor, AccessAction.VIEW_GLOBAL_STATS)
    return {
        "total_users": User.objects.count(),
        "pending_approvals": User.objects.pending().count(),
        "total_students": User.objects.with_role(UserRole.STUDENT).count(),
        "total_teachers": User.objects.with_role(UserRole.TEACHER).count(),
        "total_assessments": Assessment.objects.count(),
    }


def teacher_stats(actor: Actor | None) -> dict[str, Any]:
    ensure_allowed(actor, AccessAction.VIEW_TEACHER_STATS)
    authored = Assessment.objects.authored_by(actor.identity)
    return {
        "total_assessments": authored.count(),
        "total_students": User.objects.approved_students().count(),
        "recent_assessments": list(
            authored.select_related("student").order_by("-created_at", "-id")[:RECENT_LIMIT]
        ),
    }


def student_stats(actor: Actor | None) -> dict[str, Any]:
    ensure_allowed(actor, AccessAction.VIEW_OWN_STATS, ResourceRef.of_student(actor.identity if actor else None))
    own = Assessment.objects.owned_by(actor.identity)
    average = own.aggregate(value=Avg("final_score"))["value"]
    return {
        "total_assessments": own.count(),
        "average_score": average or 0.0,
        "recent_assessments": list(
            own.select_related("teacher").newest_first()[:RECENT_LIMIT]
        ),
    }


def student_report(actor: Actor | None) -> dict[str, Any]:
    """Report-card summary: per-category and final averages plus per-assessment bands.

    Averages are 0 when the student has no assessments yet.
    """
    ensure_allowed(actor, AccessAction.VIEW_OWN_REPORT, ResourceRef.of_student(actor.identity if actor else None))
    own = Assessment.objects.owned_by(actor.identity)
    aggregates = own.aggregate(
        final=Avg("final_score"),
        **{key: Avg(f"{key}__score") for key in scoring.CATEGORIES},
    )
    averages = {key: value or 0.0 for key, value in aggregates.items()}
    assessments = list(own.with_details().newest_first())
    return {
        "total_assessments": len(assessments),
        "averages": averages,
        "assessments": [
            {"assessment": assessment, "band": scoring.score_band(assessment.final_score)}
            for assessment in assessments
        ],
    }
