"""Domain service functions for recording, listing and deleting assessments.

Every operation takes an explicit Actor and consults the access decision
function first. Scores always come from the rubric engine; callers only supply
raw marks. Single-record reads and deletes answer NotFound both for missing
records and for records the actor does not own, so existence never leaks.
"""

import logging
import datetime
from typing import Any, Mapping

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from RecitationReportApp.assessments.models import CATEGORY_MODELS, Assessment
from RecitationReportApp.core.access import (
    Actor, ResourceRef, ensure_allowed, is_allowed, role_allows,
)
from RecitationReportApp.core.choices import AccessAction, UserRole
from RecitationReportApp.core.exceptions import InternalError
from RecitationReportApp.domain import scoring

logger = logging.getLogger(__name__)

User = get_user_model()


def _approved_student(student_id: Any) -> User:
    student = User.objects.approved_students().filter(pk=student_id).first() if _is_pk(student_id) else None
    if student is None:
        raise ValidationError({"student": "Student not found or not approved."})
    return student


def _is_pk(value: Any) -> bool:
    try:
        int(value)
    except (TypeError, ValueError):
        return False
    return True


def create_assessment(
    actor: Actor | None,
    student_id: int | None,
    date: datetime.date | None,
    surah: str = "",
    track: str = "",
    note: str = "",
    marks: Mapping[str, Mapping[str, Any]] | None = None,
) -> Assessment:
    """Score and store a new assessment with its five category records.

    Args:
        actor: Must be an approved TEACHER; becomes the authoring teacher.
        student_id: Approved STUDENT account being assessed.
        date: Session date.
        surah / track: Reciting unit (either may be blank).
        note: Free text.
        marks: Category -> {criterion -> mark}; absent marks count as 0.

    Returns:
        The persisted Assessment.

    Raises:
        PermissionDenied: Actor may not create assessments.
        ValidationError: Missing student/date, unknown student, bad marks.
        InternalError: Storage failed; nothing was written.
    """
    ensure_allowed(actor, AccessAction.CREATE_ASSESSMENT, ResourceRef.of_student(student_id))
    missing = {}
    if not student_id:
        missing["student"] = "This field is required."
    if not date:
        missing["date"] = "This field is required."
    if missing:
        raise ValidationError(missing)
    student = _approved_student(student_id)

    try:
        complete_marks = scoring.zero_filled(marks)
        scores = scoring.compute_scores(complete_marks)
    except scoring.InvalidInput as exc:
        raise ValidationError({"marks": str(exc)}) from exc

    try:
        with transaction.atomic():
            assessment = Assessment.objects.create(
                student=student,
                teacher_id=actor.identity,
                date=date,
                surah=surah or "",
                track=track or "",
                note=note or "",
                final_score=scores.final,
            )
            for key, model in CATEGORY_MODELS.items():
                model.objects.create(
                    assessment=assessment,
                    score=scores.category(key),
                    **complete_marks[key],
                )
    except DatabaseError as exc:
        logger.exception("Failed to store assessment for student %s", student.pk)
        raise InternalError() from exc
    logger.info(
        "Assessment %s recorded by teacher %s for student %s (final %.2f)",
        assessment.pk, actor.identity, student.pk, scores.final,
    )
    return assessment


def list_assessments(
    actor: Actor | None,
    student_id: int | None = None,
    unit: str | None = None,
    date_from: datetime.date | None = None,
    date_to: datetime.date | None = None,
) -> QuerySet[Assessment]:
    """Assessments visible to the actor, newest first.

    Teachers see what they authored (optionally for one student); students see
    their own (the student filter is ignored); everyone else is refused.
    """
    qs = Assessment.objects.with_details()
    if actor is not None and actor.role == UserRole.TEACHER:
        ensure_allowed(actor, AccessAction.LIST_AUTHORED_ASSESSMENTS)
        qs = qs.authored_by(actor.identity)
        if student_id:
            if not _is_pk(student_id):
                raise NotFound("Student not found.")
            qs = qs.owned_by(student_id)
    elif actor is not None and actor.role == UserRole.STUDENT:
        ensure_allowed(actor, AccessAction.LIST_OWN_ASSESSMENTS, ResourceRef.of_student(actor.identity))
        qs = qs.owned_by(actor.identity)
    else:
        raise PermissionDenied("Assessments are only listed for teachers and students.")
    return qs.matching_unit(unit).between(date_from, date_to).newest_first()


def _read_action(actor: Actor | None) -> AccessAction:
    if actor is not None and actor.role == UserRole.STUDENT:
        return AccessAction.READ_OWN_ASSESSMENT
    return AccessAction.READ_AUTHORED_ASSESSMENT


def _visible_or_404(actor: Actor | None, action: AccessAction, assessment_id: Any) -> Assessment:
    if not role_allows(actor, action):
        raise PermissionDenied("You do not have permission to perform this action.")
    assessment = (
        Assessment.objects.with_details().filter(pk=assessment_id).first()
        if _is_pk(assessment_id) else None
    )
    if assessment is None or not is_allowed(actor, action, ResourceRef.of_assessment(assessment)):
        raise NotFound("Assessment not found.")
    return assessment


def get_assessment(actor: Actor | None, assessment_id: int) -> Assessment:
    """One assessment for its authoring teacher or its student.

    Raises:
        PermissionDenied: Actor's role/approval gives no access to assessments.
        NotFound: Missing, or not authored/owned by the actor.
    """
    return _visible_or_404(actor, _read_action(actor), assessment_id)


def delete_assessment(actor: Actor | None, assessment_id: int) -> None:
    """Delete an assessment (authoring teacher only); category records cascade."""
    with transaction.atomic():
        assessment = _visible_or_404(actor, AccessAction.DELETE_ASSESSMENT, assessment_id)
        pk = assessment.pk
        assessment.delete()
    logger.info("Assessment %s deleted by teacher %s", pk, actor.identity)


def recalculate_scores() -> int:
    """Recompute stored category and final scores from stored marks.

    Returns:
        Number of assessments whose stored scores changed.
    """
    updated = 0
    for assessment in Assessment.objects.with_details().iterator(chunk_size=500):
        scores = scoring.compute_scores(assessment.stored_marks())
        changed = False
        with transaction.atomic():
            for key, record in assessment.category_records().items():
                if record.score != scores.category(key):
                    record.score = scores.category(key)
                    record.save(update_fields=["score"])
                    changed = True
            if assessment.final_score != scores.final:
                assessment.final_score = scores.final
                assessment.save(update_fields=["final_score", "updated_at"])
                changed = True
        updated += changed
    return updated
