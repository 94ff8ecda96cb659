import datetime

import pytest
from django.db import DatabaseError
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from RecitationReportApp.assessments.models import (
    CATEGORY_MODELS, Assessment, ConductAssessment, PronunciationAssessment,
)
from RecitationReportApp.core.choices import ApprovalState, UserRole
from RecitationReportApp.core.exceptions import InternalError
from RecitationReportApp.domain import scoring
from RecitationReportApp.domain.services import assessment_service

from conftest import actor, make_account

pytestmark = pytest.mark.django_db

SESSION = datetime.date(2024, 3, 1)

MARKS = {
    scoring.PRONUNCIATION: {
        "articulation_point": 90, "articulation_manner": 90, "vowel_marks": 90, "elongation_shortening": 90,
    },
    scoring.RECITATION_RULES: {
        "nasal_letter_rule": 70, "meem_letter_rule": 70, "elongation_rule": 70, "pause_rule": 70, "emphasis_rule": 70,
    },
    scoring.RHYTHM: {"tempo": 80, "calm": 80, "fluency": 80},
    scoring.VOICE: {"voice": 60, "tone": 60},
    scoring.CONDUCT: {"attitude": 100},
}


def test_create_scores_and_stores_all_categories(teacher, student):
    assessment = assessment_service.create_assessment(
        actor(teacher), student.pk, SESSION, surah="An-Naba", note="Steady", marks=MARKS,
    )
    assert assessment.teacher == teacher
    assert assessment.student == student
    assert assessment.final_score == pytest.approx(81.0)
    stored = Assessment.objects.with_details().get(pk=assessment.pk)
    assert stored.pronunciation.score == pytest.approx(90.0)
    assert stored.recitation_rules.score == pytest.approx(70.0)
    assert stored.voice.score == pytest.approx(60.0)
    assert stored.stored_marks()[scoring.RHYTHM] == {"tempo": 80, "calm": 80, "fluency": 80}


def test_absent_marks_count_as_zero(teacher, student):
    assessment = assessment_service.create_assessment(
        actor(teacher), student.pk, SESSION, marks={scoring.CONDUCT: {"attitude": 100}},
    )
    assert assessment.final_score == pytest.approx(10.0)
    assert assessment.voice.score == 0
    for model in CATEGORY_MODELS.values():
        assert model.objects.filter(assessment=assessment).count() == 1


@pytest.mark.parametrize("role,state", [
    (UserRole.STUDENT, ApprovalState.APPROVED),
    (UserRole.ADMIN, ApprovalState.APPROVED),
    (UserRole.TEACHER, ApprovalState.PENDING),
    (UserRole.TEACHER, ApprovalState.REJECTED),
])
def test_only_approved_teachers_create(role, state, student):
    author = make_account(role, state)
    with pytest.raises(PermissionDenied):
        assessment_service.create_assessment(actor(author), student.pk, SESSION, marks=MARKS)
    assert not Assessment.objects.exists()


def test_missing_student_or_date_rejected(teacher, student):
    with pytest.raises(ValidationError) as exc:
        assessment_service.create_assessment(actor(teacher), None, None)
    assert set(exc.value.detail) == {"student", "date"}
    assert not Assessment.objects.exists()


def test_student_must_be_approved_student(teacher, other_teacher):
    pending = make_account(UserRole.STUDENT, ApprovalState.PENDING)
    for target in (pending.pk, other_teacher.pk, 999999):
        with pytest.raises(ValidationError):
            assessment_service.create_assessment(actor(teacher), target, SESSION)
    assert not Assessment.objects.exists()


def test_out_of_range_mark_rejected_without_write(teacher, student):
    with pytest.raises(ValidationError) as exc:
        assessment_service.create_assessment(
            actor(teacher), student.pk, SESSION, marks={scoring.RHYTHM: {"tempo": 120}},
        )
    assert "outside [0, 100]" in str(exc.value.detail["marks"])
    assert not Assessment.objects.exists()


def test_storage_failure_leaves_nothing_behind(teacher, student, monkeypatch):
    def fail(*args, **kwargs):
        raise DatabaseError("disk full")

    monkeypatch.setattr(ConductAssessment.objects, "create", fail)
    with pytest.raises(InternalError):
        assessment_service.create_assessment(actor(teacher), student.pk, SESSION, marks=MARKS)
    assert not Assessment.objects.exists()
    assert not PronunciationAssessment.objects.exists()


def test_teacher_lists_only_authored(teacher, other_teacher, student, other_student, record_assessment):
    mine = record_assessment(teacher, student)
    record_assessment(other_teacher, student)
    for_other = record_assessment(teacher, other_student)
    assert set(assessment_service.list_assessments(actor(teacher))) == {mine, for_other}
    assert list(assessment_service.list_assessments(actor(teacher), student_id=student.pk)) == [mine]


def test_non_numeric_student_filter_is_not_found(teacher, student, record_assessment):
    record_assessment(teacher, student)
    with pytest.raises(NotFound):
        assessment_service.list_assessments(actor(teacher), student_id="abc")


def test_student_lists_only_own(teacher, student, other_student, record_assessment):
    own = record_assessment(teacher, student)
    record_assessment(teacher, other_student)
    listed = assessment_service.list_assessments(actor(student), student_id=other_student.pk)
    assert list(listed) == [own]


def test_list_filters_and_order(teacher, student, record_assessment):
    older = record_assessment(teacher, student, date=datetime.date(2024, 1, 10), surah="Al-Mulk")
    newer = record_assessment(teacher, student, date=datetime.date(2024, 2, 10), surah="", track="Jilid 4")
    latest = record_assessment(teacher, student, date=datetime.date(2024, 3, 10), surah="Al-Mulk")
    me = actor(teacher)
    assert list(assessment_service.list_assessments(me)) == [latest, newer, older]
    assert list(assessment_service.list_assessments(me, unit="mulk")) == [latest, older]
    assert list(assessment_service.list_assessments(me, unit="jilid")) == [newer]
    bounded = assessment_service.list_assessments(
        me, date_from=datetime.date(2024, 2, 10), date_to=datetime.date(2024, 3, 10)
    )
    assert list(bounded) == [latest, newer]


def test_admin_cannot_list(admin):
    with pytest.raises(PermissionDenied):
        assessment_service.list_assessments(actor(admin))
    with pytest.raises(PermissionDenied):
        assessment_service.list_assessments(None)


def test_get_for_author_and_owner(teacher, student, record_assessment):
    assessment = record_assessment(teacher, student)
    assert assessment_service.get_assessment(actor(teacher), assessment.pk) == assessment
    assert assessment_service.get_assessment(actor(student), assessment.pk) == assessment


def test_foreign_records_look_missing(teacher, other_teacher, student, other_student, record_assessment):
    assessment = record_assessment(teacher, student)
    with pytest.raises(NotFound):
        assessment_service.get_assessment(actor(other_teacher), assessment.pk)
    with pytest.raises(NotFound):
        assessment_service.get_assessment(actor(other_student), assessment.pk)
    with pytest.raises(NotFound):
        assessment_service.get_assessment(actor(teacher), 999999)


def test_wrong_role_is_forbidden(admin, teacher, student, record_assessment):
    assessment = record_assessment(teacher, student)
    with pytest.raises(PermissionDenied):
        assessment_service.get_assessment(actor(admin), assessment.pk)
    with pytest.raises(PermissionDenied):
        assessment_service.delete_assessment(actor(student), assessment.pk)


def test_delete_cascades_to_categories(teacher, student, record_assessment):
    assessment = record_assessment(teacher, student)
    assessment_service.delete_assessment(actor(teacher), assessment.pk)
    assert not Assessment.objects.exists()
    for model in CATEGORY_MODELS.values():
        assert not model.objects.exists()


def test_foreign_teacher_cannot_delete(teacher, other_teacher, student, record_assessment):
    assessment = record_assessment(teacher, student)
    with pytest.raises(NotFound):
        assessment_service.delete_assessment(actor(other_teacher), assessment.pk)
    assert Assessment.objects.filter(pk=assessment.pk).exists()


def test_recalculate_scores_repairs_drifted_values(teacher, student):
    assessment = assessment_service.create_assessment(actor(teacher), student.pk, SESSION, marks=MARKS)
    assert assessment_service.recalculate_scores() == 0
    Assessment.objects.filter(pk=assessment.pk).update(final_score=12.5)
    ConductAssessment.objects.filter(assessment=assessment).update(score=1)
    assert assessment_service.recalculate_scores() == 1
    assessment.refresh_from_db()
    assert assessment.final_score == pytest.approx(81.0)
    assert ConductAssessment.objects.get(assessment=assessment).score == pytest.approx(100.0)
