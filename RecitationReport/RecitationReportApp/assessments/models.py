"""Assessment domain models: Assessment and its five category records.

An Assessment exclusively owns one record per rubric category. The children are
created with the parent in one transaction and disappear only by cascade when the
parent is deleted. Scores are derived from the stored marks by domain.scoring.
"""

from django.conf import settings
from django.db import models

from simple_history.models import HistoricalRecords

from RecitationReportApp.assessments.querysets import AssessmentQuerySet
from RecitationReportApp.core.choices import UserRole
from RecitationReportApp.core.validators import MARK_VALIDATORS
from RecitationReportApp.domain import scoring

User = settings.AUTH_USER_MODEL


def mark_field() -> models.FloatField:
    return models.FloatField(default=0, validators=MARK_VALIDATORS)


class Assessment(models.Model):
    """One recitation evaluation of a student by a teacher."""
    student = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="assessments",
        limit_choices_to={"role": UserRole.STUDENT},
    )
    teacher = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="authored_assessments",
        limit_choices_to={"role": UserRole.TEACHER},
    )
    date = models.DateField()
    surah = models.CharField(max_length=100, blank=True)
    track = models.CharField(max_length=64, blank=True)
    note = models.TextField(blank=True)
    final_score = models.FloatField(validators=MARK_VALIDATORS)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = AssessmentQuerySet.as_manager()

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["teacher", "-date"], name="ix_assessment_teacher_date"),
            models.Index(fields=["student", "-date"], name="ix_assessment_student_date"),
        ]

    def __str__(self) -> str:
        unit = self.surah or self.track or "-"
        return f"{self.date} {unit} (#{self.pk})"

    def category_records(self) -> dict[str, "CategoryAssessment"]:
        """The five owned category records keyed by rubric category."""
        return {key: getattr(self, key) for key in scoring.CATEGORIES}

    def stored_marks(self) -> dict[str, dict[str, float]]:
        return {key: record.marks() for key, record in self.category_records().items()}


class CategoryAssessment(models.Model):
    """Marks for one rubric category plus its computed score."""
    category: str = ""
    score = models.FloatField(validators=MARK_VALIDATORS)

    class Meta:
        abstract = True

    @classmethod
    def criteria(cls) -> tuple[str, ...]:
        return tuple(scoring.CRITERION_WEIGHTS[cls.category])

    def marks(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in self.criteria()}


class PronunciationAssessment(CategoryAssessment):
    """Pronunciation precision (fashahah)."""
    category = scoring.PRONUNCIATION
    assessment = models.OneToOneField(Assessment, on_delete=models.CASCADE, related_name=scoring.PRONUNCIATION)
    articulation_point = mark_field()
    articulation_manner = mark_field()
    vowel_marks = mark_field()
    elongation_shortening = mark_field()


class RecitationRulesAssessment(CategoryAssessment):
    """Recitation rules (tajwid)."""
    category = scoring.RECITATION_RULES
    assessment = models.OneToOneField(Assessment, on_delete=models.CASCADE, related_name=scoring.RECITATION_RULES)
    nasal_letter_rule = mark_field()
    meem_letter_rule = mark_field()
    elongation_rule = mark_field()
    pause_rule = mark_field()
    emphasis_rule = mark_field()


class RhythmAssessment(CategoryAssessment):
    """Rhythm and fluency (tartil)."""
    category = scoring.RHYTHM
    assessment = models.OneToOneField(Assessment, on_delete=models.CASCADE, related_name=scoring.RHYTHM)
    tempo = mark_field()
    calm = mark_field()
    fluency = mark_field()


class VoiceAssessment(CategoryAssessment):
    """Voice and tone; optional content, always scored (zero marks score 0)."""
    category = scoring.VOICE
    assessment = models.OneToOneField(Assessment, on_delete=models.CASCADE, related_name=scoring.VOICE)
    voice = mark_field()
    tone = mark_field()


class ConductAssessment(CategoryAssessment):
    """Conduct during recitation (adab)."""
    category = scoring.CONDUCT
    assessment = models.OneToOneField(Assessment, on_delete=models.CASCADE, related_name=scoring.CONDUCT)
    attitude = mark_field()


CATEGORY_MODELS: dict[str, type[CategoryAssessment]] = {
    model.category: model
    for model in (
        PronunciationAssessment,
        RecitationRulesAssessment,
        RhythmAssessment,
        VoiceAssessment,
        ConductAssessment,
    )
}
