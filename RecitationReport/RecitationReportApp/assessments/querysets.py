"""Custom querysets encapsulating role-scoped visibility and filtering of assessments."""

from datetime import date
from typing import Self

from django.db.models import Q, QuerySet

from RecitationReportApp.domain.scoring import CATEGORIES


class AssessmentQuerySet(QuerySet):
    """QuerySet helpers for listing assessments by author, owner and filters."""

    def authored_by(self, teacher_id: int) -> Self:
        """Assessments written by the given teacher."""
        return self.filter(teacher_id=teacher_id)

    def owned_by(self, student_id: int) -> Self:
        """Assessments about the given student."""
        return self.filter(student_id=student_id)

    def matching_unit(self, unit: str | None) -> Self:
        """Case-insensitive substring match on surah or track."""
        if not unit:
            return self
        return self.filter(Q(surah__icontains=unit) | Q(track__icontains=unit))

    def between(self, date_from: date | None = None, date_to: date | None = None) -> Self:
        """Inclusive date bounds; either side may be open."""
        qs = self
        if date_from:
            qs = qs.filter(date__gte=date_from)
        if date_to:
            qs = qs.filter(date__lte=date_to)
        return qs

    def with_details(self) -> Self:
        """Join student, teacher and the five category records."""
        return self.select_related("student__student_profile", "teacher", *CATEGORIES)

    def newest_first(self) -> Self:
        return self.order_by("-date", "-created_at", "-id")
