from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from RecitationReportApp.assessments.models import CATEGORY_MODELS, Assessment


def _category_inline(model):
    # Scores are derived from the marks; editing happens through the API only.
    return type(
        f"{model.__name__}Inline",
        (admin.StackedInline,),
        {"model": model, "can_delete": False, "extra": 0, "max_num": 1,
         "readonly_fields": [*model.criteria(), "score"]},
    )


@admin.register(Assessment)
class AssessmentAdmin(SimpleHistoryAdmin):
    list_display = ("date", "student", "teacher", "surah", "track", "final_score")
    list_filter = ("date",)
    search_fields = ("surah", "track", "student__name", "teacher__name")
    readonly_fields = ("student", "teacher", "final_score", "created_at", "updated_at")
    inlines = [_category_inline(model) for model in CATEGORY_MODELS.values()]
