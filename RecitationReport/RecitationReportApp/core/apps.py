"""Core app configuration and startup checks (rubric weight tables)."""

from django.apps import AppConfig
from django.core.checks import register, Error

class CoreConfig(AppConfig):
    """AppConfig registering a system check that the rubric weights sum to 1."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "RecitationReportApp.core"

    def ready(self):
        """Register a Django system check guarding re-tuned rubric weights."""
        @register()
        def rubric_weights_check(app_configs, **kwargs):
            from RecitationReportApp.domain.scoring import weight_table_errors
            return [
                Error(f"Invalid rubric: {message}", id="core.E001")
                for message in weight_table_errors()
            ]
