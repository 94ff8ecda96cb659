"""Assessments app configuration."""

from django.apps import AppConfig

class AssessmentsConfig(AppConfig):
    """AppConfig for recitation assessments and their rubric category records."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "RecitationReportApp.assessments"
    label = "assessments"
