"""Users app configuration."""

from django.apps import AppConfig

class UsersConfig(AppConfig):
    """AppConfig for accounts and student profiles."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "RecitationReportApp.users"
    label = "users"
