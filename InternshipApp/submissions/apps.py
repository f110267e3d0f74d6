"""Submissions app configuration."""

from django.apps import AppConfig

class SubmissionsConfig(AppConfig):
    """AppConfig for the submission ledger (submissions, files, review outcome)."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "InternshipApp.submissions"
    label = "submissions"
