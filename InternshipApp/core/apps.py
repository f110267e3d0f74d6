"""Core app configuration and startup checks for lifecycle settings."""

from django.apps import AppConfig
from django.conf import settings
from django.core.checks import register, Error

class CoreConfig(AppConfig):
    """AppConfig registering a system check for the review/attachment settings."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "InternshipApp.core"

    def ready(self):
        """Register a Django system check validating lifecycle settings."""
        @register()
        def lifecycle_settings_check(app_configs, **kwargs):
            errors = []
            if int(getattr(settings, "REVIEW_NOTES_MIN_LENGTH", 10)) < 0:
                errors.append(Error("REVIEW_NOTES_MIN_LENGTH must be >= 0", id="core.E001"))
            if not getattr(settings, "ALLOWED_ATTACHMENT_MIME", None):
                errors.append(Error("ALLOWED_ATTACHMENT_MIME must not be empty", id="core.E002"))
            return errors
