from django.apps import AppConfig

class TasksConfig(AppConfig):
    """AppConfig for the task registry."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "InternshipApp.tasks"
    label = "tasks"
