"""Task registry models: Task and its task-level attachments."""

from django.db import models
from django.conf import settings

from simple_history.models import HistoricalRecords

from InternshipApp.core.models import AttachmentBase
from InternshipApp.tasks.querysets import TaskQuerySet

User = settings.AUTH_USER_MODEL

GENERAL_TARGET = "general"


def parse_target_filter(raw: str | None) -> list[str]:
    """Split a comma separated major/cohort filter; empty or "general" means everyone."""
    if not raw:
        return []
    values = []
    for part in raw.split(","):
        part = part.strip()
        if part and part.lower() != GENERAL_TARGET and part.upper() not in values:
            values.append(part.upper())
    return values


class Task(models.Model):
    """A unit of work a mentor assigns to some or all students."""
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    due_at = models.DateTimeField()
    target_filter = models.CharField(max_length=255, blank=True)
    rubric_ids = models.JSONField(default=list, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name="created_tasks")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = TaskQuerySet.as_manager()

    def __str__(self) -> str:
        return self.title

    @property
    def target_values(self) -> list[str]:
        return parse_target_filter(self.target_filter)

    @property
    def is_general(self) -> bool:
        return not self.target_values


class TaskAttachment(AttachmentBase):
    """Reference material attached to the task itself (not to a submission)."""
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="attachments")

    class Meta(AttachmentBase.Meta):
        pass
