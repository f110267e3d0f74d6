"""Submission ledger models: one current Submission per (task, student) and its files."""

from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator

from simple_history.models import HistoricalRecords

from InternshipApp.core.choices import TaskStatus
from InternshipApp.core.models import AttachmentBase
from InternshipApp.tasks.models import Task
from InternshipApp.submissions.querysets import SubmissionQuerySet

User = settings.AUTH_USER_MODEL


class Submission(models.Model):
    """A student's latest deliverable for a task, with its review outcome.

    Student-owned fields: files, note, submitted_at, is_late.
    Reviewer-owned fields: reviewed_at, reviewed_by, review_notes, score.
    """
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="submissions")
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="task_submissions")
    status = models.CharField(max_length=16, choices=TaskStatus.choices, default=TaskStatus.IN_PROGRESS)
    note = models.TextField(blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    is_late = models.BooleanField(default=False)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    reviewed_by = models.ForeignKey(
        User, on_delete=models.PROTECT, null=True, blank=True, related_name="reviewed_submissions"
    )
    review_notes = models.TextField(blank=True)
    score = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    history = HistoricalRecords()

    objects = SubmissionQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["task", "student"], name="uq_task_student"),
        ]

    def __str__(self) -> str:
        return f"{self.task_id}/{self.student_id}: {self.status}"


class SubmissionFile(AttachmentBase):
    """A file attached to the current submission; replaced wholesale on resubmit."""
    submission = models.ForeignKey(Submission, on_delete=models.CASCADE, related_name="files")

    class Meta(AttachmentBase.Meta):
        pass
