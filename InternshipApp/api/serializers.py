"""Serializers for tasks, submissions, review decisions and monitoring views."""

from rest_framework import serializers
from drf_spectacular.utils import extend_schema_field
from django.contrib.auth import get_user_model

from InternshipApp.core.choices import TaskStatus
from InternshipApp.submissions.models import Submission, SubmissionFile
from InternshipApp.tasks.models import Task, TaskAttachment

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Public, safe representation of a user."""

    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name", "role"]


class AttachmentSerializer(serializers.Serializer):
    """File metadata as returned by the upload service."""
    url = serializers.CharField(help_text="Public URL returned by the upload service.")
    filename = serializers.CharField()
    size_bytes = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    mime_type = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class TaskAttachmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = TaskAttachment
        fields = ["id", "url", "filename", "size_bytes", "mime_type"]


class SubmissionFileSerializer(serializers.ModelSerializer):
    class Meta:
        model = SubmissionFile
        fields = ["id", "url", "filename", "size_bytes", "mime_type"]


@extend_schema_field(AttachmentSerializer(many=True))
class AttachmentListField(serializers.JSONField):
    """Raw attachment list; ``core.validators.clean_attachments`` decides what is valid."""


class TaskWriteSerializer(serializers.Serializer):
    """Request shape for creating/updating a task; business rules live in task_service."""
    title = serializers.CharField(allow_blank=True)
    description = serializers.CharField(allow_blank=True)
    due_at = serializers.CharField(help_text="ISO-8601 date-time (or date, meaning end of day).")
    target_filter = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        help_text='Comma separated majors/cohorts, e.g. "RPL,TKJ". Empty or "general" targets everyone.',
    )
    rubric_ids = serializers.JSONField(required=False, help_text="List of rubric ids.")
    attachments = AttachmentListField(required=False)


class TaskReadSerializer(serializers.ModelSerializer):
    """Serializer for reading task details."""
    created_by = UserSerializer(read_only=True)
    attachments = TaskAttachmentSerializer(many=True, read_only=True)

    class Meta:
        model = Task
        fields = [
            "id", "title", "description", "due_at", "target_filter", "rubric_ids",
            "attachments", "created_by", "created_at", "updated_at",
        ]


class SubmitSerializer(serializers.Serializer):
    """Body of a submit / resubmit request."""
    files = AttachmentListField(required=False, default=list)
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ReviewSerializer(serializers.Serializer):
    """Body of a mentor review decision.

    Every field is passed through as sent: review_service checks the
    submission state before it validates decision, score and notes.
    """
    decision = serializers.JSONField(
        required=False, allow_null=True, default=None, help_text='"approve" or "reject".'
    )
    score = serializers.JSONField(
        required=False, allow_null=True, default=None, help_text="Whole number 0-100; approve only."
    )
    notes = serializers.JSONField(
        required=False, allow_null=True, default="", help_text="Review notes (minimum length applies)."
    )


class SubmissionReadSerializer(serializers.ModelSerializer):
    """Detailed submission view including files and review outcome."""
    student = UserSerializer(read_only=True)
    reviewed_by = UserSerializer(read_only=True)
    files = SubmissionFileSerializer(many=True, read_only=True)

    class Meta:
        model = Submission
        fields = [
            "id", "task", "student", "status", "note", "files", "submitted_at", "is_late",
            "reviewed_at", "reviewed_by", "review_notes", "score", "updated_at",
        ]
        read_only_fields = fields


class TaskStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    todo = serializers.IntegerField()
    in_progress = serializers.IntegerField()
    submitted = serializers.IntegerField()
    approved = serializers.IntegerField()
    rejected = serializers.IntegerField()


class SubmissionSummarySerializer(serializers.Serializer):
    """Monitoring row: one per assignee, TODO when nothing is on record."""
    student_id = serializers.IntegerField()
    student_code = serializers.CharField()
    student_name = serializers.CharField()
    major = serializers.CharField()
    cohort = serializers.CharField()
    status = serializers.ChoiceField(choices=TaskStatus.choices)
    is_late = serializers.BooleanField()
    submission_id = serializers.IntegerField(allow_null=True)
    note = serializers.CharField()
    submitted_at = serializers.DateTimeField(allow_null=True)
    reviewed_at = serializers.DateTimeField(allow_null=True)
    review_notes = serializers.CharField()
    score = serializers.IntegerField(allow_null=True)
    files = AttachmentSerializer(many=True)


class SubmissionDetailSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    note = serializers.CharField()
    submitted_at = serializers.DateTimeField(allow_null=True)
    reviewed_at = serializers.DateTimeField(allow_null=True)
    reviewed_by = serializers.IntegerField(allow_null=True)
    review_notes = serializers.CharField()
    score = serializers.IntegerField(allow_null=True)
    files = AttachmentSerializer(many=True)


class StudentTaskViewSerializer(serializers.Serializer):
    """A task as seen by one student."""
    task_id = serializers.IntegerField()
    title = serializers.CharField()
    description = serializers.CharField()
    due_at = serializers.DateTimeField()
    status = serializers.ChoiceField(choices=TaskStatus.choices)
    is_late = serializers.BooleanField()
    submission = SubmissionDetailSerializer(allow_null=True)
