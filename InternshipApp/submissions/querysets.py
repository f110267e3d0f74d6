"""Custom querysets for the submission ledger."""

from django.db.models import QuerySet, Count, Q
from typing import Self

from InternshipApp.core.choices import TaskStatus


class SubmissionQuerySet(QuerySet):
    """QuerySet helpers for submission lookup and aggregation."""

    def for_pair(self, task_id: int, student_id: int) -> Self:
        return self.filter(task_id=task_id, student_id=student_id)

    def awaiting_review(self) -> Self:
        return self.filter(status=TaskStatus.SUBMITTED)

    def status_counts(self) -> dict[str, int]:
        """Count rows per stored status; keys are TaskStatus values."""
        aggregates = {
            status.value: Count("id", filter=Q(status=status.value))
            for status in TaskStatus
        }
        return self.aggregate(**aggregates)
