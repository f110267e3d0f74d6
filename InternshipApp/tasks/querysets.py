"""Custom querysets for task lookup and search."""

from django.db.models import QuerySet, Q
from typing import Self


class TaskQuerySet(QuerySet):
    """QuerySet helpers for the task registry."""

    def search(self, term: str | None) -> Self:
        """Case-insensitive match on title or description; no-op for blank terms."""
        if not term or not term.strip():
            return self
        term = term.strip()
        return self.filter(Q(title__icontains=term) | Q(description__icontains=term))

    def by_due_date(self) -> Self:
        return self.order_by("due_at", "id")

    def with_related(self) -> Self:
        return self.select_related("created_by").prefetch_related("attachments")
