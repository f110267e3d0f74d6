"""Lateness rule for submissions."""

from datetime import datetime


def is_late(submitted_at: datetime, due_at: datetime) -> bool:
    """A submission is late only when it lands strictly after the due date."""
    return submitted_at > due_at
