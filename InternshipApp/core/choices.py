"""Typed enumerations (TextChoices) for user roles, task statuses and review decisions."""
from django.db import models

class UserRole(models.TextChoices):
    """System-level role assigned to a user account."""
    ADMIN = "admin", "Admin"
    MENTOR = "mentor", "Mentor"
    STUDENT = "student", "Student"

class TaskStatus(models.TextChoices):
    """Lifecycle states of a task for one student.

    TODO is never stored by the submission flow: a missing row means TODO.
    """
    TODO = "todo", "To do"
    IN_PROGRESS = "in_progress", "In progress"
    SUBMITTED = "submitted", "Submitted"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"

class ReviewDecision(models.TextChoices):
    """Verdict a mentor applies to a submitted task."""
    APPROVE = "approve", "Approve"
    REJECT = "reject", "Reject"


REVIEWER_ROLES = frozenset({UserRole.MENTOR, UserRole.ADMIN})

# States from which the student may (re)submit.
SUBMITTABLE_STATES = frozenset({TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.REJECTED})
