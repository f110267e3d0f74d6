"""Custom DRF permission classes for role-gated task endpoints.

These are a coarse first gate; domain services re-check role and identity.
"""

from typing import Any

from rest_framework.permissions import BasePermission
from rest_framework.request import Request

from InternshipApp.core.choices import REVIEWER_ROLES, UserRole


def _role(request: Request) -> str | None:
    user = request.user
    if not user or not user.is_authenticated:
        return None
    return getattr(user, "role", None)


class IsReviewer(BasePermission):
    """Allow mentors and admins."""
    message = "Mentor or admin role required."

    def has_permission(self, request: Request, view: Any) -> bool:
        return _role(request) in REVIEWER_ROLES


class IsStudent(BasePermission):
    """Allow students only."""
    message = "Student role required."

    def has_permission(self, request: Request, view: Any) -> bool:
        return _role(request) == UserRole.STUDENT


class IsAdmin(BasePermission):
    """Allow admins only."""
    message = "Admin role required."

    def has_permission(self, request: Request, view: Any) -> bool:
        return _role(request) == UserRole.ADMIN


class IsSubmissionParticipant(BasePermission):
    """Object-level: the submission's student or any reviewer."""

    def has_object_permission(self, request: Request, view: Any, obj: Any) -> bool:
        if _role(request) in REVIEWER_ROLES:
            return True
        return getattr(obj, "student_id", None) == request.user.pk
