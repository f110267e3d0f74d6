"""Assignment resolution: which students a task applies to.

Assignments are never stored. A task with an empty or "general" target applies
to every active student; otherwise the target is an OR set of majors/cohorts
("RPL,TKJ" matches students in either). The population is re-read on every
call because the roster changes independently of tasks.
"""

from typing import Iterator

from django.db.models import Q, QuerySet

from InternshipApp.core.choices import UserRole
from InternshipApp.core.exceptions import NotFoundError
from InternshipApp.tasks.models import Task
from InternshipApp.users.models import StudentProfile


def _target_q(values: list[str]) -> Q:
    condition = Q()
    for value in values:
        condition |= Q(major__iexact=value) | Q(cohort__iexact=value)
    return condition


def active_students() -> QuerySet[StudentProfile]:
    return StudentProfile.objects.filter(
        active=True, user__is_active=True, user__role=UserRole.STUDENT
    ).select_related("user")


def assignee_queryset(task: Task) -> QuerySet[StudentProfile]:
    """Active student profiles matching the task target, ordered by student id."""
    qs = active_students()
    values = task.target_values
    if values:
        qs = qs.filter(_target_q(values))
    return qs.order_by("user_id")


def resolve_assignees(task: Task) -> Iterator[StudentProfile]:
    """Lazily yield the student profiles the task applies to."""
    yield from assignee_queryset(task).iterator()


def is_active_student(profile: StudentProfile) -> bool:
    """In-memory counterpart of active_students() for a single profile."""
    return profile.active and profile.user.is_active and profile.user.role == UserRole.STUDENT


def matches_target(task: Task, profile: StudentProfile) -> bool:
    """In-memory counterpart of the assignee query for a single profile."""
    values = task.target_values
    if not values:
        return True
    return (profile.major or "").upper() in values or (profile.cohort or "").upper() in values


def is_assigned(task: Task, student_id: int) -> bool:
    return assignee_queryset(task).filter(user_id=student_id).exists()


def get_student_profile(student_id: int) -> StudentProfile:
    """Return the roster entry for a student user id or raise NotFoundError."""
    try:
        return StudentProfile.objects.select_related("user").get(
            user_id=student_id, user__role=UserRole.STUDENT
        )
    except (StudentProfile.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Student", student_id)


def tasks_for_student(profile: StudentProfile, tasks: QuerySet[Task] | None = None) -> list[Task]:
    """Tasks assigned to the student, in the order of the given queryset."""
    if not is_active_student(profile):
        return []
    if tasks is None:
        tasks = Task.objects.by_due_date()
    return [task for task in tasks if matches_target(task, profile)]
