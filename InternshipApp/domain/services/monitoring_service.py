"""Read-side aggregation for mentor dashboards and the student task view.

Students without a ledger row are reported as TODO, so for every task
``total == todo + in_progress + submitted + approved + rejected``. Counts are
taken over the current assignees only.
"""

from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Any

from InternshipApp.core.access import Actor, ensure_reviewer, ensure_role, ensure_self_or_reviewer
from InternshipApp.core.choices import TaskStatus, UserRole
from InternshipApp.core.exceptions import ValidationError
from InternshipApp.domain.services.assignment_service import (
    assignee_queryset,
    get_student_profile,
    tasks_for_student,
)
from InternshipApp.domain.services.submission_service import find_submission
from InternshipApp.domain.services.task_service import get_task
from InternshipApp.submissions.models import Submission
from InternshipApp.tasks.models import Task
from InternshipApp.users.models import StudentProfile


@dataclass(frozen=True)
class TaskStats:
    total: int
    todo: int
    in_progress: int
    submitted: int
    approved: int
    rejected: int

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class SubmissionSummary:
    """One assignee row on the monitoring page."""
    student_id: int
    student_code: str
    student_name: str
    major: str
    cohort: str
    status: str
    is_late: bool = False
    submission_id: int | None = None
    note: str = ""
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    review_notes: str = ""
    score: int | None = None
    files: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class StudentTaskView:
    """What a student (or a mentor on their behalf) sees for one task."""
    task_id: int
    title: str
    description: str
    due_at: datetime
    status: str
    is_late: bool
    submission: dict[str, Any] | None = None


def _submission_detail(submission: Submission) -> dict[str, Any]:
    return {
        "id": submission.pk,
        "note": submission.note,
        "submitted_at": submission.submitted_at,
        "reviewed_at": submission.reviewed_at,
        "reviewed_by": submission.reviewed_by_id,
        "review_notes": submission.review_notes,
        "score": submission.score,
        "files": [f.as_dict() for f in submission.files.all()],
    }


def _summary(profile: StudentProfile, submission: Submission | None) -> SubmissionSummary:
    base = {
        "student_id": profile.user_id,
        "student_code": profile.student_code,
        "student_name": profile.user.display_name,
        "major": profile.major,
        "cohort": profile.cohort,
    }
    if submission is None:
        return SubmissionSummary(status=TaskStatus.TODO.value, **base)
    return SubmissionSummary(
        status=submission.status,
        is_late=submission.is_late,
        submission_id=submission.pk,
        note=submission.note,
        submitted_at=submission.submitted_at,
        reviewed_at=submission.reviewed_at,
        review_notes=submission.review_notes,
        score=submission.score,
        files=[f.as_dict() for f in submission.files.all()],
        **base,
    )


def _view(task: Task, submission: Submission | None) -> StudentTaskView:
    return StudentTaskView(
        task_id=task.pk,
        title=task.title,
        description=task.description,
        due_at=task.due_at,
        status=submission.status if submission else TaskStatus.TODO.value,
        is_late=submission.is_late if submission else False,
        submission=_submission_detail(submission) if submission else None,
    )


def get_task_stats(actor: Actor, task_id: int) -> TaskStats:
    """Counts per state for a task's assignees (mentor/admin only)."""
    ensure_reviewer(actor)
    task = get_task(task_id)
    assignees = assignee_queryset(task)
    total = assignees.count()
    counts = Submission.objects.filter(
        task=task, student_id__in=assignees.values("user_id")
    ).status_counts()
    in_progress = counts[TaskStatus.IN_PROGRESS.value]
    submitted = counts[TaskStatus.SUBMITTED.value]
    approved = counts[TaskStatus.APPROVED.value]
    rejected = counts[TaskStatus.REJECTED.value]
    return TaskStats(
        total=total,
        todo=total - in_progress - submitted - approved - rejected,
        in_progress=in_progress,
        submitted=submitted,
        approved=approved,
        rejected=rejected,
    )


def list_submissions(actor: Actor, task_id: int) -> list[SubmissionSummary]:
    """One summary per assignee ordered by student id (mentor/admin only)."""
    ensure_reviewer(actor)
    task = get_task(task_id)
    profiles = list(assignee_queryset(task))
    rows = {
        s.student_id: s
        for s in Submission.objects.filter(
            task=task, student_id__in=[p.user_id for p in profiles]
        ).prefetch_related("files")
    }
    return [_summary(profile, rows.get(profile.user_id)) for profile in profiles]


def get_student_task_view(actor: Actor, task_id: int, student_id: int) -> StudentTaskView:
    """Status, lateness, due date and current submission for one student."""
    ensure_self_or_reviewer(actor, student_id)
    task = get_task(task_id)
    get_student_profile(student_id)
    return _view(task, find_submission(task.pk, student_id))


def list_assigned_tasks(
    actor: Actor, status: str | None = None, search: str | None = None
) -> list[StudentTaskView]:
    """The student's own tasks ordered by due date, optionally filtered."""
    ensure_role(actor, (UserRole.STUDENT,))
    if status:
        try:
            status = TaskStatus(status)
        except ValueError:
            raise ValidationError("status", f"Unknown status: {status!r}")
    profile = get_student_profile(actor.id)
    tasks = tasks_for_student(profile, Task.objects.search(search).by_due_date())
    rows = {
        s.task_id: s
        for s in Submission.objects.filter(
            student_id=actor.id, task_id__in=[t.pk for t in tasks]
        ).select_related("reviewed_by").prefetch_related("files")
    }
    views = [_view(task, rows.get(task.pk)) for task in tasks]
    if status:
        views = [v for v in views if v.status == status]
    return views
