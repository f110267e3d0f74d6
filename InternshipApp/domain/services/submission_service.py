"""Domain service functions for the submission ledger (student side).

One row per (task, student); no row means TODO. State transitions:
    TODO -> IN_PROGRESS (start)
    TODO | IN_PROGRESS | REJECTED -> SUBMITTED (submit / resubmit)
    IN_PROGRESS -> TODO (discard draft, deletes the row)
Resubmission overwrites files, note and submitted_at and clears the previous
review. APPROVED is terminal; SUBMITTED is locked until a mentor reviews it.
"""

import logging
from typing import Any

from django.db import transaction
from django.utils import timezone

from InternshipApp.core.access import Actor, ensure_role, ensure_student_self
from InternshipApp.core.choices import SUBMITTABLE_STATES, TaskStatus, UserRole
from InternshipApp.core.exceptions import AuthorizationError, InvalidStateError, NotFoundError
from InternshipApp.core.validators import clean_attachments
from InternshipApp.domain.lateness import is_late
from InternshipApp.domain.services.assignment_service import (
    get_student_profile,
    is_active_student,
    matches_target,
)
from InternshipApp.domain.services.task_service import get_task
from InternshipApp.submissions.models import Submission, SubmissionFile
from InternshipApp.tasks.models import Task

logger = logging.getLogger(__name__)


def ensure_assigned(task: Task, student_id: int) -> None:
    """Raise unless the student exists, is active and matches the task target."""
    profile = get_student_profile(student_id)
    if not (is_active_student(profile) and matches_target(task, profile)):
        raise AuthorizationError(
            f"Task {task.pk} is not assigned to student {student_id}",
            required_role=UserRole.STUDENT,
            actor_role=UserRole.STUDENT,
        )


def find_submission(task_id: int, student_id: int) -> Submission | None:
    """Current ledger row for the pair, or None when the student has not started."""
    return (
        Submission.objects.for_pair(task_id, student_id)
        .select_related("task", "student", "reviewed_by")
        .prefetch_related("files")
        .first()
    )


def get_submission(submission_id: int) -> Submission:
    try:
        return Submission.objects.select_related("task", "student", "reviewed_by").get(pk=submission_id)
    except (Submission.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Submission", submission_id)


@transaction.atomic
def start(actor: Actor, task_id: int, student_id: int) -> Submission:
    """Mark a task as begun by the student (TODO -> IN_PROGRESS, idempotent)."""
    ensure_student_self(actor, student_id)
    task = get_task(task_id)
    ensure_assigned(task, student_id)
    submission, created = Submission.objects.select_for_update().get_or_create(
        task=task, student_id=student_id, defaults={"status": TaskStatus.IN_PROGRESS}
    )
    if not created and submission.status != TaskStatus.IN_PROGRESS:
        raise InvalidStateError(
            "Task has already moved past the draft stage.",
            current=submission.status,
            expected=[TaskStatus.TODO, TaskStatus.IN_PROGRESS],
        )
    if created:
        logger.info("Task %s started by student %s", task.pk, student_id)
    return submission


@transaction.atomic
def submit(
    actor: Actor,
    task_id: int,
    student_id: int,
    files: list[dict[str, Any]],
    note: str | None = "",
) -> Submission:
    """Create or overwrite the student's submission for a task.

    Rules:
        - Only the student themselves may submit.
        - At least one file is required; files are validated before any state check.
        - Allowed from TODO, IN_PROGRESS and REJECTED.
        - is_late compares the submission time with the task's due date.

    Raises:
        AuthorizationError, ValidationError, NotFoundError, InvalidStateError.
    """
    ensure_student_self(actor, student_id)
    cleaned = clean_attachments(files, field="files", required=True)
    note = (note or "").strip()
    task = get_task(task_id)
    ensure_assigned(task, student_id)

    now = timezone.now()
    late = is_late(now, task.due_at)
    submission, created = Submission.objects.select_for_update().get_or_create(
        task=task,
        student_id=student_id,
        defaults={
            "status": TaskStatus.SUBMITTED,
            "note": note,
            "submitted_at": now,
            "is_late": late,
        },
    )
    if not created:
        if submission.status not in SUBMITTABLE_STATES:
            logger.warning(
                "Refused submit for task %s student %s in state %s", task.pk, student_id, submission.status
            )
            if submission.status == TaskStatus.APPROVED:
                message = "Task is already approved; resubmission is not allowed."
            else:
                message = "Submission is awaiting review and cannot be changed."
            raise InvalidStateError(message, current=submission.status, expected=sorted(SUBMITTABLE_STATES))
        previous = submission.status
        submission.status = TaskStatus.SUBMITTED
        submission.note = note
        submission.submitted_at = now
        submission.is_late = late
        submission.reviewed_at = None
        submission.reviewed_by = None
        submission.review_notes = ""
        submission.score = None
        submission.save()
        submission.files.all().delete()
        logger.info("Task %s resubmitted by student %s (from %s, late=%s)", task.pk, student_id, previous, late)
    else:
        logger.info("Task %s submitted by student %s (late=%s)", task.pk, student_id, late)

    SubmissionFile.objects.bulk_create(
        [SubmissionFile(submission=submission, **{**f, "mime_type": f["mime_type"] or ""}) for f in cleaned]
    )
    return submission


@transaction.atomic
def discard_draft(actor: Actor, task_id: int, student_id: int) -> None:
    """Student-side delete: only an IN_PROGRESS row may be removed (back to TODO)."""
    ensure_student_self(actor, student_id)
    get_task(task_id)
    submission = Submission.objects.select_for_update().for_pair(task_id, student_id).first()
    if submission is None:
        raise NotFoundError("Submission", f"{task_id}/{student_id}")
    if submission.status != TaskStatus.IN_PROGRESS:
        raise InvalidStateError(
            "Only a draft that has not been submitted can be deleted.",
            current=submission.status,
            expected=TaskStatus.IN_PROGRESS,
        )
    submission.delete()
    logger.info("Draft for task %s discarded by student %s", task_id, student_id)


@transaction.atomic
def admin_delete_submission(actor: Actor, submission_id: int) -> None:
    """Administrative removal of a ledger row in any state (admin only)."""
    ensure_role(actor, (UserRole.ADMIN,))
    submission = get_submission(submission_id)
    logger.warning(
        "Submission %s (task %s, student %s, status %s) deleted by admin %s",
        submission.pk, submission.task_id, submission.student_id, submission.status, actor.id,
    )
    submission.delete()
