"""Domain service functions for the task registry.

Only mentors and admins manage tasks. Rules:
    - title and description must be non-blank; due date is required and parsable.
    - due date may not precede the creation instant (checked on create only).
    - editing is allowed after submissions exist; is_late of existing
      submissions is NOT recalculated.
    - deletion is blocked while any submission references the task.
"""

import logging
from datetime import date, datetime, time
from typing import Any, Iterable

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from InternshipApp.core.access import Actor, ensure_reviewer
from InternshipApp.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from InternshipApp.core.validators import clean_attachments
from InternshipApp.tasks.models import Task, TaskAttachment, parse_target_filter

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"title", "description", "due_at", "target_filter", "rubric_ids", "attachments"})


def parse_due_at(value: Any) -> datetime:
    """Coerce a datetime, date or ISO-8601 string into an aware datetime.

    Plain dates mean the end of that day. Naive values are read in the
    current time zone.
    """
    if value is None or value == "":
        raise ValidationError("due_at", "Due date is required.")
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time(23, 59, 59))
    elif isinstance(value, str):
        text = value.strip()
        try:
            # parse_datetime also accepts a bare date (as midnight)
            day = parse_date(text)
            if day is not None:
                parsed = datetime.combine(day, time(23, 59, 59))
            else:
                parsed = parse_datetime(text)
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValidationError("due_at", f"Unparsable due date: {value!r}")
    else:
        raise ValidationError("due_at", f"Unparsable due date: {value!r}")
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def _clean_text(field: str, value: Any, max_length: int | None = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, f"{field.capitalize()} must not be empty.")
    value = value.strip()
    if max_length and len(value) > max_length:
        raise ValidationError(field, f"{field.capitalize()} exceeds {max_length} characters.")
    return value


def _clean_target_filter(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple, set)):
        value = ",".join(str(v) for v in value)
    if not isinstance(value, str):
        raise ValidationError("target_filter", "Target filter must be a comma separated string.")
    return ",".join(parse_target_filter(value))


def _clean_rubric_ids(value: Any) -> list[int]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise ValidationError("rubric_ids", "Rubric references must be a list of ids.")
    cleaned = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int) or item <= 0:
            raise ValidationError("rubric_ids", f"Invalid rubric id: {item!r}")
        if item not in cleaned:
            cleaned.append(item)
    return cleaned


def _replace_attachments(task: Task, files: list[dict[str, Any]]) -> None:
    task.attachments.all().delete()
    TaskAttachment.objects.bulk_create(
        [TaskAttachment(task=task, **{**f, "mime_type": f["mime_type"] or ""}) for f in files]
    )


def get_task(task_id: int) -> Task:
    """Return the task or raise NotFoundError."""
    try:
        return Task.objects.with_related().get(pk=task_id)
    except (Task.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Task", task_id)


def list_tasks(actor: Actor, search: str | None = None) -> QuerySet[Task]:
    """All tasks ordered by due date (mentor/admin only)."""
    ensure_reviewer(actor)
    return Task.objects.with_related().search(search).by_due_date()


@transaction.atomic
def create_task(
    actor: Actor,
    title: str,
    description: str,
    due_at: Any,
    target_filter: str | list[str] | None = None,
    rubric_ids: list[int] | None = None,
    attachments: list[dict[str, Any]] | None = None,
) -> Task:
    """Create a task (mentor/admin only).

    Raises:
        AuthorizationError: actor is not a mentor/admin.
        ValidationError: blank title/description, bad due date, bad attachments.
    """
    ensure_reviewer(actor)
    title = _clean_text("title", title, max_length=255)
    description = _clean_text("description", description)
    due = parse_due_at(due_at)
    if due < timezone.now():
        raise ValidationError("due_at", "Due date cannot be earlier than the creation time.")
    files = clean_attachments(attachments, field="attachments")
    task = Task.objects.create(
        title=title,
        description=description,
        due_at=due,
        target_filter=_clean_target_filter(target_filter),
        rubric_ids=_clean_rubric_ids(rubric_ids),
        created_by_id=actor.id,
    )
    _replace_attachments(task, files)
    logger.info("Task %s created by %s (due %s, target=%r)", task.pk, actor.id, due.isoformat(), task.target_filter)
    return task


@transaction.atomic
def update_task(actor: Actor, task_id: int, **fields: Any) -> Task:
    """Partially update a task (mentor/admin only).

    Attachments, when passed, replace the existing task-level attachments.
    """
    ensure_reviewer(actor)
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        name = sorted(unknown)[0]
        raise ValidationError(name, f"Field {name!r} cannot be edited.")
    try:
        task = Task.objects.select_for_update().get(pk=task_id)
    except (Task.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Task", task_id)

    files = None
    if "title" in fields:
        task.title = _clean_text("title", fields["title"], max_length=255)
    if "description" in fields:
        task.description = _clean_text("description", fields["description"])
    if "due_at" in fields:
        task.due_at = parse_due_at(fields["due_at"])
    if "target_filter" in fields:
        task.target_filter = _clean_target_filter(fields["target_filter"])
    if "rubric_ids" in fields:
        task.rubric_ids = _clean_rubric_ids(fields["rubric_ids"])
    if "attachments" in fields:
        files = clean_attachments(fields["attachments"], field="attachments")

    task.save()
    if files is not None:
        _replace_attachments(task, files)
    if task.submissions.exists():
        logger.warning("Task %s edited after submissions exist (fields=%s)", task.pk, sorted(fields))
    else:
        logger.info("Task %s updated by %s (fields=%s)", task.pk, actor.id, sorted(fields))
    return task


@transaction.atomic
def delete_task(actor: Actor, task_id: int) -> None:
    """Hard-delete a task (mentor/admin only); blocked while submissions exist."""
    ensure_reviewer(actor)
    try:
        task = Task.objects.select_for_update().get(pk=task_id)
    except (Task.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("Task", task_id)
    if task.submissions.exists():
        logger.warning("Refused to delete task %s: submissions exist", task.pk)
        raise InvalidStateError(
            "Task cannot be deleted while submissions exist.",
            current="has_submissions",
            expected="no_submissions",
        )
    task.delete()
    logger.info("Task %s deleted by %s", task_id, actor.id)
