"""Domain service for mentor review decisions.

Only SUBMITTED submissions accept a decision:
    SUBMITTED -> APPROVED (score 0-100 + notes, terminal)
    SUBMITTED -> REJECTED (notes only, student may resubmit)
The write is conditional on the row still being SUBMITTED, so of two racing
reviews exactly one is recorded and the other fails with InvalidStateError.
"""

import logging
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from InternshipApp.core.access import Actor, ensure_reviewer
from InternshipApp.core.choices import ReviewDecision, TaskStatus
from InternshipApp.core.exceptions import InvalidStateError, ValidationError
from InternshipApp.domain.services.submission_service import get_submission
from InternshipApp.submissions.models import Submission

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 100


def notes_min_length() -> int:
    return int(getattr(settings, "REVIEW_NOTES_MIN_LENGTH", 10))


def clean_decision(decision: Any) -> ReviewDecision:
    try:
        return ReviewDecision(decision)
    except ValueError:
        raise ValidationError("decision", f"Decision must be one of {', '.join(ReviewDecision.values)}.")


def clean_notes(notes: Any) -> str:
    notes = notes.strip() if isinstance(notes, str) else ""
    minimum = notes_min_length()
    if len(notes) < minimum:
        raise ValidationError("notes", f"Review notes must be at least {minimum} characters.")
    return notes


def clean_score(score: Any) -> int:
    if score is None or score == "":
        raise ValidationError("score", "A score is required to approve.")
    if isinstance(score, bool):
        raise ValidationError("score", f"Invalid score: {score!r}")
    try:
        value = Decimal(str(score))
    except ArithmeticError:
        raise ValidationError("score", f"Invalid score: {score!r}")
    if not value.is_finite() or value != value.to_integral_value():
        raise ValidationError("score", "Score must be a whole number.")
    if not (MIN_SCORE <= value <= MAX_SCORE):
        raise ValidationError("score", f"Score must be {MIN_SCORE}–{MAX_SCORE}.")
    return int(value)


@transaction.atomic
def review(
    actor: Actor,
    submission_id: int,
    decision: str,
    score: int | None = None,
    notes: str = "",
) -> Submission:
    """Apply an approve/reject decision to a submitted task (mentor/admin only).

    The state check runs before input validation: a submission that is not
    awaiting review is refused with InvalidStateError whatever the payload.
    """
    ensure_reviewer(actor)
    submission = get_submission(submission_id)
    if submission.status != TaskStatus.SUBMITTED:
        logger.warning("Refused review of submission %s in state %s", submission.pk, submission.status)
        raise InvalidStateError(
            "Only submitted tasks can be reviewed.",
            current=submission.status,
            expected=TaskStatus.SUBMITTED,
        )

    decision = clean_decision(decision)
    notes = clean_notes(notes)
    if decision == ReviewDecision.APPROVE:
        score = clean_score(score)
        new_status = TaskStatus.APPROVED
    else:
        if score is not None and score != "":
            raise ValidationError("score", "A rejected submission does not take a score.")
        score = None
        new_status = TaskStatus.REJECTED

    now = timezone.now()
    updated = Submission.objects.awaiting_review().filter(pk=submission.pk).update(
        status=new_status,
        reviewed_at=now,
        reviewed_by_id=actor.id,
        review_notes=notes,
        score=score,
        updated_at=now,
    )
    if not updated:
        current = Submission.objects.filter(pk=submission.pk).values_list("status", flat=True).first()
        logger.warning("Concurrent review lost for submission %s (now %s)", submission.pk, current)
        raise InvalidStateError(
            "Submission was reviewed by someone else.",
            current=current or "deleted",
            expected=TaskStatus.SUBMITTED,
        )

    submission.refresh_from_db()
    # queryset.update() skips save(); record the decision in history.
    submission.save(update_fields=["updated_at"])
    logger.info(
        "Submission %s %s by %s (score=%s)", submission.pk, new_status, actor.id, score,
    )
    return submission
