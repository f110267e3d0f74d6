from datetime import timedelta

import pytest
from django.test import override_settings

from InternshipApp.core.access import Actor
from InternshipApp.core.choices import TaskStatus
from InternshipApp.core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from InternshipApp.domain.services import review_service, submission_service
from InternshipApp.submissions.models import Submission, SubmissionFile
from InternshipApp.tests.payloads import PDF, PNG, REVIEW_NOTES

pytestmark = pytest.mark.django_db


def test_submit_creates_submitted_row(student, student_actor, task, clock):
    submission = submission_service.submit(student_actor, task.pk, student.pk, [PDF, PNG], note=" selesai ")
    submission.refresh_from_db()
    assert submission.status == TaskStatus.SUBMITTED
    assert submission.submitted_at == clock.now
    assert submission.is_late is False
    assert submission.note == "selesai"
    assert submission.reviewed_at is None
    files = [f.as_dict() for f in submission.files.all()]
    assert files == [
        {"url": PDF["url"], "filename": "laporan.pdf", "size_bytes": 204800, "mime_type": "application/pdf"},
        {"url": PNG["url"], "filename": "screenshot.png", "size_bytes": 51200, "mime_type": "image/png"},
    ]


def test_submit_after_due_date_is_late(student, student_actor, make_task, clock):
    task = make_task(due_at=clock.now + timedelta(hours=1))
    clock.advance(hours=1)
    assert submission_service.submit(student_actor, task.pk, student.pk, [PDF]).is_late is False
    Submission.objects.all().delete()
    clock.advance(seconds=1)
    assert submission_service.submit(student_actor, task.pk, student.pk, [PDF]).is_late is True


@pytest.mark.parametrize("files", [[], None])
def test_submit_without_files_fails(student, student_actor, task, files):
    with pytest.raises(ValidationError) as exc:
        submission_service.submit(student_actor, task.pk, student.pk, files, note="catatan")
    assert exc.value.field == "files"
    assert not Submission.objects.exists()


def test_submit_without_files_fails_even_when_approved(student, student_actor, mentor_actor, task):
    submission = submission_service.submit(student_actor, task.pk, student.pk, [PDF])
    review_service.review(mentor_actor, submission.pk, "approve", 90, REVIEW_NOTES)
    with pytest.raises(ValidationError):
        submission_service.submit(student_actor, task.pk, student.pk, [])


@pytest.mark.parametrize("bad_file", [
    {"filename": "a.pdf"},
    {"url": "https://files.example.com/a.pdf"},
    {"url": "ftp://files.example.com/a.pdf", "filename": "a.pdf"},
    {"url": "https://files.example.com/a.exe", "filename": "a.exe", "mimeType": "application/x-msdownload"},
    {"url": "https://files.example.com/a.pdf", "filename": "a.pdf", "sizeBytes": -1},
    {"url": "https://files.example.com/a.pdf", "filename": "a.pdf", "sizeBytes": 1.5},
    {"url": "https://files.example.com/a.pdf", "filename": "a.pdf", "sizeBytes": "banyak"},
    {"url": "https://files.example.com/a.pdf", "filename": "a.pdf", "sizeBytes": True},
    {"url": 5, "filename": "a.pdf"},
    {"url": "https://files.example.com/a.pdf", "filename": ["a.pdf"]},
    {"url": "https://files.example.com/a.pdf", "filename": "a.pdf", "mimeType": 7},
    "https://files.example.com/a.pdf",
])
def test_submit_rejects_malformed_files(student, student_actor, task, bad_file):
    with pytest.raises(ValidationError):
        submission_service.submit(student_actor, task.pk, student.pk, [PDF, bad_file])
    assert not Submission.objects.exists()


def test_submit_accepts_integral_size_forms(student, student_actor, task):
    files = [
        {**PDF, "sizeBytes": "2048"},
        {**PNG, "size_bytes": 1024.0},
    ]
    submission = submission_service.submit(student_actor, task.pk, student.pk, files)
    assert [f.size_bytes for f in submission.files.all()] == [2048, 1024]


@override_settings(ATTACHMENT_MAX_BYTES=1000)
def test_submit_rejects_oversized_file(student, student_actor, task):
    with pytest.raises(ValidationError):
        submission_service.submit(student_actor, task.pk, student.pk, [PDF])


def test_only_the_student_themselves_may_submit(student, make_student, mentor_actor, task):
    other = make_student()
    with pytest.raises(AuthorizationError):
        submission_service.submit(Actor.from_user(other), task.pk, student.pk, [PDF])
    with pytest.raises(AuthorizationError):
        submission_service.submit(mentor_actor, task.pk, student.pk, [PDF])


def test_submit_unknown_task(student, student_actor):
    with pytest.raises(NotFoundError):
        submission_service.submit(student_actor, 98765, student.pk, [PDF])


def test_submit_to_task_not_assigned(make_student, make_task):
    tkj = make_student(major="TKJ")
    task = make_task(target_filter="RPL")
    with pytest.raises(AuthorizationError):
        submission_service.submit(Actor.from_user(tkj), task.pk, tkj.pk, [PDF])


def test_submit_while_awaiting_review_is_blocked(student, student_actor, task):
    first = submission_service.submit(student_actor, task.pk, student.pk, [PDF], note="v1")
    with pytest.raises(InvalidStateError) as exc:
        submission_service.submit(student_actor, task.pk, student.pk, [PNG], note="v2")
    assert exc.value.current == TaskStatus.SUBMITTED
    first.refresh_from_db()
    assert first.note == "v1"
    assert [f.filename for f in first.files.all()] == ["laporan.pdf"]


def test_resubmit_after_rejection_overwrites(student, student_actor, mentor_actor, task, clock):
    first = submission_service.submit(student_actor, task.pk, student.pk, [PDF], note="v1")
    review_service.review(mentor_actor, first.pk, "reject", notes="Perlu revisi pada bagian pengujian")
    clock.advance(hours=3)

    second = submission_service.submit(student_actor, task.pk, student.pk, [PNG], note="v2")
    assert second.pk == first.pk
    second.refresh_from_db()
    assert second.status == TaskStatus.SUBMITTED
    assert second.note == "v2"
    assert second.submitted_at == clock.now
    assert second.reviewed_at is None
    assert second.reviewed_by is None
    assert second.review_notes == ""
    assert [f.filename for f in second.files.all()] == ["screenshot.png"]
    assert Submission.objects.count() == 1
    assert SubmissionFile.objects.count() == 1


def test_resubmit_after_approval_is_blocked(student, student_actor, mentor_actor, task):
    submission = submission_service.submit(student_actor, task.pk, student.pk, [PDF])
    review_service.review(mentor_actor, submission.pk, "approve", 80, REVIEW_NOTES)
    with pytest.raises(InvalidStateError) as exc:
        submission_service.submit(student_actor, task.pk, student.pk, [PNG])
    assert exc.value.current == TaskStatus.APPROVED
    submission.refresh_from_db()
    assert submission.status == TaskStatus.APPROVED
    assert submission.score == 80


def test_start_then_submit(student, student_actor, task):
    draft = submission_service.start(student_actor, task.pk, student.pk)
    assert draft.status == TaskStatus.IN_PROGRESS
    assert draft.submitted_at is None
    assert submission_service.start(student_actor, task.pk, student.pk).pk == draft.pk

    submitted = submission_service.submit(student_actor, task.pk, student.pk, [PDF])
    assert submitted.pk == draft.pk
    assert submitted.status == TaskStatus.SUBMITTED


def test_start_after_submit_is_blocked(student, student_actor, task):
    submission_service.submit(student_actor, task.pk, student.pk, [PDF])
    with pytest.raises(InvalidStateError):
        submission_service.start(student_actor, task.pk, student.pk)


def test_discard_draft_returns_to_todo(student, student_actor, task):
    submission_service.start(student_actor, task.pk, student.pk)
    submission_service.discard_draft(student_actor, task.pk, student.pk)
    assert submission_service.find_submission(task.pk, student.pk) is None


def test_discard_draft_without_row(student, student_actor, task):
    with pytest.raises(NotFoundError):
        submission_service.discard_draft(student_actor, task.pk, student.pk)


@pytest.mark.parametrize("decision", [None, "approve", "reject"])
def test_discard_refused_once_submitted(student, student_actor, mentor_actor, task, decision):
    submission = submission_service.submit(student_actor, task.pk, student.pk, [PDF])
    if decision:
        review_service.review(
            mentor_actor, submission.pk, decision, 70 if decision == "approve" else None, REVIEW_NOTES
        )
    with pytest.raises(InvalidStateError):
        submission_service.discard_draft(student_actor, task.pk, student.pk)
    assert Submission.objects.filter(pk=submission.pk).exists()


def test_admin_delete_any_state(student, student_actor, mentor_actor, admin_user, task):
    submission = submission_service.submit(student_actor, task.pk, student.pk, [PDF])
    review_service.review(mentor_actor, submission.pk, "approve", 100, REVIEW_NOTES)
    with pytest.raises(AuthorizationError):
        submission_service.admin_delete_submission(mentor_actor, submission.pk)
    submission_service.admin_delete_submission(Actor.from_user(admin_user), submission.pk)
    assert not Submission.objects.exists()


def test_submission_history_tracks_overwrites(student, student_actor, mentor_actor, task):
    submission = submission_service.submit(student_actor, task.pk, student.pk, [PDF], note="v1")
    review_service.review(mentor_actor, submission.pk, "reject", notes="Perlu revisi pada bagian pengujian")
    submission_service.submit(student_actor, task.pk, student.pk, [PDF], note="v2")
    statuses = list(submission.history.order_by("history_date", "history_id").values_list("status", flat=True))
    assert statuses == [TaskStatus.SUBMITTED, TaskStatus.REJECTED, TaskStatus.SUBMITTED]
