import types

import pytest
from model_bakery import baker

from InternshipApp.core.exceptions import NotFoundError
from InternshipApp.domain.services import assignment_service
from InternshipApp.tasks.models import parse_target_filter

pytestmark = pytest.mark.django_db


@pytest.fixture
def roster(make_student):
    return {
        "rpl": make_student(major="RPL", cohort="2024"),
        "tkj": make_student(major="TKJ", cohort="2024"),
        "mm": make_student(major="MM", cohort="2023"),
        "inactive": make_student(major="RPL", cohort="2024", active=False),
    }


def ids(profiles):
    return [p.user_id for p in profiles]


@pytest.mark.parametrize("raw,expected", [
    (None, []),
    ("", []),
    ("general", []),
    (" General ", []),
    ("RPL,TKJ", ["RPL", "TKJ"]),
    ("rpl, tkj ,RPL,", ["RPL", "TKJ"]),
])
def test_parse_target_filter(raw, expected):
    assert parse_target_filter(raw) == expected


def test_general_task_targets_all_active_students(roster, make_task):
    task = make_task()
    assert ids(assignment_service.resolve_assignees(task)) == sorted(
        [roster["rpl"].pk, roster["tkj"].pk, roster["mm"].pk]
    )


def test_filter_is_an_or_set_of_majors(roster, make_task):
    task = make_task(target_filter="RPL,TKJ")
    assert ids(assignment_service.resolve_assignees(task)) == sorted([roster["rpl"].pk, roster["tkj"].pk])


def test_filter_matches_cohort_case_insensitively(roster, make_task):
    task = make_task(target_filter="2023")
    assert ids(assignment_service.resolve_assignees(task)) == [roster["mm"].pk]
    assert assignment_service.matches_target(task, roster["mm"].student_profile)
    assert not assignment_service.matches_target(task, roster["rpl"].student_profile)


def test_resolve_is_lazy_and_recomputed(roster, make_task, make_student):
    task = make_task(target_filter="TKJ")
    first = assignment_service.resolve_assignees(task)
    assert isinstance(first, types.GeneratorType)
    assert ids(first) == [roster["tkj"].pk]

    newcomer = make_student(major="TKJ")
    assert ids(assignment_service.resolve_assignees(task)) == [roster["tkj"].pk, newcomer.pk]


def test_non_student_users_are_never_assignees(roster, make_task):
    mentor_with_profile = baker.make("users.User", role="mentor")
    baker.make("users.StudentProfile", user=mentor_with_profile, major="RPL", active=True)
    task = make_task(target_filter="RPL")
    assert mentor_with_profile.pk not in ids(assignment_service.resolve_assignees(task))


def test_is_assigned(roster, make_task):
    task = make_task(target_filter="RPL")
    assert assignment_service.is_assigned(task, roster["rpl"].pk)
    assert not assignment_service.is_assigned(task, roster["tkj"].pk)
    assert not assignment_service.is_assigned(task, roster["inactive"].pk)


def test_tasks_for_student(roster, make_task):
    general = make_task(title="Umum")
    rpl_only = make_task(title="Khusus RPL", target_filter="RPL")
    make_task(title="Khusus TKJ", target_filter="TKJ")
    profile = roster["rpl"].student_profile
    assert {t.pk for t in assignment_service.tasks_for_student(profile)} == {general.pk, rpl_only.pk}
    assert assignment_service.tasks_for_student(roster["inactive"].student_profile) == []


def test_deactivated_account_sees_no_tasks(roster, make_task):
    make_task(title="Umum")
    user = roster["rpl"]
    user.is_active = False
    user.save()
    profile = assignment_service.get_student_profile(user.pk)
    assert not assignment_service.is_active_student(profile)
    assert assignment_service.tasks_for_student(profile) == []


def test_tasks_for_student_agrees_with_assignee_query(roster, make_task):
    tasks = [make_task(), make_task(target_filter="RPL"), make_task(target_filter="2023")]
    for user in roster.values():
        profile = assignment_service.get_student_profile(user.pk)
        listed = {t.pk for t in assignment_service.tasks_for_student(profile)}
        assert listed == {t.pk for t in tasks if assignment_service.is_assigned(t, user.pk)}


def test_get_student_profile_unknown(mentor):
    with pytest.raises(NotFoundError):
        assignment_service.get_student_profile(mentor.pk)
