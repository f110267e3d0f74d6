from datetime import timedelta

import pytest
from django.core.cache import cache
from django.utils import timezone
from model_bakery import baker

from InternshipApp.core.access import Actor
from InternshipApp.domain.services import task_service


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock(monkeypatch):
    """Controllable django.utils.timezone.now()."""
    class Clock:
        def __init__(self):
            self.now = timezone.now()

        def set(self, value):
            self.now = value

        def advance(self, **kwargs):
            self.now = self.now + timedelta(**kwargs)

    c = Clock()
    monkeypatch.setattr(timezone, "now", lambda: c.now)
    return c


@pytest.fixture
def mentor():
    return baker.make("users.User", email="mentor@example.com", role="mentor", first_name="Sari", last_name="Dewi")


@pytest.fixture
def admin_user():
    return baker.make("users.User", email="admin@example.com", role="admin")


@pytest.fixture
def make_student():
    def _make(major="RPL", cohort="2024", active=True, code=None, **user_kwargs):
        user = baker.make("users.User", role="student", is_active=True, **user_kwargs)
        baker.make(
            "users.StudentProfile",
            user=user,
            major=major,
            cohort=cohort,
            active=active,
            student_code=code or f"NIS{user.pk:04d}",
        )
        return user
    return _make


@pytest.fixture
def student(make_student):
    return make_student(email="budi@example.com", first_name="Budi", last_name="Santoso")


@pytest.fixture
def mentor_actor(mentor):
    return Actor.from_user(mentor)


@pytest.fixture
def student_actor(student):
    return Actor.from_user(student)


@pytest.fixture
def make_task(mentor):
    def _make(due_at=None, title="Rancang wireframe", description="Buat wireframe halaman login.", **kwargs):
        return task_service.create_task(
            Actor.from_user(mentor),
            title=title,
            description=description,
            due_at=due_at or timezone.now() + timedelta(days=7),
            **kwargs,
        )
    return _make


@pytest.fixture
def task(make_task):
    return make_task()
