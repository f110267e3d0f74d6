from django.contrib.auth.models import AbstractUser
from django.db import models

from InternshipApp.core.choices import UserRole

class User(AbstractUser):
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=16, choices=UserRole.choices, default=UserRole.STUDENT)
    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.email


class StudentProfile(models.Model):
    """Roster entry for a student: placement major/cohort and whether still active."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="student_profile")
    student_code = models.CharField(max_length=32, blank=True)
    major = models.CharField(max_length=32, blank=True)
    cohort = models.CharField(max_length=32, blank=True)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["user_id"]

    def __str__(self) -> str:
        return f"{self.student_code or self.user_id} ({self.major or '-'})"
