"""Actor identity and role helpers shared by domain services and API permissions."""

from dataclasses import dataclass
from typing import Any, Iterable

from InternshipApp.core.choices import UserRole, REVIEWER_ROLES
from InternshipApp.core.exceptions import AuthorizationError


@dataclass(frozen=True)
class Actor:
    """The user on whose behalf a service call runs."""
    id: int
    role: str

    @classmethod
    def from_user(cls, user: Any) -> "Actor":
        return cls(id=user.pk, role=user.role)

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    @property
    def is_reviewer(self) -> bool:
        return self.role in REVIEWER_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def ensure_role(actor: Actor, roles: Iterable[str]) -> None:
    """Raise AuthorizationError unless actor has one of roles."""
    allowed = [str(role) for role in roles]
    if actor.role not in allowed:
        raise AuthorizationError(
            f"Role {'/'.join(allowed)} required",
            required_role="|".join(allowed),
            actor_role=actor.role,
        )


def ensure_reviewer(actor: Actor) -> None:
    ensure_role(actor, (UserRole.MENTOR, UserRole.ADMIN))


def ensure_student_self(actor: Actor, student_id: int) -> None:
    """Students may only act on their own ledger entries."""
    ensure_role(actor, (UserRole.STUDENT,))
    if actor.id != student_id:
        raise AuthorizationError(
            "Students may only act on their own tasks",
            required_role=UserRole.STUDENT,
            actor_role=actor.role,
        )


def ensure_self_or_reviewer(actor: Actor, student_id: int) -> None:
    if actor.is_reviewer:
        return
    ensure_student_self(actor, student_id)
