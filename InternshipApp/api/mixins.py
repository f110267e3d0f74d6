from InternshipApp.core.access import Actor


class ActorMixin:
    """Shared helper building the explicit service Actor from the request user."""

    @property
    def actor(self) -> Actor:
        return Actor.from_user(self.request.user)
