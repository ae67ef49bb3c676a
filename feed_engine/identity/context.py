from typing import Protocol

from feed_engine.identity.schemas import CurrentUser


class IdentityContext(Protocol):
    def current_user(self) -> CurrentUser:
        ...


class StaticIdentityContext:
    """Identity context for a user resolved once (per request, per session, or in tests)"""

    def __init__(self, user: CurrentUser):
        self._user = user

    def current_user(self) -> CurrentUser:
        return self._user
