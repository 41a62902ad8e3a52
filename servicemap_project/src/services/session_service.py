"""Session/identity provider contract.

The editor only needs to know *who* the caller is; authentication itself
(sign-in screens, token refresh) happens outside this package.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

from ..models.company import User

__all__ = ["SessionProvider", "StaticSessionProvider"]

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionProvider(Protocol):
    def get_current_user(self) -> Optional[User]: ...


class StaticSessionProvider:
    """Session holding a fixed user – the desktop shell signs in from CLI args."""

    def __init__(self, user: Optional[User] = None):
        self._user = user

    def get_current_user(self) -> Optional[User]:
        return self._user

    def sign_in(self, user: User) -> None:
        logger.info("Signed in as %s", user.email)
        self._user = user

    def sign_out(self) -> None:
        if self._user is not None:
            logger.info("Signed out %s", self._user.email)
        self._user = None
