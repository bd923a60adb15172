"""Caller identity as resolved by the session gateway.

The storefront's session provider authenticates users; this service only
consumes the resulting claims. Moderator capability comes from the role
claim alone.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass

from reviews.settings import get_setting


def is_moderator_role(role: str | None) -> bool:
    """True when ``role`` carries the moderator capability."""
    return bool(role) and role in get_setting("MODERATOR_ROLES")


@dataclass(frozen=True)
class Identity:
    authenticated: bool
    user_id: str | None = None
    display_name: str | None = None
    email: str | None = None
    role: str | None = None

    @property
    def is_moderator(self) -> bool:
        return self.authenticated and is_moderator_role(self.role)


ANONYMOUS = Identity(authenticated=False)


class IdentityProvider(ABC):
    """Resolves the caller of a request from its headers."""

    @abstractmethod
    def identify(self, headers: Mapping[str, str]) -> Identity: ...


class HeaderIdentityProvider(IdentityProvider):
    """Reads identity claims forwarded by the upstream session gateway.

    The gateway terminates the user session and sets ``X-User-Id``,
    ``X-User-Name``, ``X-User-Email`` and ``X-User-Role``. A request without
    ``X-User-Id`` is anonymous.
    """

    def identify(self, headers: Mapping[str, str]) -> Identity:
        user_id = (headers.get("x-user-id") or "").strip()
        if not user_id:
            return ANONYMOUS

        return Identity(
            authenticated=True,
            user_id=user_id,
            display_name=headers.get("x-user-name") or None,
            email=headers.get("x-user-email") or None,
            role=(headers.get("x-user-role") or "customer").strip().lower(),
        )
