from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from .config import get_settings
from .errors import Unauthenticated
from .services.timefmt import is_known_timezone

settings = get_settings()


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller, passed explicitly into every service call."""

    user_id: int
    email: str
    full_name: str | None = None
    timezone: str | None = None

    @property
    def tz(self) -> str:
        # unknown stored zones use the default
        if is_known_timezone(self.timezone):
            return self.timezone
        return settings.default_timezone

    def session_payload(self) -> dict:
        return {
            "id": self.user_id,
            "email": self.email,
            "full_name": self.full_name,
            "timezone": self.timezone,
        }


def get_current_user(request: Request) -> AuthContext:
    user = request.session.get("user")
    if not user:
        raise Unauthenticated()
    return AuthContext(
        user_id=user["id"],
        email=user.get("email", ""),
        full_name=user.get("full_name"),
        timezone=user.get("timezone"),
    )
