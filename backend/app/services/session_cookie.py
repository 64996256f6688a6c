"""Refresh-token cookie transport."""
from dataclasses import dataclass
from datetime import datetime
import math

from fastapi import Request, Response

from app.clock import utcnow
from app.config import Settings

SAMESITE = "lax"


@dataclass(frozen=True)
class RefreshCookie:
    """Writes, clears and reads the cookie that carries the raw refresh token.

    ``write`` and ``clear`` share every attribute; browsers ignore a deletion
    whose path, domain or flags differ from the original cookie.
    """

    name: str
    path: str = "/api/auth"
    secure: bool = True
    domain: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "RefreshCookie":
        return cls(
            name=settings.refresh_cookie_name,
            path=settings.refresh_cookie_path,
            secure=settings.refresh_cookie_secure,
            domain=settings.refresh_cookie_domain,
        )

    @staticmethod
    def max_age(expires_at: datetime, now: datetime) -> int:
        return max(0, math.floor((expires_at - now).total_seconds()))

    def write(
        self,
        response: Response,
        token: str,
        expires_at: datetime,
        now: datetime | None = None,
    ) -> None:
        max_age = self.max_age(expires_at, now or utcnow())
        response.set_cookie(
            key=self.name,
            value=token,
            max_age=max_age,
            expires=max_age,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            httponly=True,
            samesite=SAMESITE,
        )

    def clear(self, response: Response) -> None:
        response.delete_cookie(
            key=self.name,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            httponly=True,
            samesite=SAMESITE,
        )

    def read(self, request: Request) -> str | None:
        return request.cookies.get(self.name) or None
