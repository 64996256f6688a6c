"""Refresh-session expiry: sliding window capped by an absolute lifetime."""
from dataclasses import dataclass
from datetime import datetime, timedelta

from app.config import Settings


def compute_expiry(
    origin: datetime,
    now: datetime,
    sliding_window: timedelta,
    absolute_max: timedelta,
) -> datetime:
    """Extend by the sliding window from ``now``, never past ``origin + absolute_max``."""
    return min(now + sliding_window, origin + absolute_max)


@dataclass(frozen=True)
class ExpiryPolicy:
    """Lifetime limits for one session lineage."""

    sliding_window: timedelta
    absolute_max: timedelta

    def __post_init__(self) -> None:
        if self.sliding_window <= timedelta(0):
            raise ValueError("sliding_window must be positive")
        if self.absolute_max <= timedelta(0):
            raise ValueError("absolute_max must be positive")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExpiryPolicy":
        return cls(
            sliding_window=timedelta(days=settings.refresh_token_ttl_days),
            absolute_max=timedelta(days=settings.refresh_absolute_max_days),
        )

    def expiry_for(self, origin: datetime, now: datetime) -> datetime:
        return compute_expiry(origin, now, self.sliding_window, self.absolute_max)

    def lineage_deadline(self, origin: datetime) -> datetime:
        return origin + self.absolute_max

    @staticmethod
    def is_exhausted(expires_at: datetime, now: datetime) -> bool:
        """A computed expiry that is not strictly in the future leaves nothing to issue."""
        return expires_at <= now
