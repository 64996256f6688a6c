"""Refresh-session lifecycle: issue, rotate, revoke.

Every operation returns ``Ok(value)`` or ``Err(kind)``. Callers must map each
``Err`` to "unauthenticated, clear the refresh cookie"; after any call the
presented token is either exactly as valid as before or definitively dead.

A lineage is the chain of sessions produced by rotating one login. All of its
rows share the ``created_at`` of the first one, which anchors the absolute
lifetime cap.
"""
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import logging
from typing import Generic, TypeVar, Union

from sqlalchemy.exc import SQLAlchemyError

from app.clock import utcnow
from app.services.expiry_policy import ExpiryPolicy
from app.services.session_store import SessionStore, StoredSession
from app.services.token_codec import generate_refresh_token, hash_token

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionErrorKind(str, Enum):
    SESSION_NOT_FOUND = "session_not_found"
    EXPIRED = "session_expired"
    LIFETIME_EXCEEDED = "lifetime_exceeded"
    ROTATION_FAILED = "rotation_failed"


ERROR_MESSAGES = {
    SessionErrorKind.SESSION_NOT_FOUND: "Refresh session not found",
    SessionErrorKind.EXPIRED: "Refresh token expired",
    SessionErrorKind.LIFETIME_EXCEEDED: "Refresh token lifetime limit reached",
    SessionErrorKind.ROTATION_FAILED: "Invalid or expired refresh token",
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: SessionErrorKind

    @property
    def message(self) -> str:
        return ERROR_MESSAGES[self.kind]


Result = Union[Ok[T], Err]


@dataclass(frozen=True)
class RequestMetadata:
    """Advisory client details stored alongside a session."""

    user_agent: str | None = None
    ip_address: str | None = None


@dataclass(frozen=True)
class IssuedSession:
    """A freshly persisted session and the raw token that proves it.

    ``token`` is only ever handed to the transport layer; it is not stored.
    """

    session_id: str
    user_id: str
    token: str
    created_at: datetime
    expires_at: datetime


class SessionManager:
    """Owns every decision about creating and destroying refresh sessions."""

    def __init__(
        self,
        store: SessionStore,
        policy: ExpiryPolicy,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.policy = policy
        self.clock = clock

    def _new_session(
        self,
        user_id: str,
        origin: datetime,
        now: datetime,
        metadata: RequestMetadata | None,
    ) -> Result[tuple[StoredSession, str]]:
        expires_at = self.policy.expiry_for(origin, now)
        if self.policy.is_exhausted(expires_at, now):
            return Err(SessionErrorKind.LIFETIME_EXCEEDED)

        metadata = metadata or RequestMetadata()
        token = generate_refresh_token()
        record = StoredSession(
            user_id=user_id,
            token_hash=hash_token(token),
            created_at=origin,
            expires_at=expires_at,
            user_agent=metadata.user_agent,
            ip_address=metadata.ip_address,
        )
        return Ok((record, token))

    def issue(
        self,
        user_id: str,
        metadata: RequestMetadata | None = None,
        now: datetime | None = None,
    ) -> Result[IssuedSession]:
        """Start a new lineage for ``user_id``."""
        now = now or self.clock()
        built = self._new_session(user_id, now, now, metadata)
        if isinstance(built, Err):
            logger.warning("Refusing to issue session for user %s: %s", user_id, built.kind.value)
            return built

        record, token = built.value
        with self.store.transaction():
            self.store.create(record)

        logger.info("Issued refresh session %s for user %s", record.id, user_id)
        return Ok(_issued(record, token))

    def rotate(
        self,
        raw_token: str,
        metadata: RequestMetadata | None = None,
        now: datetime | None = None,
    ) -> Result[IssuedSession]:
        """Swap the presented token for a successor in the same lineage."""
        now = now or self.clock()
        current = self.store.find_by_hash(hash_token(raw_token))
        if current is None:
            logger.info("Refresh rejected: no live session for presented token")
            return Err(SessionErrorKind.SESSION_NOT_FOUND)

        if current.expires_at < now:
            self._discard_expired(current)
            # Past the lineage deadline the cap is the cause, not the sliding window
            if now >= self.policy.lineage_deadline(current.created_at):
                kind = SessionErrorKind.LIFETIME_EXCEEDED
            else:
                kind = SessionErrorKind.EXPIRED
            logger.info("Refresh rejected for session %s: %s", current.id, kind.value)
            return Err(kind)

        built = self._new_session(current.user_id, current.created_at, now, metadata)
        if isinstance(built, Err):
            # The presented session stays valid until its own expiry.
            logger.info("Refresh rejected for session %s: %s", current.id, built.kind.value)
            return built

        successor, token = built.value
        try:
            with self.store.transaction():
                self.store.create(successor)
                if not self.store.delete_by_id(current.id):
                    logger.info(
                        "Session %s was already removed concurrently; keeping successor %s",
                        current.id,
                        successor.id,
                    )
        except SQLAlchemyError:
            logger.exception("Rotation of session %s failed; it remains valid", current.id)
            return Err(SessionErrorKind.ROTATION_FAILED)

        logger.info("Rotated refresh session %s -> %s", current.id, successor.id)
        return Ok(_issued(successor, token))

    def revoke(self, raw_token: str) -> Result[int]:
        """Delete the session behind ``raw_token``. Zero matches still succeeds."""
        with self.store.transaction():
            removed = self.store.delete_by_hash(hash_token(raw_token))
        logger.info("Revoked %d refresh session(s) by token", removed)
        return Ok(removed)

    def revoke_all(self, user_id: str) -> Result[int]:
        """Delete every session belonging to ``user_id``."""
        with self.store.transaction():
            removed = self.store.delete_for_user(user_id)
        logger.info("Revoked %d refresh session(s) for user %s", removed, user_id)
        return Ok(removed)

    def purge_expired(self, now: datetime | None = None) -> int:
        """Storage hygiene only; expired rows are also reaped lazily on rotate."""
        now = now or self.clock()
        with self.store.transaction():
            removed = self.store.delete_expired(now)
        if removed:
            logger.info("Purged %d expired refresh session(s)", removed)
        return removed

    def _discard_expired(self, session: StoredSession) -> None:
        try:
            with self.store.transaction():
                self.store.delete_by_id(session.id)
        except SQLAlchemyError:
            # The row is past expires_at and rejected on every lookup anyway.
            logger.warning("Could not delete expired session %s", session.id, exc_info=True)


def _issued(record: StoredSession, token: str) -> IssuedSession:
    return IssuedSession(
        session_id=record.id,
        user_id=record.user_id,
        token=token,
        created_at=record.created_at,
        expires_at=record.expires_at,
    )
