"""Storage gateway for refresh sessions.

Executes exactly the reads and writes it is asked for. Deciding when a
session is created or destroyed belongs to ``session_lifecycle``.
"""
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
import uuid

from sqlalchemy.orm import Session

from app.models.auth import RefreshSession


@dataclass(frozen=True)
class StoredSession:
    """Detached snapshot of a ``refresh_sessions`` row."""

    user_id: str
    token_hash: str
    created_at: datetime
    expires_at: datetime
    user_agent: str | None = None
    ip_address: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def from_row(cls, row: RefreshSession) -> "StoredSession":
        return cls(
            id=row.id,
            user_id=row.user_id,
            token_hash=row.token_hash,
            created_at=row.created_at,
            expires_at=row.expires_at,
            user_agent=row.user_agent,
            ip_address=row.ip_address,
        )


class SessionStore:
    """Refresh-session persistence over a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, record: StoredSession) -> StoredSession:
        self.db.add(
            RefreshSession(
                id=record.id,
                user_id=record.user_id,
                token_hash=record.token_hash,
                created_at=record.created_at,
                expires_at=record.expires_at,
                user_agent=record.user_agent,
                ip_address=record.ip_address,
            )
        )
        self.db.flush()
        return record

    def find_by_hash(self, token_hash: str) -> StoredSession | None:
        row = self.db.query(RefreshSession).filter(RefreshSession.token_hash == token_hash).first()
        return StoredSession.from_row(row) if row else None

    def delete_by_id(self, session_id: str) -> bool:
        """Delete one row; False means it was already gone."""
        deleted = (
            self.db.query(RefreshSession)
            .filter(RefreshSession.id == session_id)
            .delete(synchronize_session=False)
        )
        return deleted > 0

    def delete_by_hash(self, token_hash: str) -> int:
        return (
            self.db.query(RefreshSession)
            .filter(RefreshSession.token_hash == token_hash)
            .delete(synchronize_session=False)
        )

    def delete_for_user(self, user_id: str) -> int:
        return (
            self.db.query(RefreshSession)
            .filter(RefreshSession.user_id == user_id)
            .delete(synchronize_session=False)
        )

    def delete_expired(self, now: datetime) -> int:
        return (
            self.db.query(RefreshSession)
            .filter(RefreshSession.expires_at < now)
            .delete(synchronize_session=False)
        )

    @contextmanager
    def transaction(self) -> Iterator["SessionStore"]:
        """Commit everything done inside the block, or roll all of it back."""
        try:
            yield self
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
