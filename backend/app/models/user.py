"""User model."""
import uuid

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from app.clock import utcnow_iso
from app.database import Base


class User(Base):
    """User account."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(String(26), default=utcnow_iso)
    updated_at = Column(String(26), default=utcnow_iso, onupdate=utcnow_iso)

    # Relationships
    records = relationship("Record", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    refresh_sessions = relationship(
        "RefreshSession",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
