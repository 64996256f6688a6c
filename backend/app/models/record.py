"""Record model."""
import uuid

from sqlalchemy import Column, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from app.clock import utcnow_iso
from app.database import Base


class Record(Base):
    """A user-owned note with a title and optional free-text content."""

    __tablename__ = "records"
    __table_args__ = (
        Index("ix_records_user_created", "user_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(Text)
    created_at = Column(String(26), default=utcnow_iso)
    updated_at = Column(String(26), default=utcnow_iso, onupdate=utcnow_iso)

    user = relationship("User", back_populates="records")
