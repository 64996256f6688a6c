"""SQLAlchemy models package."""
from app.models.user import User
from app.models.record import Record
from app.models.auth import RefreshSession

__all__ = [
    "User",
    "Record",
    "RefreshSession",
]
