"""Shared FastAPI dependencies."""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.database import get_db
from app.models.user import User
from app.security import decode_access_token
from app.services.expiry_policy import ExpiryPolicy
from app.services.session_cookie import RefreshCookie
from app.services.session_lifecycle import SessionManager
from app.services.session_store import SessionStore

bearer_scheme = HTTPBearer(auto_error=False)

__all__ = [
    "get_current_user",
    "get_db",
    "get_refresh_cookie",
    "get_session_manager",
]


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    """Resolve the user behind a bearer access token."""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized

    try:
        payload = decode_access_token(settings, credentials.credentials)
    except ValueError:
        raise unauthorized

    user = db.query(User).filter(User.id == payload["sub"]).first()
    if not user:
        raise unauthorized
    return user


def get_session_manager(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SessionManager:
    """Session manager bound to the request's database session."""
    return SessionManager(SessionStore(db), ExpiryPolicy.from_settings(settings))


def get_refresh_cookie(settings: Settings = Depends(get_settings)) -> RefreshCookie:
    return RefreshCookie.from_settings(settings)
