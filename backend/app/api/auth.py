"""Authentication API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, get_refresh_cookie, get_session_manager
from app.config import Settings, get_settings
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    ErrorResponse,
    OkResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)
from app.security import create_access_token, get_password_hash, verify_password
from app.services.session_cookie import RefreshCookie
from app.services.session_lifecycle import (
    Err,
    IssuedSession,
    RequestMetadata,
    SessionErrorKind,
    SessionManager,
)

router = APIRouter(prefix="/auth", tags=["auth"])

USER_AGENT_MAX_LENGTH = 255


def get_request_ip(request: Request) -> str | None:
    """Extract best-effort client IP for session metadata."""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


def request_metadata(request: Request) -> RequestMetadata:
    user_agent = request.headers.get("user-agent")
    return RequestMetadata(
        user_agent=user_agent[:USER_AGENT_MAX_LENGTH] if user_agent else None,
        ip_address=get_request_ip(request),
    )


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.lower()).first()


def build_auth_response(settings: Settings, user: User) -> AuthResponse:
    access_token = create_access_token(settings, {"sub": user.id, "email": user.email})
    return AuthResponse(access_token=access_token, user=UserResponse.model_validate(user))


def reject_refresh(cookie: RefreshCookie, detail: str, code: str) -> JSONResponse:
    """401 response that also tells the browser to drop the refresh cookie."""
    response = JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=ErrorResponse(detail=detail, code=code).model_dump(),
    )
    cookie.clear(response)
    return response


def start_session(
    request: Request,
    response: Response,
    user: User,
    manager: SessionManager,
    cookie: RefreshCookie,
    settings: Settings,
) -> AuthResponse:
    result = manager.issue(user.id, request_metadata(request))
    if isinstance(result, Err):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.message,
        )
    issued: IssuedSession = result.value
    cookie.write(response, issued.token, issued.expires_at)
    return build_auth_response(settings, user)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    user_data: UserRegister,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
    cookie: RefreshCookie = Depends(get_refresh_cookie),
    settings: Settings = Depends(get_settings),
):
    """Register a new user and start a session."""
    if find_user_by_email(db, user_data.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        )

    user = User(
        email=user_data.email,
        password_hash=get_password_hash(user_data.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent registration claimed the email after the lookup above
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        )
    db.refresh(user)

    return start_session(request, response, user, manager, cookie, settings)


@router.post("/login", response_model=AuthResponse)
def login(
    user_data: UserLogin,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
    cookie: RefreshCookie = Depends(get_refresh_cookie),
    settings: Settings = Depends(get_settings),
):
    """Login and get tokens."""
    user = find_user_by_email(db, user_data.email)

    if not user or not verify_password(user_data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return start_session(request, response, user, manager, cookie, settings)


@router.post(
    "/refresh",
    response_model=AuthResponse,
    responses={status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse}},
)
def refresh_tokens(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
    cookie: RefreshCookie = Depends(get_refresh_cookie),
    settings: Settings = Depends(get_settings),
):
    """Rotate the refresh cookie and mint a new access token."""
    raw_token = cookie.read(request)
    if raw_token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token missing",
        )

    result = manager.rotate(raw_token, request_metadata(request))
    if isinstance(result, Err):
        return reject_refresh(cookie, result.message, result.kind.value)

    issued = result.value
    user = db.query(User).filter(User.id == issued.user_id).first()
    if not user:
        manager.revoke(issued.token)
        return reject_refresh(cookie, "User not found", SessionErrorKind.SESSION_NOT_FOUND.value)

    cookie.write(response, issued.token, issued.expires_at)
    return build_auth_response(settings, user)


@router.post("/logout", response_model=OkResponse)
def logout(
    request: Request,
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
    cookie: RefreshCookie = Depends(get_refresh_cookie),
):
    """Revoke the presented refresh session, if any, and clear the cookie."""
    raw_token = cookie.read(request)
    if raw_token:
        manager.revoke(raw_token)
    cookie.clear(response)
    return OkResponse()


@router.post("/logout-all", response_model=OkResponse)
def logout_all(
    response: Response,
    current_user: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
    cookie: RefreshCookie = Depends(get_refresh_cookie),
):
    """Revoke every refresh session of the current user."""
    manager.revoke_all(current_user.id)
    cookie.clear(response)
    return OkResponse()


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get current user info."""
    return current_user
