"""Mnemos - records API with refresh-session authentication."""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.clock import utcnow
from app.config import get_settings
from app.logging_config import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging(settings.log_level)

    # Startup: create tables and sweep refresh sessions that expired while we were down
    from app.database import Base, engine, get_db_context
    from app.services.expiry_policy import ExpiryPolicy
    from app.services.session_lifecycle import SessionManager
    from app.services.session_store import SessionStore

    # Import all models so they're registered with Base
    from app import models  # noqa: F401

    Base.metadata.create_all(bind=engine)

    with get_db_context() as db:
        SessionManager(SessionStore(db), ExpiryPolicy.from_settings(settings)).purge_expired()

    logger.info("%s started", settings.app_name)
    yield


app = FastAPI(
    title=f"{settings.app_name} API",
    description="HTTP API for the Mnemos application.",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend; credentials are needed for the refresh cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health", tags=["health"])
async def health_check():
    """Health check endpoint."""
    return {"ok": True, "ts": utcnow().isoformat() + "Z"}


# Import and include routers
from app.api import auth, records  # noqa: E402

app.include_router(auth.router, prefix="/api")
app.include_router(records.router, prefix="/api")
