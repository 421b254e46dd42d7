"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from countdown.config import settings
from countdown.database import Base, engine
from countdown.errors import CountdownError, ValidationError

# Import routers
from countdown.routers import auth, share, timers

# Import all models so Base.metadata knows about them
from countdown.models.user import User    # noqa: F401
from countdown.models.timer import Timer  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Countdown Timers",
    description="Named countdown timers with a main display and public share links",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CountdownError)
async def handle_countdown_error(request: Request, exc: CountdownError):
    """Every service error becomes an explicit ``{"error", "code"}`` body."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    """Malformed request bodies get the same error shape as service errors."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'] if part != 'body')}: {err['msg']}"
        for err in exc.errors()
    )
    logger.info("%s %s rejected: %s", request.method, request.url.path, problems)
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"error": f"Invalid request: {problems}", "code": ValidationError.code},
    )


# Register routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(timers.router, prefix="/api/timers", tags=["Timers"])
app.include_router(share.router, prefix="/api/share", tags=["Share"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
