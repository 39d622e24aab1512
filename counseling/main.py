import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from counseling.api.routes import admin, announcements, appointments, conversations, schedule
from counseling.core.config import settings, _ENV_FILE
from counseling.core.db import async_session_maker
from counseling.services.schedule_service import seed_default_schedule

if os.getenv("ENV") != "production":
    logging.basicConfig(level=logging.DEBUG)
else:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)


async def _seed_schedule() -> None:
    """Create the default weekly slot template on first start."""
    async with async_session_maker() as session:
        try:
            n = await seed_default_schedule(session)
            await session.commit()
            if n:
                logger.info("Schedule: seeded %d default slot(s)", n)
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Loading .env from: %s (exists: %s)", _ENV_FILE, _ENV_FILE.exists())
    logger.info(
        "Booking timezone: %s, changes accepted until %d:00 the day before",
        settings.timezone,
        settings.modification_cutoff_hour,
    )
    if not settings.admin_password_hash:
        logger.warning("ADMIN_PASSWORD_HASH is not set; admin login is disabled")
    if settings.seed_default_schedule:
        await _seed_schedule()
    yield


app = FastAPI(
    title="Counseling Booking API",
    description="Backend for counseling bookings, schedule administration, announcements and messages",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(admin.router, prefix="/api")
app.include_router(schedule.router, prefix="/api")
app.include_router(appointments.router, prefix="/api")
app.include_router(announcements.router, prefix="/api")
app.include_router(conversations.router, prefix="/api")


def _cors_headers(origin: str | None) -> dict[str, str]:
    """Add CORS headers to error responses so the browser doesn't block them."""
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Authorization, Content-Type",
    }
    if origin and origin in settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = origin
    elif settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = settings.cors_origins_list[0]
    return headers


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return the error as JSON; include CORS so 500 responses are not blocked by browser."""
    origin = request.headers.get("origin")
    headers = _cors_headers(origin)
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=headers,
        )
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
        headers=headers,
    )


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
