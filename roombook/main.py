import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from slowapi.middleware import SlowAPIMiddleware
from slowapi.errors import RateLimitExceeded

from .config import get_settings
from .database import Base, engine, SessionLocal
from .rate_limit import limiter
from .routers import auth, rooms, bookings, ads, settings as settings_router, reports, users, uploads
from .error_handlers import register_exception_handlers
from .seed import seed_demo_data

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="RoomBook Backend",
    version="0.1.0",
    description="Meeting room booking with conflict checks, ads, running text and reports.",
)

# Attach limiter to app and add middleware
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

register_exception_handlers(app)


# Custom handler for rate limit errors (HTTP 429)
@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded. Please try again later.",
            "detail": "Rate limit exceeded. Please try again later.",
            "path": str(request.url.path),
        },
    )


# -----------------------------------------
# Storage lifecycle
# -----------------------------------------
@app.on_event("startup")
def startup_db():
    """Create tables and, when enabled, fill empty tables with demo data."""
    Base.metadata.create_all(bind=engine)
    if settings.seed_demo_data:
        db = SessionLocal()
        try:
            seed_demo_data(db)
        finally:
            db.close()
    logger.info("Storage ready at %s", engine.url.render_as_string(hide_password=True))


@app.on_event("shutdown")
def shutdown_db():
    engine.dispose()


# -----------------------------------------
# Routers (/api + versioned /api/v1)
# -----------------------------------------
for router in (
    auth.router,
    rooms.router,
    bookings.router,
    ads.router,
    settings_router.router,
    reports.router,
    users.router,
    uploads.router,
):
    app.include_router(router, prefix="/api")
    app.include_router(router, prefix="/api/v1")


# Uploaded files are served back from the upload directory
upload_dir = Path(settings.upload_dir)
upload_dir.mkdir(parents=True, exist_ok=True)
app.mount(uploads.UPLOADS_URL_PREFIX, StaticFiles(directory=upload_dir), name="uploads")


# -----------------------------------------
# Health check endpoint
# -----------------------------------------
@app.get("/health", tags=["health"])
def health_check():
    return {"status": "ok"}
