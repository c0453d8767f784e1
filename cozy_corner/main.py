"""
FastAPI app entry point
"""
import logging
import os
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from .auth_utils import get_password_hash
from .config import settings
from .db import Base, SessionLocal, engine

# Import models so every table is registered on Base.metadata
from . import models  # noqa: F401
from .models.user import User, UserRole, UserStatus

# Import routes
from .routes import (
    admin,
    auth,
    menu,
    notifications,
    orders,
    payments,
    reservations,
    reviews,
    uploads,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging():
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)


def initialize_upload_storage() -> bool:
    """
    Create the upload directory and check that it is writable.
    """
    upload_dir = Path(settings.UPLOAD_DIR)
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        marker = upload_dir / ".write-test"
        marker.write_text("ok")
        marker.unlink()
        logger.info(f"Upload directory ready: {upload_dir.resolve()}")
        return True
    except OSError:
        logger.exception(f"Upload directory {upload_dir} is not writable")
        return False


def run_alembic_migrations() -> bool:
    """
    Run Alembic migrations programmatically with retry logic.
    This is safer than Base.metadata.create_all() in production.
    """
    from alembic import command
    from alembic.config import Config

    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    alembic_ini_path = os.path.join(base_dir, "alembic.ini")

    if not os.path.exists(alembic_ini_path):
        logger.warning("alembic.ini not found, skipping migrations")
        return False

    alembic_cfg = Config(alembic_ini_path)
    alembic_cfg.set_main_option("script_location", os.path.join(base_dir, "alembic"))

    max_retries = 5
    retry_delay = 5

    for attempt in range(max_retries):
        try:
            command.upgrade(alembic_cfg, "head")
            logger.info("Migrations completed successfully")
            return True
        except OperationalError as e:
            if attempt < max_retries - 1 and ("timed out" in str(e) or "could not connect" in str(e)):
                logger.warning(f"Database connection failed (attempt {attempt + 1}/{max_retries}), "
                               f"retrying in {retry_delay} seconds")
                time.sleep(retry_delay)
                continue
            logger.exception("Migration error")
            return False
        except Exception:
            logger.exception("Migration error")
            return False
    return False


def ensure_admin_exists():
    """
    Ensure the bootstrap admin account exists, create it if missing.
    """
    db = SessionLocal()
    try:
        admin = db.query(User).filter(User.email == settings.ADMIN_EMAIL.lower()).first()
        if admin:
            if admin.role != UserRole.admin:
                logger.warning(f"Bootstrap account {admin.email} exists but is not an admin")
            return

        db.add(User(
            name="Admin",
            email=settings.ADMIN_EMAIL.lower(),
            password_hash=get_password_hash(settings.ADMIN_PASSWORD),
            role=UserRole.admin,
            status=UserStatus.active,
        ))
        db.commit()
        logger.info(f"Admin created: {settings.ADMIN_EMAIL}")
    except Exception:
        logger.exception("Error ensuring admin account")
        db.rollback()
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging()
    logger.info(f"Starting {settings.APP_NAME} in {settings.ENVIRONMENT} mode")

    storage_ready = initialize_upload_storage()
    if not storage_ready and settings.is_production:
        logger.warning("Running in production without writable upload storage")

    migrated = run_alembic_migrations()
    if not migrated and not settings.is_production:
        # Fallback to create_all only in development
        logger.warning("Migrations failed, falling back to create_all")
        Base.metadata.create_all(bind=engine)

    ensure_admin_exists()
    logger.info("Application ready")

    yield

    # Shutdown
    logger.info("Shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Something went wrong!"})


@app.get("/")
async def root():
    return {
        "status": "ok",
        "message": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Health check endpoint with database and storage status"""
    database_ok = True
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except OperationalError:
        logger.exception("Health check could not reach the database")
        database_ok = False

    upload_dir = Path(settings.UPLOAD_DIR)
    return {
        "status": "healthy" if database_ok else "degraded",
        "environment": settings.ENVIRONMENT,
        "database": "ok" if database_ok else "unreachable",
        "storage": {
            "upload_dir": str(upload_dir),
            "exists": upload_dir.is_dir(),
        }
    }


# Register routers
API_PREFIX = "/api"
app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(menu.router, prefix=API_PREFIX)
app.include_router(orders.router, prefix=API_PREFIX)
app.include_router(payments.router, prefix=API_PREFIX)
app.include_router(reservations.router, prefix=API_PREFIX)
app.include_router(reviews.router, prefix=API_PREFIX)
app.include_router(admin.router, prefix=API_PREFIX)
app.include_router(notifications.router, prefix=API_PREFIX)
app.include_router(uploads.router, prefix=API_PREFIX)

# Uploaded images
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("cozy_corner.main:app", host=settings.HOST, port=settings.PORT, reload=False)
