"""
Detainee Registry API with PostgreSQL, S3, and security features.
"""
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import text

import config
from database.connection import Database
from storage.s3_client import S3Client
from storage.local_store import LocalBlobStore
from core.logger import logger
from middleware.security import (
    RateLimitMiddleware, SecurityHeadersMiddleware,
    setup_cors, setup_trusted_hosts
)
from middleware.auth_middleware import AuthRequiredMiddleware
from middleware.errors import register_exception_handlers
from services.session_store import SessionStore
from services.user_service import UserService
from routers.auth import router as auth_router
from routers.dashboard import router as dashboard_router
from routers.detainees import router as detainees_router
from routers.search import router as search_router
from routers.ocr import router as ocr_router
from routers.admin_users import router as admin_users_router


def init_blob_store():
    """S3 when enabled and reachable, local disk otherwise."""
    if config.USE_S3:
        try:
            return S3Client(
                bucket_name=config.S3_BUCKET_NAME,
                aws_access_key_id=config.S3_ACCESS_KEY_ID,
                aws_secret_access_key=config.S3_SECRET_ACCESS_KEY,
                region_name=config.S3_REGION,
                endpoint_url=config.S3_ENDPOINT_URL,
                auto_create_bucket=True,
                presigned_url_expiry=config.S3_PRESIGNED_URL_EXPIRY,
            )
        except Exception as e:
            logger.error(f"Failed to initialize S3 client: {e}", exc_info=True)
            logger.warning("Continuing without S3 - attachments will be stored locally")
    else:
        logger.info("S3 storage disabled - using local storage")
    return LocalBlobStore(config.UPLOADS_DIR)


# Lifespan context manager for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan events for FastAPI app.
    Initialize database and attachment storage, seed the default admin.
    """
    logger.info("=" * 60)
    logger.info(f"Starting {config.APP_NAME}...")
    logger.info("=" * 60)

    if config.db is None:
        try:
            config.db = Database(
                database_url=config.DATABASE_URL,
                pool_size=config.DB_POOL_SIZE,
                max_overflow=config.DB_MAX_OVERFLOW
            )
            # Create tables if they don't exist
            config.db.create_tables()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}", exc_info=True)
            raise

    if config.blob_store is None:
        config.blob_store = init_blob_store()

    with config.db.get_session() as db:
        UserService.ensure_default_admin(db)
        SessionStore.purge_expired(db)

    logger.info("=" * 60)
    logger.info("Server ready!")
    logger.info(f"Environment: {config.ENVIRONMENT}")
    logger.info("API Docs: http://localhost:8000/docs")
    logger.info("=" * 60)

    yield

    # Cleanup on shutdown
    logger.info("Shutting down...")
    if config.db:
        config.db.engine.dispose()
        logger.info("Database connections closed")


# Initialize FastAPI app
app = FastAPI(
    title=config.APP_NAME,
    description="Detainee registration and search API with role-based access and audit logging",
    version=config.APP_VERSION,
    lifespan=lifespan
)

register_exception_handlers(app)

# Setup security middleware
app.add_middleware(SecurityHeadersMiddleware)
if config.RATE_LIMIT_ENABLED:
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_minute=config.RATE_LIMIT_PER_MINUTE,
        requests_per_hour=config.RATE_LIMIT_PER_HOUR,
        login_attempts_per_minute=config.RATE_LIMIT_LOGIN_PER_MINUTE
    )
app.add_middleware(AuthRequiredMiddleware)
setup_cors(app, config.CORS_ORIGINS, allow_credentials=config.CORS_ALLOW_CREDENTIALS)
if config.ENVIRONMENT == "production":
    setup_trusted_hosts(app, config.TRUSTED_HOSTS)

# Include routers
app.include_router(auth_router)
app.include_router(dashboard_router)
app.include_router(detainees_router)
app.include_router(search_router)
app.include_router(ocr_router)
app.include_router(admin_users_router)


@app.get("/")
async def root():
    """Root endpoint with API information. Public endpoint."""
    return {
        "message": config.APP_NAME,
        "version": config.APP_VERSION,
        "environment": config.ENVIRONMENT,
        "docs": "/docs",
        "s3_enabled": isinstance(config.blob_store, S3Client),
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring. Public endpoint."""
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "checks": {}
    }

    # Check database
    try:
        if config.db is None:
            health_status["checks"]["database"] = {"status": "error", "error": "not initialized"}
            health_status["status"] = "degraded"
        else:
            with config.db.get_session() as db:
                db.execute(text("SELECT 1"))
            health_status["checks"]["database"] = {"status": "ok"}
    except Exception as e:
        health_status["checks"]["database"] = {"status": "error", "error": str(e)}
        health_status["status"] = "degraded"

    # Check attachment storage
    store = config.blob_store
    if isinstance(store, S3Client):
        try:
            store.s3_client.head_bucket(Bucket=store.bucket_name)
            health_status["checks"]["storage"] = {"status": "ok", "backend": "s3", "bucket": store.bucket_name}
        except Exception as e:
            health_status["checks"]["storage"] = {"status": "error", "backend": "s3", "error": str(e)}
            health_status["status"] = "degraded"
    elif store is not None:
        health_status["checks"]["storage"] = {"status": "ok", "backend": "local"}
    else:
        health_status["checks"]["storage"] = {"status": "error", "error": "not initialized"}
        health_status["status"] = "degraded"

    return health_status


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
