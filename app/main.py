"""
HR Personnel Service HTTP application.

Serves the employee, organization and attendance APIs under ``/api/v1``.
Notifications are produced by the background workers in ``app.worker``,
never on the request path.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.api.dependencies import SessionDep
from app.api.routers.attendance import router as attendance_router
from app.api.routers.employees import router as employees_router
from app.api.routers.organization import router as organization_router
from app.core.config import settings
from app.core.database import create_db_and_tables, engine
from app.core.exceptions import register_exception_handlers
from app.core.kafka import KafkaProducer
from app.core.logging import get_logger, setup_logging
from app.core.record_store import ensure_feed_head
from app.models.record import STORE_TABLES

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION} ({settings.ENVIRONMENT})")
    create_db_and_tables(*STORE_TABLES)
    with Session(engine) as session:
        ensure_feed_head(session)
    if not settings.KAFKA_ENABLED:
        logger.warning("Kafka is disabled; change notifications will not be published")

    yield

    KafkaProducer.close()
    logger.info(f"{settings.APP_NAME} stopped")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)

register_exception_handlers(app)

for router in (employees_router, attendance_router, organization_router):
    app.include_router(router, prefix="/api/v1")


@app.get("/health", tags=["health"])
def health_check(session: SessionDep):
    """Liveness plus a round trip to the record store."""
    try:
        session.exec(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Health check could not reach the database: {e}")
        database = "unavailable"

    body = {
        "status": "healthy" if database == "ok" else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "database": database,
        "kafka": "enabled" if settings.KAFKA_ENABLED else "disabled",
    }
    code = status.HTTP_200_OK if database == "ok" else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=body)
