from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


def _is_sqlite(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def create_database():
    """Create the MySQL schema if missing. Other backends manage this themselves."""
    if make_url(settings.database_url).get_backend_name() != "mysql":
        return

    temp_engine = create_engine(settings.database_url_without_db)
    try:
        with temp_engine.connect() as conn:
            _ = conn.execute(text(f"CREATE DATABASE IF NOT EXISTS {settings.DB_NAME}"))
            conn.commit()
            logger.info(f"Database '{settings.DB_NAME}' ready")
    except Exception as e:
        logger.error(f"Failed to create database: {e}")
        raise
    finally:
        temp_engine.dispose()


def create_db_and_tables(*models):
    """
    Create database and tables for given models.

    Args:
        *models: SQLModel classes to create tables for
    """
    create_database()
    if models:
        for model in models:
            model.__table__.create(engine, checkfirst=True)
        logger.info(f"Database tables created for {len(models)} model(s)")
    else:
        SQLModel.metadata.create_all(engine)
        logger.info("Database tables created successfully")


def build_engine(url: str, echo: bool = False):
    if _is_sqlite(url):
        # In-memory sqlite must share one connection across threads
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,  # Verify connections before using them
        pool_recycle=3600,  # Recycle connections after 1 hour
    )


engine = build_engine(settings.database_url, echo=settings.DEBUG)


def get_session():
    with Session(engine) as session:
        yield session
