import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from preference_api.config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    # SQLite has no server-side pool to size
    if settings.database_url.startswith("sqlite"):
        return {"echo": settings.debug}
    if settings.environment == "production":
        return {"pool_size": 20, "max_overflow": 50, "pool_timeout": 60, "pool_recycle": 1800}
    return {"echo": settings.debug, "pool_size": 10, "max_overflow": 20, "pool_timeout": 30}


engine = create_async_engine(settings.database_url, **_engine_options())

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db():
    logger.debug("Opening database session...")
    async with AsyncSessionLocal() as db:
        try:
            yield db
        except Exception as e:
            logger.error(f"Database session error: {e}")
            raise
        finally:
            try:
                await db.close()
                logger.debug("Database session closed.")
            except Exception as close_error:
                logger.warning(f"Error closing database session: {close_error}")
