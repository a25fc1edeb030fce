import logging

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base

logger = logging.getLogger(__name__)

Base = declarative_base()

class DatabaseSettings(BaseModel):
    db_url: str
    pool_size: int = 10
    max_overflow: int = 0
    pool_timeout: float = 30.0


class Database:
    def __init__(self, db_settings: DatabaseSettings) -> None:
        # The pool bounds concurrent connections; requests beyond it wait for a free one.
        self._engine = create_async_engine(
            db_settings.db_url,
            pool_size=db_settings.pool_size,
            max_overflow=db_settings.max_overflow,
            pool_timeout=db_settings.pool_timeout,
        )
        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(self._engine, expire_on_commit=False)

    async def create_tables(self) -> None:
        """Create all tables registered on the declarative base."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self._engine.dispose()
