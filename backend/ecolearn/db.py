from __future__ import annotations
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from ecolearn.config import settings

class Base(DeclarativeBase):
    pass

# pre-ping: managed Postgres drops idle connections between moderation bursts
engine = create_async_engine(
    settings.database_url,
    pool_pre_ping=True,
    echo=settings.log_level.upper() == "DEBUG",
)
# expire_on_commit=False: handlers serialise rows after the commit
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """One session per request; committed explicitly by the services."""
    async with SessionLocal() as session:
        yield session
