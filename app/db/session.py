from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.orm import sessionmaker
from app.core.config import settings

def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine, with asyncpg tuning only when talking to Postgres."""
    if database_url.startswith("postgresql+asyncpg"):
        return create_async_engine(
            database_url,
            echo=echo,
            future=True,
            connect_args={"statement_cache_size": 0},
            pool_pre_ping=True,
            pool_recycle=1800
        )
    return create_async_engine(database_url, echo=echo, future=True)

engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)

async_session = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session
