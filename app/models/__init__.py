from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import SQLModel
from app.db.session import engine as default_engine
from . import document, payment # Import all table models

async def create_db_and_tables(engine: AsyncEngine = default_engine):
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
