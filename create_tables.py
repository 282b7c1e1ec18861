import asyncio
import logging
from app.models import create_db_and_tables

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

async def create_tables():
    logger.info("Creating documents and payments tables...")
    await create_db_and_tables()
    logger.info("Tables created.")

if __name__ == "__main__":
    asyncio.run(create_tables())
