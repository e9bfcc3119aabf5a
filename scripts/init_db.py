"""
Database initialization script

Run once (or after schema changes) to create indexes:
    python scripts/init_db.py
    python scripts/init_db.py --reset     # drop custom indexes first
"""

import argparse
import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

from app.core.config import settings
from app.core.logging import setup_logging, get_logger
from app.db.mongo import (
    connect_to_mongo,
    close_mongo_connection,
    USERS_COLLECTION,
    MEMBERSHIPS_COLLECTION,
    AUTH_SESSIONS_COLLECTION,
)
from app.db.indexes import create_indexes, drop_all_indexes

setup_logging()
logger = get_logger("scripts.init_db")


async def main(reset: bool):
    logger.info("=" * 60)
    logger.info("  ROSCA Bot Database Setup")
    logger.info("=" * 60)

    database = await connect_to_mongo()

    try:
        if reset:
            await drop_all_indexes(database)

        await create_indexes(database)

        logger.info("🔍 Verifying indexes...")
        for name in (USERS_COLLECTION, MEMBERSHIPS_COLLECTION, AUTH_SESSIONS_COLLECTION):
            indexes = await database[name].index_information()
            count = await database[name].count_documents({})
            custom = [idx for idx in indexes if idx != "_id_"]
            logger.info(f"  {name}: {count} documents, indexes {custom}")

        logger.info(f"✅ Database '{settings.MONGODB_DB_NAME}' ready")

    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create MongoDB indexes")
    parser.add_argument("--reset", action="store_true", help="Drop custom indexes before creating them")
    args = parser.parse_args()
    asyncio.run(main(args.reset))
