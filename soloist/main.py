"""Main entry point: prepare the database and seed the mission catalog"""
import logging
import asyncio
from soloist.config import validate_config, LOG_LEVEL, MISSION_CATALOG_PATH
from soloist.db.connection import Database
from soloist.db.postgres_store import PostgresStore
from soloist.progression.catalog import load_catalog_file

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL)
)

logger = logging.getLogger(__name__)


async def main() -> None:
    """Create the schema and load the mission catalog into PostgreSQL"""
    db = Database()
    try:
        logger.info("Validating configuration...")
        validate_config()

        logger.info("Initializing database connection pool...")
        await db.init_pool()

        store = PostgresStore(db)
        await store.init_schema()

        missions = load_catalog_file(MISSION_CATALOG_PATH)
        await store.replace_mission_catalog(missions)
        logger.info(f"Seeded {len(missions)} missions")

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise
    finally:
        logger.info("Closing database connection...")
        await db.close_pool()

        logger.info("Shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
