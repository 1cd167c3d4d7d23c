"""Create the users, documents, blocks and tags tables if they do not exist."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from crok.infrastructure.database.session import create_tables, engine  # noqa: E402
from crok.infrastructure.logging import get_logger  # noqa: E402

logger = get_logger(__name__)


async def main() -> None:
    logger.info(f"Creating database tables on {engine.url.render_as_string(hide_password=True)}")

    try:
        await create_tables()
        logger.info("✅ Database tables created successfully!")
    except Exception as e:
        logger.error(f"❌ Error creating database tables: {str(e)}", exc_info=True)
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
