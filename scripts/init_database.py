#!/usr/bin/env python3
"""Initialize referral core database tables."""

import asyncio

from loguru import logger

from referral_core.config.settings import settings
from referral_core.database import create_engine_from_settings
from referral_core.logging import setup_logging
from referral_core.models import Base


async def init_database() -> None:
    """Create all referral core tables."""
    setup_logging(level="INFO")
    logger.info("Connecting to database...")
    engine = create_engine_from_settings(settings.database_url)

    async with engine.begin() as conn:
        logger.info("Creating tables (checkfirst=True)...")
        await conn.run_sync(
            Base.metadata.create_all,
            checkfirst=True
        )

    await engine.dispose()
    logger.success("Database tables created successfully!")


if __name__ == "__main__":
    asyncio.run(init_database())
