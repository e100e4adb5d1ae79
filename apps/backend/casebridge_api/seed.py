"""
Seed demo accounts: one client and one lawyer

Skips when any user exists. Both accounts use the password Passw0rd!

Usage:
    python -m casebridge_api.seed
"""

import asyncio
import logging
from casebridge.services.users import DEMO_PASSWORD, seed_users
from casebridge_api.database import async_session, init_db

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def seed():
    """Create tables if needed and insert the demo accounts"""
    await init_db()
    async with async_session() as session:
        users = await seed_users(session)

    if not users:
        logger.info("Database already has users, nothing to do")
        return

    logger.info("Example accounts:")
    for user in users:
        logger.info(f"  {user.role.value}: {user.email} / {DEMO_PASSWORD}")


if __name__ == "__main__":
    asyncio.run(seed())
