"""
Database initialization script.
Run ``python -m menta.db.init_db`` to create all tables, optionally seeding a doctor:

    python -m menta.db.init_db --seed-email john@example.com --seed-password docpass123
"""
import argparse
import asyncio

from menta.core.logging import get_logger, setup_logging
from menta.db.database import async_session_maker, close_db, init_db
from menta.services.accounts import seed_doctor

logger = get_logger(__name__)


async def main(seed_name: str = None, seed_email: str = None, seed_password: str = None):
    """Create all tables and, when credentials are given, a bootstrap doctor."""
    await init_db()
    logger.info("Database initialized")

    if seed_email and seed_password:
        async with async_session_maker() as session:
            await seed_doctor(session, seed_name or "Dr. John Doe", seed_email, seed_password)

    await close_db()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create MENTA tables")
    parser.add_argument("--seed-name")
    parser.add_argument("--seed-email")
    parser.add_argument("--seed-password")
    args = parser.parse_args()

    setup_logging()
    asyncio.run(main(args.seed_name, args.seed_email, args.seed_password))
