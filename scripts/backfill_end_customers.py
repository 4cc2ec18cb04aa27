#!/usr/bin/env python3
"""Migrate embedded end customer projects into the end_customers table.

Runs the same idempotent migration the API performs on read, for every
customer of a company. Safe to run repeatedly.

Usage:
    python scripts/backfill_end_customers.py <company_id>
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from uuid import UUID

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import get_settings
from app.database import async_session_maker, engine
from app.services.end_customer_sync import sync_all_embedded_projects

settings = get_settings()
logger = logging.getLogger("backfill_end_customers")


async def backfill(company_id: UUID) -> int:
    """Run the migration for one company and commit."""
    async with async_session_maker() as session:
        created = await sync_all_embedded_projects(session, company_id)
        await session.commit()
    await engine.dispose()
    return created


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("company_id", type=UUID, help="Company whose customers to migrate")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    created = asyncio.run(backfill(args.company_id))
    print(f"✅ Created {created} end customers for company {args.company_id}")


if __name__ == "__main__":
    main()
