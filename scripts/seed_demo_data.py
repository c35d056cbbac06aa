#!/usr/bin/env python3
"""
Demo Data Seeder

Creates the tables (if needed) and fills them with a demo school so the
reports have something to show.

Usage:
    python scripts/seed_demo_data.py              # Add demo data
    python scripts/seed_demo_data.py --reset      # Wipe all rows first
    python scripts/seed_demo_data.py --seed 42    # Reproducible data
"""

import argparse
import asyncio
import random
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from academy.config import settings
from academy.core.models import Base
from academy.seeding.demo import reset_demo_data, seed_demo_data


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed the reports database with demo data")
    parser.add_argument("--reset", action="store_true", help="Delete existing rows before seeding")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible data")
    parser.add_argument("--students", type=int, default=40, help="Number of students to create")
    parser.add_argument("--db-url", type=str, help="Custom database URL (default from settings)")
    args = parser.parse_args()

    db_url = args.db_url or settings.DATABASE_URL
    print("🚀 Academy Demo Seeder")
    print(f"🗄️  Database: {db_url.split('@')[1] if '@' in db_url else db_url}\n")

    engine = create_async_engine(db_url, echo=False)
    SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        print("✅ Database tables created/verified")

        async with SessionLocal() as session:
            if args.reset:
                print("⚠️  RESET mode: deleting existing data...")
                await reset_demo_data(session)

            counts = await seed_demo_data(
                session, random.Random(args.seed), students=args.students
            )

        print("\n📊 Created:")
        for entity, count in counts.items():
            print(f"  {entity}: {count}")
        print("\n✅ Seeding complete!")

    except Exception as e:
        print(f"\n❌ Error: {e}")
        raise
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
