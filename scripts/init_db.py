"""Script to initialize the database."""

import asyncio

from welltrack.database import engine
from welltrack.models import metadata
from welltrack.seed import seed_system_trackables


async def init_db() -> None:
    """Create all tables and seed the system symptoms and habits."""
    async with engine.begin() as conn:
        # Create all tables
        await conn.run_sync(metadata.create_all)

        symptom_count, habit_count = await seed_system_trackables(conn)

    await engine.dispose()
    print("✓ Database initialized successfully!")
    print(f"  Seeded {symptom_count} system symptoms and {habit_count} system habits")


if __name__ == "__main__":
    asyncio.run(init_db())
