"""Create the Linguala database schema.

Creates the user, history, glossary and settings tables if they do not
exist yet. Pass ``--reset`` to drop and recreate them.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from linguala.config import settings
from linguala.db import create_tables, engine


async def init_database(reset: bool = False):
    print(f"Initializing database: {settings.db.url}")
    if reset:
        print("Dropping existing tables first")

    try:
        tables = await create_tables(reset=reset)
    finally:
        await engine.dispose()

    print(f"✓ Schema ready: {', '.join(tables)}")


def main():
    try:
        asyncio.run(init_database(reset="--reset" in sys.argv[1:]))
    except Exception as e:
        print(f"\n❌ Error initializing database: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
