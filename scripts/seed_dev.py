#!/usr/bin/env python
"""Seed a development database with the demo users and postcards.

Constraints:
- Refuses to run in staging or prod (DREAMPOST_ENV check)
- Idempotent: users that already exist are skipped
- Never runs automatically (manual invocation only)

Usage:
    cd python && DATABASE_URL=sqlite:///dreampost.db uv run python ../scripts/seed_dev.py
"""

import os
import sys


def main():
    # 1. Environment check (hard fail in staging/prod)
    dreampost_env = os.getenv("DREAMPOST_ENV", "local")
    if dreampost_env not in ("local", "test"):
        print(f"ERROR: seed_dev.py refuses to run in DREAMPOST_ENV={dreampost_env}")
        sys.exit(1)

    # 2. Check DATABASE_URL (the in-memory store has nothing to seed)
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("ERROR: DATABASE_URL environment variable must be set")
        sys.exit(1)

    from dreampost.config import get_settings
    from dreampost.logging import configure_logging
    from dreampost.storage import create_storage, seed_demo_data

    configure_logging(json_format=False)

    storage = create_storage(get_settings())
    try:
        created = seed_demo_data(storage)
    finally:
        storage.close()

    print(f"Seeded {created} demo user(s)")
    print("  Public gallery: GET /api/postcards/public")


if __name__ == "__main__":
    main()
