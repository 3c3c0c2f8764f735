#!/usr/bin/env python3
"""
Database Check Script

Run this to verify the database is reachable and, optionally, create tables.
Usage: python scripts/check_connection.py [--create-tables]
"""
import sys
sys.path.insert(0, '.')

from app.core.config import get_settings
from app.db.postgres import check_database_connection, get_engine
from app.db.tables import metadata


def main():
    settings = get_settings()
    print("=" * 50)
    print("INTERNSHIP PLATFORM - DATABASE CHECK")
    print("=" * 50)

    print("\n[1] Testing database...")
    if settings.database_url:
        print(f"    URL: {settings.database_url}")
    else:
        print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    if not check_database_connection():
        print("    ❌ Database: FAILED")
        return 1
    print("    ✅ Database: CONNECTED")

    if "--create-tables" in sys.argv:
        print("\n[2] Creating tables...")
        metadata.create_all(get_engine())
        for name in metadata.tables:
            print(f"    - {name}")
        print("    ✅ Tables ready")

    print("\n" + "=" * 50)
    print("Database check complete!")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(main())
