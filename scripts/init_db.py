#!/usr/bin/env python3
"""
Database Init Script

Creates the tables, bootstraps the admin account (ADMIN_EMAIL/ADMIN_PASSWORD)
and reports connectivity for the configured database.
Usage: python scripts/init_db.py
"""
import sys

from internlink.core.config import get_settings
from internlink.db.database import Database
from internlink.services.credentials import CredentialStore


def main() -> int:
    settings = get_settings()
    print("=" * 50)
    print("INTERNLINK - DATABASE INIT")
    print("=" * 50)

    url = settings.sqlalchemy_url
    if settings.database_url is None:
        url = url.replace(f":{settings.postgres_password}@", ":****@")
    print(f"\n[1] Connecting to {url}")

    db = Database(settings.sqlalchemy_url)
    try:
        if not db.ping():
            print("    ❌ Database: FAILED")
            return 1
        print("    ✅ Database: CONNECTED")

        print("\n[2] Creating tables...")
        db.create_tables()
        print("    ✅ Tables ready")

        print("\n[3] Admin account...")
        admin_id = CredentialStore(db, settings.bcrypt_rounds).bootstrap_admin(
            settings.admin_email, settings.admin_password
        )
        if admin_id is None:
            print("    ⚠️  ADMIN_EMAIL / ADMIN_PASSWORD not configured (skipped)")
        else:
            print(f"    ✅ Admin user id: {admin_id}")
    finally:
        db.dispose()

    print("\n" + "=" * 50)
    print("Init complete!")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(main())
