"""
scripts/setup_db.py — Initialize the database schema.

Run once before starting the application for the first time:
    python scripts/setup_db.py

Creates the prospect and status-history tables defined in atlas/db/models.py
directly from SQLAlchemy metadata.
"""

import sys
import os

# Ensure the project root is on the path so we can import `atlas`
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from atlas.config import settings
from atlas.db.session import check_connection, create_tables


def setup_db() -> None:
    print("🔌 Connecting to database...")
    print(f"   URL: {settings.database_url[:40]}...")
    check_connection()
    print("✅ Connection successful.")

    print("\n📦 Creating prospect tables if they don't exist...")
    tables = create_tables()
    print(f"✅ Tables in database: {tables}")

    print("\n🎉 Database setup complete!")


if __name__ == "__main__":
    setup_db()
