"""
Check the PostgreSQL database for the Task Manager API.
Run once before `alembic upgrade head`: python scripts/init_postgres.py

Requires: PostgreSQL installed and running. Create user and database:

  sudo -u postgres psql
  CREATE USER taskmanager WITH PASSWORD 'taskmanager';
  CREATE DATABASE taskmanager_db OWNER taskmanager;
  GRANT ALL PRIVILEGES ON DATABASE taskmanager_db TO taskmanager;
  \q
"""

import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy.exc import SQLAlchemyError  # noqa: E402

from app.config import get_settings  # noqa: E402
from app.core.database import Database  # noqa: E402


def main():
    settings = get_settings()
    url = settings.get_database_url()
    if not url.startswith("postgresql"):
        print("Database URL is not PostgreSQL. Skipping.")
        return
    database = Database.from_settings(settings)
    try:
        database.ping()
        print("PostgreSQL connection OK. Database exists.")
    except SQLAlchemyError as e:
        print(f"Cannot connect to PostgreSQL: {e}")
        print("\nCreate database first:")
        print("  psql -U postgres -c \"CREATE USER taskmanager WITH PASSWORD 'taskmanager';\"")
        print("  psql -U postgres -c \"CREATE DATABASE taskmanager_db OWNER taskmanager;\"")
        print("  psql -U postgres -c \"GRANT ALL PRIVILEGES ON DATABASE taskmanager_db TO taskmanager;\"")
        sys.exit(1)
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
