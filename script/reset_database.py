#!/usr/bin/env python3
"""
Database Reset Script
Reset the ride pool database structure

Features:
1. Drop & Recreate Database - completely wipe the database
2. Run Alembic Migrations - create the latest schema

Notes:
- This script only resets database structure, it does not seed data
- SQLite URLs (DATABASE_URL=sqlite+aiosqlite:///...) are reset by deleting the file
"""

from pathlib import Path
import time

from alembic import command
from alembic.config import Config
from sqlalchemy import URL, create_engine, text
from sqlalchemy.engine import make_url

from src.platform.config.core_setting import settings
from src.platform.constant.path import ALEMBIC_INI


DB_WAIT_SECONDS = 1


def _get_sync_url(async_url: str) -> URL:
    """postgresql+asyncpg://... -> postgresql://..."""
    url = make_url(async_url)
    return url.set(drivername=url.get_backend_name())


def _terminate_connections(conn, db_name: str) -> None:
    """Terminate all connections to the specified database"""
    conn.execute(
        text(
            'SELECT pg_terminate_backend(pid) FROM pg_stat_activity '
            'WHERE datname = :db_name AND pid <> pg_backend_pid()'
        ),
        {'db_name': db_name},
    )


def _drop_and_create_postgres_db(sync_url: URL) -> None:
    db_name = sync_url.database
    admin_engine = create_engine(sync_url.set(database='postgres'), isolation_level='AUTOCOMMIT')

    try:
        with admin_engine.connect() as conn:
            _terminate_connections(conn, db_name)

            conn.execute(text(f'DROP DATABASE IF EXISTS "{db_name}"'))
            print(f"   ✅ Database '{db_name}' dropped")

            time.sleep(DB_WAIT_SECONDS)

            conn.execute(text(f'CREATE DATABASE "{db_name}"'))
            print(f"   ✅ Database '{db_name}' created")
    finally:
        admin_engine.dispose()


def _remove_sqlite_file(sync_url: URL) -> None:
    if sync_url.database and sync_url.database != ':memory:':
        Path(sync_url.database).unlink(missing_ok=True)
        print(f"   ✅ SQLite file '{sync_url.database}' removed")


def _run_alembic_migrations() -> None:
    print("   🔄 Running 'alembic upgrade head'...")
    command.upgrade(Config(str(ALEMBIC_INI)), 'head')
    print('   ✅ Database migrations completed')


def main() -> None:
    sync_url = _get_sync_url(settings.DATABASE_URL_ASYNC)
    print('🔄 Starting database reset...')
    print('=' * 50)
    print(f'Database URL: {sync_url.render_as_string(hide_password=True)}')

    try:
        print('🗑️ Dropping database...')
        if sync_url.get_backend_name() == 'sqlite':
            _remove_sqlite_file(sync_url)
        else:
            _drop_and_create_postgres_db(sync_url)

        print('🏗️ Running database migrations...')
        _run_alembic_migrations()
    except Exception as e:
        print(f'❌ Reset failed: {e}')
        raise SystemExit(1) from e

    print('=' * 50)
    print('✅ Database reset completed!')


if __name__ == '__main__':
    main()
