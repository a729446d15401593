import os
from collections.abc import Generator

import psycopg
import pytest

from quoteflow.config.settings import Settings
from quoteflow.database.connection import close_pool, get_connection, init_pool

MIGRATIONS_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "migrations")


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "quoteflow_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        psycopg.connect(
            host=test_settings.db_host,
            port=test_settings.db_port,
            dbname=test_settings.db_database,
            user=test_settings.db_username,
            password=test_settings.db_password,
            connect_timeout=3,
        ).close()
    except Exception as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")

    init_pool(test_settings)
    with get_connection() as conn:
        for name in sorted(os.listdir(MIGRATIONS_DIR)):
            if not name.endswith(".sql"):
                continue
            with open(os.path.join(MIGRATIONS_DIR, name), encoding="utf-8") as fh:
                conn.execute(fh.read())
        conn.commit()
    try:
        yield
    finally:
        close_pool()
