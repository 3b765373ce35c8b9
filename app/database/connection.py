from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg_pool import ConnectionPool

from app.config.settings import Settings


def build_conninfo(settings: Settings) -> str:
    return (
        f"host={settings.db_host} "
        f"port={settings.db_port} "
        f"dbname={settings.db_database} "
        f"user={settings.db_username} "
        f"password={settings.db_password}"
    )


class Database:
    """Owns the connection pool for one worker process.

    Repositories receive a Database instance instead of reaching for a
    module-level pool, so tests can hand them a fake.
    """

    def __init__(self, settings: Settings, min_size: int = 1, max_size: int = 10) -> None:
        self._conninfo = build_conninfo(settings)
        self._min_size = min_size
        self._max_size = max_size
        self._pool: ConnectionPool | None = None

    def open(self) -> None:
        if self._pool is None:
            self._pool = ConnectionPool(
                self._conninfo, min_size=self._min_size, max_size=self._max_size
            )

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    @contextmanager
    def connection(self) -> Generator[psycopg.Connection[Any], None, None]:
        """Yield a pooled connection. Caller manages commit/rollback."""
        if self._pool is None:
            raise RuntimeError("Connection pool is not open; call Database.open() first.")
        with self._pool.connection() as conn:
            yield conn
