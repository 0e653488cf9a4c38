from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from psycopg2.extensions import connection as PgConnection
from psycopg2.pool import SimpleConnectionPool

from settings import settings

POOL_MAX_CONNECTIONS = 10
SESSION_SETUP = (
    "SET statement_timeout = '5000ms'",
    "SET application_name = 'offramp_payouts'",
)

_pool: SimpleConnectionPool | None = None


def _get_pool() -> SimpleConnectionPool:
    global _pool
    if _pool is None:
        if not settings.DATABASE_URL:
            raise RuntimeError("DATABASE_URL is not set.")
        _pool = SimpleConnectionPool(1, POOL_MAX_CONNECTIONS, dsn=settings.DATABASE_URL, connect_timeout=5)
    return _pool


def close_pool() -> None:
    global _pool
    if _pool is not None:
        _pool.closeall()
        _pool = None


@contextmanager
def get_conn() -> Iterator[PgConnection]:
    """One transaction per block: commit on exit, rollback if the block raises."""
    pool = _get_pool()
    conn = pool.getconn()
    try:
        with conn.cursor() as cur:
            for stmt in SESSION_SETUP:
                cur.execute(stmt)
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        pool.putconn(conn)
