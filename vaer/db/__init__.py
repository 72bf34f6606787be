from __future__ import annotations

import os
import textwrap
from contextlib import asynccontextmanager, contextmanager
from contextvars import ContextVar
from typing import Any, AsyncIterator, Iterable, Iterator, Optional, Sequence

import asyncpg
import structlog

from ..utils import timed

logger = structlog.get_logger()

current_connection: ContextVar[asyncpg.Connection[asyncpg.Record]] = ContextVar(
    "connection"
)

_pool: asyncpg.pool.Pool[asyncpg.Record] | None = None

SERVER_SETTINGS = {
    "application_name": "vaer",
    "timezone": "UTC",
}


def is_configured() -> bool:
    return bool(os.environ.get("DATABASE_URL"))


@asynccontextmanager
async def setup() -> AsyncIterator[None]:
    """
    Configure database connectivity with a single connection.
    """

    dsn = os.environ.get("DATABASE_URL", None)

    con = await asyncpg.connect(dsn=dsn, server_settings=SERVER_SETTINGS)
    try:
        with set_connection(con):
            yield
    finally:
        await con.close()


async def connect() -> asyncpg.pool.Pool[asyncpg.Record]:
    global _pool
    assert _pool is None
    dsn = os.environ.get("DATABASE_URL", None)
    _pool = await asyncpg.create_pool(dsn=dsn, server_settings=SERVER_SETTINGS)
    assert _pool is not None
    return _pool


async def disconnect() -> None:
    global _pool
    assert _pool is not None
    await _pool.close()
    _pool = None


@contextmanager
def set_connection(con: asyncpg.Connection[asyncpg.Record]) -> Iterator[None]:
    """
    Set the connection for the current task
    """

    reset_token = current_connection.set(con)
    try:
        yield
    finally:
        current_connection.reset(reset_token)


@asynccontextmanager
async def connection() -> AsyncIterator[asyncpg.Connection[asyncpg.Record]]:
    """
    Get the connection assigned to the current task, or lease one from the
    pool for the duration of the block.
    """

    try:
        con = current_connection.get()
    except LookupError:
        pass
    else:
        yield con
        return

    if _pool is None:
        raise RuntimeError(
            "No connection or connection pool configured for current task"
        )

    async with _pool.acquire() as con:
        with set_connection(con):
            yield con


@asynccontextmanager
async def transaction() -> AsyncIterator[None]:
    async with connection() as con:
        async with con.transaction():
            yield


async def executemany(
    sql: str, args: Iterable[Sequence[Any]], *, timeout: Optional[float] = None
) -> None:
    async with connection() as con:
        with log_query(sql):
            await con.executemany(sql, args, timeout=timeout)


async def fetchval(
    sql: str, *args: Any, column: int = 0, timeout: Optional[float] = None
) -> Any:
    async with connection() as con:
        with log_query(sql):
            return await con.fetchval(sql, *args, column=column, timeout=timeout)


@contextmanager
def log_query(sql: str) -> Iterator[None]:
    with timed("Execute query", sql=textwrap.shorten(sql, 100)):
        yield
