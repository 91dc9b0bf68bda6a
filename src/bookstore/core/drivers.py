"""Database drivers used by the connection pool.

A driver knows how to open, talk to and close one kind of physical
connection. Statements always use ``?`` positional placeholders; drivers
whose client library expects another style rewrite them.
"""

import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Sequence

import aiosqlite
import asyncpg

Row = Dict[str, Any]

# SQLite configuration for concurrent access
SQLITE_PRAGMAS = [
    "PRAGMA journal_mode = WAL",          # Write-Ahead Logging for concurrency
    "PRAGMA busy_timeout = 5000",         # 5 second timeout for locks
    "PRAGMA synchronous = NORMAL",
    "PRAGMA foreign_keys = ON",
]


class DatabaseDriver:
    """Interface shared by all drivers."""

    dialect = "generic"
    identity_column = "INTEGER PRIMARY KEY"

    async def connect(self) -> Any:
        raise NotImplementedError

    async def fetch(self, conn: Any, sql: str, params: Sequence[Any] = ()) -> List[Row]:
        """Run one statement and return its result rows (possibly empty)."""
        raise NotImplementedError

    async def execute_control(self, conn: Any, sql: str) -> None:
        """Run a parameterless control statement such as BEGIN or COMMIT."""
        raise NotImplementedError

    async def ping(self, conn: Any) -> None:
        raise NotImplementedError

    async def close(self, conn: Any) -> None:
        raise NotImplementedError

    def is_disconnect(self, exc: BaseException) -> bool:
        """Whether ``exc`` means the connection itself is unusable."""
        return isinstance(exc, (ConnectionError, OSError))

    def is_unique_violation(self, exc: BaseException) -> bool:
        """Whether ``exc`` is a rejected duplicate on a unique constraint."""
        return False

    def describe(self) -> str:
        return self.dialect


class SQLiteDriver(DatabaseDriver):
    """Embedded SQLite database through aiosqlite.

    Connections run in autocommit mode; transactions are opened and closed
    with explicit BEGIN / COMMIT / ROLLBACK.
    BEGIN is sent as BEGIN IMMEDIATE: the write lock is taken before the
    first read, and concurrent writers wait on ``busy_timeout``.
    """

    dialect = "sqlite"
    identity_column = "INTEGER PRIMARY KEY AUTOINCREMENT"

    def __init__(self, database_path: str, timeout: float = 30.0):
        self.database_path = Path(database_path)
        self.timeout = timeout

    async def connect(self) -> aiosqlite.Connection:
        """Create a new database connection with optimized settings."""
        if str(self.database_path) != ":memory:":
            self.database_path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(
            self.database_path,
            timeout=self.timeout,
            isolation_level=None  # Autocommit mode
        )
        try:
            for pragma in SQLITE_PRAGMAS:
                await conn.execute(pragma)
        except Exception:
            await conn.close()
            raise

        conn.row_factory = aiosqlite.Row
        return conn

    async def fetch(
        self,
        conn: aiosqlite.Connection,
        sql: str,
        params: Sequence[Any] = ()
    ) -> List[Row]:
        cursor = await conn.execute(sql, tuple(params))
        try:
            if cursor.description is None:
                return []
            rows = await cursor.fetchall()
            return [dict(row) for row in rows]
        finally:
            await cursor.close()

    async def execute_control(self, conn: aiosqlite.Connection, sql: str) -> None:
        if sql == "BEGIN":
            sql = "BEGIN IMMEDIATE"
        await conn.execute(sql)

    async def ping(self, conn: aiosqlite.Connection) -> None:
        await conn.execute("SELECT 1")

    async def close(self, conn: aiosqlite.Connection) -> None:
        await conn.close()

    def is_disconnect(self, exc: BaseException) -> bool:
        if isinstance(exc, sqlite3.ProgrammingError):
            return "closed" in str(exc).lower()
        if isinstance(exc, ValueError):
            # aiosqlite raises ValueError once its worker thread has stopped
            return "closed" in str(exc).lower() or "no active connection" in str(exc).lower()
        return super().is_disconnect(exc)

    def is_unique_violation(self, exc: BaseException) -> bool:
        return isinstance(exc, sqlite3.IntegrityError) and "UNIQUE constraint failed" in str(exc)

    def describe(self) -> str:
        return f"sqlite:{self.database_path}"


def to_numbered_placeholders(sql: str) -> str:
    """Rewrite ``?`` placeholders as ``$1``, ``$2``, ... outside quoted text.

    >>> to_numbered_placeholders("SELECT * FROM books WHERE genre = ? AND title <> '?'")
    "SELECT * FROM books WHERE genre = $1 AND title <> '?'"
    """
    out = []
    index = 0
    quote = None
    for char in sql:
        if quote:
            if char == quote:
                quote = None
            out.append(char)
        elif char in ("'", '"'):
            quote = char
            out.append(char)
        elif char == "?":
            index += 1
            out.append(f"${index}")
        else:
            out.append(char)
    return "".join(out)


class PostgresDriver(DatabaseDriver):
    """Network PostgreSQL server through asyncpg."""

    dialect = "postgres"
    identity_column = "SERIAL PRIMARY KEY"

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        database: str,
        connect_timeout: float = 10.0
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.connect_timeout = connect_timeout

    async def connect(self) -> asyncpg.Connection:
        return await asyncpg.connect(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            database=self.database,
            timeout=self.connect_timeout,
        )

    async def fetch(
        self,
        conn: asyncpg.Connection,
        sql: str,
        params: Sequence[Any] = ()
    ) -> List[Row]:
        records = await conn.fetch(to_numbered_placeholders(sql), *params)
        return [dict(record) for record in records]

    async def execute_control(self, conn: asyncpg.Connection, sql: str) -> None:
        await conn.execute(sql)

    async def ping(self, conn: asyncpg.Connection) -> None:
        await conn.fetchval("SELECT 1")

    async def close(self, conn: asyncpg.Connection) -> None:
        await conn.close()

    def is_disconnect(self, exc: BaseException) -> bool:
        if isinstance(exc, (
            asyncpg.exceptions.PostgresConnectionError,
            asyncpg.exceptions.InterfaceError,
        )):
            return True
        return super().is_disconnect(exc)

    def is_unique_violation(self, exc: BaseException) -> bool:
        return isinstance(exc, asyncpg.exceptions.UniqueViolationError)

    def describe(self) -> str:
        return f"postgres://{self.user}@{self.host}:{self.port}/{self.database}"


def create_driver(config) -> DatabaseDriver:
    """Build the driver named by a ``DatabaseConfig``-like object."""
    if config.driver == "sqlite":
        return SQLiteDriver(config.path)
    if config.driver == "postgres":
        return PostgresDriver(
            host=config.host,
            port=config.port,
            user=config.user,
            password=config.password,
            database=config.database,
        )
    raise ValueError(f"Unsupported database driver: {config.driver}")
