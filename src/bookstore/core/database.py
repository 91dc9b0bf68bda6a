"""Database connection pool.

Every route in the API reaches the database through one ``DatabasePool``
created at startup. Callers either run a single statement with
``pool.execute(sql, params)`` or lease a connection for several statements:

    async with pool.acquire() as conn:
        await conn.begin()
        await conn.run("INSERT INTO ...", (...))
        await conn.run("UPDATE ...", (...))
        await conn.commit()

A lease released with its transaction still open is rolled back before the
physical connection goes back to the pool.
"""

import asyncio
import logging
from collections import deque
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncGenerator, Deque, Dict, List, Optional, Sequence

from ..common.exceptions import (
    AcquisitionError,
    ConnectionReleasedError,
    QueryError,
    TransactionError
)
from ..config.settings import DatabaseConfig
from .drivers import DatabaseDriver, Row, create_driver

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONNECTIONS = 10


class LeaseState(str, Enum):
    """Lifecycle of a leased connection."""
    IDLE = "idle"
    IN_TRANSACTION = "in_transaction"
    RELEASED = "released"


class ConnectionLease:
    """Exclusive handle on one pooled connection.

    Legal transitions are IDLE -> IN_TRANSACTION (begin),
    IN_TRANSACTION -> IDLE (commit or rollback) and any state -> RELEASED.
    Releasing from IN_TRANSACTION rolls back first.
    """

    def __init__(self, pool: "DatabasePool", conn: Any):
        self._pool = pool
        self._conn = conn
        self._state = LeaseState.IDLE
        self._broken = False

    @property
    def state(self) -> LeaseState:
        return self._state

    @property
    def in_transaction(self) -> bool:
        return self._state is LeaseState.IN_TRANSACTION

    @property
    def released(self) -> bool:
        return self._state is LeaseState.RELEASED

    def _check_usable(self) -> None:
        if self._state is LeaseState.RELEASED:
            raise ConnectionReleasedError("Connection has already been released to the pool")

    def _note_failure(self, exc: BaseException) -> None:
        if self._pool.driver.is_disconnect(exc):
            self._broken = True

    async def run(self, sql: str, params: Sequence[Any] = ()) -> List[Row]:
        """Run one statement on this connection and return its rows."""
        self._check_usable()
        try:
            return await self._pool.driver.fetch(self._conn, sql, params)
        except Exception as e:
            self._note_failure(e)
            raise QueryError(f"Query failed: {e}", statement=sql, cause=e) from e

    async def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Row]:
        rows = await self.run(sql, params)
        return rows[0] if rows else None

    def is_unique_violation(self, exc: QueryError) -> bool:
        """Whether a failed statement was rejected by a unique constraint."""
        return exc.cause is not None and self._pool.driver.is_unique_violation(exc.cause)

    async def ping(self) -> None:
        self._check_usable()
        try:
            await self._pool.driver.ping(self._conn)
        except Exception as e:
            self._broken = True
            raise QueryError(f"Ping failed: {e}", statement="SELECT 1", cause=e) from e

    async def begin(self) -> None:
        self._check_usable()
        if self._state is LeaseState.IN_TRANSACTION:
            raise TransactionError("Transaction already in progress")
        try:
            await self._pool.driver.execute_control(self._conn, "BEGIN")
        except Exception as e:
            self._note_failure(e)
            raise TransactionError(f"Failed to begin transaction: {e}", cause=e) from e
        self._state = LeaseState.IN_TRANSACTION

    async def commit(self) -> None:
        self._check_usable()
        if self._state is not LeaseState.IN_TRANSACTION:
            raise TransactionError("No transaction in progress to commit")
        try:
            await self._pool.driver.execute_control(self._conn, "COMMIT")
        except Exception as e:
            # Still IN_TRANSACTION: release will attempt the rollback
            self._note_failure(e)
            raise TransactionError(f"Failed to commit transaction: {e}", cause=e) from e
        self._state = LeaseState.IDLE

    async def rollback(self) -> None:
        self._check_usable()
        if self._state is not LeaseState.IN_TRANSACTION:
            raise TransactionError("No transaction in progress to roll back")
        try:
            await self._pool.driver.execute_control(self._conn, "ROLLBACK")
        except Exception as e:
            # Transaction state is unknown, never hand this connection out again
            self._broken = True
            raise TransactionError(f"Failed to roll back transaction: {e}", cause=e) from e
        self._state = LeaseState.IDLE

    async def release(self) -> None:
        """Return the connection to the pool, rolling back an open transaction."""
        if self._state is LeaseState.RELEASED:
            logger.warning("Connection lease released more than once; ignoring")
            return

        conn = self._conn
        discard = self._broken
        try:
            if self._state is LeaseState.IN_TRANSACTION and not discard:
                logger.warning("Releasing connection with an open transaction; rolling back")
                discard = True
                try:
                    await self._pool.driver.execute_control(conn, "ROLLBACK")
                    discard = False
                except Exception as e:
                    logger.error(f"Automatic rollback failed, discarding connection: {e}")
        finally:
            self._state = LeaseState.RELEASED
            self._conn = None
            await self._pool._release_connection(conn, discard=discard)

    async def __aenter__(self) -> "ConnectionLease":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if not self.released:
            await self.release()


class _AcquireContext:
    """Result of ``pool.acquire()``: awaitable or usable with ``async with``."""

    def __init__(self, pool: "DatabasePool"):
        self._pool = pool
        self._lease: Optional[ConnectionLease] = None

    def __await__(self):
        return self._pool._acquire_lease().__await__()

    async def __aenter__(self) -> ConnectionLease:
        self._lease = await self._pool._acquire_lease()
        return self._lease

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._lease is not None and not self._lease.released:
            await self._lease.release()


class DatabasePool:
    """Bounded pool of reusable database connections.

    Connections are opened lazily up to ``max_connections``. Beyond that,
    acquirers wait in an unbounded FIFO queue and each released connection
    is handed directly to the longest-waiting caller. The pool is driven
    from a single event loop, so its bookkeeping needs no locks.
    """

    def __init__(
        self,
        driver: DatabaseDriver,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        acquire_timeout: Optional[float] = None
    ):
        if max_connections < 1:
            raise ValueError("max_connections must be at least 1")
        self.driver = driver
        self.max_connections = max_connections
        self.acquire_timeout = acquire_timeout
        self._idle: List[Any] = []
        self._waiters: Deque[asyncio.Future] = deque()
        self._size = 0
        self._leased = 0
        self._closed = False

    @property
    def size(self) -> int:
        """Open physical connections, leased or idle."""
        return self._size

    @property
    def idle_count(self) -> int:
        return len(self._idle)

    @property
    def leased_count(self) -> int:
        return self._leased

    @property
    def available(self) -> int:
        """Connections that could be leased right now without waiting."""
        return self.max_connections - self._leased

    @property
    def waiting(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    @property
    def closed(self) -> bool:
        return self._closed

    def stats(self) -> Dict[str, Any]:
        return {
            "driver": self.driver.dialect,
            "max_connections": self.max_connections,
            "size": self.size,
            "idle": self.idle_count,
            "leased": self.leased_count,
            "waiting": self.waiting,
            "closed": self.closed,
        }

    def acquire(self) -> _AcquireContext:
        """Lease a connection for multi-statement work.

        The caller must release the lease exactly once, either explicitly
        or by using the result as an async context manager.
        """
        return _AcquireContext(self)

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> List[Row]:
        """Run a single statement on a pooled connection and return its rows.

        Any failure, including not getting a connection, raises ``QueryError``
        carrying the statement; the connection is released on every path.
        """
        try:
            lease = await self._acquire_lease()
        except AcquisitionError as e:
            logger.error(f"Database query error: {e}")
            logger.error(f"SQL: {sql}")
            raise QueryError(
                f"Could not obtain a connection: {e.message}", statement=sql, cause=e
            ) from e

        try:
            return await lease.run(sql, params)
        except QueryError as e:
            logger.error(f"Database query error: {e.cause}")
            logger.error(f"SQL: {sql}")
            raise
        finally:
            await lease.release()

    async def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Row]:
        rows = await self.execute(sql, params)
        return rows[0] if rows else None

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[ConnectionLease, None]:
        """Lease a connection and run the block in one transaction."""
        async with self.acquire() as conn:
            async with transaction(conn):
                yield conn

    async def test_connection(self) -> bool:
        """Check that a connection can be obtained and answers a ping."""
        try:
            async with self.acquire() as conn:
                await conn.ping()
            return True
        except Exception as e:
            logger.warning(f"Database connection test failed: {e}")
            return False

    async def shutdown(self) -> None:
        """Close idle connections and fail pending acquirers.

        Connections still leased are closed when they are released.
        """
        self._closed = True

        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_exception(
                    AcquisitionError("Database pool closed while waiting for a connection")
                )

        idle, self._idle = self._idle, []
        for conn in idle:
            self._size -= 1
            await self._close_quietly(conn)

        if self._leased:
            logger.info(
                f"Database pool closed; {self._leased} leased connection(s) "
                f"will close on release"
            )
        else:
            logger.info("Database pool closed")

    async def _acquire_lease(self) -> ConnectionLease:
        conn = await self._get_connection()
        return ConnectionLease(self, conn)

    async def _get_connection(self) -> Any:
        if self._closed:
            raise AcquisitionError("Database pool is closed")

        if self._idle:
            conn = self._idle.pop()
        elif self._size < self.max_connections:
            self._size += 1
            conn = await self._open_connection()
        else:
            conn = await self._wait_for_connection()
            if conn is None:
                # A broken connection was discarded and its slot passed to us
                conn = await self._open_connection()

        self._leased += 1
        return conn

    async def _open_connection(self) -> Any:
        """Open a connection for a slot already counted in ``_size``."""
        try:
            conn = await self.driver.connect()
        except asyncio.CancelledError:
            self._release_slot()
            raise
        except Exception as e:
            self._release_slot()
            logger.error(f"Failed to open database connection to {self.driver.describe()}: {e}")
            raise AcquisitionError(f"Failed to acquire connection: {e}", cause=e) from e

        if self._closed:
            self._size -= 1
            await self._close_quietly(conn)
            raise AcquisitionError("Database pool is closed")

        logger.debug(f"Opened database connection ({self._size}/{self.max_connections})")
        return conn

    async def _wait_for_connection(self) -> Any:
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        logger.debug(f"Connection pool exhausted; {self.waiting} caller(s) waiting")
        try:
            if self.acquire_timeout is None:
                return await waiter
            return await asyncio.wait_for(waiter, self.acquire_timeout)
        except asyncio.TimeoutError:
            self._abandon_waiter(waiter)
            raise AcquisitionError(
                f"Timed out after {self.acquire_timeout}s waiting for a database connection"
            )
        except asyncio.CancelledError:
            self._abandon_waiter(waiter)
            raise

    def _abandon_waiter(self, waiter: asyncio.Future) -> None:
        """Drop a waiter that gave up, returning anything already handed to it."""
        try:
            self._waiters.remove(waiter)
        except ValueError:
            pass

        if not waiter.done() or waiter.cancelled():
            return
        if waiter.exception() is not None:
            return

        conn = waiter.result()
        if conn is None:
            self._release_slot()
        else:
            self._hand_off(conn)

    def _next_waiter(self) -> Optional[asyncio.Future]:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                return waiter
        return None

    def _hand_off(self, conn: Any) -> None:
        waiter = self._next_waiter()
        if waiter is not None:
            waiter.set_result(conn)
        else:
            self._idle.append(conn)

    def _release_slot(self) -> None:
        """Give up one counted slot, passing it to a waiter when there is one."""
        waiter = self._next_waiter()
        if waiter is not None:
            waiter.set_result(None)
        else:
            self._size -= 1

    async def _release_connection(self, conn: Any, discard: bool = False) -> None:
        self._leased -= 1

        if self._closed:
            self._size -= 1
            await self._close_quietly(conn)
            return

        if discard:
            logger.warning("Discarding broken database connection")
            self._release_slot()
            await self._close_quietly(conn)
            return

        self._hand_off(conn)

    async def _close_quietly(self, conn: Any) -> None:
        try:
            await self.driver.close(conn)
        except Exception as e:
            logger.error(f"Error closing connection: {e}")


# Transaction helper
@asynccontextmanager
async def transaction(conn: ConnectionLease) -> AsyncGenerator[ConnectionLease, None]:
    """Transaction context manager for atomic operations.

    Commits when the block finishes, rolls back when it raises. The block
    may end the transaction itself with ``commit()`` or ``rollback()``.
    """
    await conn.begin()
    try:
        yield conn
    except BaseException:
        if conn.in_transaction:
            try:
                await conn.rollback()
            except TransactionError as rollback_error:
                logger.error(f"Rollback after failure did not complete: {rollback_error}")
        raise
    else:
        if conn.in_transaction:
            await conn.commit()


def create_pool(config=DatabaseConfig) -> DatabasePool:
    """Build the process pool from configuration."""
    config.validate()
    driver = create_driver(config)
    logger.info(
        f"Creating database pool: target={driver.describe()}, "
        f"max_connections={config.max_connections}"
    )
    return DatabasePool(
        driver,
        max_connections=config.max_connections,
        acquire_timeout=config.acquire_timeout
    )
