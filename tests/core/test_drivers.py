"""Tests for database drivers."""

import asyncio
import sqlite3
from types import SimpleNamespace
from unittest.mock import AsyncMock

import asyncpg
import pytest

from bookstore.core.drivers import (
    PostgresDriver,
    SQLiteDriver,
    create_driver,
    to_numbered_placeholders
)


class TestPlaceholders:
    """Placeholder rewriting for numbered-parameter drivers."""

    def test_numbers_in_order(self):
        sql = "UPDATE books SET price = ? WHERE id = ?"
        assert to_numbered_placeholders(sql) == "UPDATE books SET price = $1 WHERE id = $2"

    def test_ignores_quoted_text(self):
        sql = "SELECT '?' AS q, \"a?b\" FROM t WHERE x = ?"
        assert to_numbered_placeholders(sql) == "SELECT '?' AS q, \"a?b\" FROM t WHERE x = $1"

    def test_no_placeholders(self):
        assert to_numbered_placeholders("SELECT 1") == "SELECT 1"


class TestSQLiteDriver:
    """aiosqlite-backed driver."""

    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_path):
        driver = SQLiteDriver(str(tmp_path / "nested" / "dir" / "app.db"))
        conn = await driver.connect()
        try:
            assert (tmp_path / "nested" / "dir").is_dir()
        finally:
            await driver.close(conn)

    @pytest.mark.asyncio
    async def test_fetch_returns_dicts(self, db_path):
        driver = SQLiteDriver(str(db_path))
        conn = await driver.connect()
        try:
            assert await driver.fetch(conn, "CREATE TABLE t (id INTEGER, name TEXT)") == []
            await driver.fetch(conn, "INSERT INTO t VALUES (?, ?)", (1, "one"))
            rows = await driver.fetch(conn, "SELECT id, name FROM t")
            assert rows == [{"id": 1, "name": "one"}]
        finally:
            await driver.close(conn)

    @pytest.mark.asyncio
    async def test_foreign_keys_enabled(self, db_path):
        driver = SQLiteDriver(str(db_path))
        conn = await driver.connect()
        try:
            rows = await driver.fetch(conn, "PRAGMA foreign_keys")
            assert list(rows[0].values()) == [1]
        finally:
            await driver.close(conn)

    @pytest.mark.asyncio
    async def test_begin_takes_write_lock(self, db_path):
        driver = SQLiteDriver(str(db_path))
        conn = AsyncMock()

        await driver.execute_control(conn, "BEGIN")
        await driver.execute_control(conn, "COMMIT")

        assert [call.args[0] for call in conn.execute.await_args_list] == ["BEGIN IMMEDIATE", "COMMIT"]

    @pytest.mark.asyncio
    async def test_second_writer_waits_instead_of_failing(self, db_path):
        driver = SQLiteDriver(str(db_path))
        first = await driver.connect()
        second = await driver.connect()
        try:
            await driver.fetch(first, "CREATE TABLE t (id INTEGER PRIMARY KEY, n INTEGER)")
            await driver.fetch(first, "INSERT INTO t (n) VALUES (0)")

            await driver.execute_control(first, "BEGIN")
            rows = await driver.fetch(first, "SELECT n FROM t")
            second_begin = asyncio.create_task(driver.execute_control(second, "BEGIN"))
            await asyncio.sleep(0.05)
            assert not second_begin.done()

            await driver.fetch(first, "UPDATE t SET n = ?", (rows[0]["n"] + 1,))
            await driver.execute_control(first, "COMMIT")
            await asyncio.wait_for(second_begin, timeout=5)

            rows = await driver.fetch(second, "SELECT n FROM t")
            await driver.fetch(second, "UPDATE t SET n = ?", (rows[0]["n"] + 1,))
            await driver.execute_control(second, "COMMIT")

            assert await driver.fetch(first, "SELECT n FROM t") == [{"n": 2}]
        finally:
            await driver.close(first)
            await driver.close(second)

    @pytest.mark.asyncio
    async def test_is_unique_violation(self, db_path):
        driver = SQLiteDriver(str(db_path))
        conn = await driver.connect()
        try:
            await driver.fetch(conn, "CREATE TABLE t (name TEXT UNIQUE NOT NULL)")
            await driver.fetch(conn, "INSERT INTO t VALUES (?)", ("a",))
            with pytest.raises(sqlite3.IntegrityError) as duplicate:
                await driver.fetch(conn, "INSERT INTO t VALUES (?)", ("a",))
            with pytest.raises(sqlite3.IntegrityError) as missing:
                await driver.fetch(conn, "INSERT INTO t VALUES (?)", (None,))
        finally:
            await driver.close(conn)

        assert driver.is_unique_violation(duplicate.value)
        assert not driver.is_unique_violation(missing.value)
        assert not driver.is_unique_violation(OSError("disk full"))

    def test_is_disconnect(self, db_path):
        driver = SQLiteDriver(str(db_path))
        assert driver.is_disconnect(sqlite3.ProgrammingError("Cannot operate on a closed database."))
        assert driver.is_disconnect(ConnectionResetError())
        assert not driver.is_disconnect(sqlite3.OperationalError("no such table: books"))
        assert not driver.is_disconnect(sqlite3.IntegrityError("UNIQUE constraint failed"))

    def test_describe(self, db_path):
        assert SQLiteDriver(str(db_path)).describe() == f"sqlite:{db_path}"


class TestPostgresDriver:
    """asyncpg-backed driver, exercised against a mocked connection."""

    @pytest.fixture
    def driver(self):
        return PostgresDriver(
            host="db.internal",
            port=5432,
            user="geek",
            password="secret",
            database="geektext"
        )

    @pytest.mark.asyncio
    async def test_fetch_rewrites_placeholders(self, driver):
        conn = AsyncMock()
        conn.fetch.return_value = [{"id": 7, "title": "Dune"}]

        rows = await driver.fetch(conn, "SELECT id, title FROM books WHERE genre = ? AND price < ?", ("SF", 20))

        conn.fetch.assert_awaited_once_with(
            "SELECT id, title FROM books WHERE genre = $1 AND price < $2", "SF", 20
        )
        assert rows == [{"id": 7, "title": "Dune"}]

    @pytest.mark.asyncio
    async def test_ping(self, driver):
        conn = AsyncMock()
        await driver.ping(conn)
        conn.fetchval.assert_awaited_once_with("SELECT 1")

    def test_describe_hides_password(self, driver):
        description = driver.describe()
        assert description == "postgres://geek@db.internal:5432/geektext"
        assert "secret" not in description

    def test_is_disconnect(self, driver):
        assert driver.is_disconnect(ConnectionRefusedError())
        assert not driver.is_disconnect(ValueError("bad value"))

    def test_is_unique_violation(self, driver):
        assert driver.is_unique_violation(asyncpg.exceptions.UniqueViolationError("duplicate key"))
        assert not driver.is_unique_violation(asyncpg.exceptions.NotNullViolationError("null value"))


class TestCreateDriver:
    """Driver selection from configuration."""

    def test_sqlite(self, db_path):
        config = SimpleNamespace(driver="sqlite", path=str(db_path))
        driver = create_driver(config)
        assert isinstance(driver, SQLiteDriver)
        assert driver.identity_column == "INTEGER PRIMARY KEY AUTOINCREMENT"

    def test_postgres(self):
        config = SimpleNamespace(
            driver="postgres",
            host="localhost",
            port=5432,
            user="geek",
            password="",
            database="geektext"
        )
        driver = create_driver(config)
        assert isinstance(driver, PostgresDriver)
        assert driver.identity_column == "SERIAL PRIMARY KEY"

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_driver(SimpleNamespace(driver="oracle"))
