"""Database layer for the tracking service: SQLite (aiosqlite) or PostgreSQL (asyncpg).

Backend is selected via the DATABASE_URL setting:
  - starts with "postgresql://" → asyncpg
  - absent / empty             → aiosqlite (uses DATABASE_PATH)

The PostgreSQL wrapper presents the same small surface the stores use:
  - ? placeholders → $1, $2, … (positional)
  - cursor.lastrowid → RETURNING id
  - Row access by column name (dict-like)
"""

import re
import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from alembic import command
from alembic.config import Config

from writing_tracker.config import settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"


def _is_postgres() -> bool:
    return settings.database_url.startswith("postgresql://")


async def _connect_sqlite():
    import aiosqlite
    db = await aiosqlite.connect(settings.database_path)
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA foreign_keys = ON")
    return db


# ── PostgreSQL wrapper ────────────────────────────────────────────────

_pg_pool = None


async def _get_pg_pool():
    global _pg_pool
    if _pg_pool is None:
        import asyncpg
        _pg_pool = await asyncpg.create_pool(
            settings.database_url,
            min_size=1,
            max_size=10,
        )
    return _pg_pool


class PgRow:
    """Wraps an asyncpg Record so dict(row) and row["col"] behave like sqlite3.Row."""

    __slots__ = ("_record",)

    def __init__(self, record):
        self._record = record

    def __getitem__(self, key):
        return self._record[key]

    def __contains__(self, key):
        return key in self._record.keys()

    def __len__(self):
        return len(self._record)

    def keys(self):
        return self._record.keys()

    def values(self):
        return list(self._record.values())

    def items(self):
        return self._record.items()

    def get(self, key, default=None):
        try:
            return self._record[key]
        except (KeyError, IndexError):
            return default


# Regex to replace ? placeholders with $1, $2, … while skipping quoted strings
_PARAM_RE = re.compile(r"'[^']*'|(\?)")


def _convert_placeholders(sql: str) -> str:
    """Replace ? with $1, $2, … for asyncpg, skipping ?s inside string literals."""
    counter = [0]

    def _replacer(match):
        if match.group(1) is None:
            return match.group(0)
        counter[0] += 1
        return f"${counter[0]}"

    return _PARAM_RE.sub(_replacer, sql)


def _is_insert(sql: str) -> bool:
    return sql.lstrip().upper().startswith("INSERT")


class PgCursor:
    """Mimics the aiosqlite cursor returned by execute()."""

    __slots__ = ("_rows", "_lastrowid", "_idx")

    def __init__(self, rows=None, lastrowid=None):
        self._rows = rows or []
        self._lastrowid = lastrowid
        self._idx = 0

    @property
    def lastrowid(self):
        return self._lastrowid

    async def fetchone(self):
        if self._idx < len(self._rows):
            row = self._rows[self._idx]
            self._idx += 1
            return PgRow(row)
        return None

    async def fetchall(self):
        remaining = self._rows[self._idx:]
        self._idx = len(self._rows)
        return [PgRow(r) for r in remaining]


class PgConnection:
    """Wraps an asyncpg connection to present an aiosqlite-compatible interface."""

    def __init__(self, conn):
        self._conn = conn

    async def execute(self, sql: str, params=None):
        pg_sql = _convert_placeholders(sql)
        args = tuple(params) if params else ()

        if _is_insert(pg_sql):
            if "RETURNING" not in pg_sql.upper():
                pg_sql = pg_sql.rstrip().rstrip(";") + " RETURNING id"
            row = await self._conn.fetchrow(pg_sql, *args)
            lastrowid = row["id"] if row else None
            return PgCursor(rows=[row] if row else [], lastrowid=lastrowid)

        stripped = pg_sql.lstrip().upper()
        if stripped.startswith("SELECT") or "RETURNING" in stripped:
            rows = await self._conn.fetch(pg_sql, *args)
            return PgCursor(rows=rows)
        await self._conn.execute(pg_sql, *args)
        return PgCursor()

    async def commit(self):
        # asyncpg runs each statement in autocommit mode
        pass

    async def close(self):
        # Pool release is handled by connect()
        pass


# ── Public API ────────────────────────────────────────────────────────

@asynccontextmanager
async def connect() -> AsyncIterator:
    """Open a connection for the configured backend and release it on exit."""
    if _is_postgres():
        pool = await _get_pg_pool()
        conn = await pool.acquire()
        try:
            yield PgConnection(conn)
        finally:
            await pool.release(conn)
    else:
        db = await _connect_sqlite()
        try:
            yield db
        finally:
            await db.close()


async def get_db() -> AsyncGenerator:
    """FastAPI dependency that yields a database connection for one request."""
    async with connect() as db:
        yield db


def _run_alembic_upgrade():
    """Run Alembic migrations to head (synchronous, called once at startup)."""
    alembic_cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    alembic_cfg.attributes["configure_logger"] = False

    if _is_postgres():
        alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    else:
        alembic_cfg.set_main_option(
            "sqlalchemy.url", f"sqlite:///{settings.database_path}"
        )

    command.upgrade(alembic_cfg, "head")


async def init_db():
    if _is_postgres():
        logger.info("Using PostgreSQL backend: %s", settings.database_url.split("@")[-1])
    else:
        db_path = Path(settings.database_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Using SQLite backend: %s", settings.database_path)

    _run_alembic_upgrade()


async def close_db():
    """Shutdown hook: close the connection pool if using PostgreSQL."""
    global _pg_pool
    if _pg_pool is not None:
        await _pg_pool.close()
        _pg_pool = None
