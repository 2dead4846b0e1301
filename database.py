from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, NamedTuple, Optional

import aiosqlite

DB_PATH = Path("data/watchlist.db")


class StoredSnapshot(NamedTuple):
    value: str
    schema_version: int


async def init_db(db_path: Path = DB_PATH) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    async with aiosqlite.connect(db_path) as db:
        await db.execute(
            """
            CREATE TABLE IF NOT EXISTS snapshots (
                key             TEXT PRIMARY KEY,
                value           TEXT NOT NULL,
                schema_version  INTEGER NOT NULL DEFAULT 0,
                updated_at      TEXT
            )
            """
        )
        # Databases from the first release only had key/value. Their rows
        # predate versioning and are read as version 0.
        async with db.execute("PRAGMA table_info(snapshots)") as cursor:
            existing = {row[1] for row in await cursor.fetchall()}
        for col, definition in [
            ("schema_version", "INTEGER NOT NULL DEFAULT 0"),
            ("updated_at", "TEXT"),
        ]:
            if col not in existing:
                await db.execute(f"ALTER TABLE snapshots ADD COLUMN {col} {definition}")
        await db.commit()


async def read_snapshot(key: str, db_path: Path = DB_PATH) -> Optional[StoredSnapshot]:
    async with aiosqlite.connect(db_path) as db:
        return await fetch_snapshot(db, key)


@asynccontextmanager
async def transaction(db_path: Path = DB_PATH) -> AsyncIterator[aiosqlite.Connection]:
    """
    Open a connection holding the database write lock for the whole block.

    BEGIN IMMEDIATE makes every other writer wait until COMMIT, so a
    read-modify-write done inside the block cannot interleave with another one.
    Any exception rolls the block back.
    """
    async with aiosqlite.connect(db_path, isolation_level=None) as db:
        await db.execute("BEGIN IMMEDIATE")
        try:
            yield db
        except BaseException:
            # SQLite may already have rolled back on its own (disk full, I/O error)
            if db.in_transaction:
                await db.execute("ROLLBACK")
            raise
        await db.execute("COMMIT")


async def fetch_snapshot(db: aiosqlite.Connection, key: str) -> Optional[StoredSnapshot]:
    async with db.execute(
        "SELECT value, schema_version FROM snapshots WHERE key = ?", (key,)
    ) as cursor:
        row = await cursor.fetchone()
    return StoredSnapshot(value=row[0], schema_version=row[1]) if row else None


async def put_snapshot(
    db: aiosqlite.Connection, key: str, value: str, schema_version: int
) -> None:
    await db.execute(
        """
        INSERT INTO snapshots (key, value, schema_version, updated_at)
        VALUES (?, ?, ?, ?)
        ON CONFLICT(key) DO UPDATE SET
            value          = excluded.value,
            schema_version = excluded.schema_version,
            updated_at     = excluded.updated_at
        """,
        (key, value, schema_version, datetime.now(timezone.utc).isoformat()),
    )
