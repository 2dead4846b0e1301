import asyncio
import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable

import aiosqlite
from pydantic import TypeAdapter, ValidationError

import database
from errors import CorruptStateError, PersistenceError
from models import MovieId, WatchlistEntry

logger = logging.getLogger(__name__)

WATCHLIST_KEY = "watchlist"
SCHEMA_VERSION = 1

_entries_adapter = TypeAdapter(list[WatchlistEntry])


def _migrate_v0(data: Any) -> Any:
    """Snapshots from the legacy client: "" release dates and duplicate ids."""
    if not isinstance(data, list):
        return data
    seen: set = set()
    migrated = []
    for item in data:
        if isinstance(item, dict):
            movie_id = item.get("id")
            if isinstance(movie_id, (int, str)):
                if movie_id in seen:
                    continue
                seen.add(movie_id)
            item = {**item, "release_date": item.get("release_date") or None}
        migrated.append(item)
    return migrated


# stored version -> function upgrading the decoded JSON to the next version
_MIGRATIONS: dict[int, Callable[[Any], Any]] = {0: _migrate_v0}


def encode_snapshot(entries: list[WatchlistEntry]) -> str:
    return json.dumps([entry.model_dump(mode="json") for entry in entries])


def decode_snapshot(raw: str, schema_version: int = SCHEMA_VERSION) -> list[WatchlistEntry]:
    if schema_version > SCHEMA_VERSION:
        raise CorruptStateError(
            f"snapshot has schema version {schema_version}, newest known is {SCHEMA_VERSION}"
        )
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise CorruptStateError(f"snapshot is not valid JSON: {exc}") from exc

    for version in range(schema_version, SCHEMA_VERSION):
        data = _MIGRATIONS[version](data)

    try:
        entries = _entries_adapter.validate_python(data)
    except ValidationError as exc:
        raise CorruptStateError(f"snapshot does not hold watchlist entries: {exc}") from exc

    ids = [entry.id for entry in entries]
    if len(set(ids)) != len(ids):
        raise CorruptStateError("snapshot holds duplicate ids")
    return entries


class WatchlistStore:
    """
    Sole owner of the persisted watchlist.

    The whole collection is read and written as one snapshot. add() and
    remove() are read-modify-write sequences; they are queued behind a lock
    and each runs inside one database transaction, so no mutation can read a
    snapshot that another one is about to replace.
    """

    def __init__(self, db_path: Path = database.DB_PATH, key: str = WATCHLIST_KEY) -> None:
        self.db_path = db_path
        self.key = key
        self._lock = asyncio.Lock()
        self._initialised = False

    async def _ensure_db(self) -> None:
        if self._initialised:
            return
        try:
            await database.init_db(self.db_path)
        except (aiosqlite.Error, OSError) as exc:
            raise PersistenceError(f"could not open watchlist database {self.db_path}") from exc
        self._initialised = True

    async def read_snapshot(self) -> list[WatchlistEntry]:
        """Like load(), but raises CorruptStateError instead of returning []."""
        await self._ensure_db()
        try:
            stored = await database.read_snapshot(self.key, self.db_path)
        except aiosqlite.Error as exc:
            raise PersistenceError(f"could not read watchlist {self.key!r}") from exc
        if stored is None:
            return []
        return decode_snapshot(stored.value, stored.schema_version)

    async def load(self) -> list[WatchlistEntry]:
        try:
            return await self.read_snapshot()
        except CorruptStateError as exc:
            logger.warning("Watchlist %r is unreadable, treating it as empty: %s", self.key, exc)
            return []

    async def contains(self, movie_id: MovieId) -> bool:
        return any(entry.id == movie_id for entry in await self.load())

    async def add(self, entry: WatchlistEntry) -> None:
        async with self._mutation() as db:
            entries = await self._fetch_for_update(db)
            if any(existing.id == entry.id for existing in entries):
                logger.debug("Movie %s already on watchlist %r", entry.id, self.key)
                return
            await self._store(db, [*entries, entry])
        logger.info("Added movie %s to watchlist %r", entry.id, self.key)

    async def remove(self, movie_id: MovieId) -> None:
        async with self._mutation() as db:
            entries = await self._fetch_for_update(db)
            kept = [entry for entry in entries if entry.id != movie_id]
            if len(kept) == len(entries):
                logger.debug("Movie %s not on watchlist %r", movie_id, self.key)
                return
            await self._store(db, kept)
        logger.info("Removed movie %s from watchlist %r", movie_id, self.key)

    @asynccontextmanager
    async def _mutation(self) -> AsyncIterator[aiosqlite.Connection]:
        await self._ensure_db()
        async with self._lock:
            try:
                async with database.transaction(self.db_path) as db:
                    yield db
            except (aiosqlite.Error, OSError) as exc:
                raise PersistenceError(f"could not update watchlist {self.key!r}") from exc

    async def _fetch_for_update(self, db: aiosqlite.Connection) -> list[WatchlistEntry]:
        stored = await database.fetch_snapshot(db, self.key)
        if stored is None:
            return []
        try:
            return decode_snapshot(stored.value, stored.schema_version)
        except CorruptStateError as exc:
            logger.warning(
                "Watchlist %r is unreadable and will be replaced: %s (was %r)",
                self.key,
                exc,
                stored.value,
            )
            return []

    async def _store(self, db: aiosqlite.Connection, entries: list[WatchlistEntry]) -> None:
        await database.put_snapshot(db, self.key, encode_snapshot(entries), SCHEMA_VERSION)
