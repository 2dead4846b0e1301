"""
Screen controllers.

Each controller keeps only throwaway view state. The watchlist itself lives in
the WatchlistStore handed to the controller, and every screen re-reads it
rather than trusting what it showed last time.
"""

import asyncio
import logging
from typing import Optional, Protocol

from errors import CatalogUnavailableError, PersistenceError
from models import CastMember, CatalogRecord, MovieId, WatchlistEntry
from projector import project
from watchlist import WatchlistStore

logger = logging.getLogger(__name__)

TOP_CAST_SIZE = 6
WATCHLIST_NOTICE = "Couldn't update your watchlist. Please try again."


class Catalog(Protocol):
    async def fetch_trending(self) -> list[CatalogRecord]: ...

    async def fetch_popular(self) -> list[CatalogRecord]: ...

    async def search(self, query: str) -> list[CatalogRecord]: ...

    async def fetch_detail(self, movie_id: MovieId) -> CatalogRecord: ...


class HomeController:
    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog
        self.trending: list[CatalogRecord] = []
        self.popular: list[CatalogRecord] = []
        self.loading = False
        self.unavailable = False

    async def show(self) -> None:
        self.loading = True
        try:
            self.trending, self.popular = await asyncio.gather(
                self.catalog.fetch_trending(), self.catalog.fetch_popular()
            )
            self.unavailable = False
        except CatalogUnavailableError:
            logger.warning("Home lists unavailable")
            self.trending, self.popular = [], []
            self.unavailable = True
        finally:
            self.loading = False


class SearchController:
    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog
        self.query = ""
        self.results: list[CatalogRecord] = []
        self.unavailable = False

    async def search(self, query: str) -> list[CatalogRecord]:
        self.query = query.strip()
        self.unavailable = False
        if not self.query:
            self.results = []
            return self.results
        try:
            self.results = await self.catalog.search(self.query)
        except CatalogUnavailableError:
            logger.warning("Search for %r unavailable", self.query)
            self.results = []
            self.unavailable = True
        return self.results


class DetailController:
    def __init__(self, movie_id: MovieId, catalog: Catalog, store: WatchlistStore) -> None:
        self.movie_id = movie_id
        self.catalog = catalog
        self.store = store
        self.movie: Optional[CatalogRecord] = None
        self.loading = False
        self.unavailable = False
        self.in_watchlist = False
        self.notice: Optional[str] = None

    async def show(self) -> None:
        self.loading = True
        self.notice = None
        try:
            self.movie = await self.catalog.fetch_detail(self.movie_id)
            self.unavailable = False
        except CatalogUnavailableError:
            logger.warning("Details for movie %s unavailable", self.movie_id)
            self.movie = None
            self.unavailable = True
        finally:
            self.loading = False

        try:
            self.in_watchlist = await self.store.contains(self.movie_id)
        except PersistenceError:
            logger.exception("Could not check watchlist for movie %s", self.movie_id)
            self.in_watchlist = False
            self.notice = WATCHLIST_NOTICE

    async def toggle_watchlist(self) -> bool:
        """
        Add or remove the movie and return the new membership flag.

        The flag only changes when the store call succeeds; on failure it keeps
        its previous value and ``notice`` is set instead.
        """
        try:
            if self.in_watchlist:
                await self.store.remove(self.movie_id)
            elif self.movie is not None:
                await self.store.add(project(self.movie))
            else:
                return self.in_watchlist
        except PersistenceError:
            logger.exception("Could not update watchlist for movie %s", self.movie_id)
            self.notice = WATCHLIST_NOTICE
            return self.in_watchlist

        self.in_watchlist = not self.in_watchlist
        self.notice = None
        return self.in_watchlist

    @property
    def trailer_url(self) -> Optional[str]:
        if self.movie is None or self.movie.videos is None:
            return None
        for video in self.movie.videos.results:
            if video.type == "Trailer" and video.site == "YouTube":
                return f"https://www.youtube.com/watch?v={video.key}"
        return None

    @property
    def director(self) -> Optional[str]:
        if self.movie is None or self.movie.credits is None:
            return None
        return next(
            (person.name for person in self.movie.credits.crew if person.job == "Director"),
            None,
        )

    @property
    def top_cast(self) -> list[CastMember]:
        if self.movie is None or self.movie.credits is None:
            return []
        return self.movie.credits.cast[:TOP_CAST_SIZE]


class WatchlistController:
    def __init__(self, store: WatchlistStore) -> None:
        self.store = store
        self.entries: list[WatchlistEntry] = []
        self.notice: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    async def on_visible(self) -> list[WatchlistEntry]:
        """Reload the whole watchlist. Call every time the screen is shown."""
        self.notice = None
        try:
            self.entries = await self.store.load()
        except PersistenceError:
            logger.exception("Could not load watchlist")
            self.entries = []
            self.notice = WATCHLIST_NOTICE
        return self.entries

    async def remove(self, movie_id: MovieId) -> list[WatchlistEntry]:
        failed = False
        try:
            await self.store.remove(movie_id)
        except PersistenceError:
            logger.exception("Could not remove movie %s from watchlist", movie_id)
            failed = True
        await self.on_visible()
        if failed:
            self.notice = WATCHLIST_NOTICE
        return self.entries
