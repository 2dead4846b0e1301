import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import Depends, FastAPI
from fastapi.requests import Request

from config import settings
from controllers import (
    DetailController,
    HomeController,
    SearchController,
    WatchlistController,
)
from models import CatalogRecord
from tmdb import CatalogClient, image_url
from watchlist import WatchlistStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.store = WatchlistStore(settings.db_path)
    async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
        app.state.catalog = CatalogClient(client, settings.tmdb_api_key, settings.tmdb_base_url)
        logger.info("Watchlist stored in %s", settings.db_path)
        yield


app = FastAPI(lifespan=lifespan)


def get_store(request: Request) -> WatchlistStore:
    return request.app.state.store


def get_catalog(request: Request) -> CatalogClient:
    return request.app.state.catalog


def _card(record: CatalogRecord) -> dict:
    return {
        **record.model_dump(mode="json", include={"id", "title", "vote_average", "release_date"}),
        "poster_url": image_url(record.poster_path),
    }


def _listing(records: list[CatalogRecord], unavailable: bool) -> dict:
    return {"results": [_card(r) for r in records], "unavailable": unavailable}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/movies/home")
async def home(catalog=Depends(get_catalog)):
    screen = HomeController(catalog)
    await screen.show()
    return {
        "trending": [_card(r) for r in screen.trending],
        "popular": [_card(r) for r in screen.popular],
        "unavailable": screen.unavailable,
    }


@app.get("/movies/search")
async def search(q: str = "", catalog=Depends(get_catalog)):
    screen = SearchController(catalog)
    results = await screen.search(q)
    return _listing(results, screen.unavailable)


async def _detail_screen(movie_id: int, catalog, store) -> DetailController:
    screen = DetailController(movie_id, catalog, store)
    await screen.show()
    return screen


def _detail_body(screen: DetailController) -> dict:
    movie: Optional[dict] = None
    if screen.movie is not None:
        movie = screen.movie.model_dump(mode="json", exclude={"credits", "videos"})
        movie["poster_url"] = image_url(screen.movie.poster_path)
        movie["backdrop_url"] = image_url(screen.movie.backdrop_path or screen.movie.poster_path)
    return {
        "movie": movie,
        "unavailable": screen.unavailable,
        "in_watchlist": screen.in_watchlist,
        "trailer_url": screen.trailer_url,
        "director": screen.director,
        "cast": [member.model_dump() for member in screen.top_cast],
        "notice": screen.notice,
    }


@app.get("/movies/{movie_id}")
async def movie_detail(movie_id: int, catalog=Depends(get_catalog), store=Depends(get_store)):
    return _detail_body(await _detail_screen(movie_id, catalog, store))


@app.post("/movies/{movie_id}/watchlist")
async def toggle_watchlist(movie_id: int, catalog=Depends(get_catalog), store=Depends(get_store)):
    screen = await _detail_screen(movie_id, catalog, store)
    await screen.toggle_watchlist()
    return _detail_body(screen)


def _watchlist_body(screen: WatchlistController) -> dict:
    return {
        "entries": [
            {**entry.model_dump(mode="json"), "poster_url": image_url(entry.poster_path)}
            for entry in screen.entries
        ],
        "count": screen.count,
        "notice": screen.notice,
    }


@app.get("/watchlist")
async def watchlist(store=Depends(get_store)):
    screen = WatchlistController(store)
    await screen.on_visible()
    return _watchlist_body(screen)


@app.delete("/watchlist/{movie_id}")
async def remove_from_watchlist(movie_id: int, store=Depends(get_store)):
    screen = WatchlistController(store)
    await screen.remove(movie_id)
    return _watchlist_body(screen)
