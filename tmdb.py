import asyncio
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from errors import CatalogUnavailableError
from models import CatalogRecord, MovieId

logger = logging.getLogger(__name__)

TMDB_BASE = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p"

_semaphore = asyncio.Semaphore(10)


def image_url(path: Optional[str], size: str = "w500") -> Optional[str]:
    return f"{TMDB_IMAGE_BASE}/{size}{path}" if path else None


class CatalogClient:
    """Read-only access to the TMDB movie catalog."""

    def __init__(self, client: httpx.AsyncClient, api_key: str, base_url: str = TMDB_BASE) -> None:
        self._client = client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    async def fetch_trending(self) -> list[CatalogRecord]:
        return self._records(await self._get("/trending/movie/week"))

    async def fetch_popular(self) -> list[CatalogRecord]:
        return self._records(await self._get("/movie/popular"))

    async def search(self, query: str) -> list[CatalogRecord]:
        return self._records(await self._get("/search/movie", query=query))

    async def fetch_detail(self, movie_id: MovieId) -> CatalogRecord:
        """Full record for one movie, including credits and videos."""
        data = await self._get(f"/movie/{movie_id}", append_to_response="credits,videos")
        try:
            return CatalogRecord.model_validate(data)
        except ValidationError as exc:
            raise CatalogUnavailableError(f"unexpected detail record for movie {movie_id}") from exc

    async def _get(self, path: str, **params: str) -> Any:
        url = f"{self._base_url}{path}"
        try:
            async with _semaphore:
                response = await self._client.get(url, params={"api_key": self._api_key, **params})
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Catalog request %s failed: %s", path, exc)
            raise CatalogUnavailableError(f"catalog request {path} failed") from exc

    @staticmethod
    def _records(data: Any) -> list[CatalogRecord]:
        try:
            return [CatalogRecord.model_validate(item) for item in data.get("results", [])]
        except (AttributeError, ValidationError) as exc:
            raise CatalogUnavailableError("unexpected catalog listing") from exc
