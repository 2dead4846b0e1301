import os
from pathlib import Path

import pytest

os.environ.setdefault("TMDB_API_KEY", "test-key")

from models import CatalogRecord  # noqa: E402
from watchlist import WatchlistStore  # noqa: E402


@pytest.fixture
def tmp_db(tmp_path) -> Path:
    """Returns path to a temporary SQLite database file."""
    return tmp_path / "test.db"


@pytest.fixture
def store(tmp_db) -> WatchlistStore:
    return WatchlistStore(tmp_db)


@pytest.fixture
def inception() -> CatalogRecord:
    return CatalogRecord(
        id=27205,
        title="Inception",
        poster_path="/inception.jpg",
        vote_average=8.8,
        release_date="2010-07-15",
        overview="A thief who steals corporate secrets through dream-sharing.",
        runtime=148,
        vote_count=36000,
        genres=[{"id": 28, "name": "Action"}, {"id": 878, "name": "Science Fiction"}],
        credits={
            "cast": [
                {"id": i, "name": f"Actor {i}", "character": f"Role {i}"} for i in range(8)
            ],
            "crew": [
                {"id": 100, "name": "Hans Zimmer", "job": "Original Music Composer"},
                {"id": 525, "name": "Christopher Nolan", "job": "Director"},
            ],
        },
        videos={
            "results": [
                {"key": "teaser1", "site": "YouTube", "type": "Teaser"},
                {"key": "YoHD9XEInc0", "site": "YouTube", "type": "Trailer"},
            ]
        },
    )
