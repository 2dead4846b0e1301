import pytest
from pydantic import ValidationError


def test_valid_config(monkeypatch):
    monkeypatch.setenv("TMDB_API_KEY", "abc123")
    monkeypatch.delenv("TMDB_BASE_URL", raising=False)
    monkeypatch.delenv("DB_PATH", raising=False)
    monkeypatch.delenv("REQUEST_TIMEOUT", raising=False)

    from config import Settings

    settings = Settings(_env_file=None)

    assert settings.tmdb_api_key == "abc123"
    assert settings.tmdb_base_url == "https://api.themoviedb.org/3"
    assert str(settings.db_path) == "data/watchlist.db"
    assert settings.request_timeout == 30.0


def test_db_path_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("TMDB_API_KEY", "abc123")
    monkeypatch.setenv("DB_PATH", str(tmp_path / "mine.db"))

    from config import Settings

    assert Settings(_env_file=None).db_path == tmp_path / "mine.db"


def test_missing_required_vars(monkeypatch):
    monkeypatch.delenv("TMDB_API_KEY", raising=False)

    from config import Settings

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
