from models import CatalogRecord, WatchlistEntry


def project(record: CatalogRecord) -> WatchlistEntry:
    """Reduce a catalog record to the fields kept on the watchlist."""
    return WatchlistEntry(
        id=record.id,
        title=record.title,
        poster_path=record.poster_path,
        vote_average=record.vote_average,
        release_date=record.release_date,
    )
