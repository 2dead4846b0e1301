class WatchlistError(Exception):
    """Base class for errors raised by the catalog client and the watchlist store."""


class CatalogUnavailableError(WatchlistError):
    """The remote catalog could not be reached or returned something unusable."""


class CorruptStateError(WatchlistError):
    """The persisted watchlist snapshot cannot be decoded."""


class PersistenceError(WatchlistError):
    """Reading or writing the watchlist snapshot failed. Nothing was committed."""
