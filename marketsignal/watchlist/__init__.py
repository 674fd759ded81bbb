from .refresh import RefreshReport, Watchlist, WatchlistRefresher

__all__ = ["RefreshReport", "Watchlist", "WatchlistRefresher"]
