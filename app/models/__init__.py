from app.models.user import User
from app.models.series import Series, Season, Episode
from app.models.series_watch import (
    WatchingStatus,
    EpisodeWatchHistory,
    SeriesRating,
    SeriesWatchingState,
)

__all__ = [
    "User",
    "Series",
    "Season",
    "Episode",
    "WatchingStatus",
    "EpisodeWatchHistory",
    "SeriesRating",
    "SeriesWatchingState",
]
