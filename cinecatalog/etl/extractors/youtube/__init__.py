"""YouTube video platform provider: soundtrack and trailer search."""

from cinecatalog.etl.extractors.youtube.client import (
    YouTubeClient,
    YouTubeClientError,
    YouTubeNotFoundError,
    YouTubeQuotaError,
)
from cinecatalog.etl.extractors.youtube.matcher import (
    MatchResult,
    MatchTarget,
    SongMatcher,
    song_queries,
)
from cinecatalog.etl.extractors.youtube.songs import SongFinder

__all__ = [
    "MatchResult",
    "MatchTarget",
    "SongFinder",
    "SongMatcher",
    "YouTubeClient",
    "YouTubeClientError",
    "YouTubeNotFoundError",
    "YouTubeQuotaError",
    "song_queries",
]
