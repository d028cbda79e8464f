"""Provider clients: movie database, video platform, ratings aggregator."""

from cinecatalog.etl.extractors.base import BaseAPIClient
from cinecatalog.etl.extractors.omdb import OMDbClient, OMDbClientError
from cinecatalog.etl.extractors.tmdb import TMDBClient, TMDBClientError
from cinecatalog.etl.extractors.youtube import (
    SongFinder,
    SongMatcher,
    YouTubeClient,
    YouTubeClientError,
)

__all__ = [
    "BaseAPIClient",
    "OMDbClient",
    "OMDbClientError",
    "SongFinder",
    "SongMatcher",
    "TMDBClient",
    "TMDBClientError",
    "YouTubeClient",
    "YouTubeClientError",
]
