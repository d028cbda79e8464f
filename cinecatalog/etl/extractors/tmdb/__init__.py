"""TMDB movie database provider."""

from cinecatalog.etl.extractors.tmdb.client import (
    TMDBClient,
    TMDBClientError,
    TMDBNotFoundError,
    TMDBRateLimitError,
)
from cinecatalog.etl.extractors.tmdb.normalizer import normalize_movie, pick_trailer

__all__ = [
    "TMDBClient",
    "TMDBClientError",
    "TMDBNotFoundError",
    "TMDBRateLimitError",
    "normalize_movie",
    "pick_trailer",
]
