"""Provider-specific settings."""

from cinecatalog.settings.sources.omdb import OMDbSettings
from cinecatalog.settings.sources.tmdb import TMDBSettings
from cinecatalog.settings.sources.youtube import YouTubeSettings

__all__ = [
    "OMDbSettings",
    "TMDBSettings",
    "YouTubeSettings",
]
