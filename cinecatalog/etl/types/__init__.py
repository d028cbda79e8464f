"""ETL data types package.

Raw provider payloads are TypedDicts; normalized records are pydantic
models; run control structures are dataclasses.

Usage:
    from cinecatalog.etl.types import FullRecord, RunStats
"""

from cinecatalog.etl.types.omdb import OMDbMovieResponse, OMDbRatingEntry
from cinecatalog.etl.types.pipeline import (
    EnrichmentMode,
    ProviderResult,
    RunConfig,
    RunResult,
    RunStats,
)
from cinecatalog.etl.types.records import (
    CastCredit,
    FullRecord,
    MediaCandidate,
    RatingRecord,
    SongRecord,
    normalize_rating_source,
)
from cinecatalog.etl.types.tmdb import (
    TMDBCastData,
    TMDBCrewData,
    TMDBDiscoverPage,
    TMDBMovieDetails,
    TMDBVideoData,
)
from cinecatalog.etl.types.youtube import YouTubeSearchItem, YouTubeSearchResponse

__all__ = [
    # Records
    "CastCredit",
    "FullRecord",
    "MediaCandidate",
    "RatingRecord",
    "SongRecord",
    "normalize_rating_source",
    # Pipeline
    "EnrichmentMode",
    "ProviderResult",
    "RunConfig",
    "RunResult",
    "RunStats",
    # Raw payloads
    "OMDbMovieResponse",
    "OMDbRatingEntry",
    "TMDBCastData",
    "TMDBCrewData",
    "TMDBDiscoverPage",
    "TMDBMovieDetails",
    "TMDBVideoData",
    "YouTubeSearchItem",
    "YouTubeSearchResponse",
]
