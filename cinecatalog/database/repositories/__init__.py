"""Repository layer for catalog data access."""

from cinecatalog.database.repositories.base import BaseRepository
from cinecatalog.database.repositories.etl_run import ETLRunRepository
from cinecatalog.database.repositories.media import SongRepository
from cinecatalog.database.repositories.movie import MovieRepository, PersonRepository
from cinecatalog.database.repositories.provenance import (
    AliasRepository,
    AttributionRepository,
    MergeCandidateRepository,
)
from cinecatalog.database.repositories.rating import RatingRepository

__all__ = [
    "BaseRepository",
    "MovieRepository",
    "PersonRepository",
    "SongRepository",
    "RatingRepository",
    "AttributionRepository",
    "AliasRepository",
    "MergeCandidateRepository",
    "ETLRunRepository",
]
