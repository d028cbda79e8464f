"""SQLAlchemy ORM models for the catalog database.

Usage:
    from cinecatalog.database.models import Base, Movie, Song

Tables:
    - movies: Catalog entities (one row per provider identity)
    - movie_genres: Movie-genre association
    - persons: Cast and crew
    - movie_cast: Billed cast
    - songs: Soundtrack entries
    - ratings: External ratings, one per source
    - attributions: Append-only provenance
    - id_aliases: Non-canonical to canonical id redirections
    - merge_candidates: Merges awaiting confirmation
    - user_reviews, user_favorites: User content (migrated on merge)
    - etl_runs: Ingestion run tracking
"""

from cinecatalog.database.models.audit import ETLRun
from cinecatalog.database.models.base import Base, TimestampMixin, utcnow
from cinecatalog.database.models.media import CURATOR_SOURCE, Song
from cinecatalog.database.models.movie import (
    EDITORIAL_FIELDS,
    Movie,
    MovieCast,
    MovieGenre,
    Person,
)
from cinecatalog.database.models.provenance import Attribution, IdAlias, MergeCandidate
from cinecatalog.database.models.rating import Rating
from cinecatalog.database.models.user_content import UserFavorite, UserReview

__all__ = [
    "Base",
    "TimestampMixin",
    "utcnow",
    "Movie",
    "MovieGenre",
    "Person",
    "MovieCast",
    "EDITORIAL_FIELDS",
    "Song",
    "CURATOR_SOURCE",
    "Rating",
    "Attribution",
    "IdAlias",
    "MergeCandidate",
    "UserReview",
    "UserFavorite",
    "ETLRun",
]
