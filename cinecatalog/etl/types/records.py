"""Normalized records exchanged between clients, matcher and store.

Raw provider payloads are validated into these models at the
normalizer boundary; everything downstream works on them only.
"""

import re
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cinecatalog.etl.utils.ids import movie_id

_WHITESPACE = re.compile(r"\s+")


def normalize_rating_source(name: str) -> str:
    """Normalize a rating source name into a storage key.

    "Internet Movie Database" -> "imdb", "Rotten Tomatoes" -> "rottentomatoes".
    """
    lowered = name.lower()
    if "imdb" in lowered or "internet movie database" in lowered:
        return "imdb"
    return _WHITESPACE.sub("", lowered)


class CastCredit(BaseModel):
    """Billed cast member of a movie.

    Attributes:
        native_id: Provider person id.
        name: Display name.
        character: Role played.
        order: Billing order (0 = top billed).
        profile_image: Absolute profile image URL.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    native_id: str
    name: str = Field(min_length=1)
    character: str | None = None
    order: int = 0
    profile_image: str | None = None

    @field_validator("native_id", mode="before")
    @classmethod
    def coerce_native_id(cls, v: object) -> str:
        """Accept numeric provider ids."""
        return str(v) if isinstance(v, int) else v


class FullRecord(BaseModel):
    """A provider's complete view of one movie.

    Attributes:
        provider: Provider name ("tmdb", "wiki", ...).
        native_id: Provider-native identifier.
        title: Display title.
        language: Language name (e.g. "Hindi").
        language_code: Original-language code (e.g. "hi").
        production_countries: ISO 3166-1 codes.
        vote_average: Provider's own audience score (0-10).
        source_url: Public page of the record on the provider.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    provider: str = "tmdb"
    native_id: str
    title: str = Field(min_length=1, max_length=500)
    original_title: str | None = None
    language: str | None = None
    language_code: str | None = None
    release_date: date | None = None
    synopsis: str | None = None
    director: str | None = None
    writers: list[str] = Field(default_factory=list)
    cast: list[CastCredit] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    poster: str | None = None
    backdrop: str | None = None
    trailer_url: str | None = None
    production_countries: list[str] = Field(default_factory=list)
    vote_average: float | None = Field(default=None, ge=0, le=10)
    vote_count: int | None = Field(default=None, ge=0)
    imdb_id: str | None = None
    source_url: str | None = None

    @field_validator("native_id", mode="before")
    @classmethod
    def coerce_native_id(cls, v: object) -> str:
        """Accept numeric provider ids."""
        return str(v) if isinstance(v, int) else v

    @field_validator("release_date", mode="before")
    @classmethod
    def parse_release_date(cls, v: object) -> object:
        """Treat empty strings as unknown dates."""
        if v == "":
            return None
        return v

    @field_validator("production_countries")
    @classmethod
    def upper_countries(cls, v: list[str]) -> list[str]:
        """Normalize country codes to upper case."""
        return [code.upper() for code in v if code]

    @property
    def entity_id(self) -> str:
        """Catalog entity id derived from provider identity."""
        return movie_id(self.provider, self.native_id)

    @property
    def year(self) -> int | None:
        """Release year, if known."""
        return self.release_date.year if self.release_date else None


class MediaCandidate(BaseModel):
    """A video returned by the video platform search.

    Attributes:
        title: Video title.
        description: Video description.
        url: Watch URL; candidates without one are never stored.
        channel: Uploading channel name.
    """

    model_config = ConfigDict(extra="ignore")

    title: str
    description: str = ""
    url: str | None = None
    channel: str | None = None
    published_at: datetime | None = None
    thumbnail: str | None = None


class SongRecord(BaseModel):
    """A soundtrack entry ready to be stored."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    title: str = Field(min_length=1)
    singers: list[str] = Field(default_factory=list)
    youtube_url: str | None = None
    platform: str = "youtube"

    @classmethod
    def from_candidate(cls, candidate: MediaCandidate) -> "SongRecord":
        """Build a song from an accepted video candidate."""
        singers = [candidate.channel] if candidate.channel else []
        return cls(title=candidate.title, singers=singers, youtube_url=candidate.url)


class RatingRecord(BaseModel):
    """A rating from one source.

    Attributes:
        source: Source name as reported by the provider.
        value: Numeric value on ``scale``.
        scale: Upper bound of the rating scale (10 or 100).
        count: Number of votes, when known.
        url: Public page of the rating.
    """

    model_config = ConfigDict(extra="ignore")

    source: str = Field(min_length=1)
    value: float = Field(ge=0)
    scale: float = Field(default=10, gt=0)
    count: int | None = Field(default=None, ge=0)
    url: str | None = None

    @property
    def source_key(self) -> str:
        """Normalized source used as the storage key."""
        return normalize_rating_source(self.source)
