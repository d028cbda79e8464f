"""Movie catalog entities: movies, genres, persons and cast.

A movie row is keyed by its provider-prefixed entity id and is never
renumbered; duplicates across providers are folded through aliases.
"""

from datetime import date

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from cinecatalog.database.models.base import Base, TimestampMixin

# Scalar fields merged with "non-empty wins" and lockable by curators.
EDITORIAL_FIELDS = (
    "title",
    "original_title",
    "language",
    "language_code",
    "synopsis",
    "director",
    "release_date",
    "status",
    "poster",
    "backdrop",
    "trailer_url",
    "imdb_id",
)


class Movie(Base, TimestampMixin):
    """Canonical or provider-specific movie entity.

    Attributes:
        id: Entity id (e.g. "tmdb-movie:27205").
        provider: Provider that created the row.
        provider_id: Provider-native identifier.
        status: Announced, Upcoming or Now Showing.
        is_indian: Classifier verdict at last upsert.
        sources: Providers that contributed data.
        curated_fields: Fields owned by a human curator.
    """

    __tablename__ = "movies"
    __table_args__ = (UniqueConstraint("provider", "provider_id", name="uq_movies_provider"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    provider: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    provider_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Editorial
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    original_title: Mapped[str | None] = mapped_column(String(500))
    language: Mapped[str | None] = mapped_column(String(50), index=True)
    language_code: Mapped[str | None] = mapped_column(String(8))
    synopsis: Mapped[str | None] = mapped_column(Text)
    director: Mapped[str | None] = mapped_column(String(255))
    writers: Mapped[list[str]] = mapped_column(JSON, default=list)
    release_date: Mapped[date | None] = mapped_column(Date, index=True)
    status: Mapped[str | None] = mapped_column(String(20))
    poster: Mapped[str | None] = mapped_column(String(500))
    backdrop: Mapped[str | None] = mapped_column(String(500))
    trailer_url: Mapped[str | None] = mapped_column(String(500))
    imdb_id: Mapped[str | None] = mapped_column(String(20), index=True)

    # Classification
    is_indian: Mapped[bool] = mapped_column(Boolean, default=True)
    production_countries: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Provenance
    sources: Mapped[list[str]] = mapped_column(JSON, default=list)
    curated_fields: Mapped[list[str]] = mapped_column(JSON, default=list)

    @property
    def year(self) -> int | None:
        """Release year, if known."""
        return self.release_date.year if self.release_date else None

    def is_curated(self, field_name: str) -> bool:
        """Check whether a curator owns the field."""
        return field_name in (self.curated_fields or [])

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Movie(id='{self.id}', title='{self.title}')>"


class MovieGenre(Base):
    """Movie-genre association."""

    __tablename__ = "movie_genres"

    movie_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("movies.id", ondelete="CASCADE"),
        primary_key=True,
    )
    genre: Mapped[str] = mapped_column(String(100), primary_key=True)


class Person(Base, TimestampMixin):
    """Cast or crew member."""

    __tablename__ = "persons"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    profile_image: Mapped[str | None] = mapped_column(String(500))

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Person(id='{self.id}', name='{self.name}')>"


class MovieCast(Base):
    """Billed cast member of a movie."""

    __tablename__ = "movie_cast"

    movie_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("movies.id", ondelete="CASCADE"),
        primary_key=True,
    )
    person_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("persons.id", ondelete="CASCADE"),
        primary_key=True,
    )
    character: Mapped[str | None] = mapped_column(String(255))
    billing_order: Mapped[int] = mapped_column(Integer, default=0)
