"""Ratings from external sources, one row per (movie, source)."""

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cinecatalog.database.models.base import Base, utcnow


class Rating(Base):
    """Rating of a movie by one source.

    Attributes:
        source: Normalized source key (imdb, tmdb, rottentomatoes, ...).
        value: Numeric value on ``scale``.
        scale: Upper bound of the scale (10 or 100).
        count: Number of votes, when known.
    """

    __tablename__ = "ratings"
    __table_args__ = (UniqueConstraint("movie_id", "source", name="uq_ratings_movie_source"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    movie_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("movies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    source: Mapped[str] = mapped_column(String(50), nullable=False)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    scale: Mapped[float] = mapped_column(Float, default=10)
    count: Mapped[int | None] = mapped_column(Integer)
    url: Mapped[str | None] = mapped_column(String(500))
    fetched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    @property
    def normalized(self) -> float:
        """Value on a 0-10 scale."""
        return round(self.value * 10 / self.scale, 2)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Rating(movie_id='{self.movie_id}', source='{self.source}', value={self.value})>"
