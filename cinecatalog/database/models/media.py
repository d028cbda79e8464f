"""Ancillary media attached to a movie (soundtrack songs)."""

from sqlalchemy import JSON, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cinecatalog.database.models.base import Base, TimestampMixin

CURATOR_SOURCE = "admin"


class Song(Base, TimestampMixin):
    """Soundtrack entry of a movie.

    Rows are owned by the provider named in ``source``; rows with
    source "admin" are curator entries and never replaced automatically.

    Attributes:
        id: Hashed id derived from movie and URL (or title).
        movie_id: Owning movie.
        singers: Performer names (channel name for video matches).
        youtube_url: Watch URL; unique per movie when present.
    """

    __tablename__ = "songs"
    __table_args__ = (UniqueConstraint("movie_id", "youtube_url", name="uq_songs_movie_url"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    movie_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("movies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    singers: Mapped[list[str]] = mapped_column(JSON, default=list)
    youtube_url: Mapped[str | None] = mapped_column(String(500))
    platform: Mapped[str] = mapped_column(String(32), default="youtube")
    source: Mapped[str] = mapped_column(String(32), default="youtube", index=True)

    @property
    def is_curated(self) -> bool:
        """Check whether a curator entered the song."""
        return self.source == CURATOR_SOURCE

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<Song(movie_id='{self.movie_id}', title='{self.title}')>"
