"""User-generated content referencing movies.

Written by the browsing front end; the engine only migrates these
rows when entities are merged.
"""

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cinecatalog.database.models.base import Base, TimestampMixin


class UserReview(Base, TimestampMixin):
    """Review written by a user."""

    __tablename__ = "user_reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    movie_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("movies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    rating: Mapped[int | None] = mapped_column(Integer)
    body: Mapped[str | None] = mapped_column(Text)


class UserFavorite(Base, TimestampMixin):
    """Movie marked as favourite by a user."""

    __tablename__ = "user_favorites"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    movie_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("movies.id", ondelete="CASCADE"),
        primary_key=True,
    )
