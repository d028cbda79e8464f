"""Rating repository."""

from sqlalchemy import select

from cinecatalog.database.models import Rating, utcnow
from cinecatalog.database.repositories.base import BaseRepository
from cinecatalog.etl.utils.ids import hash_id


class RatingRepository(BaseRepository[Rating]):
    """Repository for Rating entity operations."""

    model = Rating

    def get_for_source(self, movie_id: str, source: str) -> Rating | None:
        """Retrieve the rating of one source for a movie."""
        stmt = select(Rating).where(Rating.movie_id == movie_id, Rating.source == source)
        return self._session.scalars(stmt).first()

    def list_for_movie(self, movie_id: str) -> list[Rating]:
        """Return ratings of a movie ordered by source."""
        stmt = select(Rating).where(Rating.movie_id == movie_id).order_by(Rating.source)
        return list(self._session.scalars(stmt).all())

    def upsert(
        self,
        movie_id: str,
        source: str,
        value: float,
        scale: float = 10,
        count: int | None = None,
        url: str | None = None,
    ) -> tuple[Rating, bool]:
        """Insert or replace the rating of a source.

        Args:
            movie_id: Movie entity id.
            source: Normalized source key.
            value: Rating value.
            scale: Scale upper bound.
            count: Vote count.
            url: Rating page.

        Returns:
            Tuple of (rating, created).
        """
        rating = self.get_for_source(movie_id, source)
        if rating is None:
            rating = Rating(
                id=hash_id("rating", f"{movie_id}|{source}"),
                movie_id=movie_id,
                source=source,
                value=value,
                scale=scale,
                count=count,
                url=url,
            )
            self.create(rating)
            return rating, True

        rating.value = value
        rating.scale = scale
        rating.count = count
        rating.url = url
        rating.fetched_at = utcnow()
        self._session.flush()
        return rating, False
