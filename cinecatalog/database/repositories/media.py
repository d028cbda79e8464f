"""Song repository."""

from sqlalchemy import delete, select

from cinecatalog.database.models import Song
from cinecatalog.database.repositories.base import BaseRepository


class SongRepository(BaseRepository[Song]):
    """Repository for Song entity operations."""

    model = Song

    def list_for_movie(self, movie_id: str, source: str | None = None) -> list[Song]:
        """Return songs of a movie in insertion order.

        Args:
            movie_id: Movie entity id.
            source: Restrict to rows owned by one source.

        Returns:
            List of songs.
        """
        stmt = select(Song).where(Song.movie_id == movie_id)
        if source is not None:
            stmt = stmt.where(Song.source == source)
        return list(self._session.scalars(stmt.order_by(Song.created_at, Song.id)).all())

    def delete_for_movie(self, movie_id: str, source: str) -> int:
        """Delete all songs of one source for a movie.

        Returns:
            Number of rows deleted.
        """
        result = self._session.execute(
            delete(Song).where(Song.movie_id == movie_id, Song.source == source)
        )
        self._session.flush()
        return result.rowcount or 0

    def urls_for_movie(self, movie_id: str) -> set[str]:
        """Return the video URLs already attached to a movie."""
        stmt = select(Song.youtube_url).where(
            Song.movie_id == movie_id,
            Song.youtube_url.is_not(None),
        )
        return set(self._session.scalars(stmt).all())
