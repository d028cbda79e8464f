"""Reconciliation store: idempotent writes into the catalog.

Every write is keyed on provider identity, so re-running an ingestion
pass converges to the same rows. Curator-owned fields and curator songs
are never overwritten by automated sources, and stored values are never
blanked by empty incoming values.
"""

from collections.abc import Iterable
from datetime import date
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cinecatalog.database.models import (
    CURATOR_SOURCE,
    EDITORIAL_FIELDS,
    Movie,
    MovieCast,
    Song,
)
from cinecatalog.database.repositories import (
    AttributionRepository,
    MovieRepository,
    PersonRepository,
    RatingRepository,
    SongRepository,
)
from cinecatalog.etl.exceptions import CatalogError, EntityNotFoundError
from cinecatalog.etl.loaders.base import BaseLoader, LoaderStats
from cinecatalog.etl.types import FullRecord, RatingRecord, SongRecord
from cinecatalog.etl.utils.ids import hash_id, person_id

# =============================================================================
# STATUS DERIVATION
# =============================================================================

STATUS_ANNOUNCED = "Announced"
STATUS_UPCOMING = "Upcoming"
STATUS_NOW_SHOWING = "Now Showing"

PERSON_URLS = {
    "tmdb": "https://www.themoviedb.org/person/{id}",
}

# Fields a curator may edit: editorial scalars plus writers.
CURATABLE_FIELDS = frozenset(EDITORIAL_FIELDS) | {"writers"}


def derive_status(
    release_date: date | None,
    today: date | None = None,
) -> str:
    """Derive the release status of a movie.

    Args:
        release_date: Release date, if known.
        today: Reference date (defaults to today).

    Returns:
        Announced, Upcoming or Now Showing.
    """
    if release_date is None:
        return STATUS_ANNOUNCED
    if release_date > (today or date.today()):
        return STATUS_UPCOMING
    return STATUS_NOW_SHOWING


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip()) or value == []


# =============================================================================
# STORE
# =============================================================================


class ReconciliationStore(BaseLoader):
    """Idempotent catalog writer bound to one session (one transaction).

    Example:
        ```python
        with db.session() as session:
            entity_id = ReconciliationStore(session).upsert(record)
        ```
    """

    name = "store"

    def __init__(self, session: Session, today: date | None = None) -> None:
        """Initialize store.

        Args:
            session: SQLAlchemy session; the caller commits.
            today: Reference date for status derivation.
        """
        super().__init__(session)
        self._today = today
        self._movies = MovieRepository(session)
        self._persons = PersonRepository(session)
        self._songs = SongRepository(session)
        self._ratings = RatingRepository(session)
        self._attributions = AttributionRepository(session)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_movie(self, entity_id: str) -> Movie:
        """Return a movie or raise.

        Raises:
            EntityNotFoundError: If no movie has this id.
        """
        movie = self._movies.get_by_id(entity_id)
        if movie is None:
            raise EntityNotFoundError(f"Unknown movie: {entity_id}")
        return movie

    # -------------------------------------------------------------------------
    # Base Records
    # -------------------------------------------------------------------------

    def upsert(
        self,
        record: FullRecord,
        store_provider_rating: bool = True,
        is_indian: bool = True,
    ) -> str:
        """Insert or update the movie described by a provider record.

        Args:
            record: Normalized provider record.
            store_provider_rating: Store the provider's vote average.
            is_indian: Classifier verdict.

        Returns:
            Entity id of the movie.
        """
        movie = self._movies.get_by_provider_id(record.provider, record.native_id)
        values = self._editorial_values(record)

        if movie is None:
            movie = Movie(
                id=record.entity_id,
                provider=record.provider,
                provider_id=record.native_id,
                writers=list(record.writers),
                production_countries=list(record.production_countries),
                is_indian=is_indian,
                sources=[record.provider],
                curated_fields=[],
                status=derive_status(record.release_date, self._today),
                **values,
            )
            self._movies.create(movie)
            self._count("inserted")
        else:
            self._merge_into(movie, values, record)
            movie.is_indian = is_indian
            self._session.flush()
            self._count("updated")

        if record.genres:
            self._movies.replace_genres(movie.id, record.genres)
        if record.cast:
            self._replace_cast(movie.id, record)

        self.add_attribution(
            "movie", movie.id, record.provider, record.native_id, record.source_url
        )

        if store_provider_rating and record.vote_average is not None and record.vote_count:
            self._ratings.upsert(
                movie.id,
                record.provider,
                record.vote_average,
                scale=10,
                count=record.vote_count,
                url=record.source_url,
            )
            self._count("ratings")

        return movie.id

    def load(self, data: Iterable[FullRecord]) -> LoaderStats:
        """Upsert a batch of records, isolating failures per record.

        Args:
            data: Records to upsert.

        Returns:
            Statistics of this batch.
        """
        self.reset_stats()
        for record in data:
            try:
                with self._session.begin_nested():
                    self.upsert(record)
            except (SQLAlchemyError, CatalogError) as e:
                self._record_error(f"{record.entity_id}: {e}")
        self._log_summary()
        return self.stats

    @staticmethod
    def _editorial_values(record: FullRecord) -> dict[str, Any]:
        """Editorial columns carried by a record."""
        return {
            "title": record.title,
            "original_title": record.original_title,
            "language": record.language,
            "language_code": record.language_code,
            "synopsis": record.synopsis,
            "director": record.director,
            "release_date": record.release_date,
            "poster": record.poster,
            "backdrop": record.backdrop,
            "trailer_url": record.trailer_url,
            "imdb_id": record.imdb_id,
        }

    def _merge_into(self, movie: Movie, values: dict[str, Any], record: FullRecord) -> None:
        """Apply "non-empty wins" to an existing movie, skipping curated fields."""
        for field_name, value in values.items():
            if movie.is_curated(field_name) or _is_empty(value):
                continue
            setattr(movie, field_name, value)

        if record.writers and not movie.is_curated("writers"):
            movie.writers = list(record.writers)
        if record.production_countries:
            movie.production_countries = list(record.production_countries)
        if record.provider not in (movie.sources or []):
            movie.sources = [*(movie.sources or []), record.provider]
        if not movie.is_curated("status"):
            movie.status = derive_status(movie.release_date, self._today)

    def _replace_cast(self, movie_id: str, record: FullRecord) -> None:
        """Upsert cast persons with provenance, then replace billing."""
        rows: list[MovieCast] = []
        for credit in record.cast:
            pid = person_id(record.provider, credit.native_id)
            self._persons.upsert(pid, credit.name, credit.profile_image)
            url_template = PERSON_URLS.get(record.provider)
            url = url_template.format(id=credit.native_id) if url_template else None
            self.add_attribution("person", pid, record.provider, credit.native_id, url)
            rows.append(
                MovieCast(person_id=pid, character=credit.character, billing_order=credit.order)
            )
        self._movies.replace_cast(movie_id, rows)

    # -------------------------------------------------------------------------
    # Ancillary Media
    # -------------------------------------------------------------------------

    def replace_media(
        self,
        entity_id: str,
        items: Iterable[SongRecord],
        source: str = "youtube",
    ) -> int:
        """Replace all songs a source owns for a movie.

        Items are de-duplicated by URL; URLs already held by songs of
        another owner (curator entries) are skipped. An empty list
        removes the source's songs.

        Args:
            entity_id: Movie entity id.
            items: New songs.
            source: Owning source.

        Returns:
            Number of songs stored.

        Raises:
            ValueError: If an automated write targets curator songs.
            EntityNotFoundError: If the movie does not exist.
        """
        if source == CURATOR_SOURCE:
            raise ValueError("Curator songs are not replaced in bulk")
        self.get_movie(entity_id)

        self._songs.delete_for_movie(entity_id, source)
        taken_urls = self._songs.urls_for_movie(entity_id)
        used_ids: set[str] = set()
        stored = 0

        for item in items:
            if item.youtube_url:
                if item.youtube_url in taken_urls:
                    continue
                taken_urls.add(item.youtube_url)
            song_id = hash_id("song", f"{entity_id}|{source}|{item.youtube_url or item.title}")
            if song_id in used_ids:
                continue
            used_ids.add(song_id)
            self._session.add(
                Song(
                    id=song_id,
                    movie_id=entity_id,
                    title=item.title,
                    singers=list(item.singers),
                    youtube_url=item.youtube_url,
                    platform=item.platform,
                    source=source,
                )
            )
            stored += 1

        self._session.flush()
        self._logger.debug(f"Replaced {source} songs for {entity_id}: {stored}")
        self._count("songs", stored)
        return stored

    def add_curator_song(
        self,
        entity_id: str,
        title: str,
        singers: list[str] | None = None,
        youtube_url: str | None = None,
    ) -> Song:
        """Add a curator-owned song (never replaced by ingestion)."""
        self.get_movie(entity_id)
        song = Song(
            id=hash_id("song", f"{entity_id}|{CURATOR_SOURCE}|{youtube_url or title}"),
            movie_id=entity_id,
            title=title,
            singers=list(singers or []),
            youtube_url=youtube_url,
            source=CURATOR_SOURCE,
        )
        return self._songs.create(song)

    # -------------------------------------------------------------------------
    # Ratings
    # -------------------------------------------------------------------------

    def merge_ratings(self, entity_id: str, incoming: Iterable[RatingRecord]) -> int:
        """Upsert ratings per normalized source.

        Args:
            entity_id: Movie entity id.
            incoming: Ratings; the first occurrence of a source wins.

        Returns:
            Number of ratings written.
        """
        self.get_movie(entity_id)
        written: set[str] = set()
        for rating in incoming:
            key = rating.source_key
            if key in written:
                continue
            self._ratings.upsert(
                entity_id,
                key,
                rating.value,
                scale=rating.scale,
                count=rating.count,
                url=rating.url,
            )
            written.add(key)
        self._count("ratings", len(written))
        return len(written)

    # -------------------------------------------------------------------------
    # Editorial Writes
    # -------------------------------------------------------------------------

    def set_trailer(self, entity_id: str, url: str) -> bool:
        """Set the trailer link from an automated source.

        Returns:
            True if the stored value changed.
        """
        movie = self.get_movie(entity_id)
        if not url or movie.is_curated("trailer_url") or movie.trailer_url == url:
            return False
        movie.trailer_url = url
        self._session.flush()
        return True

    def apply_curator_edit(self, entity_id: str, **fields: Any) -> Movie:
        """Write curator values and lock the fields against ingestion.

        Args:
            entity_id: Movie entity id.
            **fields: Field values (editorial fields or writers).

        Returns:
            Updated movie.

        Raises:
            ValueError: On a field curators cannot own.
        """
        unknown = set(fields) - CURATABLE_FIELDS
        if unknown:
            raise ValueError(f"Not curatable: {sorted(unknown)}")

        movie = self.get_movie(entity_id)
        for field_name, value in fields.items():
            setattr(movie, field_name, value)
        movie.curated_fields = sorted(set(movie.curated_fields or []) | set(fields))
        self._session.flush()
        self._logger.info(f"Curator edit on {entity_id}: {sorted(fields)}")
        return movie

    def add_attribution(
        self,
        entity_type: str,
        entity_id: str,
        provider: str,
        provider_id: str,
        url: str | None = None,
    ) -> bool:
        """Record provenance (no-op when already recorded)."""
        added = self._attributions.add(entity_type, entity_id, provider, provider_id, url)
        if added:
            self._count("attributions")
        return added
