"""Cross-provider identity resolution.

Entities from different providers that describe the same movie are
folded into one canonical entity. The other entity is kept and an
alias redirects its id; every reference (songs, ratings, attributions,
genre and cast links, user content) moves to the canonical id.
"""

from dataclasses import dataclass, field
from datetime import datetime

from rapidfuzz import fuzz, process
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cinecatalog.database.models import (
    EDITORIAL_FIELDS,
    Attribution,
    IdAlias,
    MergeCandidate,
    Movie,
    MovieCast,
    UserFavorite,
    UserReview,
    utcnow,
)
from cinecatalog.database.repositories import (
    AliasRepository,
    MergeCandidateRepository,
    MovieRepository,
    RatingRepository,
    SongRepository,
)
from cinecatalog.etl.exceptions import (
    AliasCycleError,
    CatalogError,
    EntityNotFoundError,
    ResolutionError,
)
from cinecatalog.etl.extractors.youtube.matcher import SongMatcher
from cinecatalog.etl.utils.logger import setup_logger
from cinecatalog.settings import settings

# =============================================================================
# CONSTANTS
# =============================================================================

MAX_ALIAS_HOPS = 32
"""Longest alias chain followed before declaring a cycle."""

PROVIDER_RANK: dict[str, int] = {"tmdb": 0, "wiki": 1}
"""Lower rank wins canonical selection; unknown providers rank last."""

_UNRANKED = len(PROVIDER_RANK)

TITLE_WEIGHT = 0.6
YEAR_WEIGHT = 0.25
LANGUAGE_WEIGHT = 0.15
YEAR_TOLERANCE = 1
_TITLE_CUTOFF = 60


# =============================================================================
# RESULT TYPES
# =============================================================================


@dataclass(frozen=True)
class MappingCandidate:
    """Proposed identity mapping between two entities.

    Attributes:
        from_id: Entity to be redirected.
        to_id: Canonical target.
        confidence: Mapping confidence (0-1).
        reason: Evidence used ("imdb_id" or "title_year_language").
    """

    from_id: str
    to_id: str
    confidence: float
    reason: str


@dataclass
class MergeOutcome:
    """References moved by one merge."""

    from_id: str
    canonical_id: str
    songs_moved: int = 0
    songs_dropped: int = 0
    ratings_moved: int = 0
    attributions_moved: int = 0
    user_rows_moved: int = 0
    fields_filled: list[str] = field(default_factory=list)


@dataclass
class IdentityStats:
    """Statistics of a reconciliation pass.

    Attributes:
        candidates: Mappings above the review threshold.
        merged: Mappings merged automatically.
        queued: Mappings queued for confirmation.
        errors: Mappings that failed to apply.
    """

    candidates: int = 0
    merged: int = 0
    queued: int = 0
    errors: int = 0
    error_messages: list[str] = field(default_factory=list)


# =============================================================================
# RESOLVER
# =============================================================================


class IdentityResolver:
    """Resolves, creates and applies entity aliases within one session.

    Attributes:
        auto_merge_threshold: Confidence at or above which mappings merge.
        review_threshold: Confidence at or above which mappings are queued.
    """

    def __init__(
        self,
        session: Session,
        auto_merge_threshold: float | None = None,
        review_threshold: float | None = None,
    ) -> None:
        """Initialize resolver.

        Args:
            session: SQLAlchemy session; the caller commits.
            auto_merge_threshold: Defaults to MERGE_AUTO_THRESHOLD.
            review_threshold: Defaults to MERGE_REVIEW_THRESHOLD.
        """
        self._session = session
        self._logger = setup_logger("etl.identity")
        self._movies = MovieRepository(session)
        self._aliases = AliasRepository(session)
        self._candidates = MergeCandidateRepository(session)
        self._songs = SongRepository(session)
        self._ratings = RatingRepository(session)
        self.auto_merge_threshold = (
            settings.ingestion.auto_merge_threshold
            if auto_merge_threshold is None
            else auto_merge_threshold
        )
        self.review_threshold = (
            settings.ingestion.review_threshold if review_threshold is None else review_threshold
        )

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve(self, entity_id: str) -> str:
        """Follow aliases to the canonical id.

        Args:
            entity_id: Any entity id.

        Returns:
            Terminal id (the input itself when not aliased).

        Raises:
            AliasCycleError: On a cycle or a chain longer than MAX_ALIAS_HOPS.
        """
        chain = [entity_id]
        current = entity_id
        for _ in range(MAX_ALIAS_HOPS):
            target = self._aliases.target_of(current)
            if target is None:
                return current
            if target in chain:
                raise AliasCycleError(entity_id, [*chain, target])
            chain.append(target)
            current = target
        raise AliasCycleError(entity_id, chain)

    def add_alias(self, from_id: str, to_id: str, reason: str) -> IdAlias:
        """Redirect one id to another.

        The alias points at the terminal id of ``to_id``.

        Raises:
            ResolutionError: On a self-alias or an already aliased id.
            AliasCycleError: If ``to_id`` resolves back to ``from_id``.
        """
        if from_id == to_id:
            raise ResolutionError(f"Cannot alias {from_id} to itself")
        existing = self._aliases.target_of(from_id)
        if existing is not None:
            raise ResolutionError(f"{from_id} is already aliased to {existing}")

        target = self.resolve(to_id)
        if target == from_id:
            raise AliasCycleError(from_id, [from_id, to_id, from_id])

        alias = self._aliases.create(IdAlias(from_id=from_id, to_id=target, reason=reason))
        self._logger.info(f"Alias {from_id} -> {target} ({reason})")
        return alias

    @staticmethod
    def choose_canonical(a: Movie, b: Movie) -> Movie:
        """Pick the canonical entity of a pair.

        Provider rank first, then earlier creation, then smaller id.
        """

        def key(movie: Movie) -> tuple[int, datetime, str]:
            created = movie.created_at or utcnow()
            return (
                PROVIDER_RANK.get(movie.provider, _UNRANKED),
                created.replace(tzinfo=None),
                movie.id,
            )

        return min((a, b), key=key)

    # -------------------------------------------------------------------------
    # Merge
    # -------------------------------------------------------------------------

    def merge(self, from_id: str, to_id: str, reason: str = "manual") -> MergeOutcome:
        """Fold one entity into another.

        Args:
            from_id: Entity to redirect (must not be aliased).
            to_id: Target; its canonical id receives the references.
            reason: Recorded on the alias.

        Returns:
            Counts of moved references.

        Raises:
            ResolutionError: On invalid alias requests.
            EntityNotFoundError: If either movie is missing.
        """
        canonical_id = self.resolve(to_id)
        source = self._require(from_id)
        canonical = self._require(canonical_id)

        self.add_alias(from_id, canonical_id, reason)

        outcome = MergeOutcome(from_id=from_id, canonical_id=canonical_id)
        self._move_songs(from_id, canonical_id, outcome)
        self._move_ratings(from_id, canonical_id, outcome)
        self._move_attributions(from_id, canonical_id, outcome)
        self._move_user_content(from_id, canonical_id, outcome)
        self._merge_collections(source, canonical)
        self._merge_fields(source, canonical, outcome)

        self._session.flush()
        self._logger.info(
            f"Merged {from_id} into {canonical_id}: songs={outcome.songs_moved}, "
            f"ratings={outcome.ratings_moved}, attributions={outcome.attributions_moved}"
        )
        return outcome

    def _require(self, entity_id: str) -> Movie:
        movie = self._movies.get_by_id(entity_id)
        if movie is None:
            raise EntityNotFoundError(f"Unknown movie: {entity_id}")
        return movie

    def _move_songs(self, from_id: str, to_id: str, outcome: MergeOutcome) -> None:
        """Move songs, dropping those whose URL the canonical already has."""
        taken = self._songs.urls_for_movie(to_id)
        for song in self._songs.list_for_movie(from_id):
            if song.youtube_url and song.youtube_url in taken:
                self._session.delete(song)
                outcome.songs_dropped += 1
                continue
            if song.youtube_url:
                taken.add(song.youtube_url)
            song.movie_id = to_id
            outcome.songs_moved += 1
        self._session.flush()

    def _move_ratings(self, from_id: str, to_id: str, outcome: MergeOutcome) -> None:
        """Move ratings; the canonical's rating wins per source."""
        for rating in self._ratings.list_for_movie(from_id):
            if self._ratings.get_for_source(to_id, rating.source) is not None:
                self._session.delete(rating)
                continue
            rating.movie_id = to_id
            outcome.ratings_moved += 1
        self._session.flush()

    def _move_attributions(self, from_id: str, to_id: str, outcome: MergeOutcome) -> None:
        """Re-point provenance; identical provenance already on the canonical stays put."""
        rows = self._session.scalars(
            select(Attribution).where(Attribution.entity_id == from_id)
        ).all()
        for row in rows:
            duplicate = self._session.scalars(
                select(Attribution).where(
                    Attribution.entity_type == row.entity_type,
                    Attribution.entity_id == to_id,
                    Attribution.provider == row.provider,
                    Attribution.provider_id == row.provider_id,
                )
            ).first()
            if duplicate is None:
                row.entity_id = to_id
                outcome.attributions_moved += 1
        self._session.flush()

    def _move_user_content(self, from_id: str, to_id: str, outcome: MergeOutcome) -> None:
        """Move reviews and favourites to the canonical movie."""
        result = self._session.execute(
            update(UserReview).where(UserReview.movie_id == from_id).values(movie_id=to_id)
        )
        outcome.user_rows_moved += result.rowcount or 0

        favorites = self._session.scalars(
            select(UserFavorite).where(UserFavorite.movie_id == from_id)
        ).all()
        for favorite in favorites:
            already = self._session.get(UserFavorite, (favorite.user_id, to_id))
            if already is not None:
                self._session.delete(favorite)
                continue
            self._session.add(UserFavorite(user_id=favorite.user_id, movie_id=to_id))
            self._session.delete(favorite)
            outcome.user_rows_moved += 1
        self._session.flush()

    def _merge_collections(self, source: Movie, canonical: Movie) -> None:
        """Richer collection wins for genres, cast and writers.

        Genre and cast links are then dropped from the merged-away movie.
        """
        source_genres = self._movies.get_genres(source.id)
        if len(source_genres) > len(self._movies.get_genres(canonical.id)):
            self._movies.replace_genres(canonical.id, source_genres)

        source_cast = self._movies.get_cast(source.id)
        if len(source_cast) > len(self._movies.get_cast(canonical.id)):
            self._movies.replace_cast(
                canonical.id,
                [
                    MovieCast(
                        person_id=c.person_id,
                        character=c.character,
                        billing_order=c.billing_order,
                    )
                    for c in source_cast
                ],
            )
        self._movies.replace_genres(source.id, [])
        self._movies.replace_cast(source.id, [])

        if not canonical.is_curated("writers") and len(source.writers or []) > len(
            canonical.writers or []
        ):
            canonical.writers = list(source.writers)

    @staticmethod
    def _merge_fields(source: Movie, canonical: Movie, outcome: MergeOutcome) -> None:
        """First non-empty value wins, canonical first; sets are unioned."""
        for field_name in EDITORIAL_FIELDS:
            current = getattr(canonical, field_name)
            incoming = getattr(source, field_name)
            if current in (None, "") and incoming not in (None, ""):
                setattr(canonical, field_name, incoming)
                outcome.fields_filled.append(field_name)

        canonical.sources = list(
            dict.fromkeys([*(canonical.sources or []), *(source.sources or [])])
        )
        canonical.production_countries = list(
            dict.fromkeys(
                [*(canonical.production_countries or []), *(source.production_countries or [])]
            )
        )

    # -------------------------------------------------------------------------
    # Mapping Discovery
    # -------------------------------------------------------------------------

    @staticmethod
    def confidence(a: Movie, b: Movie) -> float:
        """Score how likely two movies are the same title.

        Weighted title similarity, release year (within one year) and
        language. Unknown year or language counts half.
        """
        title_score = (
            fuzz.token_sort_ratio(SongMatcher.normalize(a.title), SongMatcher.normalize(b.title))
            / 100
        )

        if a.year is None or b.year is None:
            year_score = 0.5
        elif a.year == b.year:
            year_score = 1.0
        elif abs(a.year - b.year) <= YEAR_TOLERANCE:
            year_score = 0.5
        else:
            year_score = 0.0

        if not a.language or not b.language:
            language_score = 0.5
        else:
            language_score = 1.0 if a.language.lower() == b.language.lower() else 0.0

        score = (
            TITLE_WEIGHT * title_score
            + YEAR_WEIGHT * year_score
            + LANGUAGE_WEIGHT * language_score
        )
        return round(score, 4)

    def find_candidates(self) -> list[MappingCandidate]:
        """Propose mappings from lower-ranked entities onto top-ranked ones.

        Returns:
            Best mapping per entity with confidence at or above the
            review threshold, highest confidence first.
        """
        top_provider = min(PROVIDER_RANK, key=PROVIDER_RANK.__getitem__)
        pool = self._movies.list_unaliased(provider=top_provider)
        if not pool:
            return []

        by_id = {m.id: m for m in pool}
        by_imdb = {m.imdb_id: m for m in pool if m.imdb_id}
        titles = {m.id: SongMatcher.normalize(m.title) for m in pool}

        proposals: list[MappingCandidate] = []
        for movie in self._movies.list_unaliased():
            if movie.provider == top_provider:
                continue

            if movie.imdb_id and movie.imdb_id in by_imdb:
                target = by_imdb[movie.imdb_id]
                proposals.append(MappingCandidate(movie.id, target.id, 1.0, "imdb_id"))
                continue

            matches = process.extract(
                SongMatcher.normalize(movie.title),
                titles,
                scorer=fuzz.token_sort_ratio,
                limit=5,
                score_cutoff=_TITLE_CUTOFF,
            )
            scored = [(self.confidence(movie, by_id[key]), key) for _, _, key in matches]
            if not scored:
                continue
            best_score, best_id = max(scored, key=lambda item: (item[0], item[1]))
            if best_score >= self.review_threshold:
                proposals.append(
                    MappingCandidate(movie.id, best_id, best_score, "title_year_language")
                )

        return sorted(proposals, key=lambda p: (-p.confidence, p.from_id))

    def reconcile(self) -> IdentityStats:
        """Merge confident mappings and queue uncertain ones.

        Each merge runs in a savepoint; a failing merge is logged and
        leaves the rest of the pass intact.

        Returns:
            Pass statistics.
        """
        stats = IdentityStats()
        for candidate in self.find_candidates():
            stats.candidates += 1
            try:
                with self._session.begin_nested():
                    if candidate.confidence >= self.auto_merge_threshold:
                        self._merge_oriented(candidate)
                        stats.merged += 1
                    elif self._queue(candidate):
                        stats.queued += 1
            except (CatalogError, SQLAlchemyError) as e:
                message = f"{candidate.from_id} -> {candidate.to_id}: {e}"
                stats.errors += 1
                stats.error_messages.append(message)
                self._logger.warning(f"Merge failed: {message}")

        self._logger.info(
            f"Identity pass: candidates={stats.candidates}, merged={stats.merged}, "
            f"queued={stats.queued}, errors={stats.errors}"
        )
        return stats

    def _merge_oriented(self, candidate: MappingCandidate) -> MergeOutcome:
        """Merge a mapping in the direction canonical selection dictates."""
        a = self._require(self.resolve(candidate.from_id))
        b = self._require(self.resolve(candidate.to_id))
        if a.id == b.id:
            return MergeOutcome(from_id=candidate.from_id, canonical_id=a.id)
        canonical = self.choose_canonical(a, b)
        other = b if canonical is a else a
        return self.merge(other.id, canonical.id, reason=f"auto:{candidate.reason}")

    def _queue(self, candidate: MappingCandidate) -> bool:
        """Store a pending candidate unless the pair was already seen."""
        if self._candidates.get_pair(candidate.from_id, candidate.to_id) is not None:
            return False
        self._candidates.create(
            MergeCandidate(
                from_id=candidate.from_id,
                to_id=candidate.to_id,
                confidence=candidate.confidence,
                reason=candidate.reason,
            )
        )
        return True

    # -------------------------------------------------------------------------
    # Manual Review
    # -------------------------------------------------------------------------

    def pending(self) -> list[MergeCandidate]:
        """Queued candidates awaiting a decision."""
        return self._candidates.pending()

    def confirm(self, candidate_id: int) -> MergeOutcome:
        """Apply a queued merge.

        Raises:
            ResolutionError: If the candidate is unknown or already decided.
        """
        candidate = self._decidable(candidate_id)
        outcome = self._merge_oriented(
            MappingCandidate(
                candidate.from_id, candidate.to_id, candidate.confidence, "confirmed"
            )
        )
        self._decide(candidate, MergeCandidate.APPLIED)
        return outcome

    def reject(self, candidate_id: int) -> None:
        """Close a queued merge without applying it."""
        self._decide(self._decidable(candidate_id), MergeCandidate.REJECTED)

    def _decidable(self, candidate_id: int) -> MergeCandidate:
        candidate = self._candidates.get_by_id(candidate_id)
        if candidate is None:
            raise ResolutionError(f"Unknown merge candidate: {candidate_id}")
        if not candidate.is_pending:
            raise ResolutionError(f"Merge candidate {candidate_id} is already {candidate.status}")
        return candidate

    def _decide(self, candidate: MergeCandidate, status: str) -> None:
        candidate.status = status
        candidate.decided_at = utcnow()
        self._session.flush()
        self._logger.info(f"Merge candidate {candidate.id} {status}")
