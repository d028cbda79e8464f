"""Unit tests for cross-provider identity resolution."""

from collections.abc import Callable
from datetime import date, datetime, timezone

import pytest
from sqlalchemy.orm import Session

from cinecatalog.database.models import IdAlias, MergeCandidate, Movie, UserFavorite, UserReview
from cinecatalog.database.repositories import (
    AttributionRepository,
    MovieRepository,
    RatingRepository,
    SongRepository,
)
from cinecatalog.etl.exceptions import AliasCycleError, ResolutionError
from cinecatalog.etl.loaders import ReconciliationStore
from cinecatalog.etl.reconciliation import IdentityResolver
from cinecatalog.etl.types import CastCredit, FullRecord, RatingRecord, SongRecord


@pytest.fixture()
def resolver(session: Session) -> IdentityResolver:
    return IdentityResolver(session, auto_merge_threshold=0.92, review_threshold=0.6)


@pytest.fixture()
def store(session: Session) -> ReconciliationStore:
    return ReconciliationStore(session, today=date(2024, 6, 1))


@pytest.fixture()
def pair(
    store: ReconciliationStore,
    make_record: Callable[..., FullRecord],
) -> tuple[str, str]:
    """A movie database entity and a sparser encyclopedia entity of the same title."""
    tmdb_id = store.upsert(make_record(synopsis=None))
    wiki_id = store.upsert(
        make_record(
            provider="wiki",
            native_id="Jawan_(film)",
            synopsis="Encyclopedia synopsis",
            genres=["Action", "Thriller", "Drama"],
            vote_average=None,
            vote_count=None,
            source_url="https://en.wikipedia.org/wiki/Jawan_(film)",
        )
    )
    return tmdb_id, wiki_id


def _movie(entity_id: str, provider: str, created_at: datetime) -> Movie:
    return Movie(
        id=entity_id,
        provider=provider,
        provider_id=entity_id,
        title="X",
        created_at=created_at,
    )


# -------------------------------------------------------------------------
# Resolution
# -------------------------------------------------------------------------


class TestResolve:
    @staticmethod
    def test_unaliased_id_is_canonical(resolver: IdentityResolver) -> None:
        assert resolver.resolve("tmdb-movie:1") == "tmdb-movie:1"

    @staticmethod
    def test_chain_resolves_to_terminal(resolver: IdentityResolver) -> None:
        resolver.add_alias("a", "b", "test")
        resolver.add_alias("b", "c", "test")
        assert resolver.resolve("a") == "c"
        assert resolver.resolve("b") == "c"

    @staticmethod
    def test_cycle_raises(resolver: IdentityResolver, session: Session) -> None:
        session.add_all(
            [
                IdAlias(from_id="x", to_id="y", reason="corrupt"),
                IdAlias(from_id="y", to_id="x", reason="corrupt"),
            ]
        )
        session.flush()

        with pytest.raises(AliasCycleError) as exc_info:
            resolver.resolve("x")
        assert exc_info.value.chain == ["x", "y", "x"]
        assert isinstance(exc_info.value, ResolutionError)


class TestAddAlias:
    @staticmethod
    def test_rejects_self_alias(resolver: IdentityResolver) -> None:
        with pytest.raises(ResolutionError):
            resolver.add_alias("a", "a", "test")

    @staticmethod
    def test_rejects_already_aliased(resolver: IdentityResolver) -> None:
        resolver.add_alias("a", "b", "test")
        with pytest.raises(ResolutionError):
            resolver.add_alias("a", "c", "test")

    @staticmethod
    def test_rejects_alias_closing_a_cycle(resolver: IdentityResolver) -> None:
        resolver.add_alias("a", "b", "test")
        resolver.add_alias("b", "c", "test")
        with pytest.raises(AliasCycleError):
            resolver.add_alias("c", "a", "test")

    @staticmethod
    def test_points_to_terminal_id(resolver: IdentityResolver) -> None:
        resolver.add_alias("a", "b", "test")
        alias = resolver.add_alias("d", "a", "test")
        assert alias.to_id == "b"


class TestChooseCanonical:
    @staticmethod
    def test_provider_rank_wins() -> None:
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        tmdb = _movie("tmdb-movie:2", "tmdb", now)
        wiki = _movie("wiki-movie:1", "wiki", datetime(2020, 1, 1))
        assert IdentityResolver.choose_canonical(wiki, tmdb) is tmdb

    @staticmethod
    def test_unknown_provider_ranks_last() -> None:
        when = datetime(2024, 1, 1)
        wiki = _movie("wiki-movie:1", "wiki", when)
        other = _movie("itunes-movie:1", "itunes", when)
        assert IdentityResolver.choose_canonical(other, wiki) is wiki

    @staticmethod
    def test_earlier_creation_then_smaller_id() -> None:
        older = _movie("tmdb-movie:9", "tmdb", datetime(2023, 1, 1))
        newer = _movie("tmdb-movie:1", "tmdb", datetime(2024, 1, 1, tzinfo=timezone.utc))
        assert IdentityResolver.choose_canonical(newer, older) is older

        same = datetime(2024, 1, 1)
        a = _movie("tmdb-movie:1", "tmdb", same)
        b = _movie("tmdb-movie:2", "tmdb", same)
        assert IdentityResolver.choose_canonical(b, a) is a


# -------------------------------------------------------------------------
# Merge
# -------------------------------------------------------------------------


class TestMerge:
    @staticmethod
    def test_redirects_and_fills_fields(
        resolver: IdentityResolver,
        session: Session,
        pair: tuple[str, str],
    ) -> None:
        tmdb_id, wiki_id = pair
        outcome = resolver.merge(wiki_id, tmdb_id, reason="manual")

        canonical = session.get(Movie, tmdb_id)
        assert resolver.resolve(wiki_id) == tmdb_id
        assert outcome.canonical_id == tmdb_id
        assert canonical.synopsis == "Encyclopedia synopsis"
        assert canonical.sources == ["tmdb", "wiki"]
        assert MovieRepository(session).get_genres(tmdb_id) == ["Action", "Drama", "Thriller"]
        assert session.get(Movie, wiki_id) is not None

    @staticmethod
    def test_genre_and_cast_links_leave_merged_movie(
        resolver: IdentityResolver,
        store: ReconciliationStore,
        session: Session,
        make_record: Callable[..., FullRecord],
    ) -> None:
        tmdb_id = store.upsert(
            make_record(cast=[CastCredit(native_id=1, name="Shah Rukh Khan", order=0)])
        )
        wiki_id = store.upsert(
            make_record(
                provider="wiki",
                native_id="Jawan_(film)",
                genres=["Action"],
                cast=[
                    CastCredit(native_id="srk", name="Shah Rukh Khan", order=0),
                    CastCredit(native_id="nayanthara", name="Nayanthara", order=1),
                ],
            )
        )

        resolver.merge(wiki_id, tmdb_id)

        movies = MovieRepository(session)
        assert movies.get_genres(wiki_id) == []
        assert movies.get_cast(wiki_id) == []
        assert movies.get_genres(tmdb_id) == ["Action", "Thriller"]
        assert [c.billing_order for c in movies.get_cast(tmdb_id)] == [0, 1]

    @staticmethod
    def test_keeps_union_of_attributions(
        resolver: IdentityResolver,
        store: ReconciliationStore,
        session: Session,
        pair: tuple[str, str],
    ) -> None:
        tmdb_id, wiki_id = pair
        store.add_attribution("movie", tmdb_id, "omdb", "tt15354916")
        store.add_attribution("movie", wiki_id, "omdb", "tt15354916")
        attributions = AttributionRepository(session)
        total_before = attributions.count()

        resolver.merge(wiki_id, tmdb_id)

        providers = {a.provider for a in attributions.list_for_entity(tmdb_id)}
        assert providers == {"tmdb", "wiki", "omdb"}
        assert attributions.count() == total_before

    @staticmethod
    def test_moves_songs_dropping_duplicate_urls(
        resolver: IdentityResolver,
        store: ReconciliationStore,
        session: Session,
        pair: tuple[str, str],
    ) -> None:
        tmdb_id, wiki_id = pair
        store.replace_media(tmdb_id, [SongRecord(title="Zinda Banda", youtube_url="https://y/1")])
        store.replace_media(
            wiki_id,
            [
                SongRecord(title="Zinda Banda", youtube_url="https://y/1"),
                SongRecord(title="Chaleya", youtube_url="https://y/2"),
            ],
        )

        outcome = resolver.merge(wiki_id, tmdb_id)

        songs = SongRepository(session)
        assert sorted(s.youtube_url for s in songs.list_for_movie(tmdb_id)) == [
            "https://y/1",
            "https://y/2",
        ]
        assert songs.list_for_movie(wiki_id) == []
        assert outcome.songs_moved == 1
        assert outcome.songs_dropped == 1

    @staticmethod
    def test_canonical_rating_wins(
        resolver: IdentityResolver,
        store: ReconciliationStore,
        session: Session,
        pair: tuple[str, str],
    ) -> None:
        tmdb_id, wiki_id = pair
        store.merge_ratings(tmdb_id, [RatingRecord(source="IMDb", value=7.0)])
        store.merge_ratings(
            wiki_id,
            [
                RatingRecord(source="IMDb", value=1.0),
                RatingRecord(source="Rotten Tomatoes", value=80, scale=100),
            ],
        )

        resolver.merge(wiki_id, tmdb_id)

        ratings = {r.source: r for r in RatingRepository(session).list_for_movie(tmdb_id)}
        assert ratings["imdb"].value == pytest.approx(7.0)
        assert "rottentomatoes" in ratings
        assert RatingRepository(session).list_for_movie(wiki_id) == []

    @staticmethod
    def test_moves_user_content(
        resolver: IdentityResolver,
        session: Session,
        pair: tuple[str, str],
    ) -> None:
        tmdb_id, wiki_id = pair
        session.add_all(
            [
                UserReview(movie_id=wiki_id, user_id="u1", rating=5, body="Mass!"),
                UserFavorite(user_id="u1", movie_id=wiki_id),
                UserFavorite(user_id="u1", movie_id=tmdb_id),
                UserFavorite(user_id="u2", movie_id=wiki_id),
            ]
        )
        session.flush()

        resolver.merge(wiki_id, tmdb_id)
        session.expire_all()

        review = session.query(UserReview).one()
        assert review.movie_id == tmdb_id
        favorites = session.query(UserFavorite).order_by(UserFavorite.user_id).all()
        assert [(f.user_id, f.movie_id) for f in favorites] == [("u1", tmdb_id), ("u2", tmdb_id)]

    @staticmethod
    def test_merge_into_aliased_target_uses_terminal(
        resolver: IdentityResolver,
        store: ReconciliationStore,
        make_record: Callable[..., FullRecord],
        pair: tuple[str, str],
    ) -> None:
        tmdb_id, wiki_id = pair
        resolver.merge(wiki_id, tmdb_id)
        other_id = store.upsert(make_record(provider="itunes", native_id="555", vote_average=None))

        outcome = resolver.merge(other_id, wiki_id)
        assert outcome.canonical_id == tmdb_id

    @staticmethod
    def test_merge_twice_rejected(resolver: IdentityResolver, pair: tuple[str, str]) -> None:
        tmdb_id, wiki_id = pair
        resolver.merge(wiki_id, tmdb_id)
        with pytest.raises(ResolutionError):
            resolver.merge(wiki_id, tmdb_id)


# -------------------------------------------------------------------------
# Mapping Discovery
# -------------------------------------------------------------------------


class TestReconcile:
    @staticmethod
    def test_confident_match_is_merged(
        resolver: IdentityResolver,
        pair: tuple[str, str],
    ) -> None:
        tmdb_id, wiki_id = pair
        candidates = resolver.find_candidates()
        assert [(c.from_id, c.to_id) for c in candidates] == [(wiki_id, tmdb_id)]
        assert candidates[0].confidence == pytest.approx(1.0)

        stats = resolver.reconcile()
        assert stats.merged == 1
        assert resolver.resolve(wiki_id) == tmdb_id

    @staticmethod
    def test_uncertain_match_is_queued(
        resolver: IdentityResolver,
        store: ReconciliationStore,
        make_record: Callable[..., FullRecord],
    ) -> None:
        tmdb_id = store.upsert(make_record())
        wiki_id = store.upsert(
            make_record(provider="wiki", native_id="Jawan", release_date=None, vote_average=None)
        )

        stats = resolver.reconcile()

        assert stats.merged == 0
        assert stats.queued == 1
        pending = resolver.pending()
        assert (pending[0].from_id, pending[0].to_id) == (wiki_id, tmdb_id)
        assert pending[0].confidence == pytest.approx(0.875)

        assert resolver.reconcile().queued == 0

    @staticmethod
    def test_unrelated_titles_ignored(
        resolver: IdentityResolver,
        store: ReconciliationStore,
        make_record: Callable[..., FullRecord],
    ) -> None:
        store.upsert(make_record())
        store.upsert(
            make_record(
                provider="wiki",
                native_id="Kalki",
                title="Kalki 2898 AD",
                language="Telugu",
                release_date=date(2024, 6, 27),
            )
        )
        assert resolver.find_candidates() == []

    @staticmethod
    def test_imdb_id_match(
        resolver: IdentityResolver,
        store: ReconciliationStore,
        make_record: Callable[..., FullRecord],
    ) -> None:
        store.upsert(make_record(imdb_id="tt15354916"))
        store.upsert(
            make_record(
                provider="wiki",
                native_id="Jawan_(2023_film)",
                title="Jawan (2023 film)",
                imdb_id="tt15354916",
            )
        )
        candidates = resolver.find_candidates()
        assert candidates[0].reason == "imdb_id"
        assert candidates[0].confidence == pytest.approx(1.0)

    @staticmethod
    def test_confidence_weights() -> None:
        a = Movie(id="a", provider="tmdb", provider_id="1", title="Jawan", language="Hindi",
                  release_date=date(2023, 9, 7))
        b = Movie(id="b", provider="wiki", provider_id="2", title="Jawan", language="Tamil",
                  release_date=date(2024, 1, 1))
        assert IdentityResolver.confidence(a, b) == pytest.approx(0.6 + 0.125)


class TestManualReview:
    @staticmethod
    def _queue(store: ReconciliationStore, make_record: Callable[..., FullRecord]) -> None:
        store.upsert(make_record())
        store.upsert(make_record(provider="wiki", native_id="Jawan", release_date=None))

    def test_confirm_applies_merge(
        self,
        resolver: IdentityResolver,
        store: ReconciliationStore,
        make_record: Callable[..., FullRecord],
    ) -> None:
        self._queue(store, make_record)
        resolver.reconcile()
        candidate = resolver.pending()[0]

        outcome = resolver.confirm(candidate.id)

        assert outcome.canonical_id == "tmdb-movie:100"
        assert resolver.resolve("wiki-movie:Jawan") == "tmdb-movie:100"
        assert candidate.status == MergeCandidate.APPLIED
        assert candidate.decided_at is not None
        with pytest.raises(ResolutionError):
            resolver.confirm(candidate.id)

    def test_reject_closes_candidate(
        self,
        resolver: IdentityResolver,
        store: ReconciliationStore,
        make_record: Callable[..., FullRecord],
    ) -> None:
        self._queue(store, make_record)
        resolver.reconcile()
        candidate = resolver.pending()[0]

        resolver.reject(candidate.id)

        assert candidate.status == MergeCandidate.REJECTED
        assert resolver.pending() == []
        assert resolver.resolve("wiki-movie:Jawan") == "wiki-movie:Jawan"
        assert resolver.reconcile().queued == 0

    @staticmethod
    def test_unknown_candidate(resolver: IdentityResolver) -> None:
        with pytest.raises(ResolutionError):
            resolver.reject(999)
