"""Soundtrack and trailer lookup on the video platform."""

from cinecatalog.etl.classifier import language_code
from cinecatalog.etl.exceptions import ProviderError
from cinecatalog.etl.extractors.youtube.client import YouTubeClient
from cinecatalog.etl.extractors.youtube.matcher import MatchTarget, SongMatcher, song_queries
from cinecatalog.etl.types import MediaCandidate, ProviderResult, SongRecord
from cinecatalog.etl.utils.logger import setup_logger


class SongFinder:
    """Runs song query variants and keeps the matcher-approved results.

    Attributes:
        query_limit: Number of query variants issued per movie.
    """

    def __init__(
        self,
        client: YouTubeClient,
        matcher: SongMatcher | None = None,
        query_limit: int | None = None,
    ) -> None:
        """Initialize finder.

        Args:
            client: Open YouTube client.
            matcher: Scorer (defaults to a new SongMatcher).
            query_limit: Query variants per movie (defaults to settings).
        """
        self._client = client
        self._matcher = matcher or SongMatcher()
        self.query_limit = query_limit or client.config.song_query_limit
        self._logger = setup_logger("etl.youtube.songs")

    def find_songs(self, target: MatchTarget) -> ProviderResult[list[SongRecord]]:
        """Search and select soundtrack songs for a movie.

        A query that fails is skipped; the result only counts as failed
        when every query failed.

        Args:
            target: Movie being matched.

        Returns:
            Accepted songs (best first), EMPTY, or FAILED.
        """
        candidates: list[MediaCandidate] = []
        errors: list[str] = []
        queries = song_queries(target, self.query_limit)
        relevance = language_code(target.language)

        for query in queries:
            try:
                candidates.extend(self._client.search_media(query, relevance_language=relevance))
            except ProviderError as e:
                self._logger.warning(f"Song search failed for '{query}': {e}")
                errors.append(str(e))

        if queries and len(errors) == len(queries):
            return ProviderResult.failed(errors[-1])

        selected = self._matcher.select(target, candidates)
        return ProviderResult.ok([SongRecord.from_candidate(r.candidate) for r in selected])

    def find_trailer(self, title: str) -> ProviderResult[str]:
        """Find an official trailer link for a movie title.

        Args:
            title: Movie title.

        Returns:
            First result's URL, EMPTY when nothing is found, or FAILED.
        """
        try:
            hits = self._client.search_media(
                f"{title} official trailer", max_results=1, music_only=False
            )
        except ProviderError as e:
            return ProviderResult.failed(str(e))
        if not hits or not hits[0].url:
            return ProviderResult.empty()
        return ProviderResult.ok(hits[0].url)
