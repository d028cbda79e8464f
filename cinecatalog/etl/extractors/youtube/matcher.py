"""Soundtrack video to movie matcher.

Scores how likely a video search result is a song from a given movie,
using title token coverage, song-signal bonuses and disqualifying terms.
Pure: no I/O, deterministic for a given input.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from cinecatalog.etl.types import MediaCandidate
from cinecatalog.etl.utils.logger import setup_logger


@dataclass(frozen=True)
class MatchTarget:
    """Movie the songs are searched for.

    Attributes:
        title: Movie title.
        year: Release year, used as a disambiguator.
        language: Language name, used as a disambiguator.
    """

    title: str
    year: int | None = None
    language: str | None = None


@dataclass(frozen=True)
class MatchResult:
    """Scored candidate.

    Attributes:
        candidate: Video candidate.
        score: Match score (-1 when disqualified).
        accepted: Whether the score reaches the threshold.
    """

    candidate: MediaCandidate
    score: float
    accepted: bool


class SongMatcher:
    """Matches soundtrack videos to a movie.

    Attributes:
        max_results: Cap on accepted candidates per movie.
    """

    # Score thresholds
    _SINGLE_TOKEN_THRESHOLD = 0.55
    _MULTI_TOKEN_THRESHOLD = 0.38
    _DISQUALIFIED = -1.0
    _MAX_RESULTS_DEFAULT = 12

    # Score bonuses (one per group)
    _BONUS_GROUPS: tuple[tuple[tuple[str, ...], float], ...] = (
        (("jukebox", "full album", "audio jukebox"), 0.25),
        (("lyric", "lyrical", "audio"), 0.15),
        (("song", "songs"), 0.05),
    )

    _BAD_TERMS = ("trailer", "teaser", "reaction", "review", "scene", "interview", "full movie")
    _SONG_SIGNALS = ("song", "songs", "jukebox", "audio")
    _STOP_WORDS = frozenset({"the", "and", "for", "from", "with", "movie", "film"})
    _MIN_TOKEN_LENGTH = 3

    _NON_ALNUM = re.compile(r"[^a-z0-9]+")

    def __init__(self, max_results: int = _MAX_RESULTS_DEFAULT) -> None:
        """Initialize matcher.

        Args:
            max_results: Maximum accepted candidates returned by select().
        """
        self._logger = setup_logger("etl.youtube.matcher")
        self.max_results = max_results

    # -------------------------------------------------------------------------
    # Text Helpers
    # -------------------------------------------------------------------------

    @classmethod
    def normalize(cls, text: str | None) -> str:
        """Lowercase, unescape ampersands, collapse non-alphanumerics."""
        lowered = (text or "").lower().replace("&amp;", "&")
        return cls._NON_ALNUM.sub(" ", lowered).strip()

    @classmethod
    def significant_tokens(cls, title: str) -> list[str]:
        """Title tokens used for coverage, de-duplicated in order."""
        tokens = [
            t
            for t in cls.normalize(title).split()
            if len(t) >= cls._MIN_TOKEN_LENGTH and t not in cls._STOP_WORDS
        ]
        return list(dict.fromkeys(tokens))

    @staticmethod
    def _has_any(haystack: str, phrases: Iterable[str]) -> bool:
        """Substring test on a normalized haystack ("lyrics" contains "lyric")."""
        return any(p in haystack for p in phrases)

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def threshold_for(self, target: MatchTarget) -> float:
        """Acceptance threshold for a movie title, stricter for one-word titles."""
        if len(self.normalize(target.title).split()) <= 1:
            return self._SINGLE_TOKEN_THRESHOLD
        return self._MULTI_TOKEN_THRESHOLD

    def score(self, target: MatchTarget, candidate: MediaCandidate) -> float:
        """Score a candidate against a movie.

        Args:
            target: Movie being matched.
            candidate: Video search result.

        Returns:
            -1 for disqualified videos, 0 for rejected single-token
            matches, otherwise coverage plus bonuses.
        """
        haystack = f"{self.normalize(candidate.title)} {self.normalize(candidate.description)}"

        if self._has_any(haystack, self._BAD_TERMS):
            return self._DISQUALIFIED

        tokens = self.significant_tokens(target.title)
        matched = sum(1 for t in tokens if t in haystack)
        base = matched / len(tokens) if tokens else 0.0

        bonus = sum(
            value for phrases, value in self._BONUS_GROUPS if self._has_any(haystack, phrases)
        )

        if len(tokens) <= 1 and not self._single_token_allowed(target, haystack, matched):
            return 0.0

        return round(base + bonus, 4)

    def _single_token_allowed(self, target: MatchTarget, haystack: str, matched: int) -> bool:
        """Extra evidence required when the title has at most one significant token."""
        if not matched or not self._has_any(haystack, self._SONG_SIGNALS):
            return False

        disambiguators: list[str] = []
        if target.language:
            disambiguators.append(self.normalize(target.language))
        if target.year:
            disambiguators.append(str(target.year))
        if not disambiguators:
            return True
        return self._has_any(haystack, disambiguators)

    def evaluate(self, target: MatchTarget, candidate: MediaCandidate) -> MatchResult:
        """Score a candidate and apply the threshold."""
        value = self.score(target, candidate)
        return MatchResult(
            candidate=candidate,
            score=value,
            accepted=value >= self.threshold_for(target),
        )

    def select(
        self,
        target: MatchTarget,
        candidates: Iterable[MediaCandidate],
    ) -> list[MatchResult]:
        """Keep the best candidates for a movie.

        Candidates are de-duplicated by URL (first wins, URL-less ones
        dropped), scored, filtered by threshold, sorted by descending
        score and capped.

        Args:
            target: Movie being matched.
            candidates: Search results, possibly from several queries.

        Returns:
            Accepted results, best first.
        """
        unique: dict[str, MediaCandidate] = {}
        for candidate in candidates:
            if candidate.url and candidate.url not in unique:
                unique[candidate.url] = candidate

        results = [self.evaluate(target, c) for c in unique.values()]
        accepted = sorted((r for r in results if r.accepted), key=lambda r: r.score, reverse=True)
        selected = accepted[: self.max_results]

        self._logger.debug(
            f"Matched {len(selected)}/{len(unique)} candidates for '{target.title}'"
        )
        return selected


def song_queries(target: MatchTarget, limit: int | None = None) -> list[str]:
    """Search query variants for a movie's soundtrack.

    Args:
        target: Movie being matched.
        limit: Maximum number of variants.

    Returns:
        Queries, most specific first, whitespace-collapsed.
    """
    lang = target.language or ""
    year = str(target.year) if target.year else ""
    variants = [
        f"{target.title} {lang} jukebox",
        f"{target.title} {year} {lang} songs",
        f"{target.title} {lang} movie songs",
        f"{target.title} {lang} lyrical",
    ]
    queries = list(dict.fromkeys(" ".join(v.split()) for v in variants))
    return queries[:limit] if limit is not None else queries
