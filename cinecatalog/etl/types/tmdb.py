"""TMDB API data types.

TypedDict definitions for the raw payloads of the discover and
movie-details (credits, videos appended) endpoints.
"""

from typing import NotRequired, TypedDict


class TMDBGenreData(TypedDict):
    """Genre entry of a movie record."""

    id: int
    name: str


class TMDBCastData(TypedDict):
    """Cast member from the credits block."""

    id: int
    name: str
    character: NotRequired[str | None]
    order: NotRequired[int]
    profile_path: NotRequired[str | None]


class TMDBCrewData(TypedDict):
    """Crew member from the credits block."""

    id: int
    name: str
    department: str
    job: str
    profile_path: NotRequired[str | None]


class TMDBCreditsData(TypedDict):
    """Combined credits data."""

    cast: list[TMDBCastData]
    crew: list[TMDBCrewData]


class TMDBVideoData(TypedDict):
    """Video entry from the videos block."""

    key: str
    site: str
    type: str
    name: NotRequired[str]
    official: NotRequired[bool]


class TMDBVideosData(TypedDict):
    """Videos block wrapper."""

    results: list[TMDBVideoData]


class TMDBCountryData(TypedDict):
    """Production country entry."""

    iso_3166_1: str
    name: NotRequired[str]


class TMDBDiscoverItem(TypedDict):
    """Single result of /discover/movie."""

    id: int
    title: NotRequired[str]
    original_language: NotRequired[str]
    release_date: NotRequired[str]
    popularity: NotRequired[float]


class TMDBDiscoverPage(TypedDict):
    """Page of /discover/movie results."""

    page: int
    results: list[TMDBDiscoverItem]
    total_pages: NotRequired[int]
    total_results: NotRequired[int]


class TMDBMovieDetails(TypedDict):
    """Movie details with credits and videos appended."""

    id: int
    title: str
    original_title: NotRequired[str]
    original_language: NotRequired[str]
    overview: NotRequired[str | None]
    release_date: NotRequired[str | None]
    poster_path: NotRequired[str | None]
    backdrop_path: NotRequired[str | None]
    imdb_id: NotRequired[str | None]
    genres: NotRequired[list[TMDBGenreData]]
    production_countries: NotRequired[list[TMDBCountryData]]
    vote_average: NotRequired[float]
    vote_count: NotRequired[int]
    credits: NotRequired[TMDBCreditsData]
    videos: NotRequired[TMDBVideosData]
