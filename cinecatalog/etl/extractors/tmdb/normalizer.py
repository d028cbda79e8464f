"""TMDB payload normalization into catalog records."""

from pydantic import ValidationError

from cinecatalog.etl.classifier import language_name
from cinecatalog.etl.exceptions import ProviderError
from cinecatalog.etl.types import FullRecord, TMDBMovieDetails, TMDBVideoData
from cinecatalog.settings import TMDBSettings

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={key}"
TMDB_MOVIE_URL = "https://www.themoviedb.org/movie/{id}"


def image_url(path: str | None, size: str, base_url: str) -> str | None:
    """Build an absolute image URL from a TMDB path."""
    if not path:
        return None
    return f"{base_url}/{size}{path}"


def pick_trailer(videos: list[TMDBVideoData]) -> str | None:
    """Select the trailer link from a movie's videos.

    YouTube trailers win; any YouTube video is the fallback.
    """
    youtube = [v for v in videos if v.get("site") == "YouTube" and v.get("key")]
    trailer = next((v for v in youtube if v.get("type") == "Trailer"), None)
    chosen = trailer or (youtube[0] if youtube else None)
    return YOUTUBE_WATCH_URL.format(key=chosen["key"]) if chosen else None


def normalize_movie(details: TMDBMovieDetails, config: TMDBSettings) -> FullRecord:
    """Convert a TMDB details payload into a FullRecord.

    Args:
        details: Movie details with credits and videos appended.
        config: TMDB settings (image sizes, cast limit).

    Returns:
        Normalized record.

    Raises:
        ProviderError: If the payload fails validation.
    """
    credits = details.get("credits") or {"cast": [], "crew": []}
    crew = credits.get("crew") or []
    cast = sorted(credits.get("cast") or [], key=lambda c: c.get("order", 0))

    director = next((c["name"] for c in crew if c.get("job") == "Director"), None)
    writers = list(dict.fromkeys(c["name"] for c in crew if c.get("department") == "Writing"))

    data = {
        "provider": "tmdb",
        "native_id": details.get("id"),
        "title": details.get("title") or details.get("original_title"),
        "original_title": details.get("original_title"),
        "language": language_name(details.get("original_language")),
        "language_code": details.get("original_language"),
        "release_date": details.get("release_date") or None,
        "synopsis": details.get("overview") or None,
        "director": director,
        "writers": writers,
        "cast": [
            {
                "native_id": c["id"],
                "name": c["name"],
                "character": c.get("character"),
                "order": c.get("order", idx),
                "profile_image": image_url(
                    c.get("profile_path"), config.poster_size, config.image_base_url
                ),
            }
            for idx, c in enumerate(cast[: config.cast_limit])
        ],
        "genres": [g["name"] for g in details.get("genres") or []],
        "poster": image_url(details.get("poster_path"), config.poster_size, config.image_base_url),
        "backdrop": image_url(
            details.get("backdrop_path"), config.backdrop_size, config.image_base_url
        ),
        "trailer_url": pick_trailer((details.get("videos") or {}).get("results") or []),
        "production_countries": [
            c["iso_3166_1"] for c in details.get("production_countries") or []
        ],
        "vote_average": details.get("vote_average"),
        "vote_count": details.get("vote_count"),
        "imdb_id": details.get("imdb_id") or None,
        "source_url": TMDB_MOVIE_URL.format(id=details.get("id")),
    }

    try:
        return FullRecord.model_validate(data)
    except ValidationError as e:
        raise ProviderError(
            f"Invalid TMDB payload for movie {details.get('id')}: {e.error_count()} errors",
            provider="tmdb",
        ) from e
