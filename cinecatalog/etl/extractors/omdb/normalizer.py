"""OMDb rating parsing.

OMDb reports ratings as display strings: "7.3/10", "85%", "66/100".
"""

import re

from cinecatalog.etl.types import OMDbMovieResponse, RatingRecord
from cinecatalog.etl.types.records import normalize_rating_source

IMDB_TITLE_URL = "https://www.imdb.com/title/{imdb_id}/"

_FRACTION = re.compile(r"^\s*([\d.]+)\s*/\s*([\d.]+)\s*$")
_PERCENT = re.compile(r"^\s*([\d.]+)\s*%\s*$")


def parse_rating_value(raw: str | None) -> tuple[float, float] | None:
    """Parse a display rating into (value, scale).

    Args:
        raw: Rating string such as "7.3/10" or "85%".

    Returns:
        Tuple of (value, scale), or None when unparseable ("N/A").
    """
    if not raw:
        return None
    if match := _FRACTION.match(raw):
        value, scale = float(match.group(1)), float(match.group(2))
        return (value, scale) if scale > 0 else None
    if match := _PERCENT.match(raw):
        return float(match.group(1)), 100.0
    return None


def parse_vote_count(raw: str | None) -> int | None:
    """Parse "1,234,567" into an int."""
    if not raw:
        return None
    digits = raw.replace(",", "").strip()
    return int(digits) if digits.isdigit() else None


def build_ratings(payload: OMDbMovieResponse) -> list[RatingRecord]:
    """Extract ratings from an OMDb title payload.

    The IMDb rating (with vote count) comes first; duplicate sources
    keep their first occurrence.

    Args:
        payload: OMDb response for one title.

    Returns:
        Rating records with raw source names.
    """
    imdb_id = payload.get("imdbID")
    imdb_url = IMDB_TITLE_URL.format(imdb_id=imdb_id) if imdb_id else None
    records: list[RatingRecord] = []
    seen: set[str] = set()

    imdb = parse_rating_value(f"{payload.get('imdbRating')}/10")
    if imdb is not None:
        records.append(
            RatingRecord(
                source="IMDb",
                value=imdb[0],
                scale=imdb[1],
                count=parse_vote_count(payload.get("imdbVotes")),
                url=imdb_url,
            )
        )
        seen.add("imdb")

    for entry in payload.get("Ratings") or []:
        source = entry.get("Source") or ""
        key = normalize_rating_source(source)
        parsed = parse_rating_value(entry.get("Value"))
        if not source or parsed is None or key in seen:
            continue
        seen.add(key)
        url = imdb_url if key == "imdb" else None
        records.append(RatingRecord(source=source, value=parsed[0], scale=parsed[1], url=url))

    return records
