"""OMDb API payload types."""

from typing import TypedDict

# OMDb capitalizes keys; functional syntax keeps them as-is.
OMDbRatingEntry = TypedDict("OMDbRatingEntry", {"Source": str, "Value": str})

OMDbMovieResponse = TypedDict(
    "OMDbMovieResponse",
    {
        "Title": str,
        "Year": str,
        "imdbID": str,
        "imdbRating": str,
        "imdbVotes": str,
        "Ratings": list[OMDbRatingEntry],
        "Response": str,
        "Error": str,
    },
    total=False,
)
