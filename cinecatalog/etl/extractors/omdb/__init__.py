"""OMDb ratings aggregator provider."""

from cinecatalog.etl.extractors.omdb.client import OMDbClient, OMDbClientError, OMDbQuotaError
from cinecatalog.etl.extractors.omdb.normalizer import (
    build_ratings,
    normalize_rating_source,
    parse_rating_value,
)

__all__ = [
    "OMDbClient",
    "OMDbClientError",
    "OMDbQuotaError",
    "build_ratings",
    "normalize_rating_source",
    "parse_rating_value",
]
