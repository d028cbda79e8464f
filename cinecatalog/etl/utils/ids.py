"""Entity identifier helpers.

Entity ids are provider-prefixed strings such as ``tmdb-movie:27205``.
Rows without a natural key (songs, ratings, attributions) get a
deterministic hashed id: ``<prefix>:<sha1(input)[:12]>``.
"""

import hashlib

MOVIE_KIND = "movie"
PERSON_KIND = "person"


def make_id(provider: str, kind: str, native_id: int | str) -> str:
    """Build an entity id, e.g. make_id("tmdb", "movie", 27205) -> "tmdb-movie:27205"."""
    return f"{provider}-{kind}:{native_id}"


def movie_id(provider: str, native_id: int | str) -> str:
    """Build a movie entity id for a provider-native id."""
    return make_id(provider, MOVIE_KIND, native_id)


def person_id(provider: str, native_id: int | str) -> str:
    """Build a person entity id for a provider-native id."""
    return make_id(provider, PERSON_KIND, native_id)


def hash_id(prefix: str, value: str) -> str:
    """Build a deterministic id from arbitrary text."""
    digest = hashlib.sha1(value.encode("utf-8")).hexdigest()
    return f"{prefix}:{digest[:12]}"


def split_id(entity_id: str) -> tuple[str, str, str]:
    """Split an entity id into (provider, kind, native id).

    Raises:
        ValueError: If the id is not provider-prefixed.
    """
    head, sep, native = entity_id.partition(":")
    provider, dash, kind = head.partition("-")
    if not sep or not dash or not native:
        raise ValueError(f"Malformed entity id: {entity_id!r}")
    return provider, kind, native


def provider_of(entity_id: str) -> str:
    """Return the provider prefix of an entity id."""
    return split_id(entity_id)[0]
