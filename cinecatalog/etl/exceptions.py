"""Exception hierarchy for the ingestion engine.

Provider-specific subclasses live next to their clients.
"""


class CatalogError(Exception):
    """Base exception for catalog ingestion errors."""

    pass


class ProviderError(CatalogError):
    """Raised when a provider call fails or returns an unusable payload."""

    def __init__(self, message: str, provider: str = "unknown") -> None:
        super().__init__(message)
        self.provider = provider


class ResolutionError(CatalogError):
    """Raised when an identity cannot be resolved or an alias is invalid."""

    pass


class AliasCycleError(ResolutionError):
    """Raised when alias redirection loops back on itself."""

    def __init__(self, entity_id: str, chain: list[str]) -> None:
        path = " -> ".join(chain)
        super().__init__(f"Alias cycle detected from {entity_id}: {path}")
        self.entity_id = entity_id
        self.chain = chain


class StorageUnavailableError(CatalogError):
    """Raised when the catalog database cannot be reached."""

    pass


class IngestionError(CatalogError):
    """Raised when an ingestion run cannot start."""

    pass


class EntityNotFoundError(CatalogError):
    """Raised when a write targets an entity that does not exist."""

    pass
