"""Identity reconciliation across providers."""

from cinecatalog.etl.reconciliation.identity import (
    MAX_ALIAS_HOPS,
    PROVIDER_RANK,
    IdentityResolver,
    IdentityStats,
    MappingCandidate,
    MergeOutcome,
)

__all__ = [
    "MAX_ALIAS_HOPS",
    "PROVIDER_RANK",
    "IdentityResolver",
    "IdentityStats",
    "MappingCandidate",
    "MergeOutcome",
]
