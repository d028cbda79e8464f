"""Attribution, alias and merge-candidate repositories."""

from sqlalchemy import select

from cinecatalog.database.models import Attribution, IdAlias, MergeCandidate
from cinecatalog.database.repositories.base import BaseRepository


class AttributionRepository(BaseRepository[Attribution]):
    """Repository for append-only provenance records."""

    model = Attribution

    def find(
        self,
        entity_type: str,
        entity_id: str,
        provider: str,
        provider_id: str,
    ) -> Attribution | None:
        """Retrieve an exact provenance record."""
        stmt = select(Attribution).where(
            Attribution.entity_type == entity_type,
            Attribution.entity_id == entity_id,
            Attribution.provider == provider,
            Attribution.provider_id == provider_id,
        )
        return self._session.scalars(stmt).first()

    def add(
        self,
        entity_type: str,
        entity_id: str,
        provider: str,
        provider_id: str,
        url: str | None = None,
    ) -> bool:
        """Record provenance unless it already exists.

        Returns:
            True if a new record was inserted.
        """
        if self.find(entity_type, entity_id, provider, provider_id) is not None:
            return False
        self.create(
            Attribution(
                entity_type=entity_type,
                entity_id=entity_id,
                provider=provider,
                provider_id=provider_id,
                url=url,
            )
        )
        return True

    def list_for_entity(self, entity_id: str) -> list[Attribution]:
        """Return provenance of an entity ordered by insertion."""
        stmt = select(Attribution).where(Attribution.entity_id == entity_id).order_by(Attribution.id)
        return list(self._session.scalars(stmt).all())


class AliasRepository(BaseRepository[IdAlias]):
    """Repository for id redirections."""

    model = IdAlias

    def target_of(self, from_id: str) -> str | None:
        """Return the direct redirection target of an id, if any."""
        alias = self.get_by_id(from_id)
        return alias.to_id if alias else None


class MergeCandidateRepository(BaseRepository[MergeCandidate]):
    """Repository for queued merge proposals."""

    model = MergeCandidate

    def get_pair(self, from_id: str, to_id: str) -> MergeCandidate | None:
        """Retrieve the candidate for a (from, to) pair."""
        matches = self.filter_by(from_id=from_id, to_id=to_id)
        return matches[0] if matches else None

    def pending(self) -> list[MergeCandidate]:
        """Return pending candidates, highest confidence first."""
        stmt = (
            select(MergeCandidate)
            .where(MergeCandidate.status == MergeCandidate.PENDING)
            .order_by(MergeCandidate.confidence.desc(), MergeCandidate.id)
        )
        return list(self._session.scalars(stmt).all())
