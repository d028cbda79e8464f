"""Provenance and identity tables: attributions, aliases, merge queue."""

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cinecatalog.database.models.base import Base, utcnow


class Attribution(Base):
    """Append-only record of which provider contributed to an entity.

    Attributes:
        entity_type: "movie" or "person".
        entity_id: Entity the provenance applies to.
        provider: Contributing provider.
        provider_id: Provider-native identifier.
        url: Public page on the provider.
    """

    __tablename__ = "attributions"
    __table_args__ = (
        UniqueConstraint(
            "entity_type",
            "entity_id",
            "provider",
            "provider_id",
            name="uq_attributions_provenance",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    provider: Mapped[str] = mapped_column(String(32), nullable=False)
    provider_id: Mapped[str] = mapped_column(String(64), nullable=False)
    url: Mapped[str | None] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )


class IdAlias(Base):
    """Redirection of a non-canonical entity id to its canonical target."""

    __tablename__ = "id_aliases"

    from_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    to_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    reason: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<IdAlias('{self.from_id}' -> '{self.to_id}')>"


class MergeCandidate(Base):
    """Proposed merge awaiting curator confirmation.

    Attributes:
        confidence: Mapping confidence (0-1).
        status: pending, applied or rejected.
    """

    __tablename__ = "merge_candidates"
    __table_args__ = (UniqueConstraint("from_id", "to_id", name="uq_merge_candidates_pair"),)

    PENDING = "pending"
    APPLIED = "applied"
    REJECTED = "rejected"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    from_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    to_id: Mapped[str] = mapped_column(String(64), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    reason: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=PENDING, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    @property
    def is_pending(self) -> bool:
        """Check if the candidate still awaits a decision."""
        return self.status == self.PENDING
