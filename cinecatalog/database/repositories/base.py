"""Base repository shared by the catalog tables."""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from cinecatalog.database.models.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Typed access to one mapped table.

    Repositories flush but never commit; the caller's session scope
    owns the transaction.

    Attributes:
        model: SQLAlchemy model class.
    """

    model: type[ModelT]

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def get_by_id(self, entity_id: str | int) -> ModelT | None:
        """Look up a row by primary key (identity map first)."""
        return self._session.get(self.model, entity_id)

    def filter_by(self, **criteria: Any) -> list[ModelT]:
        """Rows whose columns equal the given values.

        Example:
            ``MergeCandidateRepository(session).filter_by(status="pending")``
        """
        stmt = select(self.model).filter_by(**criteria)
        return list(self._session.scalars(stmt).all())

    def count(self) -> int:
        """Number of rows in the table."""
        stmt = select(func.count()).select_from(self.model)
        return self._session.execute(stmt).scalar() or 0

    def create(self, entity: ModelT) -> ModelT:
        """Add a new row and flush so generated keys are populated."""
        self._session.add(entity)
        self._session.flush()
        return entity
