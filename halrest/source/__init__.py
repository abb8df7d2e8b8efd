"""
The persistence port

Actions never talk to a database directly, they pass query objects to the
Source bound to their resource. Implementations:
- halrest.source.sql.SQLAlchemySource
"""
import abc
import contextlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from ..query import Condition, Order


@dataclass(frozen=True)
class ReadQuery:
    source: str
    conditions: List[Condition] = field(default_factory=list)
    order: Optional[Order] = None
    limit: Optional[int] = None
    offset: int = 0


@dataclass(frozen=True)
class CreateQuery:
    source: str
    data: Dict[str, Any]
    returning: Sequence[str] = ()


@dataclass(frozen=True)
class UpdateQuery:
    source: str
    conditions: List[Condition]
    data: Dict[str, Any]
    returning: Sequence[str] = ()


@dataclass(frozen=True)
class DeleteQuery:
    source: str
    conditions: List[Condition]


class Source(abc.ABC):
    """
    Persistence port, the `source` attribute of the queries is the resource name
    """

    @abc.abstractmethod
    def read_one(self, query: ReadQuery) -> Optional[Dict[str, Any]]:
        """
        :return: the first matching row or None
        """

    @abc.abstractmethod
    def read_many(self, query: ReadQuery) -> List[Dict[str, Any]]:
        """
        :return: the matching rows, ordered and paginated
        """

    @abc.abstractmethod
    def count(self, query: ReadQuery) -> int:
        """
        :return: number of matching rows, limit and offset are ignored
        """

    @abc.abstractmethod
    def create(self, query: CreateQuery) -> Dict[str, Any]:
        """
        :return: the `returning` fields (primary keys) of the created row
        :raise ConstraintViolation: foreign key or uniqueness failure
        """

    @abc.abstractmethod
    def update(self, query: UpdateQuery) -> int:
        """
        :return: number of affected rows
        :raise ConstraintViolation: foreign key or uniqueness failure
        """

    @abc.abstractmethod
    def delete(self, query: DeleteQuery) -> int:
        """
        :return: number of affected rows
        """

    def transaction(self):
        """
        Context manager grouping all writes of one request.
        Sources without multi-row atomicity keep this no-op: rows persisted by
        the embedded resource resolver stay persisted when a later write fails.
        """
        return contextlib.nullcontext()
