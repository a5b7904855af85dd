"""Queryable interface.

A queryable is a deferred sequence of records of one element type. Every
operation returns a new queryable describing the extended plan; nothing is
fetched until the execution layer materializes it.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from ..querydsl.nodes import Lambda

__all__ = ("Queryable",)

T = TypeVar("T")


class Queryable(ABC, Generic[T]):
    """Abstract deferred sequence of `element_type` records."""

    def __init__(self, element_type: type) -> None:
        self._element_type = element_type

    @property
    def element_type(self) -> type:
        """Record type the expressions are built against."""
        return self._element_type

    @abstractmethod
    def where(self, predicate: Lambda) -> "Queryable[T]":
        """Keep records for which `predicate` holds."""
        raise NotImplementedError

    @abstractmethod
    def order_by(self, key: Lambda, descending: bool = False) -> "Queryable[T]":
        """Start a new ordering by `key`."""
        raise NotImplementedError

    @abstractmethod
    def then_by(self, key: Lambda, descending: bool = False) -> "Queryable[T]":
        """Break ties of the current ordering by `key`."""
        raise NotImplementedError

    @abstractmethod
    def skip(self, count: int) -> "Queryable[T]":
        raise NotImplementedError

    @abstractmethod
    def take(self, count: int) -> "Queryable[T]":
        raise NotImplementedError

    @property
    @abstractmethod
    def is_ordered(self) -> bool:
        """Whether an ordering has been applied, i.e. `then_by` is allowed."""
        raise NotImplementedError
