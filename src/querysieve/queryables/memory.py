"""In-memory queryable.

Keeps the source iterable and a plan of steps; iterating the queryable runs
the plan through the python compiler. Ordering is stable and `None` keys sort
before any value (after every value when descending).
"""

from itertools import islice
from typing import Any, Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar, Union

from ..exceptions import SieveError
from ..querydsl.compilers.python import python_compiler
from ..querydsl.nodes import Lambda
from .base import Queryable

__all__ = ("ListQueryable",)

T = TypeVar("T")

Selector = Union[Lambda, Callable[[Any], Any]]
Step = Tuple[str, Any]


def _compile(selector: Selector) -> Callable[[Any], Any]:
    if isinstance(selector, Lambda):
        return python_compiler.to_where(selector)
    if callable(selector):
        return selector
    raise TypeError(f"Expected a Lambda or a callable, got {type(selector).__name__}")


def _null_first(value: Any) -> Tuple[bool, Any]:
    return (value is not None, value)


class ListQueryable(Queryable[T]):
    """Deferred query over an in-memory iterable.

    Args:
        items: Source records; consumed only when the queryable is iterated
        element_type: Record type; inferred from the first item of a non-empty sequence
    """

    def __init__(self, items: Iterable[T], element_type: Optional[type] = None, steps: Tuple[Step, ...] = ()) -> None:
        if element_type is None:
            if not isinstance(items, Sequence) or not items:
                raise TypeError("element_type is required unless items is a non-empty sequence")
            element_type = type(items[0])
        super().__init__(element_type)
        self._items = items
        self._steps = steps

    def _extend(self, step: Step) -> "ListQueryable[T]":
        return ListQueryable(self._items, self.element_type, self._steps + (step,))

    @property
    def steps(self) -> Tuple[Step, ...]:
        return self._steps

    @property
    def is_ordered(self) -> bool:
        return bool(self._steps) and self._steps[-1][0] == "order"

    def where(self, predicate: Selector) -> "ListQueryable[T]":
        return self._extend(("where", _compile(predicate)))

    def order_by(self, key: Selector, descending: bool = False) -> "ListQueryable[T]":
        return self._extend(("order", ((_compile(key), descending),)))

    def then_by(self, key: Selector, descending: bool = False) -> "ListQueryable[T]":
        if not self.is_ordered:
            raise SieveError("then_by requires a preceding order_by", element_type=self.element_type.__name__)
        kind, keys = self._steps[-1]
        return ListQueryable(
            self._items, self.element_type, self._steps[:-1] + ((kind, keys + ((_compile(key), descending),)),)
        )

    def skip(self, count: int) -> "ListQueryable[T]":
        return self._extend(("skip", max(count, 0)))

    def take(self, count: int) -> "ListQueryable[T]":
        return self._extend(("take", max(count, 0)))

    # -------------------
    # Materialization
    # -------------------
    def __iter__(self) -> Iterator[T]:
        rows: Iterable[Any] = iter(self._items)
        for kind, arg in self._steps:
            if kind == "where":
                rows = filter(arg, rows)
            elif kind == "order":
                rows = self._sorted(rows, arg)
            elif kind == "skip":
                rows = islice(rows, arg, None)
            elif kind == "take":
                rows = islice(rows, arg)
        return iter(rows)

    def to_list(self) -> List[T]:
        return list(self)

    @staticmethod
    def _sorted(rows: Iterable[Any], keys: Tuple[Tuple[Callable[[Any], Any], bool], ...]) -> List[Any]:
        ordered = list(rows)
        # Stable sorts applied from the least significant key to the primary one
        for key, descending in reversed(keys):
            ordered.sort(key=lambda row, key=key: _null_first(key(row)), reverse=descending)
        return ordered

    def __repr__(self) -> str:
        return f"<ListQueryable[{self.element_type.__name__}]: {[kind for kind, _ in self._steps]}>"
