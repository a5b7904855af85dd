"""SQL queryable.

Composes a single parameterized SELECT statement for one table. The
statement is only built by `to_sql`; executing it is left to the caller's
database driver.
"""

from typing import Any, Dict, List, Optional, Tuple, TypeVar, Union

from ..exceptions import SieveError
from ..querydsl.compilers.sql import SqlCompiler
from ..querydsl.compilers.utils import ParamSink, normalize_lambda, quote_identifier
from ..querydsl.nodes import Lambda
from .base import Queryable

__all__ = ("SqlQueryable",)

T = TypeVar("T")


class SqlQueryable(Queryable[T]):
    """Deferred SELECT over `table` whose rows map onto `element_type`.

    No joins are generated: a nested path such as `author.name` renders as
    the qualified column `"author"."name"`, so `table` must be a view or
    joined source exposing each related record under its member name.
    """

    def __init__(
        self,
        table: str,
        element_type: type,
        paramstyle: str = "qmark",
        *,
        predicates: Tuple[Lambda, ...] = (),
        orderings: Tuple[Tuple[Lambda, bool], ...] = (),
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> None:
        super().__init__(element_type)
        self.table = table
        self.compiler = SqlCompiler(paramstyle)
        self.predicates = predicates
        self.orderings = orderings
        self.offset = offset
        self.limit = limit

    def _copy(self, **changes: Any) -> "SqlQueryable[T]":
        state: Dict[str, Any] = {
            "predicates": self.predicates,
            "orderings": self.orderings,
            "offset": self.offset,
            "limit": self.limit,
        }
        state.update(changes)
        return SqlQueryable(self.table, self.element_type, self.compiler.paramstyle, **state)

    @property
    def is_ordered(self) -> bool:
        return bool(self.orderings)

    def where(self, predicate: Lambda) -> "SqlQueryable[T]":
        return self._copy(predicates=self.predicates + (normalize_lambda(predicate),))

    def order_by(self, key: Lambda, descending: bool = False) -> "SqlQueryable[T]":
        return self._copy(orderings=((normalize_lambda(key), descending),))

    def then_by(self, key: Lambda, descending: bool = False) -> "SqlQueryable[T]":
        if not self.orderings:
            raise SieveError("then_by requires a preceding order_by", table=self.table)
        return self._copy(orderings=self.orderings + ((normalize_lambda(key), descending),))

    def skip(self, count: int) -> "SqlQueryable[T]":
        count = max(count, 0)
        limit = None if self.limit is None else max(self.limit - count, 0)
        return self._copy(offset=self.offset + count, limit=limit)

    def take(self, count: int) -> "SqlQueryable[T]":
        count = max(count, 0)
        return self._copy(limit=count if self.limit is None else min(self.limit, count))

    def to_sql(self) -> Tuple[str, Union[List[Any], Dict[str, Any]]]:
        """Build the SELECT statement and its bound parameters."""
        sink = ParamSink(self.compiler.paramstyle)
        sql = f"SELECT * FROM {quote_identifier(self.table)}"
        if self.predicates:
            clauses = [self.compiler.render(predicate, sink) for predicate in self.predicates]
            sql += " WHERE " + " AND ".join(clauses)
        if self.orderings:
            keys = [
                f"{self.compiler.render(key, sink)} {'DESC' if descending else 'ASC'}"
                for key, descending in self.orderings
            ]
            sql += " ORDER BY " + ", ".join(keys)
        if self.limit is not None:
            sql += f" LIMIT {int(self.limit)}"
        if self.offset:
            sql += f" OFFSET {int(self.offset)}"
        return sql, sink.params

    def __str__(self) -> str:
        return self.to_sql()[0]
