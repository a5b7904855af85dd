"""Expression tree nodes.

Predicates and sort keys are composed as small immutable trees that an
execution layer interprets later: the python compiler turns them into
closures for in-memory collections, the SQL compiler into parameterized
clauses. Nothing here evaluates anything.

Typical usage:

- Build a predicate: `Lambda.of(Post, lambda p: p.attr("likes", int).gt(100))`
- Combine: `a & b`, `a | b`, `~a`
- Inspect: `node.to_dict()` returns the universal dict form used by `repr`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class CompareOp(str, Enum):
    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"


class CallMethod(str, Enum):
    UPPER = "$upper"
    CONTAINS = "$contains"
    STARTS_WITH = "$startswith"
    ENDS_WITH = "$endswith"


class Expr:
    """Base class of every expression node.

    - Use `&` to combine with logical AND.
    - Use `|` to combine with logical OR.
    - Use `~` to negate a node.
    """

    @property
    def result_type(self) -> Any:
        return bool

    def __and__(self, other: "Expr") -> "And":
        return And(self, other)

    def __or__(self, other: "Expr") -> "Or":
        return Or(self, other)

    def __invert__(self) -> "Not":
        return Not(self)

    # -------------------
    # Builder helpers
    # -------------------
    def attr(self, name: str, type_: Any = Any) -> "Access":
        """Return a member access on this node."""
        return Access(self, name, type_)

    def eq(self, other: Any) -> "Compare":
        return Compare(CompareOp.EQ, self, as_expr(other))

    def ne(self, other: Any) -> "Compare":
        return Compare(CompareOp.NE, self, as_expr(other))

    def gt(self, other: Any) -> "Compare":
        return Compare(CompareOp.GT, self, as_expr(other))

    def gte(self, other: Any) -> "Compare":
        return Compare(CompareOp.GTE, self, as_expr(other))

    def lt(self, other: Any) -> "Compare":
        return Compare(CompareOp.LT, self, as_expr(other))

    def lte(self, other: Any) -> "Compare":
        return Compare(CompareOp.LTE, self, as_expr(other))

    def is_null(self) -> "NullCheck":
        return NullCheck(self, is_null=True)

    def is_not_null(self) -> "NullCheck":
        return NullCheck(self, is_null=False)

    # -------------------
    # Universal dict representation
    # -------------------
    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError

    def __str__(self) -> str:
        return str(self.to_dict())


def as_expr(value: Any) -> Expr:
    """Wrap a plain python value into a boxed `Constant` unless it already is a node."""
    if isinstance(value, Expr):
        return value
    return Constant(value, type(value) if value is not None else Any)


@dataclass(frozen=True, eq=False)
class Parameter(Expr):
    """Placeholder for the current record; compared by identity."""

    name: str
    type: Any = Any

    @property
    def result_type(self) -> Any:
        return self.type

    def to_dict(self) -> Dict[str, Any]:
        return {"$param": self.name}

    def __repr__(self) -> str:
        return f"<Parameter: {self.name}>"


@dataclass(frozen=True)
class Access(Expr):
    target: Expr
    member: str
    type: Any = Any

    @property
    def result_type(self) -> Any:
        return self.type

    @property
    def path(self) -> Optional[str]:
        """Dotted path below the root parameter, or None if the chain is not plain access."""
        if isinstance(self.target, Parameter):
            return self.member
        if isinstance(self.target, Access):
            parent = self.target.path
            return f"{parent}.{self.member}" if parent is not None else None
        return None

    def to_dict(self) -> Dict[str, Any]:
        path = self.path
        if path is not None:
            return {"$field": path}
        return {"$member": [self.target.to_dict(), self.member]}


@dataclass(frozen=True)
class Lambda(Expr, Generic[T]):
    """A one-parameter expression, e.g. a predicate or an ordering key.

    Annotating a member as `Lambda[bool]` marks it as a computed member whose
    value is an expression over the record itself.
    """

    parameter: Parameter
    body: Expr

    @property
    def result_type(self) -> Any:
        return self.body.result_type

    @classmethod
    def of(cls, entity_type: Any, build: Callable[[Parameter], Expr], name: str = "e") -> "Lambda":
        parameter = Parameter(name, entity_type)
        return cls(parameter, build(parameter))

    def apply(self, argument: Expr) -> "Invoke":
        return Invoke(self, argument, self.result_type)

    def to_dict(self) -> Dict[str, Any]:
        return {"$lambda": {"param": self.parameter.name, "body": self.body.to_dict()}}


@dataclass(frozen=True)
class Invoke(Expr):
    function: Expr
    argument: Expr
    type: Any = bool

    @property
    def result_type(self) -> Any:
        return self.type

    def to_dict(self) -> Dict[str, Any]:
        return {"$invoke": [self.function.to_dict(), self.argument.to_dict()]}


@dataclass(frozen=True)
class Constant(Expr):
    """A constant value.

    Parameterized constants are bound as query parameters by translating
    compilers; a literal (e.g. the null sentinel) is inlined.
    """

    value: Any
    type: Any = Any
    parameterized: bool = True

    @property
    def result_type(self) -> Any:
        return self.type

    def to_dict(self) -> Dict[str, Any]:
        return {"$value": self.value}


@dataclass(frozen=True)
class Default(Expr):
    """The default value of a type: None for nullable types, the zero value otherwise."""

    type: Any

    @property
    def result_type(self) -> Any:
        return self.type

    def to_dict(self) -> Dict[str, Any]:
        return {"$default": getattr(self.type, "__name__", str(self.type))}


@dataclass(frozen=True)
class NullCheck(Expr):
    operand: Expr
    is_null: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"$null" if self.is_null else "$notnull": self.operand.to_dict()}


@dataclass(frozen=True)
class Compare(Expr):
    op: CompareOp
    left: Expr
    right: Expr

    def to_dict(self) -> Dict[str, Any]:
        return {self.op.value: [self.left.to_dict(), self.right.to_dict()]}


@dataclass(frozen=True)
class And(Expr):
    left: Expr
    right: Expr

    def to_dict(self) -> Dict[str, Any]:
        return {"$and": [self.left.to_dict(), self.right.to_dict()]}


@dataclass(frozen=True)
class Or(Expr):
    left: Expr
    right: Expr

    def to_dict(self) -> Dict[str, Any]:
        return {"$or": [self.left.to_dict(), self.right.to_dict()]}


@dataclass(frozen=True)
class Not(Expr):
    operand: Expr

    def to_dict(self) -> Dict[str, Any]:
        return {"$not": self.operand.to_dict()}


@dataclass(frozen=True)
class Call(Expr):
    """A string method call: `upper()` or a substring test against `argument`."""

    method: CallMethod
    target: Expr
    argument: Optional[Expr] = None

    @property
    def result_type(self) -> Any:
        return str if self.method is CallMethod.UPPER else bool

    def to_dict(self) -> Dict[str, Any]:
        args = [self.target.to_dict()]
        if self.argument is not None:
            args.append(self.argument.to_dict())
        return {self.method.value: args}


@dataclass(frozen=True)
class Conditional(Expr):
    test: Expr
    if_true: Expr
    if_false: Expr

    @property
    def result_type(self) -> Any:
        return self.if_false.result_type

    def to_dict(self) -> Dict[str, Any]:
        return {"$cond": [self.test.to_dict(), self.if_true.to_dict(), self.if_false.to_dict()]}


def substitute(node: Expr, parameter: Parameter, replacement: Expr) -> Expr:
    """Return a copy of `node` with every occurrence of `parameter` replaced.

    Nested lambdas that bind their own parameter are left untouched below
    their binding.
    """
    if node is parameter:
        return replacement
    if isinstance(node, Lambda) and node.parameter is parameter:
        return node
    if not dataclasses.is_dataclass(node) or isinstance(node, Parameter):
        return node
    changes = {}
    for f in dataclasses.fields(node):
        value = getattr(node, f.name)
        if (isinstance(value, Expr) and not isinstance(value, Parameter)) or value is parameter:
            new_value = substitute(value, parameter, replacement)
            if new_value is not value:
                changes[f.name] = new_value
    return dataclasses.replace(node, **changes) if changes else node
