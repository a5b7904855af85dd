"""Member resolution on entity types.

Entity types are plain annotated classes: dataclasses, pydantic models,
`typing.Protocol` interfaces or abstract base classes. A member is found, in
order, as:

1. a declared attribute or property of the type (an attribute declared as
   `Lambda[...]` is a *computed* member: its value is an expression over the
   record itself);
2. for interfaces, an attribute declared on exactly one implemented interface;
3. a class-level `Lambda` (a *static* expression member) invoked against the
   current value.
"""

from __future__ import annotations

import abc
import inspect
import types
import typing
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple, Union, get_args, get_origin, get_type_hints

from .exceptions import AmbiguousMemberError, MemberNotFoundError
from .querydsl.nodes import Lambda
from .types import TypeHint

__all__ = (
    "Member",
    "MemberKind",
    "default_value",
    "is_nullable",
    "is_text",
    "member_hints",
    "resolve_chain",
    "resolve_member",
    "strip_annotated",
    "unwrap_optional",
)

_NON_INTERFACE_BASES = (object, typing.Protocol, typing.Generic, abc.ABC)

_ZERO_VALUES: Dict[Any, Any] = {
    bool: False,
    int: 0,
    float: 0.0,
    Decimal: Decimal(0),
    str: "",
    bytes: b"",
    datetime: datetime.min,
    date: date.min,
    time: time.min,
    timedelta: timedelta(0),
}


class MemberKind(str, Enum):
    ATTRIBUTE = "attribute"
    COMPUTED = "computed"
    STATIC = "static"


@dataclass(frozen=True)
class Member:
    """One link of a member chain."""

    owner: type
    name: str
    type: TypeHint
    kind: MemberKind = MemberKind.ATTRIBUTE
    expression: Optional[Lambda] = None

    @property
    def value_type(self) -> Any:
        """Type produced once the member is accessed (and, for expressions, invoked)."""
        if self.kind is MemberKind.STATIC:
            return self.expression.result_type
        if self.kind is MemberKind.COMPUTED:
            args = get_args(unwrap_optional(self.type))
            return args[0] if args else bool
        return self.type


# -------------------
# Type hint helpers
# -------------------
def strip_annotated(hint: Any) -> Any:
    """Remove an `Annotated[...]` wrapper, keeping the underlying type."""
    if get_origin(hint) is typing.Annotated:
        return get_args(hint)[0]
    return hint


def _is_union(hint: Any) -> bool:
    return get_origin(hint) in (Union, types.UnionType)


def is_nullable(hint: Any) -> bool:
    """Whether a value of this type may be None (Optional, None-unions, Any)."""
    hint = strip_annotated(hint)
    if hint is Any or hint is None or hint is type(None):
        return True
    if _is_union(hint):
        return type(None) in get_args(hint)
    return False


def unwrap_optional(hint: Any) -> Any:
    """`Optional[X]` -> `X`; other hints are returned unchanged."""
    hint = strip_annotated(hint)
    if not _is_union(hint):
        return hint
    args = tuple(arg for arg in get_args(hint) if arg is not type(None))
    if len(args) == 1:
        return args[0]
    return Union[args]


def is_text(hint: Any) -> bool:
    target = unwrap_optional(hint)
    return isinstance(target, type) and issubclass(target, str)


def is_lambda_type(hint: Any) -> bool:
    target = unwrap_optional(hint)
    return target is Lambda or get_origin(target) is Lambda


def default_value(hint: Any) -> Any:
    """Default of a type: None when nullable, otherwise its zero value."""
    if is_nullable(hint):
        return None
    target = strip_annotated(hint)
    if target in _ZERO_VALUES:
        return _ZERO_VALUES[target]
    if isinstance(target, type) and issubclass(target, Enum):
        return next(iter(target), None)
    for base, zero in _ZERO_VALUES.items():
        if isinstance(target, type) and issubclass(target, base):
            return zero
    return None


# -------------------
# Class introspection
# -------------------
def is_interface(owner: type) -> bool:
    """Protocols and abstract classes play the role of interfaces."""
    if owner in _NON_INTERFACE_BASES:
        return False
    return bool(getattr(owner, "_is_protocol", False)) or inspect.isabstract(owner) or abc.ABC in owner.__bases__


def _property_type(prop: property) -> Any:
    if prop.fget is None:
        return Any
    try:
        return get_type_hints(prop.fget, include_extras=True).get("return", Any)
    except (NameError, TypeError):
        return Any


def _own_hints(klass: type) -> Dict[str, Any]:
    names = inspect.get_annotations(klass)
    if not names:
        return {}
    try:
        resolved = get_type_hints(klass, include_extras=True)
    except (NameError, TypeError):
        resolved = {}
    hints: Dict[str, Any] = {}
    for name, raw in names.items():
        hint = resolved.get(name, raw)
        if isinstance(hint, str):
            # unresolvable forward reference
            if hint.startswith(("ClassVar", "typing.ClassVar")):
                continue
            hint = Any
        if get_origin(hint) is typing.ClassVar or name.startswith("__"):
            continue
        hints[name] = hint
    return hints


@lru_cache(maxsize=None)
def member_hints(owner: type, own_only: bool = False) -> Dict[str, Any]:
    """Return declared members of `owner` with their type hints (Annotated kept).

    With `own_only`, only members declared directly on `owner` are returned;
    otherwise inherited members are merged in MRO order.
    """
    classes = (owner,) if own_only else tuple(reversed(owner.__mro__))
    hints: Dict[str, Any] = {}
    for klass in classes:
        if klass in _NON_INTERFACE_BASES:
            continue
        hints.update(_own_hints(klass))
        for name, value in vars(klass).items():
            if isinstance(value, property):
                hints[name] = _property_type(value)
    return hints


def _implemented_interfaces(owner: type) -> List[type]:
    return [base for base in owner.__mro__[1:] if is_interface(base)]


# -------------------
# Resolution
# -------------------
def resolve_member(owner: Any, name: str) -> Member:
    """Resolve one path segment on `owner`.

    Raises:
        MemberNotFoundError: If `name` is neither a member nor a static expression
        AmbiguousMemberError: If `name` is declared on several unrelated interfaces
    """
    owner = unwrap_optional(owner)
    if not isinstance(owner, type):
        raise MemberNotFoundError(
            f"Cannot resolve member {name} on a non-class type", member=name, owner=str(owner)
        )

    interface = is_interface(owner)
    hints = member_hints(owner, own_only=interface)
    if name in hints:
        hint = strip_annotated(hints[name])
        kind = MemberKind.COMPUTED if is_lambda_type(hint) else MemberKind.ATTRIBUTE
        return Member(owner, name, hint, kind)

    if not interface:
        return _static_member(owner, name)
    return _interface_member(owner, name)


def _interface_member(owner: type, name: str) -> Member:
    declaring = [base for base in _implemented_interfaces(owner) if name in member_hints(base, own_only=True)]
    # A redeclaration on a derived interface hides the base declaration
    declaring = [base for base in declaring if not any(o is not base and base in o.__mro__ for o in declaring)]
    if len(declaring) > 1:
        raise AmbiguousMemberError(
            f"{name} is repeated in interface hierarchy. Try renaming.",
            member=name,
            entity_type=owner.__name__,
            interfaces=[base.__name__ for base in declaring],
        )
    if declaring:
        return resolve_member(declaring[0], name)
    return _static_member(owner, name)


def _static_member(owner: type, name: str) -> Member:
    value = inspect.getattr_static(owner, name, None)
    if isinstance(value, Lambda):
        return Member(owner, name, type(value), MemberKind.STATIC, expression=value)
    raise MemberNotFoundError(f"{name} is not a member of {owner.__name__}", member=name, entity_type=owner.__name__)


def resolve_chain(entity_type: type, path: str) -> Tuple[Member, ...]:
    """Resolve a dotted path (e.g. ``author.name``) into its member chain."""
    members: List[Member] = []
    current: Any = entity_type
    for segment in path.split("."):
        member = resolve_member(current, segment)
        members.append(member)
        current = member.value_type
    return tuple(members)
