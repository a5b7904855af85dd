"""Custom filter and sort methods.

Names that do not resolve to a property are looked up on a collection of
custom methods supplied to the processor::

    class PostFilters(CustomFilterMethods):
        def is_new(self, source: Queryable[Post], operator, values) -> Queryable[Post]:
            return source.where(Lambda.of(Post, lambda p: p.attr("created", datetime).gt(cutoff)))

        def has_tag(self, source: Queryable[Tagged], operator, values) -> Queryable[Tagged]:
            ...  # Tagged = TypeVar("Tagged", bound=HasTags): any entity implementing HasTags

The record type a method serves comes from its return annotation
(`Queryable[Post]`), a `Queryable[T]` annotation with a TypeVar makes it
generic, and the `custom_method` decorator states either explicitly. The
table of methods is built once per class.

Filter methods are called with `(source, operator, values)`, sort methods
with `(source, use_then_by, descending)`; extra context given to
`SieveProcessor.apply` is appended when the method accepts it.
"""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar, get_args, get_origin, get_type_hints

from .exceptions import IncompatibleMethodError, MethodNotFoundError
from .logger import Logger
from .queryables.base import Queryable
from .types import CustomMethodArgs
from .utils import is_subtype, names_match, type_name

__all__ = (
    "CustomFilterMethods",
    "CustomMethodSpec",
    "CustomMethods",
    "CustomSortMethods",
    "custom_method",
    "invoke_custom_method",
)

_MARKER = "__sieve_custom_method__"

logger = Logger(__name__)


@dataclass(frozen=True)
class CustomMethodSpec:
    """What a custom method declares about the record types it serves."""

    name: str
    attribute: str
    entity_type: Optional[type] = None
    generic: bool = False
    bounds: Tuple[type, ...] = ()
    any_bound: bool = False
    declared: Any = None

    def matches_exactly(self, entity_type: type) -> bool:
        return not self.generic and self.entity_type is entity_type

    def accepts(self, entity_type: type) -> bool:
        """Whether a generic method can be bound to `entity_type`."""
        if not self.generic:
            return False
        if not self.bounds:
            return True
        check = any if self.any_bound else all
        return check(is_subtype(entity_type, bound) for bound in self.bounds)

    @property
    def served(self) -> str:
        if self.generic:
            bounds = ", ".join(type_name(b) for b in self.bounds) or "any"
            return f"Queryable[T: {bounds}]"
        if self.entity_type is not None:
            return f"Queryable[{self.entity_type.__name__}]"
        return type_name(self.declared)


def custom_method(
    entity_type: Optional[type] = None, *, bound: Sequence[type] = (), name: Optional[str] = None
) -> Callable:
    """Declare the record type of a custom method explicitly.

    Args:
        entity_type: Exact record type served; omit for a generic method
        bound: Types a record type must subclass for a generic method
        name: Name the method is looked up by (defaults to the function name)
    """

    def decorator(fn: Callable) -> Callable:
        setattr(fn, _MARKER, {"entity_type": entity_type, "bound": tuple(bound), "name": name})
        return fn

    return decorator


def _spec_from_annotation(attribute: str, fn: Callable) -> CustomMethodSpec:
    try:
        declared = get_type_hints(fn).get("return")
    except (NameError, TypeError):
        declared = inspect.signature(fn).return_annotation
    origin = get_origin(declared)
    if declared is Queryable:
        return CustomMethodSpec(attribute, attribute, generic=True, declared=declared)
    if isinstance(origin, type) and issubclass(origin, Queryable):
        args = get_args(declared)
        served = args[0] if args else Any
        if isinstance(served, TypeVar):
            if served.__constraints__:
                return CustomMethodSpec(
                    attribute, attribute, generic=True, bounds=served.__constraints__, any_bound=True, declared=declared
                )
            bounds = (served.__bound__,) if served.__bound__ is not None else ()
            return CustomMethodSpec(attribute, attribute, generic=True, bounds=bounds, declared=declared)
        if served is Any:
            return CustomMethodSpec(attribute, attribute, generic=True, declared=declared)
        return CustomMethodSpec(attribute, attribute, entity_type=served, declared=declared)
    return CustomMethodSpec(attribute, attribute, declared=declared)


def _binds(signature: inspect.Signature, arguments: Tuple[Any, ...]) -> bool:
    try:
        signature.bind(*arguments)
    except TypeError:
        return False
    return True


def _spec(attribute: str, fn: Callable) -> CustomMethodSpec:
    marker = getattr(fn, _MARKER, None)
    if marker is None:
        return _spec_from_annotation(attribute, fn)
    entity_type = marker["entity_type"]
    return CustomMethodSpec(
        marker["name"] or attribute,
        attribute,
        entity_type=entity_type,
        generic=entity_type is None,
        bounds=marker["bound"],
        declared=entity_type,
    )


class CustomMethods:
    """Base class of a collection of custom filter or sort methods.

    Every public method of a subclass is a candidate.
    """

    @classmethod
    def method_table(cls) -> Dict[str, Tuple[CustomMethodSpec, ...]]:
        """Return `name -> candidates`, built on first use and cached on the class."""
        table = cls.__dict__.get("_method_table")
        if table is not None:
            return table

        functions: Dict[str, Callable] = {}
        for klass in reversed(cls.__mro__):
            if klass is object or klass in (CustomMethods, CustomFilterMethods, CustomSortMethods):
                continue
            for attribute, value in vars(klass).items():
                if attribute.startswith("_"):
                    continue
                if isinstance(value, staticmethod):
                    value = value.__func__
                if inspect.isfunction(value):
                    functions[attribute] = value

        grouped: Dict[str, List[CustomMethodSpec]] = {}
        for attribute, fn in functions.items():
            spec = _spec(attribute, fn)
            grouped.setdefault(spec.name, []).append(spec)
        table = {name: tuple(specs) for name, specs in grouped.items()}
        cls._method_table = table
        return table

    def find(self, name: str, entity_type: type, case_sensitive: bool = False) -> Callable:
        """Return the bound method serving `name` for `entity_type`.

        An exact record type match wins over a generic method.

        Raises:
            MethodNotFoundError: If no method is called `name`
            IncompatibleMethodError: If methods called `name` exist but none serves `entity_type`
        """
        candidates = [
            spec
            for key, specs in self.method_table().items()
            if names_match(key, name, case_sensitive)
            for spec in specs
        ]
        if not candidates:
            raise MethodNotFoundError(f"{name} not found.", method_name=name)

        chosen = next((spec for spec in candidates if spec.matches_exactly(entity_type)), None)
        if chosen is None:
            chosen = next((spec for spec in candidates if spec.accepts(entity_type)), None)
        if chosen is not None:
            return getattr(self, chosen.attribute)

        expected = f"Queryable[{entity_type.__name__}]"
        errors = [
            IncompatibleMethodError(
                f"{name} failed. Expected a custom method for type {expected} but only found for type {spec.served}",
                method_name=spec.attribute,
                expected=expected,
                actual=spec.served,
            )
            for spec in candidates
        ]
        raise IncompatibleMethodError(
            f"No custom method {name} is compatible with {entity_type.__name__}",
            errors=errors,
            method_name=name,
            mismatches=[error.message for error in errors],
        )

    def invoke(
        self,
        name: str,
        source: Queryable,
        arguments: Sequence[Any],
        extra: CustomMethodArgs = None,
        case_sensitive: bool = False,
    ) -> Queryable:
        """Call the custom method `name` on `source`.

        `extra` context is appended to the mandatory `arguments` whenever the
        method's signature takes it, including context parameters that have
        defaults; otherwise the method is called with `arguments` alone.
        """
        method = self.find(name, source.element_type, case_sensitive)
        signature = inspect.signature(method)
        arguments = tuple(arguments)
        if extra and _binds(signature, arguments + tuple(extra)):
            arguments = arguments + tuple(extra)
        else:
            signature.bind(*arguments)

        logger.debug("Invoking custom method %s.%s", type(self).__name__, method.__name__)
        result = method(*arguments)
        if not isinstance(result, Queryable):
            raise IncompatibleMethodError(
                f"{name} returned {type(result).__name__} instead of a Queryable", method_name=name
            )
        return result


class CustomFilterMethods(CustomMethods):
    """Custom filters: `(source, operator, values[, *context]) -> Queryable`."""


class CustomSortMethods(CustomMethods):
    """Custom sorts: `(source, use_then_by, descending[, *context]) -> Queryable`."""


def invoke_custom_method(
    methods: Optional[CustomMethods],
    name: str,
    source: Queryable,
    arguments: Sequence[Any],
    extra: CustomMethodArgs = None,
    case_sensitive: bool = False,
) -> Queryable:
    """Dispatch an unresolved name to `methods`, which may be absent."""
    if methods is None:
        raise MethodNotFoundError(f"{name} not found.", method_name=name)
    return methods.invoke(name, source, arguments, extra=extra, case_sensitive=case_sensitive)
