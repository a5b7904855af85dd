"""Utility functions for querysieve.

Shared helpers used by the resolver, the compilers and the custom method
dispatcher.
"""

from datetime import date, datetime, timezone
from typing import Any


def names_match(candidate: str, name: str, case_sensitive: bool) -> bool:
    """Compare two names under the global case policy."""
    if case_sensitive:
        return candidate == name
    return candidate.casefold() == name.casefold()


def type_name(hint: Any) -> str:
    """Readable name of a type hint for error details."""
    return getattr(hint, "__name__", None) or str(hint)


def to_utc(value: Any) -> Any:
    """Convert timezone-aware datetimes to naive UTC; other values pass through.

    Naive datetimes are taken as already being in UTC, so both compare
    against naive members.
    """
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def is_temporal(value: Any) -> bool:
    return isinstance(value, (datetime, date))


def is_subtype(klass: type, base: Any) -> bool:
    """`issubclass` that also accepts protocols which are not runtime checkable."""
    if not isinstance(base, type):
        return False
    if getattr(base, "_is_protocol", False) and not getattr(base, "_is_runtime_protocol", False):
        return base in klass.__mro__
    return issubclass(klass, base)
