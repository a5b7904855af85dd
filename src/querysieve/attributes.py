"""Declarative opt-in for entity members.

Members can be exposed without registering them on a `PropertyMapper` by
annotating them with a `Sieve` marker::

    @dataclass
    class Post:
        title: Annotated[str, Sieve(can_filter=True, can_sort=True)]
        likes: Annotated[int, Sieve(can_sort=True, name="popularity")]

The property resolver consults these markers only after the mapper.
"""

from dataclasses import dataclass
from typing import Annotated, Any, Iterator, Optional, Tuple, get_args, get_origin

from .members import member_hints

__all__ = ("Sieve", "sieve_members")


@dataclass(frozen=True)
class Sieve:
    can_filter: bool = False
    can_sort: bool = False
    name: Optional[str] = None


def _marker(hint: Any) -> Optional[Sieve]:
    if get_origin(hint) is not Annotated:
        return None
    return next((meta for meta in get_args(hint)[1:] if isinstance(meta, Sieve)), None)


def sieve_members(entity_type: type) -> Iterator[Tuple[str, Sieve]]:
    """Yield `(attribute_name, marker)` for every marked member of `entity_type`."""
    hints = member_hints(entity_type)
    for attribute, hint in hints.items():
        marker = _marker(hint)
        if marker is not None:
            yield attribute, marker
