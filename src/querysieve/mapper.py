"""Explicit property registry.

A `PropertyMapper` holds, per entity type, an ordered list of registrations
declared through a fluent API::

    mapper = PropertyMapper()
    mapper.property(Post, "title").can_filter().can_sort()
    mapper.property(Post, "author.name").can_filter().has_name("AuthorName")

The member chain of every path is resolved when it is registered, so a
misspelled or ambiguous path fails at construction time. The processor
freezes its mapper once `map_properties` returns.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .exceptions import RegistrationError
from .members import Member, resolve_chain
from .utils import names_match

__all__ = ("PropertyBuilder", "PropertyMapper", "PropertyRegistration")


@dataclass(frozen=True)
class PropertyRegistration:
    entity_type: type
    members: Tuple[Member, ...]
    name: str
    full_name: str
    can_filter: bool = False
    can_sort: bool = False


class PropertyMapper:
    """Registry mapping entity types to their filterable/sortable properties."""

    def __init__(self) -> None:
        self._map: Dict[type, List[PropertyRegistration]] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "PropertyMapper":
        """Make the registry read-only."""
        self._frozen = True
        return self

    def property(self, entity_type: type, path: str) -> "PropertyBuilder":
        """Start registering the member at `path` (dotted for nested members).

        Raises:
            RegistrationError: If the mapper is frozen
            MemberNotFoundError: If a path segment does not exist
            AmbiguousMemberError: If a segment is declared on several interfaces
        """
        self._check_writable(entity_type)
        members = resolve_chain(entity_type, path)
        registrations = self._map.setdefault(entity_type, [])
        registrations.append(PropertyRegistration(entity_type, members, name=path, full_name=path))
        return PropertyBuilder(self, entity_type, len(registrations) - 1)

    def registrations(self, entity_type: type) -> Tuple[PropertyRegistration, ...]:
        return tuple(self._map.get(entity_type, ()))

    def find_property(
        self,
        entity_type: type,
        name: str,
        can_sort_required: bool = False,
        can_filter_required: bool = False,
        case_sensitive: bool = False,
    ) -> Optional[PropertyRegistration]:
        """Return the first registration matching `name` and the required capabilities."""
        for registration in self._map.get(entity_type, ()):
            if not names_match(registration.name, name, case_sensitive):
                continue
            if can_sort_required and not registration.can_sort:
                continue
            if can_filter_required and not registration.can_filter:
                continue
            return registration
        return None

    def _update(self, entity_type: type, index: int, **changes) -> None:
        self._check_writable(entity_type)
        registrations = self._map[entity_type]
        registrations[index] = dataclasses.replace(registrations[index], **changes)

    def _check_writable(self, entity_type: type) -> None:
        if self._frozen:
            raise RegistrationError("Property mapper is frozen", entity_type=entity_type.__name__)


class PropertyBuilder:
    """Fluent handle on one registration."""

    def __init__(self, mapper: PropertyMapper, entity_type: type, index: int) -> None:
        self._mapper = mapper
        self._entity_type = entity_type
        self._index = index

    def can_filter(self) -> "PropertyBuilder":
        self._mapper._update(self._entity_type, self._index, can_filter=True)
        return self

    def can_sort(self) -> "PropertyBuilder":
        self._mapper._update(self._entity_type, self._index, can_sort=True)
        return self

    def has_name(self, name: str) -> "PropertyBuilder":
        """Expose the property under `name` instead of its dotted path."""
        if not name:
            raise RegistrationError("Property name must not be empty", entity_type=self._entity_type.__name__)
        self._mapper._update(self._entity_type, self._index, name=name)
        return self
