"""Property resolution.

Maps a client-supplied name to a canonical dotted path and member chain on an
entity type, consulting the sources listed in `RESOLUTION_ORDER`. A miss is
not an error: the processor then treats the name as a custom method.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .attributes import sieve_members
from .constants import RESOLUTION_ORDER, PropertySource
from .mapper import PropertyMapper
from .members import Member, resolve_member
from .utils import names_match

__all__ = ("PropertyResolver", "ResolvedProperty")


@dataclass(frozen=True)
class ResolvedProperty:
    full_name: str
    members: Tuple[Member, ...]
    source: PropertySource


class PropertyResolver:
    """Resolve property names against a mapper, then against `Sieve` markers."""

    def __init__(self, mapper: PropertyMapper, case_sensitive: bool = False) -> None:
        self.mapper = mapper
        self.case_sensitive = case_sensitive

    def resolve(
        self,
        entity_type: type,
        name: str,
        can_sort_required: bool = False,
        can_filter_required: bool = False,
    ) -> Optional[ResolvedProperty]:
        """Return the resolved property or None when no source knows `name`.

        Args:
            entity_type: Record type of the queryable
            name: Name from the filter or sort term
            can_sort_required: Only match sortable properties
            can_filter_required: Only match filterable properties
        """
        for source in RESOLUTION_ORDER:
            if source is PropertySource.MAPPER:
                resolved = self._from_mapper(entity_type, name, can_sort_required, can_filter_required)
            else:
                resolved = self._from_attributes(entity_type, name, can_sort_required, can_filter_required)
            if resolved is not None:
                return resolved
        return None

    def _from_mapper(
        self, entity_type: type, name: str, can_sort_required: bool, can_filter_required: bool
    ) -> Optional[ResolvedProperty]:
        registration = self.mapper.find_property(
            entity_type,
            name,
            can_sort_required=can_sort_required,
            can_filter_required=can_filter_required,
            case_sensitive=self.case_sensitive,
        )
        if registration is None:
            return None
        return ResolvedProperty(registration.full_name, registration.members, PropertySource.MAPPER)

    def _from_attributes(
        self, entity_type: type, name: str, can_sort_required: bool, can_filter_required: bool
    ) -> Optional[ResolvedProperty]:
        for attribute, marker in sieve_members(entity_type):
            if can_sort_required and not marker.can_sort:
                continue
            if can_filter_required and not marker.can_filter:
                continue
            if names_match(marker.name or attribute, name, self.case_sensitive):
                member = resolve_member(entity_type, attribute)
                return ResolvedProperty(attribute, (member,), PropertySource.ATTRIBUTE)
        return None
