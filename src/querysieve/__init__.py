"""
querysieve: filtering, sorting and paging for deferred queries.

Exposes the `SieveProcessor`, the parsed parameter schemas, the property
registry and the queryables the processor extends.
"""

from .attributes import Sieve
from .constants import FilterOperator
from .custom import CustomFilterMethods, CustomMethods, CustomSortMethods, custom_method
from .exceptions import (
    AmbiguousMemberError,
    IncompatibleMethodError,
    InvalidConfigError,
    InvalidFilterValueError,
    MemberNotFoundError,
    MethodNotFoundError,
    RegistrationError,
    SieveError,
    TranslationError,
)
from .mapper import PropertyMapper
from .processor import SieveProcessor
from .queryables import ListQueryable, Queryable, SqlQueryable
from .querydsl import Lambda
from .schema import FilterTerm, SieveModel, SieveOptions, SortTerm

__version__ = "0.1.0"

__all__ = [
    "SieveProcessor",
    "SieveModel",
    "SieveOptions",
    "FilterTerm",
    "SortTerm",
    "FilterOperator",
    "PropertyMapper",
    "Sieve",
    "CustomMethods",
    "CustomFilterMethods",
    "CustomSortMethods",
    "custom_method",
    "Queryable",
    "ListQueryable",
    "SqlQueryable",
    "Lambda",
    "SieveError",
    "MemberNotFoundError",
    "AmbiguousMemberError",
    "RegistrationError",
    "InvalidFilterValueError",
    "MethodNotFoundError",
    "IncompatibleMethodError",
    "TranslationError",
    "InvalidConfigError",
]
