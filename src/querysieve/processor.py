"""
Main processor applying filter, sort and paging parameters to a queryable.

This module provides the `SieveProcessor`, which resolves client-supplied
property names against a property mapper and `Sieve` markers, compiles filter
and sort terms into expression trees, dispatches unknown names to custom
methods and finally selects a page. The queryable stays deferred throughout.
"""

from typing import Optional

from .custom import CustomFilterMethods, CustomSortMethods
from .exceptions import SieveError
from .logger import Logger
from .mapper import PropertyMapper
from .pagination import Pager
from .queryables.base import Queryable
from .querydsl.filters import FilterCompiler
from .querydsl.paths import ExpressionPathBuilder
from .querydsl.sorting import SortCompiler
from .resolver import PropertyResolver
from .schema import SieveModel, SieveOptions
from .types import CustomMethodArgs

__all__ = ("SieveProcessor",)


class SieveProcessor:
    """Apply a `SieveModel` to a `Queryable`.

    Subclass and override `map_properties` to register properties::

        class ApplicationSieveProcessor(SieveProcessor):
            def map_properties(self, mapper):
                mapper.property(Post, "title").can_filter().can_sort()
                return mapper

    Attributes:
        options: Processor options (case policy, paging, error handling, null handling)
        mapper: Frozen property registry
        resolver: Property resolver over `mapper` and `Sieve` markers
    """

    def __init__(
        self,
        options: Optional[SieveOptions] = None,
        custom_filter_methods: Optional[CustomFilterMethods] = None,
        custom_sort_methods: Optional[CustomSortMethods] = None,
        mapper: Optional[PropertyMapper] = None,
    ) -> None:
        """Initialize the processor and build its property registry.

        Args:
            options: Processor options (defaults from `SieveSettings`)
            custom_filter_methods: Collection searched for unresolved filter names
            custom_sort_methods: Collection searched for unresolved sort names
            mapper: Pre-populated property mapper; `map_properties` may extend it

        Raises:
            RegistrationError, MemberNotFoundError, AmbiguousMemberError: From `map_properties`
        """
        self.options = options or SieveOptions()
        self.custom_filter_methods = custom_filter_methods
        self.custom_sort_methods = custom_sort_methods
        self.logger = Logger(self.__class__.__name__)

        self.mapper = self.map_properties(mapper or PropertyMapper()).freeze()
        self.resolver = PropertyResolver(self.mapper, case_sensitive=self.options.case_sensitive)

        builder = ExpressionPathBuilder()
        self.filters = FilterCompiler(self.resolver, self.options, builder, custom_filter_methods)
        self.sorts = SortCompiler(self.resolver, self.options, builder, custom_sort_methods)
        self.pager = Pager(self.options)

        self.logger.message(
            "SieveProcessor initialized: case_sensitive=%s throw_exceptions=%s",
            self.options.case_sensitive,
            self.options.throw_exceptions,
        )

    def map_properties(self, mapper: PropertyMapper) -> PropertyMapper:
        """Register properties on `mapper` and return it. No properties by default."""
        return mapper

    def apply(
        self,
        model: Optional[SieveModel],
        source: Queryable,
        data_for_custom_methods: CustomMethodArgs = None,
        apply_filtering: bool = True,
        apply_sorting: bool = True,
        apply_pagination: bool = True,
    ) -> Queryable:
        """Apply filtering, sorting and paging from `model` to `source`, in that order.

        Args:
            model: Parsed parameters; None leaves the source unchanged
            source: Deferred queryable to extend
            data_for_custom_methods: Extra arguments appended to custom method calls that need them
            apply_filtering: Apply the filter terms
            apply_sorting: Apply the sort terms
            apply_pagination: Apply page and page size

        Returns:
            The extended queryable, or `source` itself when an error is suppressed

        Raises:
            SieveError: Only when `throw_exceptions` is set; non-sieve errors are wrapped
        """
        if model is None:
            return source

        result = source
        try:
            if apply_filtering:
                result = self.filters.apply(result, model.filters, data_for_custom_methods)
            if apply_sorting:
                result = self.sorts.apply(result, model.sorts, data_for_custom_methods)
            if apply_pagination:
                result = self.pager.paginate(result, model.page, model.page_size)
        except Exception as exc:
            if not self.options.throw_exceptions:
                self.logger.warning("Sieve failed on %s, returning source unchanged: %r", type(source).__name__, exc)
                return source
            if isinstance(exc, SieveError):
                raise
            raise SieveError(str(exc), error_type=type(exc).__name__) from exc
        return result
