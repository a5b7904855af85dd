"""Sort term compilation.

The first resolved term starts an ordering (`order_by`), later terms break
ties (`then_by`). A nullable path is sorted through a conditional key that
falls back to the member type's default when any link is null, unless
`disable_nullable_type_expression_for_sorting` is set.
"""

from typing import Optional, Sequence

from ..custom import CustomMethods, invoke_custom_method
from ..logger import Logger
from ..queryables.base import Queryable
from ..resolver import PropertyResolver, ResolvedProperty
from ..schema import SieveOptions, SortTerm
from ..types import CustomMethodArgs
from .nodes import Conditional, Default, Lambda, Parameter
from .paths import ExpressionPathBuilder

__all__ = ("SortCompiler",)

logger = Logger(__name__)


class SortCompiler:
    """Compile sort terms into key selectors and apply them to a queryable."""

    def __init__(
        self,
        resolver: PropertyResolver,
        options: SieveOptions,
        builder: Optional[ExpressionPathBuilder] = None,
        custom_methods: Optional[CustomMethods] = None,
    ) -> None:
        self.resolver = resolver
        self.options = options
        self.builder = builder or ExpressionPathBuilder()
        self.custom_methods = custom_methods

    def apply(
        self,
        source: Queryable,
        terms: Optional[Sequence[SortTerm]],
        data_for_custom_methods: CustomMethodArgs = None,
    ) -> Queryable:
        if not terms:
            return source

        use_then_by = False
        for term in terms:
            resolved = self.resolver.resolve(source.element_type, term.name, can_sort_required=True)
            if resolved is None:
                source = invoke_custom_method(
                    self.custom_methods,
                    term.name,
                    source,
                    (source, use_then_by, term.descending),
                    extra=data_for_custom_methods,
                    case_sensitive=self.options.case_sensitive,
                )
            else:
                key = self.key_selector(Parameter("e", source.element_type), resolved)
                logger.debug("Sorting %s by %s (descending=%s)", source.element_type.__name__, key, term.descending)
                if use_then_by:
                    source = source.then_by(key, term.descending)
                else:
                    source = source.order_by(key, term.descending)
            use_then_by = True
        return source

    def key_selector(self, parameter: Parameter, resolved: ResolvedProperty) -> Lambda:
        """Return the key selector lambda of `resolved` for records bound to `parameter`."""
        path = self.builder.build(
            parameter,
            resolved.members,
            resolved.full_name,
            for_filter=False,
            disable_null_guard=self.options.disable_nullable_type_expression_for_sorting,
        )
        if path.null_check is None:
            return Lambda(parameter, path.access)
        return Lambda(parameter, Conditional(path.null_check, Default(path.type), path.access))
