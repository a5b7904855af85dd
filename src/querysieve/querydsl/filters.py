"""Filter term compilation.

Turns parsed filter terms into one boolean `Lambda` over the record type:

- values of a term are OR'd, names of a term are OR'd, terms are AND'd;
- every comparison is guarded by the null checks of its access path, except
  a plain not-equals when `ignore_nulls_on_not_equal` is off;
- the literal ``null`` stands for a null constant on non-text members and for
  `==` / `!=` on text members; ``\\null`` matches the text itself.

Names that do not resolve to a filterable property are handed to the custom
filter methods instead.
"""

from datetime import timedelta
from functools import lru_cache
from typing import Optional, Sequence

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

from ..constants import DATE_OPERATORS, EQUALITY_OPERATORS, ESCAPE_CHAR, NULL_FILTER_VALUE, FilterOperator
from ..custom import CustomMethods, invoke_custom_method
from ..exceptions import InvalidFilterValueError
from ..logger import Logger
from ..members import is_text
from ..queryables.base import Queryable
from ..resolver import PropertyResolver, ResolvedProperty
from ..schema import FilterTerm, SieveOptions
from ..types import CustomMethodArgs, TypeHint
from ..utils import is_temporal, to_utc, type_name
from .nodes import Call, CallMethod, Compare, CompareOp, Constant, Expr, Lambda, Parameter
from .paths import ExpressionPathBuilder

__all__ = ("FilterCompiler",)

logger = Logger(__name__)

_COMPARE_OPS = {
    FilterOperator.EQUALS: CompareOp.EQ,
    FilterOperator.NOT_EQUALS: CompareOp.NE,
    FilterOperator.GREATER_THAN: CompareOp.GT,
    FilterOperator.LESS_THAN: CompareOp.LT,
    FilterOperator.GREATER_THAN_OR_EQUAL_TO: CompareOp.GTE,
    FilterOperator.LESS_THAN_OR_EQUAL_TO: CompareOp.LTE,
}

_CALL_METHODS = {
    FilterOperator.CONTAINS: CallMethod.CONTAINS,
    FilterOperator.STARTS_WITH: CallMethod.STARTS_WITH,
    FilterOperator.ENDS_WITH: CallMethod.ENDS_WITH,
}


@lru_cache(maxsize=None)
def _adapter(target_type: TypeHint) -> TypeAdapter:
    return TypeAdapter(target_type)


class FilterCompiler:
    """Compile filter terms into a predicate and apply it to a queryable."""

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
        terms: Optional[Sequence[FilterTerm]],
        data_for_custom_methods: CustomMethodArgs = None,
    ) -> Queryable:
        """Filter `source` by `terms`.

        Custom methods are applied to the source as their names are met; the
        compiled predicate is applied last.
        """
        if not terms:
            return source

        parameter = Parameter("e", source.element_type)
        outer: Optional[Expr] = None
        for term in terms:
            inner: Optional[Expr] = None
            for name in term.names:
                resolved = self.resolver.resolve(source.element_type, name, can_filter_required=True)
                if resolved is None:
                    source = invoke_custom_method(
                        self.custom_methods,
                        name,
                        source,
                        (source, term.operator, term.values),
                        extra=data_for_custom_methods,
                        case_sensitive=self.options.case_sensitive,
                    )
                    continue
                for value in term.values or ():
                    expression = self.build_comparison(parameter, resolved, term, value)
                    inner = expression if inner is None else inner | expression

            if inner is None:
                continue
            outer = inner if outer is None else outer & inner

        if outer is None:
            return source
        predicate = Lambda(parameter, outer)
        logger.debug("Compiled filter for %s: %s", source.element_type.__name__, predicate)
        return source.where(predicate)

    def build_comparison(self, parameter: Parameter, resolved: ResolvedProperty, term: FilterTerm, value: str) -> Expr:
        """Build the guarded comparison of one property against one value."""
        path = self.builder.build(parameter, resolved.members, resolved.full_name, for_filter=True)
        is_null = self.is_null_value(path.type, term.operator, value)
        filter_value: Expr = (
            Constant(None, path.type, parameterized=False) if is_null else self.convert_value(value, path.type)
        )

        access = path.access
        if term.case_insensitive and not is_null and is_text(path.type):
            access = Call(CallMethod.UPPER, access)
            filter_value = Call(CallMethod.UPPER, filter_value)

        expression = self._operator_expression(term.operator, access, filter_value)
        if term.negated:
            expression = ~expression

        if not self._is_not_equal(expression) or self.options.ignore_nulls_on_not_equal:
            guard = self.builder.null_check(path.access, path.null_check, True, is_null, None, None)
            if guard is not None:
                expression = guard & expression
        return expression

    @staticmethod
    def is_null_value(target_type: TypeHint, operator: FilterOperator, value: str) -> bool:
        """Whether `value` is the null literal for this member and operator."""
        if value.lower() != NULL_FILTER_VALUE:
            return False
        return not is_text(target_type) or operator in EQUALITY_OPERATORS

    @staticmethod
    def convert_value(value: str, target_type: TypeHint) -> Constant:
        """Convert a raw filter value into a boxed constant of `target_type`.

        Raises:
            InvalidFilterValueError: If the value does not validate as `target_type`
        """
        if value.lower() == ESCAPE_CHAR + NULL_FILTER_VALUE:
            value = value.lstrip(ESCAPE_CHAR)
        try:
            converted = _adapter(target_type).validate_python(value)
        except (ValidationError, PydanticSchemaGenerationError) as exc:
            raise InvalidFilterValueError(
                f"Cannot convert filter value to {type_name(target_type)}",
                value=value,
                target_type=type_name(target_type),
            ) from exc
        return Constant(to_utc(converted), target_type)

    def _operator_expression(self, operator: FilterOperator, access: Expr, filter_value: Expr) -> Expr:
        if operator in DATE_OPERATORS:
            return self._date_range(access, filter_value)
        if operator in _CALL_METHODS:
            return Call(_CALL_METHODS[operator], access, filter_value)
        return Compare(_COMPARE_OPS.get(operator, CompareOp.EQ), access, filter_value)

    @staticmethod
    def _date_range(access: Expr, filter_value: Expr) -> Expr:
        """`value <= access < value + 1 day`; both bounds become `access == null` for a null value."""
        value = filter_value.value if isinstance(filter_value, Constant) else None
        if value is None:
            null = Constant(None, access.result_type, parameterized=False)
            return access.eq(null) & access.eq(null)
        if not is_temporal(value):
            raise InvalidFilterValueError(
                "Date operators require a date or datetime member", value=value, value_type=type(value).__name__
            )
        lower = Constant(value, access.result_type)
        upper = Constant(value + timedelta(days=1), access.result_type)
        return access.gte(lower) & access.lt(upper)

    @staticmethod
    def _is_not_equal(expression: Expr) -> bool:
        return isinstance(expression, Compare) and expression.op is CompareOp.NE
