"""SQL where compiler.

Transforms expression trees into SQL boolean expressions and ordering keys.
Constant values are bound as parameters, so one query shape can be prepared
and cached by the driver regardless of the filter values.

Supports:
- Comparison: =, <>, >, <, >=, <= (comparison against NULL becomes IS [NOT] NULL)
- String: UPPER, LIKE with `||` concatenation for substring tests
- Logical: AND, OR, NOT
- Conditional sort keys: CASE WHEN ... THEN ... ELSE ... END
- Nested fields as dotted, quoted identifiers ("author"."name")

Limitations:
- Computed members whose expression lives on the record instance cannot be
  translated; static expression members are inlined.
"""

from typing import Any, Dict, List, Optional, Tuple, Union

from ...exceptions import TranslationError
from ...members import default_value
from ..nodes import (
    Access,
    And,
    Call,
    CallMethod,
    CompareOp,
    Compare,
    Conditional,
    Constant,
    Default,
    Expr,
    Invoke,
    Lambda,
    Not,
    NullCheck,
    Or,
    Parameter,
    substitute,
)
from .base import BaseCompiler
from .utils import ParamSink, format_value_sql, normalize_lambda, quote_identifier

__all__ = (
    "SqlCompiler",
    "sql_compiler",
)

Params = Union[List[Any], Dict[str, Any]]


class SqlCompiler(BaseCompiler):
    """Compile expression trees into parameterized SQL fragments."""

    _OP_MAP = {
        CompareOp.EQ: "=",
        CompareOp.NE: "<>",
        CompareOp.GT: ">",
        CompareOp.GTE: ">=",
        CompareOp.LT: "<",
        CompareOp.LTE: "<=",
    }

    def __init__(self, paramstyle: str = "qmark") -> None:
        # validates the paramstyle eagerly
        ParamSink(paramstyle)
        self.paramstyle = paramstyle

    def to_where(self, where: Any) -> Tuple[str, Params]:
        """Convert a Lambda into a SQL fragment and its bound parameters.

        Args:
            where: Lambda over a record (predicate or ordering key)

        Returns:
            Tuple of (sql, params); params is a list for qmark, a dict for pyformat
        """
        sink = ParamSink(self.paramstyle)
        sql = self.render(normalize_lambda(where), sink)
        return sql, sink.params

    def to_expr(self, node: Expr) -> str:
        """Convert a node into SQL with literals inlined (debugging only)."""
        if isinstance(node, Lambda):
            return self._node_to_sql(node.body, node.parameter, None)
        return self._node_to_sql(node, None, None)

    def render(self, where: Lambda, sink: Optional[ParamSink]) -> str:
        """Render a Lambda body, binding constants into a shared `sink`."""
        return self._node_to_sql(where.body, where.parameter, sink)

    # -------------------
    # Rendering
    # -------------------
    def _value(self, value: Any, sink: Optional[ParamSink], parameterized: bool = True) -> str:
        if value is None:
            return "NULL"
        if sink is not None and parameterized:
            return sink.add(value)
        return format_value_sql(value)

    def _node_to_sql(self, node: Expr, parameter: Optional[Parameter], sink: Optional[ParamSink]) -> str:
        if isinstance(node, Access):
            path = node.path
            if path is None or (parameter is not None and self._root(node) is not parameter):
                raise TranslationError("Only plain member paths can be translated to SQL", node=str(node))
            return quote_identifier(path)
        if isinstance(node, Invoke):
            if not isinstance(node.function, Lambda):
                raise TranslationError(
                    "Computed members stored on the record cannot be translated to SQL", node=str(node)
                )
            inlined = substitute(node.function.body, node.function.parameter, node.argument)
            return self._node_to_sql(inlined, parameter, sink)
        if isinstance(node, Constant):
            return self._value(node.value, sink, node.parameterized)
        if isinstance(node, Default):
            return self._value(default_value(node.type), sink)
        if isinstance(node, NullCheck):
            operand = self._node_to_sql(node.operand, parameter, sink)
            return f"{operand} IS NULL" if node.is_null else f"{operand} IS NOT NULL"
        if isinstance(node, Compare):
            return self._compare_to_sql(node, parameter, sink)
        if isinstance(node, And):
            return f"({self._node_to_sql(node.left, parameter, sink)} AND {self._node_to_sql(node.right, parameter, sink)})"
        if isinstance(node, Or):
            return f"({self._node_to_sql(node.left, parameter, sink)} OR {self._node_to_sql(node.right, parameter, sink)})"
        if isinstance(node, Not):
            return "NOT (" + self._node_to_sql(node.operand, parameter, sink) + ")"
        if isinstance(node, Call):
            return self._call_to_sql(node, parameter, sink)
        if isinstance(node, Conditional):
            test = self._node_to_sql(node.test, parameter, sink)
            if_true = self._node_to_sql(node.if_true, parameter, sink)
            if_false = self._node_to_sql(node.if_false, parameter, sink)
            return f"CASE WHEN {test} THEN {if_true} ELSE {if_false} END"
        raise TranslationError("Node is not supported by the SQL compiler", node=type(node).__name__)

    @staticmethod
    def _root(node: Access) -> Expr:
        target: Expr = node
        while isinstance(target, Access):
            target = target.target
        return target

    @staticmethod
    def _is_null_literal(node: Expr) -> bool:
        if isinstance(node, Constant):
            return node.value is None
        if isinstance(node, Default):
            return default_value(node.type) is None
        return False

    def _compare_to_sql(self, node: Compare, parameter: Optional[Parameter], sink: Optional[ParamSink]) -> str:
        if node.op in (CompareOp.EQ, CompareOp.NE) and self._is_null_literal(node.right):
            left = self._node_to_sql(node.left, parameter, sink)
            return f"{left} IS NULL" if node.op is CompareOp.EQ else f"{left} IS NOT NULL"
        left = self._node_to_sql(node.left, parameter, sink)
        right = self._node_to_sql(node.right, parameter, sink)
        return f"{left} {self._OP_MAP[node.op]} {right}"

    def _call_to_sql(self, node: Call, parameter: Optional[Parameter], sink: Optional[ParamSink]) -> str:
        target = self._node_to_sql(node.target, parameter, sink)
        if node.method is CallMethod.UPPER:
            return f"UPPER({target})"
        argument = self._node_to_sql(node.argument, parameter, sink)
        if node.method is CallMethod.CONTAINS:
            return f"{target} LIKE '%' || {argument} || '%'"
        if node.method is CallMethod.STARTS_WITH:
            return f"{target} LIKE {argument} || '%'"
        return f"{target} LIKE '%' || {argument}"


sql_compiler = SqlCompiler()
