"""In-process compiler.

Turns expression trees into python closures so in-memory collections can be
filtered and ordered with the same trees a database translator receives.

Comparison semantics follow nullable value types:

- `==` / `!=` compare normally, `None == None` is true;
- relational operators with a `None` operand are false;
- `upper()` of `None` is `None`, substring tests on `None` are false.

Member access on `None` raises, which is what the null guards built by the
path builder protect against.
"""

import operator
from typing import Any, Callable, Dict

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
)
from .base import BaseCompiler
from .utils import normalize_lambda

__all__ = (
    "PythonCompiler",
    "python_compiler",
)

Env = Dict[Parameter, Any]
Evaluator = Callable[[Env], Any]

_COMPARE = {
    CompareOp.EQ: operator.eq,
    CompareOp.NE: operator.ne,
    CompareOp.GT: operator.gt,
    CompareOp.GTE: operator.ge,
    CompareOp.LT: operator.lt,
    CompareOp.LTE: operator.le,
}

_SYMBOLS = {
    CompareOp.EQ: "==",
    CompareOp.NE: "!=",
    CompareOp.GT: ">",
    CompareOp.GTE: ">=",
    CompareOp.LT: "<",
    CompareOp.LTE: "<=",
}


class PythonCompiler(BaseCompiler):
    """Compile expression trees into python callables."""

    def to_where(self, where: Any) -> Callable[[Any], Any]:
        """Convert a Lambda into a one-argument python callable.

        Args:
            where: Lambda over a record

        Returns:
            Callable taking a record and returning the body's value
        """
        lambda_ = normalize_lambda(where)
        evaluate = self._compile(lambda_.body)
        parameter = lambda_.parameter

        def run(record: Any) -> Any:
            return evaluate({parameter: record})

        return run

    def to_expr(self, node: Expr) -> str:
        """Convert a node into a python-like expression string."""
        return self._node_to_expr(node)

    def evaluate(self, where: Lambda, record: Any) -> Any:
        return self.to_where(where)(record)

    # -------------------
    # Closures
    # -------------------
    def _compile(self, node: Expr) -> Evaluator:
        if isinstance(node, Parameter):
            return lambda env: env[node]
        if isinstance(node, Access):
            target = self._compile(node.target)
            name = node.member
            return lambda env: getattr(target(env), name)
        if isinstance(node, Invoke):
            return self._compile_invoke(node)
        if isinstance(node, Lambda):
            return lambda env: node
        if isinstance(node, Constant):
            value = node.value
            return lambda env: value
        if isinstance(node, Default):
            value = default_value(node.type)
            return lambda env: value
        if isinstance(node, NullCheck):
            operand = self._compile(node.operand)
            if node.is_null:
                return lambda env: operand(env) is None
            return lambda env: operand(env) is not None
        if isinstance(node, Compare):
            return self._compile_compare(node)
        if isinstance(node, And):
            left, right = self._compile(node.left), self._compile(node.right)
            return lambda env: bool(left(env)) and bool(right(env))
        if isinstance(node, Or):
            left, right = self._compile(node.left), self._compile(node.right)
            return lambda env: bool(left(env)) or bool(right(env))
        if isinstance(node, Not):
            operand = self._compile(node.operand)
            return lambda env: not operand(env)
        if isinstance(node, Call):
            return self._compile_call(node)
        if isinstance(node, Conditional):
            test = self._compile(node.test)
            if_true, if_false = self._compile(node.if_true), self._compile(node.if_false)
            return lambda env: if_true(env) if test(env) else if_false(env)
        raise TranslationError("Node is not supported by the python compiler", node=type(node).__name__)

    def _compile_invoke(self, node: Invoke) -> Evaluator:
        argument = self._compile(node.argument)
        if isinstance(node.function, Lambda):
            compiled = self.to_where(node.function)
            return lambda env: compiled(argument(env))

        function = self._compile(node.function)

        def run(env: Env) -> Any:
            value = function(env)
            if not isinstance(value, Lambda):
                raise TranslationError(
                    "Invoked member did not evaluate to an expression", value_type=type(value).__name__
                )
            return self.to_where(value)(argument(env))

        return run

    def _compile_compare(self, node: Compare) -> Evaluator:
        left, right = self._compile(node.left), self._compile(node.right)
        compare = _COMPARE[node.op]
        if node.op in (CompareOp.EQ, CompareOp.NE):
            return lambda env: compare(left(env), right(env))

        def run(env: Env) -> bool:
            lhs, rhs = left(env), right(env)
            if lhs is None or rhs is None:
                return False
            return compare(lhs, rhs)

        return run

    def _compile_call(self, node: Call) -> Evaluator:
        target = self._compile(node.target)
        if node.method is CallMethod.UPPER:

            def upper(env: Env) -> Any:
                value = target(env)
                return value.upper() if value is not None else None

            return upper

        argument = self._compile(node.argument)
        test = {
            CallMethod.CONTAINS: lambda value, arg: arg in value,
            CallMethod.STARTS_WITH: str.startswith,
            CallMethod.ENDS_WITH: str.endswith,
        }[node.method]

        def run(env: Env) -> bool:
            value, arg = target(env), argument(env)
            if value is None or arg is None:
                return False
            return test(value, arg)

        return run

    # -------------------
    # Debug strings
    # -------------------
    def _node_to_expr(self, node: Expr) -> str:
        if isinstance(node, Parameter):
            return node.name
        if isinstance(node, Access):
            return f"{self._node_to_expr(node.target)}.{node.member}"
        if isinstance(node, Invoke):
            return f"({self._node_to_expr(node.function)})({self._node_to_expr(node.argument)})"
        if isinstance(node, Lambda):
            return f"lambda {node.parameter.name}: {self._node_to_expr(node.body)}"
        if isinstance(node, Constant):
            return repr(node.value)
        if isinstance(node, Default):
            return repr(default_value(node.type))
        if isinstance(node, NullCheck):
            return f"{self._node_to_expr(node.operand)} is {'' if node.is_null else 'not '}None"
        if isinstance(node, Compare):
            return f"{self._node_to_expr(node.left)} {_SYMBOLS[node.op]} {self._node_to_expr(node.right)}"
        if isinstance(node, And):
            return f"({self._node_to_expr(node.left)} and {self._node_to_expr(node.right)})"
        if isinstance(node, Or):
            return f"({self._node_to_expr(node.left)} or {self._node_to_expr(node.right)})"
        if isinstance(node, Not):
            return f"not ({self._node_to_expr(node.operand)})"
        if isinstance(node, Call):
            target = self._node_to_expr(node.target)
            if node.method is CallMethod.UPPER:
                return f"{target}.upper()"
            method = node.method.value.lstrip("$")
            if node.method is CallMethod.CONTAINS:
                return f"{self._node_to_expr(node.argument)} in {target}"
            return f"{target}.{method}({self._node_to_expr(node.argument)})"
        if isinstance(node, Conditional):
            return (
                f"({self._node_to_expr(node.if_true)} if {self._node_to_expr(node.test)} "
                f"else {self._node_to_expr(node.if_false)})"
            )
        raise TranslationError("Node is not supported by the python compiler", node=type(node).__name__)


python_compiler = PythonCompiler()
