"""Query DSL module.

Exports the expression nodes used to compose predicates and ordering keys.
Executable representations are handled by the `compilers` subpackage; the
filter and sort compilers live in `filters` and `sorting`.
"""

from .nodes import (
    Access,
    And,
    Call,
    CallMethod,
    Compare,
    CompareOp,
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

__all__ = (
    "Access",
    "And",
    "Call",
    "CallMethod",
    "Compare",
    "CompareOp",
    "Conditional",
    "Constant",
    "Default",
    "Expr",
    "Invoke",
    "Lambda",
    "Not",
    "NullCheck",
    "Or",
    "Parameter",
)
