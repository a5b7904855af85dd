"""Base compiler interface.

Defines the abstract contract all expression compilers must follow.
"""

from abc import ABC, abstractmethod
from typing import Any

from ..nodes import Expr

__all__ = ("BaseCompiler",)


class BaseCompiler(ABC):
    """Abstract base class for expression compilers.

    Subclasses implement `to_where` and `to_expr` to turn a `Lambda` into
    something an execution layer can run.
    """

    @abstractmethod
    def to_where(self, where: Any) -> Any:
        """
        Convert a Lambda into its executable representation.
        - a python callable for in-memory collections
        - a (sql, params) pair for SQL engines
        """
        raise NotImplementedError

    @abstractmethod
    def to_expr(self, node: Expr) -> str:
        """Convert a node into a human-readable expression string for debugging."""
        raise NotImplementedError
