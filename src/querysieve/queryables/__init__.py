from .base import Queryable
from .memory import ListQueryable
from .sql import SqlQueryable

__all__ = (
    "Queryable",
    "ListQueryable",
    "SqlQueryable",
)
