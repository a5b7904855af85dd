from .base import BaseCompiler
from .python import PythonCompiler, python_compiler
from .sql import SqlCompiler, sql_compiler

__all__ = (
    "BaseCompiler",
    "PythonCompiler",
    "python_compiler",
    "SqlCompiler",
    "sql_compiler",
)
