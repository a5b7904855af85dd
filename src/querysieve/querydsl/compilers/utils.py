"""Compiler utility functions.

Provides helpers for quoting identifiers, formatting SQL values, collecting
bound parameters and normalizing compiler input.
"""

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Union

from ...exceptions import InvalidConfigError
from ..nodes import Lambda

PARAMSTYLES = ("qmark", "pyformat")


def normalize_lambda(where: Any) -> Lambda:
    """Check that the compiler input is a `Lambda`.

    Raises:
        TypeError: If input is not a Lambda
    """
    if isinstance(where, Lambda):
        return where
    raise TypeError(f"where parameter must be a Lambda, got {type(where).__name__}")


def quote_identifier(name: str) -> str:
    """Quote SQL identifier with double quotes.

    Handles dotted field paths by quoting each segment separately.
    """
    if "." in name:
        return ".".join(quote_identifier(p) for p in name.split("."))
    return '"' + name.replace('"', '""') + '"'


def format_value_sql(v: Any) -> str:
    """Format Python value for SQL literal embedding.

    Only used for debugging output; compiled clauses bind values as parameters.
    """
    if v is None:
        return "NULL"
    if isinstance(v, Enum):
        return format_value_sql(v.value)
    if isinstance(v, bool):
        return "TRUE" if v else "FALSE"
    if isinstance(v, (int, float, Decimal)):
        return str(v)
    if isinstance(v, (datetime, date, time)):
        return "'" + v.isoformat() + "'"
    if isinstance(v, (list, tuple)):
        inner = ", ".join(format_value_sql(x) for x in v)
        return f"({inner})"
    return "'" + str(v).replace("'", "''") + "'"


class ParamSink:
    """
    Collects bound parameters and returns the placeholder for the paramstyle.
      - 'qmark'    -> ?, params is a list
      - 'pyformat' -> %(p1)s, params is a dict
    """

    def __init__(self, paramstyle: str = "qmark", prefix: str = "p") -> None:
        if paramstyle not in PARAMSTYLES:
            raise InvalidConfigError(
                "Unsupported paramstyle", config_key="paramstyle", value=paramstyle, expected=PARAMSTYLES
            )
        self.paramstyle = paramstyle
        self.prefix = prefix
        self._list: List[Any] = []
        self._dict: Dict[str, Any] = {}

    def add(self, value: Any) -> str:
        if isinstance(value, Enum):
            value = value.value
        if self.paramstyle == "qmark":
            self._list.append(value)
            return "?"
        name = f"{self.prefix}{len(self._dict) + 1}"
        self._dict[name] = value
        return f"%({name})s"

    @property
    def params(self) -> Union[List[Any], Dict[str, Any]]:
        return self._list if self.paramstyle == "qmark" else self._dict
