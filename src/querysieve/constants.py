"""
Common constants shared by the resolver, compilers and processor.
"""

from enum import Enum


class FilterOperator(str, Enum):
    EQUALS = "=="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    LESS_THAN = "<"
    GREATER_THAN_OR_EQUAL_TO = ">="
    LESS_THAN_OR_EQUAL_TO = "<="
    CONTAINS = "@="
    STARTS_WITH = "_="
    ENDS_WITH = "_-="
    DATE_EQUALS = "==="
    DATE_NOT_EQUALS = "!=="


class PropertySource(str, Enum):
    MAPPER = "mapper"
    ATTRIBUTE = "attribute"


# Registry sources consulted by the property resolver, highest priority first
RESOLUTION_ORDER = (PropertySource.MAPPER, PropertySource.ATTRIBUTE)

# Filter value that stands for a null constant; prefix with ESCAPE_CHAR to match the text itself
NULL_FILTER_VALUE = "null"
ESCAPE_CHAR = "\\"

EQUALITY_OPERATORS = frozenset({FilterOperator.EQUALS, FilterOperator.NOT_EQUALS})
DATE_OPERATORS = frozenset({FilterOperator.DATE_EQUALS, FilterOperator.DATE_NOT_EQUALS})
