"""Pydantic schemas for parsed query parameters and processor options."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import FilterOperator
from .settings import settings


class FilterTerm(BaseModel):
    """One parsed filter term.

    `names` and `values` are OR groups: the term matches when any name
    matches any value.
    """

    model_config = ConfigDict(frozen=True)

    names: List[str] = Field(..., min_length=1, description="Alternative property or custom method names.")
    operator: FilterOperator = Field(FilterOperator.EQUALS, description="Comparison operator.")
    negated: bool = Field(False, description="Wrap the comparison in a logical NOT.")
    case_insensitive: bool = Field(False, description="Uppercase both sides before comparing.")
    values: Optional[List[str]] = Field(None, description="Alternative literal values.")

    @field_validator("names")
    @classmethod
    def strip_names(cls, names: List[str]) -> List[str]:
        stripped = [name.strip() for name in names]
        if any(not name for name in stripped):
            raise ValueError("filter term names must not be blank")
        return stripped


class SortTerm(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Property or custom method name.")
    descending: bool = Field(False, description="Sort in descending order.")


class SieveModel(BaseModel):
    """Parsed filter, sort and paging parameters handed to `SieveProcessor.apply`."""

    filters: Optional[List[FilterTerm]] = None
    sorts: Optional[List[SortTerm]] = None
    page: Optional[int] = None
    page_size: Optional[int] = None


class SieveOptions(BaseModel):
    """Per-processor options; defaults come from `SieveSettings`."""

    model_config = ConfigDict(frozen=True)

    case_sensitive: bool = Field(default_factory=lambda: settings.CASE_SENSITIVE)
    default_page_size: int = Field(default_factory=lambda: settings.DEFAULT_PAGE_SIZE)
    max_page_size: int = Field(default_factory=lambda: settings.MAX_PAGE_SIZE)
    throw_exceptions: bool = Field(default_factory=lambda: settings.THROW_EXCEPTIONS)
    ignore_nulls_on_not_equal: bool = Field(default_factory=lambda: settings.IGNORE_NULLS_ON_NOT_EQUAL)
    disable_nullable_type_expression_for_sorting: bool = Field(
        default_factory=lambda: settings.DISABLE_NULLABLE_TYPE_EXPRESSION_FOR_SORTING
    )
