"""
Server-side grid query translation for the gridsql data service.

Turns untrusted jqxGrid filter, sort and paging instructions into
parameterized SQL fragments.
"""

from .catalog import ColumnCatalog, ColumnDefinition
from .errors import ConfigurationMissing, GridQueryError, InvalidInput
from .filters import (
    ConditionKind,
    FilterCondition,
    FilterGroup,
    GridQueryOptions,
    JoinOperator,
    PagingSpec,
    SortSpec,
)
from .query import (
    FilterBuildResult,
    GridQueryResult,
    build_filter_clauses,
    build_grid_query,
    build_paging_clause,
    build_sort_clause,
)

__all__ = [
    "ColumnCatalog",
    "ColumnDefinition",
    "ConfigurationMissing",
    "GridQueryError",
    "InvalidInput",
    "ConditionKind",
    "FilterCondition",
    "FilterGroup",
    "GridQueryOptions",
    "JoinOperator",
    "PagingSpec",
    "SortSpec",
    "FilterBuildResult",
    "GridQueryResult",
    "build_filter_clauses",
    "build_grid_query",
    "build_paging_clause",
    "build_sort_clause",
]
