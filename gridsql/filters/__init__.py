"""
Request models for the gridsql data service.

This module provides the filter, sort and paging models a grid sends, and
decoding for jqxGrid JSON bodies and GET query strings.
"""

from .models import (
    ConditionKind,
    JoinOperator,
    SortSpec,
    PagingSpec,
    FilterCondition,
    FilterGroup,
    GridQueryOptions,
    GRID_OPTIONS_SCHEMA,
    parse_grid_options_json,
)
from .request import options_from_query_params

__all__ = [
    "ConditionKind",
    "JoinOperator",
    "SortSpec",
    "PagingSpec",
    "FilterCondition",
    "FilterGroup",
    "GridQueryOptions",
    "GRID_OPTIONS_SCHEMA",
    "parse_grid_options_json",
    "options_from_query_params",
]
