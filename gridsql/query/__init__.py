"""
Query building module for the gridsql data service.

This module provides SQL fragment generation from grid query options.
"""

from .builder import (
    CONDITION_SQL,
    FilterBuildResult,
    GridQueryResult,
    build_filter_clauses,
    build_sort_clause,
    build_paging_clause,
    build_grid_query,
)

__all__ = [
    "CONDITION_SQL",
    "FilterBuildResult",
    "GridQueryResult",
    "build_filter_clauses",
    "build_sort_clause",
    "build_paging_clause",
    "build_grid_query",
]
