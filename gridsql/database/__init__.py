"""
Database operations for the gridsql data service.

This module handles Snowflake connections and grid query execution.
"""

from .snowflake import execute_grid_query

__all__ = [
    "execute_grid_query",
]
