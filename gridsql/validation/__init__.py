"""
Validation module for the gridsql data service.

This module provides the guards applied to a request before SQL is built.
"""

from .rules import cap_page_size

__all__ = [
    "cap_page_size",
]
