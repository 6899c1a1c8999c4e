from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union
import json
import logging

import jsonschema

from ..errors import InvalidInput

log = logging.getLogger("gridsql.filters")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ConditionKind(str, Enum):
    CONTAINS = "CONTAINS"
    DOES_NOT_CONTAIN = "DOES_NOT_CONTAIN"
    EQUAL = "EQUAL"
    NOT_EQUAL = "NOT_EQUAL"
    GREATER_THAN = "GREATER_THAN"
    LESS_THAN = "LESS_THAN"
    GREATER_THAN_OR_EQUAL = "GREATER_THAN_OR_EQUAL"
    LESS_THAN_OR_EQUAL = "LESS_THAN_OR_EQUAL"
    STARTS_WITH = "STARTS_WITH"
    ENDS_WITH = "ENDS_WITH"
    NULL = "NULL"
    NOT_NULL = "NOT_NULL"

    @classmethod
    def lookup(cls, raw: Any) -> Optional["ConditionKind"]:
        """Unknown kinds come back as None rather than raising."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(raw)
        except (TypeError, ValueError):
            return None


class JoinOperator(str, Enum):
    AND = "and"
    OR = "or"

    @classmethod
    def parse(cls, raw: Any) -> "JoinOperator":
        # jqxGrid GET requests send 0 for "and" and 1 for "or"
        if isinstance(raw, cls):
            return raw
        return cls.OR if str(raw).strip().lower() in ("or", "1") else cls.AND


# ---------------------------------------------------------------------------
# Sorting / paging
# ---------------------------------------------------------------------------

SORT_ORDERS = ("ASC", "DESC", "")


class SortSpec:
    """
    Sort field plus sort order. The order is upper-cased and must be
    ASC, DESC or empty; anything else is rejected on assignment.
    """

    def __init__(self, field: str = "", order: str = ""):
        self._field = ""
        self._order = ""
        self.set_field(field)
        self.set_order(order)

    def get_field(self) -> str:
        return self._field

    def set_field(self, value: str) -> None:
        self._field = value or ""

    def get_order(self) -> str:
        return self._order

    def set_order(self, value: str) -> None:
        order = (value or "").upper()
        if order not in SORT_ORDERS:
            raise InvalidInput("The sort order provided is not valid.")
        self._order = order

    field = property(get_field, set_field)
    order = property(get_order, set_order)

    def __repr__(self) -> str:
        return f"SortSpec(field={self._field!r}, order={self._order!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SortSpec):
            return NotImplemented
        return (self._field, self._order) == (other._field, other._order)


@dataclass
class PagingSpec:
    """0-based page number. Either value missing means no paging at all."""
    page_size: Optional[int] = None
    page_number: Optional[int] = None

    @property
    def enabled(self) -> bool:
        return self.page_size is not None and self.page_number is not None

    @property
    def offset(self) -> int:
        if not self.enabled:
            return 0
        return int(self.page_size) * int(self.page_number)


# ---------------------------------------------------------------------------
# Filter models
# ---------------------------------------------------------------------------

@dataclass
class FilterCondition:
    """
    One comparison inside a filter group. `condition_kind` is kept as sent by
    the client; the query builder decides whether it is usable.
    """
    condition_kind: Union[ConditionKind, str] = ConditionKind.EQUAL
    value: Any = ""
    join_operator: Union[JoinOperator, str] = JoinOperator.AND

    def to_dict(self) -> Dict[str, Any]:
        kind = self.condition_kind
        op = self.join_operator
        return {
            "condition": kind.value if isinstance(kind, ConditionKind) else kind,
            "value": self.value,
            "operator": op.value if isinstance(op, JoinOperator) else op,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterCondition":
        return cls(
            condition_kind=data.get("condition", data.get("conditionKind", "")),
            value=data.get("value", ""),
            join_operator=data.get("operator", data.get("joinOperator", JoinOperator.AND.value)),
        )


@dataclass
class FilterGroup:
    """All conditions a grid column carries; combined into one parenthesized expression."""
    field: str
    filters: List[FilterCondition] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "filters": [f.to_dict() for f in self.filters],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["FilterGroup"]:
        """Returns None for a group too malformed to interpret."""
        if not isinstance(data, dict):
            return None
        filters = data.get("filters", [])
        if not isinstance(filters, (list, tuple)):
            return None
        return cls(
            field=data.get("field", ""),
            filters=[FilterCondition.from_dict(f) for f in filters if isinstance(f, dict)],
        )


# ---------------------------------------------------------------------------
# Request aggregate
# ---------------------------------------------------------------------------

@dataclass
class GridQueryOptions:
    """
    Everything a grid sends for one query-building pass. `filter_groups` holds
    whatever the client supplied; a non-list value means "no filtering".
    """
    filter_groups: Any = field(default_factory=list)
    sort_field: Optional[str] = None
    sort_order: Optional[str] = None
    page_size: Optional[int] = None
    page_number: Optional[int] = None

    @property
    def paging(self) -> PagingSpec:
        return PagingSpec(self.page_size, self.page_number)

    # jqxGrid JSON helpers
    def to_dict(self) -> Dict[str, Any]:
        groups = self.filter_groups
        if isinstance(groups, list):
            groups = [g.to_dict() if isinstance(g, FilterGroup) else g for g in groups]
        return {
            "filtergroups": groups,
            "sortdatafield": self.sort_field,
            "sortorder": self.sort_order,
            "pagesize": self.page_size,
            "pagenum": self.page_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GridQueryOptions":
        raw_groups = data.get("filtergroups", [])
        if isinstance(raw_groups, list):
            groups: Any = [g for g in (FilterGroup.from_dict(x) for x in raw_groups) if g is not None]
        else:
            groups = raw_groups
        return cls(
            filter_groups=groups,
            sort_field=data.get("sortdatafield") or None,
            sort_order=data.get("sortorder") or None,
            page_size=_opt_int(data.get("pagesize")),
            page_number=_opt_int(data.get("pagenum")),
        )


def _opt_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"Expected an integer, got {value!r}")


# ---------------------------------------------------------------------------
# JSON Schema for request payloads
# ---------------------------------------------------------------------------

_INT_LIKE = {
    "oneOf": [
        {"type": "integer", "minimum": 0},
        {"type": "string", "pattern": "^[0-9]+$"},
        {"type": "null"},
    ]
}

GRID_OPTIONS_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Grid query options",
    "type": "object",
    "properties": {
        # left open: malformed filters are dropped by the builder, not rejected here
        "filtergroups": {},
        "sortdatafield": {"type": ["string", "null"]},
        "sortorder": {"type": ["string", "null"]},
        "pagesize": _INT_LIKE,
        "pagenum": _INT_LIKE,
    },
}


def parse_grid_options_json(
    payload: Union[str, Dict[str, Any]],
    *,
    validate: bool = True,
) -> GridQueryOptions:
    """
    Accept a JSON string or dict in jqxGrid shape and return GridQueryOptions.
    """
    try:
        data = json.loads(payload) if isinstance(payload, str) else payload
    except json.JSONDecodeError as e:
        raise InvalidInput(f"Grid options are not valid JSON: {e}")
    if not isinstance(data, dict):
        raise InvalidInput("Grid options must be a JSON object")
    if validate:
        try:
            jsonschema.validate(instance=data, schema=GRID_OPTIONS_SCHEMA)
        except jsonschema.ValidationError as e:
            log.warning("Rejected grid options: %s", e.message)
            raise InvalidInput(e.message)
    return GridQueryOptions.from_dict(data)


# ---------------------------------------------------------------------------
# Public exports
# ---------------------------------------------------------------------------

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
]
