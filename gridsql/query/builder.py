from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from ..catalog import ColumnCatalog
from ..errors import ConfigurationMissing, InvalidInput
from ..filters import (
    ConditionKind,
    FilterCondition,
    FilterGroup,
    GridQueryOptions,
    JoinOperator,
    PagingSpec,
)

log = logging.getLogger("gridsql.query")

# ConditionKind -> (SQL operator, value pattern). A pattern of None means the
# operator takes no right-hand side.
CONDITION_SQL: Dict[ConditionKind, Tuple[str, Optional[str]]] = {
    ConditionKind.CONTAINS: ("LIKE", "%{}%"),
    ConditionKind.DOES_NOT_CONTAIN: ("NOT LIKE", "%{}%"),
    ConditionKind.EQUAL: ("=", "{}"),
    ConditionKind.NOT_EQUAL: ("<>", "{}"),
    ConditionKind.GREATER_THAN: (">", "{}"),
    ConditionKind.LESS_THAN: ("<", "{}"),
    ConditionKind.GREATER_THAN_OR_EQUAL: (">=", "{}"),
    ConditionKind.LESS_THAN_OR_EQUAL: ("<=", "{}"),
    ConditionKind.STARTS_WITH: ("LIKE", "{}%"),
    ConditionKind.ENDS_WITH: ("LIKE", "%{}"),
    ConditionKind.NULL: ("IS NULL", None),
    ConditionKind.NOT_NULL: ("IS NOT NULL", None),
}


class _ParamSink:
    """
    Hands out :p0, :p1, ... for one build call and collects the bound values.
    """
    def __init__(self, prefix: str = ":p", start_index: int = 0):
        self.prefix = prefix
        self.next_idx = start_index
        self.params: Dict[str, Any] = {}

    def add(self, value: Any) -> str:
        name = f"{self.prefix}{self.next_idx}"
        self.next_idx += 1
        self.params[name] = value
        return name


def _require_catalog(catalog: Optional[ColumnCatalog]) -> ColumnCatalog:
    if catalog is None:
        raise ConfigurationMissing("Column definitions have not been set!")
    return catalog


def _transform_value(kind: ConditionKind, raw: Any) -> Any:
    pattern = CONDITION_SQL[kind][1]
    if pattern is None or raw is None:
        return ""
    if pattern == "{}":
        # bind as sent so numeric comparisons keep their type
        return raw
    return pattern.format(raw)


def _coerce_group(raw: Any) -> Optional[FilterGroup]:
    if isinstance(raw, FilterGroup):
        return raw
    return FilterGroup.from_dict(raw)


def _coerce_condition(raw: Any) -> Optional[FilterCondition]:
    if isinstance(raw, FilterCondition):
        return raw
    if isinstance(raw, dict):
        return FilterCondition.from_dict(raw)
    return None


def _build_group_sql(db_name: str, conditions: Sequence[Any], sink: _ParamSink) -> str:
    parts: List[str] = []
    for raw in conditions:
        cond = _coerce_condition(raw)
        if cond is None:
            continue
        kind = ConditionKind.lookup(cond.condition_kind)
        if kind is None:
            log.debug("Skipping unknown filter condition %r on %s", cond.condition_kind, db_name)
            continue

        if parts:
            parts.append(" OR " if JoinOperator.parse(cond.join_operator) is JoinOperator.OR else " AND ")

        sql_op = CONDITION_SQL[kind][0]
        value = _transform_value(kind, cond.value)
        if value != "":
            parts.append(f"{db_name} {sql_op} {sink.add(value)}")
        else:
            parts.append(f"{db_name} {sql_op}")
    return "".join(parts)


@dataclass
class FilterBuildResult:
    where: List[str] = field(default_factory=list)
    params: Dict[str, Any] = field(default_factory=dict)


def build_filter_clauses(
    filter_groups: Any,
    catalog: Optional[ColumnCatalog],
) -> FilterBuildResult:
    """
    Turn filter groups into one parenthesized clause per group plus the
    parameter map. The caller AND-joins the clauses.

    Groups on fields missing from the catalog and conditions with an unknown
    kind are dropped without raising.
    """
    if not isinstance(filter_groups, (list, tuple)):
        return FilterBuildResult()
    catalog = _require_catalog(catalog)

    sink = _ParamSink()
    clauses: List[str] = []
    for raw in filter_groups:
        group = _coerce_group(raw)
        if group is None:
            log.debug("Skipping malformed filter group %r", raw)
            continue
        db_name = catalog.resolve(group.field)
        if db_name is None:
            log.debug("Skipping filter group on unknown field %r", group.field)
            continue
        body = _build_group_sql(db_name, group.filters, sink)
        if not body:
            continue
        clauses.append(f"({body})")

    return FilterBuildResult(where=clauses, params=sink.params)


def build_sort_clause(
    requested_field: Optional[str],
    requested_order: Optional[str],
    catalog: Optional[ColumnCatalog],
    default_field: Optional[str],
) -> str:
    """
    ORDER BY for the requested field, falling back to `default_field` when the
    field is not in the catalog. Anything but ASC sorts descending.
    """
    catalog = _require_catalog(catalog)
    if not requested_field or not requested_order:
        return ""

    column = catalog.resolve(requested_field)
    if column is None:
        log.debug("Sort field %r not in catalog, using %r", requested_field, default_field)
        column = default_field
    if not column:
        return ""

    direction = "ASC" if str(requested_order).upper() == "ASC" else "DESC"
    return f"ORDER BY {column} {direction}"


def _as_int(name: str, value: Any, minimum: int) -> int:
    if isinstance(value, bool):
        raise InvalidInput(f"{name} must be an integer")
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{name} must be an integer, got {value!r}")
    if n < minimum:
        raise InvalidInput(f"{name} must be at least {minimum}, got {n}")
    return n


def build_paging_clause(
    page_size: Any,
    page_number: Any,
    catalog: Optional[ColumnCatalog],
) -> str:
    """
    OFFSET/FETCH for a 0-based page number. No upper bound on page size.

    Both values end up in the SQL text rather than in params, so they must be
    integers: a page size below 1, a negative page number or anything `int()`
    cannot read raises InvalidInput instead of being passed through.
    """
    _require_catalog(catalog)
    if page_size is None or page_number is None:
        return ""
    paging = PagingSpec(
        page_size=_as_int("pagesize", page_size, 1),
        page_number=_as_int("pagenum", page_number, 0),
    )
    return f"OFFSET {paging.offset} ROWS FETCH NEXT {paging.page_size} ROWS ONLY"


# -----------------------------------------------------------------------------
# Full query assembly
# -----------------------------------------------------------------------------

@dataclass
class GridQueryResult:
    sql: str
    params: Dict[str, Any]
    count_sql: Optional[str] = None


def build_grid_query(
    base_sql: str,
    options: GridQueryOptions,
    catalog: Optional[ColumnCatalog],
    default_sort_field: Optional[str] = None,
    *,
    include_count: bool = False,
) -> GridQueryResult:
    """
    Wrap a grid's base SELECT with the WHERE, ORDER BY and paging built from
    `options`. With `include_count`, also return a COUNT(*) over the filtered
    rows that shares the same params.
    """
    if not base_sql or not base_sql.strip():
        raise ConfigurationMissing("Grid has no base query")
    base_sql = base_sql.strip().rstrip(";")

    filters = build_filter_clauses(options.filter_groups, catalog)
    order_clause = build_sort_clause(options.sort_field, options.sort_order, catalog, default_sort_field)
    paging = options.paging
    paging_clause = build_paging_clause(paging.page_size, paging.page_number, catalog)

    # OFFSET/FETCH needs an ORDER BY to be deterministic
    if paging_clause and not order_clause and default_sort_field:
        order_clause = f"ORDER BY {default_sort_field} ASC"

    filtered = base_sql
    if filters.where:
        filtered += " WHERE " + " AND ".join(filters.where)

    sql = filtered
    if order_clause:
        sql += f" {order_clause}"
    if paging_clause:
        sql += f" {paging_clause}"

    count_sql = None
    if include_count:
        count_sql = f"SELECT COUNT(*) FROM ({filtered}) AS grid_count"

    log.debug("Built grid query %s with %d params", sql, len(filters.params))
    return GridQueryResult(sql=sql, params=filters.params, count_sql=count_sql)


# -----------------------------------------------------------------------------
# Public exports
# -----------------------------------------------------------------------------
__all__ = [
    "CONDITION_SQL",
    "FilterBuildResult",
    "GridQueryResult",
    "build_filter_clauses",
    "build_sort_clause",
    "build_paging_clause",
    "build_grid_query",
]
