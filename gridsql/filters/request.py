from __future__ import annotations
from typing import Any, List, Mapping, Optional
import re

from .models import FilterCondition, FilterGroup, GridQueryOptions, _opt_int

_DATAFIELD_RE = re.compile(r"filterdatafield(0|[1-9][0-9]{0,8})")


def _filters_from_query_params(params: Mapping[str, Any]) -> List[FilterGroup]:
    """
    jqxGrid flattens its filter groups into indexed keys:
      filterscount=2
      filterdatafield0=status  filtercondition0=EQUAL  filtervalue0=open  filteroperator0=0
      filterdatafield1=status  filtercondition1=EQUAL  filtervalue1=held  filteroperator1=1
    Consecutive filters on the same data field belong to one group.
    """
    try:
        count = int(params.get("filterscount") or 0)
    except (TypeError, ValueError):
        return []

    # only indices the request actually carries, so filterscount cannot drive the loop
    indices = sorted(
        int(m.group(1))
        for m in (_DATAFIELD_RE.fullmatch(k) for k in params.keys())
        if m and int(m.group(1)) < count
    )

    groups: List[FilterGroup] = []
    current: Optional[FilterGroup] = None
    for i in indices:
        datafield = params.get(f"filterdatafield{i}")
        cond = FilterCondition(
            condition_kind=params.get(f"filtercondition{i}", ""),
            value=params.get(f"filtervalue{i}", ""),
            join_operator=params.get(f"filteroperator{i}", "0"),
        )
        if current is None or current.field != datafield:
            current = FilterGroup(field=datafield)
            groups.append(current)
        current.filters.append(cond)
    return groups


def options_from_query_params(params: Mapping[str, Any]) -> GridQueryOptions:
    """Decode a jqxGrid GET query string (already parsed to a mapping)."""
    return GridQueryOptions(
        filter_groups=_filters_from_query_params(params),
        sort_field=params.get("sortdatafield") or None,
        sort_order=params.get("sortorder") or None,
        page_size=_opt_int(params.get("pagesize")),
        page_number=_opt_int(params.get("pagenum")),
    )


__all__ = ["options_from_query_params"]
