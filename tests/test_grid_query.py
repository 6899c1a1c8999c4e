import pytest

from gridsql.errors import ConfigurationMissing
from gridsql.filters import GridQueryOptions, parse_grid_options_json
from gridsql.query import build_grid_query

BASE = "SELECT id, status, total FROM SALES.ORDERS"


def test_full_query_assembly(catalog):
    options = parse_grid_options_json(
        {
            "filtergroups": [
                {"field": "status", "filters": [{"condition": "EQUAL", "value": "open", "operator": "and"}]},
                {"field": "total", "filters": [{"condition": "GREATER_THAN", "value": 100, "operator": "and"}]},
            ],
            "sortdatafield": "total",
            "sortorder": "desc",
            "pagesize": 20,
            "pagenum": 1,
        }
    )
    res = build_grid_query(BASE, options, catalog, "id", include_count=True)
    assert res.sql == (
        f"{BASE} WHERE (db_status = :p0) AND (order_total > :p1)"
        " ORDER BY order_total DESC OFFSET 20 ROWS FETCH NEXT 20 ROWS ONLY"
    )
    assert res.params == {":p0": "open", ":p1": 100}
    assert res.count_sql == (
        f"SELECT COUNT(*) FROM ({BASE} WHERE (db_status = :p0) AND (order_total > :p1)) AS grid_count"
    )


def test_no_options_leaves_base_query(catalog):
    res = build_grid_query(BASE, GridQueryOptions(), catalog, "id")
    assert res.sql == BASE
    assert res.params == {}
    assert res.count_sql is None


def test_paging_without_sort_orders_by_default(catalog):
    res = build_grid_query(BASE, GridQueryOptions(page_size=10, page_number=0), catalog, "id")
    assert res.sql == f"{BASE} ORDER BY id ASC OFFSET 0 ROWS FETCH NEXT 10 ROWS ONLY"


def test_trailing_semicolon_stripped(catalog):
    res = build_grid_query(BASE + ";", GridQueryOptions(), catalog, "id")
    assert res.sql == BASE


def test_missing_catalog_raises():
    options = GridQueryOptions(filter_groups=[])
    with pytest.raises(ConfigurationMissing):
        build_grid_query(BASE, options, None, "id")


def test_missing_base_query_raises(catalog):
    with pytest.raises(ConfigurationMissing):
        build_grid_query("  ", GridQueryOptions(), catalog, "id")
