import json
import time

import pytest

from gridsql.errors import InvalidInput
from gridsql.filters import (
    FilterGroup,
    GridQueryOptions,
    JoinOperator,
    options_from_query_params,
    parse_grid_options_json,
)


def test_parse_json_string():
    payload = json.dumps(
        {
            "filtergroups": [
                {"field": "status", "filters": [{"condition": "EQUAL", "value": "open", "operator": "or"}]}
            ],
            "sortdatafield": "status",
            "sortorder": "asc",
            "pagesize": "10",
            "pagenum": "2",
        }
    )
    options = parse_grid_options_json(payload)
    assert options.sort_field == "status"
    assert options.sort_order == "asc"
    assert options.page_size == 10
    assert options.page_number == 2
    assert options.paging.offset == 20
    group = options.filter_groups[0]
    assert isinstance(group, FilterGroup)
    assert group.field == "status"
    assert group.filters[0].condition_kind == "EQUAL"
    assert JoinOperator.parse(group.filters[0].join_operator) is JoinOperator.OR


def test_camel_case_condition_keys():
    options = GridQueryOptions.from_dict(
        {"filtergroups": [{"field": "x", "filters": [{"conditionKind": "NULL", "joinOperator": "OR"}]}]}
    )
    cond = options.filter_groups[0].filters[0]
    assert cond.condition_kind == "NULL"
    assert cond.join_operator == "OR"


def test_missing_paging_means_no_paging():
    options = parse_grid_options_json({})
    assert options.page_size is None
    assert options.page_number is None
    assert not options.paging.enabled


def test_non_list_filtergroups_survive_validation():
    options = parse_grid_options_json({"filtergroups": "garbage"})
    assert options.filter_groups == "garbage"


@pytest.mark.parametrize(
    "payload",
    [
        {"pagesize": "ten"},
        {"pagenum": -1},
        {"sortorder": 5},
        "not json",
        "[1, 2]",
    ],
)
def test_invalid_payloads_raise(payload):
    with pytest.raises(InvalidInput):
        parse_grid_options_json(payload)


def test_round_trip_to_dict():
    data = {
        "filtergroups": [
            {"field": "x", "filters": [{"condition": "EQUAL", "value": "a", "operator": "and"}]}
        ],
        "sortdatafield": "x",
        "sortorder": "desc",
        "pagesize": 5,
        "pagenum": 0,
    }
    assert GridQueryOptions.from_dict(data).to_dict() == data


def test_query_params_group_consecutive_fields():
    params = {
        "filterscount": "3",
        "filterdatafield0": "status",
        "filtercondition0": "EQUAL",
        "filtervalue0": "open",
        "filteroperator0": "0",
        "filterdatafield1": "status",
        "filtercondition1": "EQUAL",
        "filtervalue1": "held",
        "filteroperator1": "1",
        "filterdatafield2": "name",
        "filtercondition2": "CONTAINS",
        "filtervalue2": "ann",
        "filteroperator2": "0",
        "sortdatafield": "name",
        "sortorder": "asc",
        "pagesize": "25",
        "pagenum": "2",
    }
    options = options_from_query_params(params)
    assert [g.field for g in options.filter_groups] == ["status", "name"]
    assert [f.value for f in options.filter_groups[0].filters] == ["open", "held"]
    assert JoinOperator.parse(options.filter_groups[0].filters[1].join_operator) is JoinOperator.OR
    assert options.sort_field == "name"
    assert options.page_size == 25
    assert options.page_number == 2


def test_query_params_without_filters():
    options = options_from_query_params({"filterscount": "nope"})
    assert options.filter_groups == []
    assert options.page_size is None


def test_query_params_bad_paging_raises():
    with pytest.raises(InvalidInput):
        options_from_query_params({"pagesize": "lots", "pagenum": "0"})


def test_huge_filterscount_only_walks_present_filters():
    start = time.perf_counter()
    options = options_from_query_params(
        {
            "filterscount": "1000000000",
            "filterdatafield0": "status",
            "filtercondition0": "EQUAL",
            "filtervalue0": "open",
        }
    )
    assert time.perf_counter() - start < 1.0
    assert [g.field for g in options.filter_groups] == ["status"]


def test_filters_beyond_filterscount_are_ignored():
    options = options_from_query_params(
        {
            "filterscount": "1",
            "filterdatafield0": "status",
            "filtercondition0": "EQUAL",
            "filtervalue0": "open",
            "filterdatafield1": "name",
            "filtercondition1": "EQUAL",
            "filtervalue1": "ann",
        }
    )
    assert [g.field for g in options.filter_groups] == ["status"]


def test_filter_indices_are_read_in_numeric_order():
    options = options_from_query_params(
        {
            "filterscount": "11",
            "filterdatafield10": "name",
            "filtercondition10": "EQUAL",
            "filtervalue10": "ann",
            "filterdatafield2": "status",
            "filtercondition2": "EQUAL",
            "filtervalue2": "open",
            "filterdatafield002": "ghost",
        }
    )
    assert [g.field for g in options.filter_groups] == ["status", "name"]
