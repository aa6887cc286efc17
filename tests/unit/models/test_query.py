# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for query specification models."""

import pytest

from strapi_query.compiler import compile_query
from strapi_query.core._error_codes import VALIDATION_FILTER_VALUE_REQUIRED
from strapi_query.core.errors import ValidationError
from strapi_query.models.query import (
    OPERATOR_LABELS,
    FilterCondition,
    FilterGroup,
    FilterOperator,
    GroupOperator,
    PaginationOptions,
    PopulateField,
    QuerySpec,
    SortOption,
    SortOrder,
    filter_from_dict,
    parse_filter_value,
)


class TestEnums:
    def test_operator_tokens(self):
        assert FilterOperator.NOT_IN.value == "$notIn"
        assert FilterOperator.NOT_CONTAINSI.value == "$notContainsi"
        assert GroupOperator.OR.value == "$or"
        assert SortOrder.DESC.value == "desc"

    def test_string_operators_are_coerced(self):
        assert FilterCondition("a", "$gte", 1).operator is FilterOperator.GTE
        assert FilterGroup("$or").operator is GroupOperator.OR
        assert SortOption("a", "desc").order is SortOrder.DESC

    def test_unknown_operator_kept_as_string(self):
        assert FilterCondition("a", "$eqi", 1).operator == "$eqi"

    def test_between_not_offered_for_editing(self):
        assert FilterOperator.BETWEEN not in OPERATOR_LABELS
        assert len(OPERATOR_LABELS) == 16


class TestPopulateField:
    def test_flags(self):
        assert not PopulateField("a").has_fields
        assert not PopulateField("a", fields=[]).has_fields
        assert PopulateField("a", fields=["x"]).has_fields
        assert PopulateField("a", populate=[PopulateField("b")]).has_populate

    def test_to_dict_from_dict(self):
        node = PopulateField("author", fields=["name"], populate=[PopulateField("company")])
        data = node.to_dict()
        assert data == {"field": "author", "fields": ["name"], "populate": [{"field": "company"}]}
        assert PopulateField.from_dict(data) == node


class TestPaginationOptions:
    def test_to_dict_uses_camel_case_and_keeps_zero(self):
        assert PaginationOptions(page=1, page_size=25).to_dict() == {"page": 1, "pageSize": 25}
        assert PaginationOptions(start=0).to_dict() == {"start": 0}

    def test_merged(self):
        p = PaginationOptions(page=1, page_size=25).merged(page=3)
        assert p == PaginationOptions(page=3, page_size=25)

    def test_from_dict(self):
        assert PaginationOptions.from_dict({"pageSize": 10, "start": 0}) == PaginationOptions(page_size=10, start=0)


class TestQuerySpec:
    def test_round_trip_through_mapping(self):
        spec = QuerySpec(
            fields=["title"],
            populate=[PopulateField("author", fields=["name"])],
            sort=[SortOption("title", "desc")],
            filters=FilterGroup("$and", [FilterCondition("views", "$gt", 10)]),
            pagination=PaginationOptions(page=2, page_size=10),
        )
        assert QuerySpec.from_dict(spec.to_dict()) == spec

    def test_condition_root_is_kept(self):
        spec = QuerySpec.from_dict({"filters": {"field": "a", "operator": "$eq", "value": 1}})
        assert spec.filters == FilterCondition("a", "$eq", 1)

    def test_condition_root_compiles_the_same_after_round_trip(self):
        spec = QuerySpec(filters=FilterCondition("age", "$gte", 18))
        assert compile_query(QuerySpec.from_dict(spec.to_dict())) == compile_query(spec)

    def test_empty_mapping(self):
        assert QuerySpec.from_dict({}) == QuerySpec()

    def test_filter_from_dict_nested(self):
        node = filter_from_dict(
            {
                "operator": "$or",
                "conditions": [
                    {"field": "a", "operator": "$eq", "value": 1},
                    {"operator": "$and", "conditions": []},
                ],
            }
        )
        assert isinstance(node, FilterGroup)
        assert node.operator is GroupOperator.OR
        assert isinstance(node.conditions[1], FilterGroup)


class TestParseFilterValue:
    def test_null_operators_ignore_input(self):
        assert parse_filter_value("$null", "") is None
        assert parse_filter_value(FilterOperator.NOT_NULL, "anything") is None

    def test_list_operators_split_and_strip(self):
        assert parse_filter_value("$in", "a, b ,c") == ["a", "b", "c"]
        assert parse_filter_value("$notIn", "1,2") == ["1", "2"]

    def test_numbers(self):
        assert parse_filter_value("$gte", "18") == 18
        assert parse_filter_value("$lt", "2.5") == 2.5
        assert parse_filter_value("$eq", "1e3") == 1000

    def test_javascript_number_syntax(self):
        assert parse_filter_value("$eq", "0x1F") == 31
        assert parse_filter_value("$eq", ".5") == 0.5
        assert parse_filter_value("$eq", " 42 ") == 42
        assert parse_filter_value("$eq", "-7") == -7

    def test_digit_separators_are_text(self):
        assert parse_filter_value("$eq", "1_000") == "1_000"
        assert parse_filter_value("$eq", "1 000") == "1 000"

    def test_blank_text_is_zero(self):
        assert parse_filter_value("$eq", "  ") == 0

    def test_overflowing_number_kept_as_text(self):
        assert parse_filter_value("$eq", "1e400") == "1e400"

    def test_booleans(self):
        assert parse_filter_value("$eq", "true") is True
        assert parse_filter_value("$eq", "false") is False
        assert parse_filter_value("$eq", "True") == "True"

    def test_text_kept(self):
        assert parse_filter_value("$containsi", "strapi") == "strapi"
        assert parse_filter_value("$eq", "nan") == "nan"

    def test_empty_value_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_filter_value("$eq", "")
        assert exc_info.value.subcode == VALIDATION_FILTER_VALUE_REQUIRED
