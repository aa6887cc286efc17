# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for the query string compiler."""

import json
import unittest
from urllib.parse import unquote

from strapi_query.compiler import (
    build_fields,
    build_filter_object,
    build_filters,
    build_pagination,
    build_populate,
    build_query_string,
    build_sort,
    build_url,
    compile_query,
)
from strapi_query.models.query import (
    FilterCondition,
    FilterGroup,
    PaginationOptions,
    PopulateField,
    QuerySpec,
    SortOption,
)


class TestBuildFields(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(build_fields([]), "")

    def test_joined_in_selection_order(self):
        self.assertEqual(build_fields(["a", "b"]), "fields=a,b")
        self.assertEqual(build_fields(["b", "a"]), "fields=b,a")


class TestBuildPopulate(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(build_populate([]), "")

    def test_plain_relation(self):
        self.assertEqual(build_populate([PopulateField("author")]), "populate[author]=true")

    def test_relation_with_fields(self):
        self.assertEqual(
            build_populate([PopulateField("author", fields=["name", "email"])]),
            "populate[author][fields]=name,email",
        )

    def test_empty_fields_list_counts_as_no_fields(self):
        self.assertEqual(build_populate([PopulateField("author", fields=[])]), "populate[author]=true")

    def test_nested_child_without_parent_marker(self):
        node = PopulateField("author", populate=[PopulateField("posts")])
        self.assertEqual(build_populate([node]), "populate[author][populate][posts]=true")

    def test_fields_then_children(self):
        node = PopulateField(
            "author",
            fields=["name"],
            populate=[PopulateField("company", fields=["name"]), PopulateField("avatar")],
        )
        self.assertEqual(
            build_populate([node]),
            "populate[author][fields]=name"
            "&populate[author][populate][company][fields]=name"
            "&populate[author][populate][avatar]=true",
        )

    def test_three_levels(self):
        node = PopulateField("a", populate=[PopulateField("b", populate=[PopulateField("c")])])
        self.assertEqual(build_populate([node]), "populate[a][populate][b][populate][c]=true")

    def test_siblings_in_order(self):
        self.assertEqual(
            build_populate([PopulateField("author"), PopulateField("tags")]),
            "populate[author]=true&populate[tags]=true",
        )


class TestBuildSort(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(build_sort([]), "")

    def test_order_preserved(self):
        self.assertEqual(
            build_sort([SortOption("a", "asc"), SortOption("b", "desc")]),
            "sort=a:asc,b:desc",
        )

    def test_default_direction_is_ascending(self):
        self.assertEqual(build_sort([SortOption("title")]), "sort=title:asc")


class TestBuildFilters(unittest.TestCase):
    def test_none(self):
        self.assertEqual(build_filters(None), "")

    def test_single_condition(self):
        self.assertEqual(
            build_filters(FilterCondition("age", "$gte", 18)),
            "filters=%7B%22age%22%3A%7B%22%24gte%22%3A18%7D%7D",
        )

    def test_root_group(self):
        group = FilterGroup("$and", [FilterCondition("age", "$gte", 18)])
        self.assertEqual(
            build_filters(group),
            "filters=%7B%22%24and%22%3A%5B%7B%22age%22%3A%7B%22%24gte%22%3A18%7D%7D%5D%7D",
        )

    def test_empty_group_is_still_emitted(self):
        self.assertEqual(build_filters(FilterGroup("$and", [])), "filters=%7B%22%24and%22%3A%5B%5D%7D")

    def test_filter_object_nested_groups(self):
        tree = FilterGroup(
            "$and",
            [
                FilterCondition("views", "$gt", 10),
                FilterGroup(
                    "$or",
                    [
                        FilterCondition("title", "$containsi", "strapi"),
                        FilterCondition("author", "$null", None),
                    ],
                ),
            ],
        )
        self.assertEqual(
            build_filter_object(tree),
            {
                "$and": [
                    {"views": {"$gt": 10}},
                    {"$or": [{"title": {"$containsi": "strapi"}}, {"author": {"$null": None}}]},
                ]
            },
        )

    def test_values_pass_through_unchanged(self):
        obj = build_filter_object(FilterCondition("id", "$in", [1, "2", True]))
        self.assertEqual(obj, {"id": {"$in": [1, "2", True]}})

    def test_between_is_passed_through(self):
        encoded = build_filters(FilterCondition("price", "$between", [10, 20]))
        payload = encoded[len("filters="):]
        self.assertEqual(json.loads(unquote(payload)), {"price": {"$between": [10, 20]}})

    def test_unknown_operator_is_passed_through(self):
        obj = build_filter_object(FilterCondition("title", "$eqi", "x"))
        self.assertEqual(obj, {"title": {"$eqi": "x"}})

    def test_reserved_characters_are_encoded(self):
        encoded = build_filters(FilterCondition("title", "$eq", "a b&c=d/é"))
        self.assertNotIn(" ", encoded[len("filters="):])
        self.assertNotIn("&", encoded[len("filters="):])
        self.assertIn("%C3%A9", encoded)
        self.assertIn("a%20b%26c%3Dd%2F", encoded)

    def test_encode_uri_component_safe_set(self):
        encoded = build_filters(FilterCondition("t", "$eq", "it's (ok)!*~-_."))
        self.assertIn("it's%20(ok)!*~-_.", encoded)

    def test_json_is_compact(self):
        payload = unquote(build_filters(FilterCondition("a", "$eq", 1))[len("filters="):])
        self.assertEqual(payload, '{"a":{"$eq":1}}')

    def test_non_finite_values_become_null(self):
        for value in (float("nan"), float("inf"), float("-inf")):
            with self.subTest(value=value):
                self.assertEqual(
                    build_filters(FilterCondition("a", "$eq", value)),
                    "filters=%7B%22a%22%3A%7B%22%24eq%22%3Anull%7D%7D",
                )

    def test_non_finite_values_inside_lists(self):
        payload = unquote(build_filters(FilterCondition("a", "$in", [1, float("nan")]))[len("filters="):])
        self.assertEqual(payload, '{"a":{"$in":[1,null]}}')

    def test_large_integral_float_written_in_full(self):
        payload = unquote(build_filters(FilterCondition("a", "$gt", 1e16))[len("filters="):])
        self.assertEqual(payload, '{"a":{"$gt":10000000000000000}}')

    def test_fractional_float_kept(self):
        payload = unquote(build_filters(FilterCondition("a", "$lt", 2.5))[len("filters="):])
        self.assertEqual(payload, '{"a":{"$lt":2.5}}')


class TestBuildPagination(unittest.TestCase):
    def test_none(self):
        self.assertEqual(build_pagination(None), "")

    def test_no_keys(self):
        self.assertEqual(build_pagination(PaginationOptions()), "")

    def test_zero_start_is_emitted(self):
        self.assertEqual(build_pagination(PaginationOptions(start=0)), "pagination[start]=0")

    def test_fixed_key_order(self):
        self.assertEqual(
            build_pagination(PaginationOptions(limit=10, start=5, page_size=25, page=2)),
            "pagination[page]=2&pagination[pageSize]=25&pagination[start]=5&pagination[limit]=10",
        )

    def test_zero_limit_is_emitted(self):
        self.assertEqual(build_pagination(PaginationOptions(limit=0)), "pagination[limit]=0")


class TestBuildQueryString(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(build_query_string(), "")
        self.assertEqual(compile_query(QuerySpec()), "")

    def test_segment_order(self):
        qs = build_query_string(
            fields=["title"],
            populate=[PopulateField("author", fields=["name"])],
            sort=[SortOption("title", "desc")],
            filters=FilterCondition("age", "$gte", 18),
            pagination=PaginationOptions(page=1, page_size=25),
        )
        self.assertEqual(
            qs,
            "fields=title"
            "&populate[author][fields]=name"
            "&sort=title:desc"
            "&filters=%7B%22age%22%3A%7B%22%24gte%22%3A18%7D%7D"
            "&pagination[page]=1&pagination[pageSize]=25",
        )

    def test_skips_empty_segments(self):
        self.assertEqual(
            build_query_string(sort=[SortOption("title")], pagination=PaginationOptions(start=0)),
            "sort=title:asc&pagination[start]=0",
        )

    def test_compile_query_is_deterministic(self):
        spec = QuerySpec(
            fields=["title", "views"],
            populate=[PopulateField("author", populate=[PopulateField("company")])],
            sort=[SortOption("views", "desc")],
            filters=FilterGroup("$and", [FilterCondition("views", "$gt", 0)]),
            pagination=PaginationOptions(page=3, page_size=10),
        )
        self.assertEqual(compile_query(spec), compile_query(spec))

    def test_compile_query_does_not_mutate(self):
        spec = QuerySpec(fields=["title"], populate=[PopulateField("author")])
        before = spec.to_dict()
        compile_query(spec)
        self.assertEqual(spec.to_dict(), before)


class TestBuildUrl(unittest.TestCase):
    def test_with_query_string(self):
        self.assertEqual(
            build_url("http://localhost:1337/", "articles", "fields=title"),
            "http://localhost:1337/api/articles?fields=title",
        )

    def test_without_query_string(self):
        self.assertEqual(build_url("http://localhost:1337", "articles"), "http://localhost:1337/api/articles")
