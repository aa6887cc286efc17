# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for QueryBuilder class."""

import unittest
from unittest.mock import MagicMock

from strapi_query.models.query import (
    FilterCondition,
    FilterGroup,
    FilterOperator,
    PaginationOptions,
    PopulateField,
    SortOrder,
)
from strapi_query.models.query_builder import QueryBuilder


class TestQueryBuilder(unittest.TestCase):
    """Test cases for the QueryBuilder class."""

    def test_basic_construction(self):
        """An empty builder compiles to an empty query string."""
        qb = QueryBuilder("articles")
        self.assertEqual(qb.collection, "articles")
        self.assertEqual(qb.build(), "")

    def test_select_chained_and_deduplicated(self):
        qb = QueryBuilder("articles").select("title", "views").select("title", "slug")
        self.assertEqual(qb.to_spec().fields, ["title", "views", "slug"])
        self.assertEqual(qb.build(), "fields=title,views,slug")

    def test_populate_by_name(self):
        qb = QueryBuilder("articles").populate("author", fields=["name"], populate=["company"])
        self.assertEqual(
            qb.to_spec().populate,
            [PopulateField("author", fields=["name"], populate=[PopulateField("company")])],
        )
        self.assertEqual(
            qb.build(),
            "populate[author][fields]=name&populate[author][populate][company]=true",
        )

    def test_populate_replaces_same_relation(self):
        qb = QueryBuilder("articles").populate("author").populate("author", fields=["name"])
        self.assertEqual(qb.build(), "populate[author][fields]=name")

    def test_populate_node(self):
        node = PopulateField("tags")
        qb = QueryBuilder("articles").populate(node)
        self.assertEqual(qb.build(), "populate[tags]=true")

    def test_sort_replaces_by_field(self):
        qb = QueryBuilder("articles").sort("title").sort("views", "desc").sort("title", "desc")
        spec = qb.to_spec()
        self.assertEqual([s.field for s in spec.sort], ["title", "views"])
        self.assertEqual(spec.sort[0].order, SortOrder.DESC)
        self.assertEqual(qb.build(), "sort=title:desc,views:desc")

    def test_order_by(self):
        qb = QueryBuilder("articles").order_by("publishedAt", descending=True).order_by("title")
        self.assertEqual(qb.build(), "sort=publishedAt:desc,title:asc")

    def test_filters_collect_under_and_root(self):
        qb = QueryBuilder("articles").filter_gte("views", 100).filter_containsi("title", "strapi")
        spec = qb.to_spec()
        self.assertEqual(
            spec.filters,
            FilterGroup(
                "$and",
                [FilterCondition("views", "$gte", 100), FilterCondition("title", "$containsi", "strapi")],
            ),
        )

    def test_filter_helpers_map_to_operators(self):
        qb = (
            QueryBuilder("articles")
            .filter_eq("a", 1)
            .filter_ne("b", 2)
            .filter_lt("c", 3)
            .filter_lte("d", 4)
            .filter_gt("e", 5)
            .filter_in("f", (1, 2))
            .filter_not_in("g", [3])
            .filter_contains("h", "x")
            .filter_not_contains("i", "y")
            .filter_not_containsi("j", "z")
            .filter_null("k")
            .filter_not_null("l")
            .filter_starts_with("m", "p")
            .filter_ends_with("n", "s")
            .filter_between("o", 1, 9)
        )
        ops = [c.operator for c in qb.to_spec().filters.conditions]
        self.assertEqual(
            ops,
            [
                FilterOperator.EQ,
                FilterOperator.NE,
                FilterOperator.LT,
                FilterOperator.LTE,
                FilterOperator.GT,
                FilterOperator.IN,
                FilterOperator.NOT_IN,
                FilterOperator.CONTAINS,
                FilterOperator.NOT_CONTAINS,
                FilterOperator.NOT_CONTAINSI,
                FilterOperator.NULL,
                FilterOperator.NOT_NULL,
                FilterOperator.STARTS_WITH,
                FilterOperator.ENDS_WITH,
                FilterOperator.BETWEEN,
            ],
        )
        conditions = qb.to_spec().filters.conditions
        self.assertEqual(conditions[5].value, [1, 2])
        self.assertIsNone(conditions[10].value)
        self.assertEqual(conditions[14].value, [1, 9])

    def test_filter_group(self):
        qb = QueryBuilder("articles").filter_group(
            FilterGroup("$or", [FilterCondition("a", "$eq", 1), FilterCondition("b", "$eq", 2)])
        )
        self.assertEqual(
            qb.build(),
            "filters=%7B%22%24and%22%3A%5B%7B%22%24or%22%3A%5B%7B%22a%22%3A%7B%22%24eq%22%3A1%7D%7D"
            "%2C%7B%22b%22%3A%7B%22%24eq%22%3A2%7D%7D%5D%7D%5D%7D",
        )

    def test_page(self):
        qb = QueryBuilder("articles").page(2, 10)
        self.assertEqual(qb.to_spec().pagination, PaginationOptions(page=2, page_size=10))
        self.assertEqual(qb.build(), "pagination[page]=2&pagination[pageSize]=10")

    def test_page_size_merges(self):
        qb = QueryBuilder("articles").page(3).page_size(50)
        self.assertEqual(qb.to_spec().pagination, PaginationOptions(page=3, page_size=50))

    def test_offset_keeps_zero_start(self):
        qb = QueryBuilder("articles").offset(0, 20)
        self.assertEqual(qb.build(), "pagination[start]=0&pagination[limit]=20")

    def test_invalid_pagination(self):
        with self.assertRaises(ValueError):
            QueryBuilder("articles").page(0)
        with self.assertRaises(ValueError):
            QueryBuilder("articles").page(1, 0)
        with self.assertRaises(ValueError):
            QueryBuilder("articles").page_size(0)
        with self.assertRaises(ValueError):
            QueryBuilder("articles").offset(-1)
        with self.assertRaises(ValueError):
            QueryBuilder("articles").offset(0, -5)

    def test_to_spec_is_a_copy(self):
        qb = QueryBuilder("articles").select("title")
        spec = qb.to_spec()
        spec.fields.append("views")
        self.assertEqual(qb.build(), "fields=title")

    def test_url(self):
        qb = QueryBuilder("articles").select("title")
        self.assertEqual(qb.url("http://localhost:1337/"), "http://localhost:1337/api/articles?fields=title")
        self.assertEqual(QueryBuilder("articles").url("http://localhost:1337"), "http://localhost:1337/api/articles")

    def test_execute_without_client_raises(self):
        with self.assertRaises(RuntimeError):
            QueryBuilder("articles").select("title").execute()

    def test_execute_delegates_to_query_operations(self):
        ops = MagicMock()
        ops.execute.return_value = "result"
        qb = QueryBuilder("articles", _query_ops=ops).select("title").page(1, 5)

        self.assertEqual(qb.execute(), "result")
        ops.execute.assert_called_once_with("articles", "fields=title&pagination[page]=1&pagination[pageSize]=5")


if __name__ == "__main__":
    unittest.main()
