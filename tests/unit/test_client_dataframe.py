# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import unittest
from unittest.mock import MagicMock

import pandas as pd

from strapi_query.client import StrapiClient
from strapi_query.core.results import QueryResult, RequestMetadata
from strapi_query.utils._pandas import records_to_dataframe, strip_system_keys


class TestQueryResultDataFrame(unittest.TestCase):
    """Tests for QueryResult.to_dataframe."""

    def setUp(self):
        self.client = StrapiClient("http://localhost:1337", "token")
        self.client._api = MagicMock()
        self.client._api._call_scope.return_value.__exit__.return_value = False

    def test_collection_to_dataframe(self):
        body = {
            "data": [
                {"id": 1, "documentId": "a1", "title": "Hello", "author": {"name": "Ada"}},
                {"id": 2, "documentId": "b2", "title": "World", "author": {"name": "Linus"}},
            ]
        }
        self.client._api._get_collection.return_value = (body, RequestMetadata())

        df = self.client.query.execute("articles", "fields=title&populate[author][fields]=name").to_dataframe()

        self.assertIsInstance(df, pd.DataFrame)
        self.assertEqual(len(df), 2)
        self.assertIn("author.name", df.columns)
        self.assertEqual(df.iloc[1]["author.name"], "Linus")
        self.assertEqual(df.iloc[0]["title"], "Hello")

    def test_without_system_fields(self):
        result = QueryResult(
            data=[{"id": 1, "documentId": "a1", "createdAt": "x", "publishedAt": None, "title": "Hello"}]
        )

        df = result.to_dataframe(include_system_fields=False)

        self.assertEqual(list(df.columns), ["title"])

    def test_single_record(self):
        df = QueryResult(data={"id": 1, "title": "Home"}).to_dataframe()
        self.assertEqual(len(df), 1)
        self.assertEqual(df.iloc[0]["title"], "Home")

    def test_empty_result(self):
        df = QueryResult(data=[]).to_dataframe()
        self.assertIsInstance(df, pd.DataFrame)
        self.assertTrue(df.empty)

    def test_to_many_relation_kept_as_list(self):
        df = records_to_dataframe([{"id": 1, "tags": [{"label": "a"}, {"label": "b"}]}])
        self.assertEqual(df.iloc[0]["tags"], [{"label": "a"}, {"label": "b"}])

    def test_non_mapping_records_skipped(self):
        df = records_to_dataframe([{"id": 1}, "junk", None])
        self.assertEqual(len(df), 1)

    def test_strip_system_keys(self):
        self.assertEqual(strip_system_keys({"id": 1, "locale": "en", "updatedAt": "x", "name": "n"}), {"name": "n"})


if __name__ == "__main__":
    unittest.main()
