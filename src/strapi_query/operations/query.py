# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Query execution operations namespace."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.results import QueryResult
from ..models.query_builder import QueryBuilder

if TYPE_CHECKING:
    from ..client import StrapiClient


class QueryOperations:
    """
    Query operations for retrieving records.

    Accessed via ``client.query``.

    Example:
        Fluent query builder (recommended)::

            result = (client.query.builder("articles")
                      .select("title")
                      .filter_eq("category", "news")
                      .order_by("publishedAt", descending=True)
                      .page(1, 25)
                      .execute())
            for article in result:
                print(article["title"])

        Pre-compiled query string::

            result = client.query.execute("articles", "fields=title&sort=title:asc")
            print(result.pagination.total)
    """

    def __init__(self, client: "StrapiClient") -> None:
        """
        Initialize QueryOperations.

        :param client: Parent StrapiClient instance.
        :type client: StrapiClient
        """
        self._client = client

    def execute(self, collection: str, query_string: str = "") -> QueryResult:
        """
        Run ``GET /api/<collection>?<query string>``.

        :param collection: Plural API name (or API ID) of the collection.
        :type collection: str
        :param query_string: Compiled query string, without the leading ``?``.
        :type query_string: str
        :return: Records and metadata of the response.
        :rtype: ~strapi_query.core.results.QueryResult

        :raises ValueError: If ``collection`` is empty.
        :raises ~strapi_query.core.errors.HttpError: If Strapi answers with a non-2xx status.
            The message is Strapi's ``error.message`` when the body has one.
        :raises requests.exceptions.RequestException: On transport failure after retries.
        """
        if not collection:
            raise ValueError("collection is required.")
        with self._client._scoped_api() as api:
            body, metadata = api._get_collection(collection, query_string)
        return QueryResult.from_api_response(body, metadata)

    def builder(self, collection: str) -> QueryBuilder:
        """
        Create a fluent query builder bound to this client.

        :param collection: Plural API name of the collection.
        :type collection: str
        :return: Builder whose ``execute()`` runs through this client.
        :rtype: ~strapi_query.models.query_builder.QueryBuilder
        """
        return QueryBuilder(collection, _query_ops=self)

    def url(self, collection: str, query_string: str = "") -> str:
        """Full request URL for ``collection`` and ``query_string``."""
        return self._client._get_api()._url(collection, query_string)


__all__ = ["QueryOperations"]
