# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Fluent query builder for constructing Strapi REST queries.

Provides a discoverable, chainable interface on top of
:class:`~strapi_query.models.query.QuerySpec` and the compiler.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Sequence, Union

from ..compiler import build_url, compile_query
from .query import (
    FilterCondition,
    FilterGroup,
    FilterOperator,
    FilterValue,
    GroupOperator,
    PaginationOptions,
    PopulateField,
    QuerySpec,
    SortOption,
    SortOrder,
)

if TYPE_CHECKING:
    from ..core.results import QueryResult


@dataclass
class QueryBuilder:
    """
    Fluent interface for building Strapi REST queries.

    Conditions added with the ``filter_*`` methods are combined with ``$and``.
    Use :meth:`filter_group` to nest an ``$or`` group.

    :param collection: Plural API name of the collection (e.g. ``"articles"``).
    :type collection: str

    Example:
        Build and execute a query (via client)::

            result = (client.query.builder("articles")
                      .select("title", "publishedAt")
                      .populate("author", fields=["name"])
                      .filter_containsi("title", "strapi")
                      .order_by("publishedAt", descending=True)
                      .page(1, 10)
                      .execute())
            for article in result:
                print(article["title"])

        Build a standalone query string::

            qs = QueryBuilder("articles").select("title").filter_gte("views", 100).build()
            # 'fields=title&filters=%7B%22%24and%22%3A...'
    """

    collection: str
    _spec: QuerySpec = field(default_factory=QuerySpec)
    _query_ops: Any = field(default=None, compare=False, repr=False)

    def select(self, *fields: str) -> "QueryBuilder":
        """
        Restrict the returned attributes. Duplicates are ignored; selection order is kept.

        :param fields: Attribute names.
        :type fields: str
        :return: Self for method chaining.
        :rtype: QueryBuilder
        """
        for name in fields:
            if name not in self._spec.fields:
                self._spec.fields.append(name)
        return self

    def populate(
        self,
        relation: Union[str, PopulateField],
        fields: Optional[Sequence[str]] = None,
        populate: Optional[Sequence[Union[str, PopulateField]]] = None,
    ) -> "QueryBuilder":
        """
        Populate a relation, optionally restricting its fields and nesting further relations.

        :param relation: Relation name, or a ready-made :class:`PopulateField`.
        :param fields: Attributes of the related record to return.
        :param populate: Nested relations, as names or :class:`PopulateField` nodes.
        :return: Self for method chaining.
        :rtype: QueryBuilder

        Example::

            QueryBuilder("articles").populate(
                "author", fields=["name"], populate=[PopulateField("avatar", fields=["url"])]
            )
        """
        if isinstance(relation, PopulateField):
            node = relation
        else:
            children = None
            if populate:
                children = [c if isinstance(c, PopulateField) else PopulateField(c) for c in populate]
            node = PopulateField(relation, fields=list(fields) if fields else None, populate=children)
        self._spec.populate = [p for p in self._spec.populate if p.field != node.field]
        self._spec.populate.append(node)
        return self

    def sort(self, field_name: str, order: Union[SortOrder, str] = SortOrder.ASC) -> "QueryBuilder":
        """
        Add a sort entry. Sorting on a field already present replaces its entry in place.

        :param field_name: Attribute to sort on.
        :param order: ``"asc"`` or ``"desc"``.
        :return: Self for method chaining.
        :rtype: QueryBuilder
        """
        option = SortOption(field_name, order)
        for i, existing in enumerate(self._spec.sort):
            if existing.field == field_name:
                self._spec.sort[i] = option
                return self
        self._spec.sort.append(option)
        return self

    def order_by(self, field_name: str, descending: bool = False) -> "QueryBuilder":
        """
        Add a sort entry; can be called multiple times for multi-field sorting.

        Example::

            QueryBuilder("articles").order_by("publishedAt", descending=True).order_by("title")
        """
        return self.sort(field_name, SortOrder.DESC if descending else SortOrder.ASC)

    def where(self, field_name: str, operator: Union[FilterOperator, str], value: FilterValue = None) -> "QueryBuilder":
        """
        Add a condition to the root ``$and`` group. The value is stored as given.

        Example::

            QueryBuilder("articles").where("views", "$gte", 100)
        """
        self._root().conditions.append(FilterCondition(field_name, operator, value))
        return self

    def filter_group(self, group: FilterGroup) -> "QueryBuilder":
        """
        Add a nested group to the root ``$and`` group.

        Example::

            QueryBuilder("articles").filter_group(FilterGroup("$or", [
                FilterCondition("title", "$containsi", "strapi"),
                FilterCondition("title", "$containsi", "python"),
            ]))
        """
        self._root().conditions.append(group)
        return self

    def filter_eq(self, field_name: str, value: FilterValue) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.EQ, value)

    def filter_ne(self, field_name: str, value: FilterValue) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.NE, value)

    def filter_lt(self, field_name: str, value: FilterValue) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.LT, value)

    def filter_lte(self, field_name: str, value: FilterValue) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.LTE, value)

    def filter_gt(self, field_name: str, value: FilterValue) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.GT, value)

    def filter_gte(self, field_name: str, value: FilterValue) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.GTE, value)

    def filter_in(self, field_name: str, values: Sequence[Any]) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.IN, list(values))

    def filter_not_in(self, field_name: str, values: Sequence[Any]) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.NOT_IN, list(values))

    def filter_contains(self, field_name: str, value: str) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.CONTAINS, value)

    def filter_not_contains(self, field_name: str, value: str) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.NOT_CONTAINS, value)

    def filter_containsi(self, field_name: str, value: str) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.CONTAINSI, value)

    def filter_not_containsi(self, field_name: str, value: str) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.NOT_CONTAINSI, value)

    def filter_null(self, field_name: str) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.NULL, None)

    def filter_not_null(self, field_name: str) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.NOT_NULL, None)

    def filter_starts_with(self, field_name: str, value: str) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.STARTS_WITH, value)

    def filter_ends_with(self, field_name: str, value: str) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.ENDS_WITH, value)

    def filter_between(self, field_name: str, low: Any, high: Any) -> "QueryBuilder":
        return self.where(field_name, FilterOperator.BETWEEN, [low, high])

    def page(self, page: int, page_size: Optional[int] = None) -> "QueryBuilder":
        """
        Page-based pagination.

        :raises ValueError: If ``page`` or ``page_size`` is below 1.
        """
        if page < 1:
            raise ValueError("page must be at least 1")
        changes = {"page": page}
        if page_size is not None:
            if page_size < 1:
                raise ValueError("page_size must be at least 1")
            changes["page_size"] = page_size
        self._spec.pagination = self._pagination().merged(**changes)
        return self

    def page_size(self, size: int) -> "QueryBuilder":
        """
        Set the number of records per page.

        :raises ValueError: If ``size`` is below 1.
        """
        if size < 1:
            raise ValueError("page_size must be at least 1")
        self._spec.pagination = self._pagination().merged(page_size=size)
        return self

    def offset(self, start: int, limit: Optional[int] = None) -> "QueryBuilder":
        """
        Offset-based pagination. ``start=0`` is sent explicitly.

        :raises ValueError: If ``start`` or ``limit`` is negative.
        """
        if start < 0:
            raise ValueError("start must not be negative")
        changes = {"start": start}
        if limit is not None:
            if limit < 0:
                raise ValueError("limit must not be negative")
            changes["limit"] = limit
        self._spec.pagination = self._pagination().merged(**changes)
        return self

    def _root(self) -> FilterGroup:
        if self._spec.filters is None:
            self._spec.filters = FilterGroup(GroupOperator.AND, [])
        return self._spec.filters

    def _pagination(self) -> PaginationOptions:
        return self._spec.pagination or PaginationOptions()

    def to_spec(self) -> QuerySpec:
        """Return a deep copy of the specification built so far."""
        return copy.deepcopy(self._spec)

    def build(self) -> str:
        """
        Compile the query string.

        :return: Query string without a leading ``?``; empty when nothing is set.
        :rtype: str
        """
        return compile_query(self._spec)

    def url(self, base_url: str) -> str:
        """Full request URL for ``base_url``."""
        return build_url(base_url, self.collection, self.build())

    def execute(self) -> "QueryResult":
        """
        Execute the query.

        Only available when the builder was created via ``client.query.builder(collection)``.

        :raises RuntimeError: If the builder is not bound to a client.
        :raises ~strapi_query.core.errors.HttpError: If Strapi answers with a non-2xx status.
        """
        if self._query_ops is None:
            raise RuntimeError(
                "Cannot execute: query was not created via client.query.builder(). "
                "Use client.query.execute(collection, builder.build()) instead."
            )
        return self._query_ops.execute(self.collection, self.build())


__all__ = ["QueryBuilder"]
