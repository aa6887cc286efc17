# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Editing session for interactively assembling a query.

A :class:`QuerySession` owns one query specification plus the state an
editor needs around it (selected collection, known content types, last
results). It is passed around explicitly; nothing in the SDK keeps a
global session.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence

import requests

from .common.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, DEFAULT_QUERY_ERROR_MESSAGE
from .compiler import build_url, compile_query
from .core._error_codes import (
    VALIDATION_CIRCULAR_POPULATE,
    VALIDATION_COLLECTION_REQUIRED,
    VALIDATION_CONDITION_INDEX,
    VALIDATION_POPULATE_PATH_NOT_FOUND,
)
from .core.errors import StrapiError, ValidationError
from .models.content_type import ContentTypeInfo, ContentTypeRegistry
from .models.query import (
    FilterCondition,
    FilterGroup,
    FilterOperator,
    FilterValue,
    GroupOperator,
    PaginationOptions,
    PopulateField,
    QuerySpec,
    SortOption,
)

if TYPE_CHECKING:
    from .client import StrapiClient

logger = logging.getLogger(__name__)

NO_COLLECTION_MESSAGE = "Please select a collection first"


class QuerySession:
    """
    Mutable editing state for one query.

    Changing the collection clears fields, populate, sort and filters so
    nothing leaks across collections; pagination survives until
    :meth:`reset`.

    :param content_types: Known content types, used for field lists and
        relation checks. May be empty.
    :type content_types: list[~strapi_query.models.content_type.ContentTypeInfo]
    :param default_page_size: Page size of a fresh or reset session.
    :type default_page_size: int

    Example::

        session = QuerySession(client.content_types.list())
        session.select_collection("articles")
        session.add_field("title")
        session.add_populate(PopulateField("author"))
        session.add_nested_populate(["author"], "company")
        session.add_sort(SortOption("title", "desc"))
        session.add_condition("views", "$gte", 100)
        print(session.query_string)
        session.execute(client)
        print(session.data, session.error)
    """

    def __init__(
        self,
        content_types: Iterable[ContentTypeInfo] = (),
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._default_page_size = default_page_size
        self._registry = ContentTypeRegistry(content_types)
        self.collection: Optional[str] = None
        self.fields: List[str] = []
        self.populate: List[PopulateField] = []
        self.sort: List[SortOption] = []
        self.filters: Optional[FilterGroup] = None
        self.pagination = self._default_pagination()
        self.data: Optional[List[Any]] = None
        self.meta: Optional[Dict[str, Any]] = None
        self.loading = False
        self.error: Optional[str] = None
        self._generation = 0

    def _default_pagination(self) -> PaginationOptions:
        return PaginationOptions(page=DEFAULT_PAGE, page_size=self._default_page_size)

    # ----------------------------- schema -------------------------------

    @property
    def content_types(self) -> List[ContentTypeInfo]:
        return list(self._registry)

    def set_content_types(self, content_types: Iterable[ContentTypeInfo]) -> None:
        self._registry = ContentTypeRegistry(content_types)

    @property
    def content_type(self) -> Optional[ContentTypeInfo]:
        """Content type of the selected collection, when known."""
        return self._registry.find(self.collection)

    def available_fields(self) -> List[str]:
        """Non-relation attributes of the selected collection; empty when the schema is unknown."""
        ct = self.content_type
        return ct.scalar_fields() if ct is not None else []

    def relation_candidates(self, path: Sequence[str] = ()) -> List[str]:
        """Relations that may be populated under ``path`` without looping back on the branch."""
        if not self.collection:
            return []
        return self._registry.relation_candidates(self.collection, path)

    # ----------------------------- collection ---------------------------

    def select_collection(self, collection: Optional[str]) -> None:
        self.collection = collection
        self.fields = []
        self.populate = []
        self.sort = []
        self.filters = None

    # ----------------------------- fields -------------------------------

    def set_fields(self, fields: Iterable[str]) -> None:
        self.fields = list(fields)

    def add_field(self, field_name: str) -> None:
        if field_name and field_name not in self.fields:
            self.fields.append(field_name)

    def remove_field(self, field_name: str) -> None:
        self.fields = [f for f in self.fields if f != field_name]

    # ----------------------------- populate -----------------------------

    def set_populate(self, populate: Iterable[PopulateField]) -> None:
        self.populate = list(populate)

    def add_populate(self, node: PopulateField) -> None:
        """Add a top-level relation; ignored when the relation is already populated."""
        if any(p.field == node.field for p in self.populate):
            return
        self.populate.append(copy.deepcopy(node))

    def remove_populate(self, relation: str) -> None:
        self.populate = [p for p in self.populate if p.field != relation]

    def _node_at(self, path: Sequence[str]) -> PopulateField:
        nodes = self.populate
        node: Optional[PopulateField] = None
        for name in path:
            node = next((p for p in nodes if p.field == name), None)
            if node is None:
                raise ValidationError(
                    f"No populated relation at path {'.'.join(path)!r}.",
                    subcode=VALIDATION_POPULATE_PATH_NOT_FOUND,
                    details={"path": list(path)},
                )
            nodes = node.populate or []
        if node is None:
            raise ValidationError("A populate path needs at least one relation.", subcode=VALIDATION_POPULATE_PATH_NOT_FOUND)
        return node

    def _check_not_circular(self, path: Sequence[str], relation: str) -> None:
        if not self.collection or not self._registry:
            return
        try:
            parent = self._registry.resolve_path(self.collection, path)
        except StrapiError:
            return
        attr = parent.attributes.get(relation)
        if attr is None or attr.target is None:
            return
        if attr.target in self._registry.visited_uids(self.collection, path):
            raise ValidationError(
                f"Populating '{relation}' under {'.'.join(path)!r} would loop back to {attr.target}.",
                subcode=VALIDATION_CIRCULAR_POPULATE,
                details={"path": list(path), "relation": relation, "target": attr.target},
            )

    def add_nested_populate(self, path: Sequence[str], relation: str) -> None:
        """
        Populate ``relation`` under the populated relation at ``path``.

        :raises ~strapi_query.core.errors.ValidationError: If ``path`` is not populated, or
            (when content types are known) the relation's target already appears on the branch.
        """
        node = self._node_at(path)
        children = node.populate or []
        if any(c.field == relation for c in children):
            return
        self._check_not_circular(path, relation)
        node.populate = children + [PopulateField(relation)]

    def remove_nested_populate(self, path: Sequence[str], relation: str) -> None:
        node = self._node_at(path)
        node.populate = [c for c in (node.populate or []) if c.field != relation]

    def add_populate_field(self, path: Sequence[str], field_name: str) -> None:
        """Restrict the related record at ``path`` to also return ``field_name``."""
        node = self._node_at(path)
        current = node.fields or []
        if field_name not in current:
            node.fields = current + [field_name]

    def remove_populate_field(self, path: Sequence[str], field_name: str) -> None:
        node = self._node_at(path)
        node.fields = [f for f in (node.fields or []) if f != field_name]

    # ----------------------------- sort ---------------------------------

    def set_sort(self, sort: Iterable[SortOption]) -> None:
        """Replace the sort list; a repeated field keeps its first position and its last direction."""
        self.sort = []
        for option in sort:
            self.add_sort(option)

    def add_sort(self, option: SortOption) -> None:
        """Append a sort entry, or replace in place the entry for the same field."""
        for i, existing in enumerate(self.sort):
            if existing.field == option.field:
                self.sort[i] = option
                return
        self.sort.append(option)

    def remove_sort(self, field_name: str) -> None:
        self.sort = [s for s in self.sort if s.field != field_name]

    # ----------------------------- filters ------------------------------

    def set_filters(self, filters: Optional[FilterGroup]) -> None:
        self.filters = filters

    def add_condition(self, field_name: str, operator: FilterOperator | str, value: FilterValue = None) -> None:
        """
        Append a condition to the root group, creating the group when needed.

        The root is always rebuilt as an ``$and`` group: an existing ``$or``
        root keeps its conditions but they become conjunctive.
        """
        condition = FilterCondition(field_name, operator, value)
        existing = self.filters.conditions if self.filters is not None else []
        self.filters = FilterGroup(GroupOperator.AND, existing + [condition])

    def remove_condition(self, index: int) -> None:
        """
        Remove the root-level condition or group at ``index``. The filter
        tree is dropped once its root group is empty.

        :raises ~strapi_query.core.errors.ValidationError: If ``index`` is out of range.
        """
        conditions = self.filters.conditions if self.filters is not None else []
        if not 0 <= index < len(conditions):
            raise ValidationError(
                f"No filter condition at index {index}.",
                subcode=VALIDATION_CONDITION_INDEX,
                details={"index": index, "count": len(conditions)},
            )
        del conditions[index]
        if not conditions:
            self.filters = None

    def clear_filters(self) -> None:
        self.filters = None

    # ----------------------------- pagination ---------------------------

    def set_pagination(self, **changes: Optional[int]) -> None:
        """Merge ``page``, ``page_size``, ``start`` and/or ``limit`` into the current pagination."""
        self.pagination = self.pagination.merged(**changes)

    # ----------------------------- lifecycle ----------------------------

    def reset(self) -> None:
        self.fields = []
        self.populate = []
        self.sort = []
        self.filters = None
        self.pagination = self._default_pagination()
        self.data = None
        self.meta = None
        self.error = None

    # ----------------------------- compile ------------------------------

    @property
    def spec(self) -> QuerySpec:
        """Snapshot of the current specification."""
        return QuerySpec(
            fields=list(self.fields),
            populate=copy.deepcopy(self.populate),
            sort=list(self.sort),
            filters=copy.deepcopy(self.filters),
            pagination=copy.copy(self.pagination),
        )

    @property
    def query_string(self) -> str:
        return compile_query(self.spec)

    def url(self, base_url: str) -> str:
        """Full request URL, or ``""`` when no collection is selected."""
        if not self.collection:
            return ""
        return build_url(base_url, self.collection, self.query_string)

    # ----------------------------- execute ------------------------------

    def execute(self, client: "StrapiClient") -> bool:
        """
        Run the current query and store its outcome on the session.

        On success ``data`` holds the records (a single record is wrapped in
        a list) and ``meta`` the response meta. On failure ``error`` holds a
        human-readable message. ``loading`` is always cleared.

        A newer call supersedes the state of an older one still running; the
        older outcome is discarded.

        :return: True when the query succeeded.
        :rtype: bool
        """
        if not self.collection:
            self.error = NO_COLLECTION_MESSAGE
            logger.debug("Query not executed: %s", VALIDATION_COLLECTION_REQUIRED)
            return False

        self._generation += 1
        generation = self._generation
        self.loading = True
        self.error = None
        try:
            result = client.query.execute(self.collection, self.query_string)
        except (StrapiError, requests.exceptions.RequestException) as e:
            if generation == self._generation:
                self.error = str(e) or DEFAULT_QUERY_ERROR_MESSAGE
                logger.info("Query on %s failed: %s", self.collection, self.error)
            return False
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            return False
        self.data = result.records
        self.meta = result.meta
        return True


__all__ = ["QuerySession", "NO_COLLECTION_MESSAGE"]
