# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Compile a query specification into a Strapi v5 REST query string.

Every function here is pure: no state, no I/O, no exceptions for partial
input. An empty or absent part of the specification compiles to an empty
string and is left out of the assembled query.

Segments are assembled in a fixed order (fields, populate, sort, filters,
pagination), so a given specification always yields the same string.

Example::

    from strapi_query.compiler import build_query_string
    from strapi_query.models.query import PopulateField, SortOption

    build_query_string(
        fields=["title"],
        populate=[PopulateField("author", fields=["name"])],
        sort=[SortOption("title", "desc")],
    )
    # 'fields=title&populate[author][fields]=name&sort=title:desc'
"""

from __future__ import annotations

import json
import math
from typing import Any, Dict, Iterable, List, Optional, Sequence
from urllib.parse import quote

from .common.constants import (
    API_PREFIX,
    PARAM_FIELDS,
    PARAM_FILTERS,
    PARAM_PAGINATION,
    PARAM_POPULATE,
    PARAM_SORT,
    URI_COMPONENT_SAFE,
)
from .models.query import (
    FilterGroup,
    FilterNode,
    PaginationOptions,
    PopulateField,
    QuerySpec,
    SortOption,
    token,
)


def build_fields(fields: Sequence[str]) -> str:
    """``fields=a,b`` in selection order, or ``""`` for no fields."""
    if not fields:
        return ""
    return f"{PARAM_FIELDS}={','.join(fields)}"


def build_populate(populate: Sequence[PopulateField]) -> str:
    """
    Bracket-notation populate parameters, depth first.

    - no restricted fields, no children: ``populate[rel]=true``
    - restricted fields only: ``populate[rel][fields]=a,b``
    - children: optional ``[fields]`` pair first, then each child under
      ``populate[rel][populate]``. No ``=true`` marker is emitted for the
      parent; its nested keys already imply it.
    """
    if not populate:
        return ""
    params: List[str] = []
    _populate_params(populate, PARAM_POPULATE, params)
    return "&".join(params)


def _populate_params(nodes: Iterable[PopulateField], prefix: str, params: List[str]) -> None:
    for node in nodes:
        path = f"{prefix}[{node.field}]"
        if node.has_fields:
            params.append(f"{path}[fields]={','.join(node.fields)}")
        if node.has_populate:
            _populate_params(node.populate, f"{path}[{PARAM_POPULATE}]", params)
        elif not node.has_fields:
            params.append(f"{path}=true")


def build_sort(sort: Sequence[SortOption]) -> str:
    """``sort=a:asc,b:desc`` in list order, or ``""`` for no sort."""
    if not sort:
        return ""
    entries = ",".join(f"{s.field}:{token(s.order)}" for s in sort)
    return f"{PARAM_SORT}={entries}"


def build_filter_object(node: FilterNode) -> Dict[str, Any]:
    """
    Transform a filter tree into the nested mapping Strapi expects.

    A group becomes ``{"$and": [...children]}``; a condition becomes
    ``{field: {operator: value}}`` with the value passed through unchanged.
    """
    if isinstance(node, FilterGroup):
        return {token(node.operator): [build_filter_object(child) for child in node.conditions]}
    return {node.field: {token(node.operator): node.value}}


def _json_number(value: Any) -> Any:
    # NaN and infinities serialize as null; integral floats below 1e21 print without an exponent
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer() and abs(value) < 1e21:
            return int(value)
        return value
    if isinstance(value, dict):
        return {k: _json_number(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_number(v) for v in value]
    return value


def build_filters(filters: Optional[FilterNode]) -> str:
    """
    ``filters=<percent-encoded JSON>``, or ``""`` when there is no filter tree.

    Numbers are written the way a browser would: ``NaN`` and infinities
    become ``null`` and ``1e16`` is written out in full.
    """
    if filters is None:
        return ""
    payload = json.dumps(
        _json_number(build_filter_object(filters)),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return f"{PARAM_FILTERS}={quote(payload, safe=URI_COMPONENT_SAFE)}"


def build_pagination(pagination: Optional[PaginationOptions]) -> str:
    """
    One ``pagination[key]=value`` pair per present key, in the order
    page, pageSize, start, limit.

    Presence means "not None": ``start=0`` is emitted.
    """
    if pagination is None:
        return ""
    params: List[str] = []
    if pagination.page is not None:
        params.append(f"{PARAM_PAGINATION}[page]={pagination.page}")
    if pagination.page_size is not None:
        params.append(f"{PARAM_PAGINATION}[pageSize]={pagination.page_size}")
    if pagination.start is not None:
        params.append(f"{PARAM_PAGINATION}[start]={pagination.start}")
    if pagination.limit is not None:
        params.append(f"{PARAM_PAGINATION}[limit]={pagination.limit}")
    return "&".join(params)


def build_query_string(
    fields: Optional[Sequence[str]] = None,
    populate: Optional[Sequence[PopulateField]] = None,
    sort: Optional[Sequence[SortOption]] = None,
    filters: Optional[FilterNode] = None,
    pagination: Optional[PaginationOptions] = None,
) -> str:
    """Join the non-empty segments in the order fields, populate, sort, filters, pagination."""
    parts = [
        build_fields(fields or []),
        build_populate(populate or []),
        build_sort(sort or []),
        build_filters(filters),
        build_pagination(pagination),
    ]
    return "&".join(p for p in parts if p)


def compile_query(spec: QuerySpec) -> str:
    """Compile a whole :class:`~strapi_query.models.query.QuerySpec`."""
    return build_query_string(
        fields=spec.fields,
        populate=spec.populate,
        sort=spec.sort,
        filters=spec.filters,
        pagination=spec.pagination,
    )


def build_url(base_url: str, collection: str, query_string: str = "") -> str:
    """``<base>/api/<collection>`` with ``?<query string>`` appended when it is not empty."""
    url = f"{(base_url or '').rstrip('/')}{API_PREFIX}/{collection}"
    return f"{url}?{query_string}" if query_string else url


__all__ = [
    "build_fields",
    "build_populate",
    "build_sort",
    "build_filter_object",
    "build_filters",
    "build_pagination",
    "build_query_string",
    "compile_query",
    "build_url",
]
