# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Result types for Strapi query execution.

- :class:`RequestMetadata`: HTTP request/response metadata for diagnostics
- :class:`PaginationMeta`: the ``meta.pagination`` block of a Strapi response
- :class:`QueryResult`: records plus metadata returned by ``client.query.execute()``

Example::

    result = client.query.execute("articles", "fields=title&pagination[page]=1")
    for record in result:
        print(record["title"])
    print(result.pagination.total)
    print(result.metadata.timing_ms)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

if TYPE_CHECKING:
    import pandas as pd


@dataclass(frozen=True)
class RequestMetadata:
    """
    HTTP request/response metadata for diagnostics and tracing.

    :param client_request_id: Client-generated ID for the single HTTP request.
    :type client_request_id: :class:`str` | None
    :param correlation_id: Client-generated ID shared by all HTTP requests of one SDK call.
    :type correlation_id: :class:`str` | None
    :param http_status_code: HTTP response status code.
    :type http_status_code: :class:`int` | None
    :param timing_ms: Request duration in milliseconds.
    :type timing_ms: :class:`float` | None
    :param url: Full request URL, query string included.
    :type url: :class:`str` | None
    """

    client_request_id: Optional[str] = None
    correlation_id: Optional[str] = None
    http_status_code: Optional[int] = None
    timing_ms: Optional[float] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class PaginationMeta:
    """Pagination block returned by Strapi under ``meta.pagination``."""

    page: Optional[int] = None
    page_size: Optional[int] = None
    page_count: Optional[int] = None
    total: Optional[int] = None
    start: Optional[int] = None
    limit: Optional[int] = None

    @classmethod
    def from_api_response(cls, meta: Any) -> Optional["PaginationMeta"]:
        if not isinstance(meta, dict):
            return None
        block = meta.get("pagination")
        if not isinstance(block, dict):
            return None
        return cls(
            page=block.get("page"),
            page_size=block.get("pageSize"),
            page_count=block.get("pageCount"),
            total=block.get("total"),
            start=block.get("start"),
            limit=block.get("limit"),
        )


@dataclass
class QueryResult:
    """
    Response of a collection query.

    ``data`` is kept exactly as Strapi returned it: a list for collection
    types, a single mapping for single types. :attr:`records` always gives
    a list.

    :param data: The ``data`` member of the response body.
    :param meta: The ``meta`` member of the response body, if any.
    :type meta: :class:`dict` | None
    :param metadata: Request diagnostics.
    :type metadata: :class:`RequestMetadata`
    """

    data: Any = None
    meta: Optional[Dict[str, Any]] = None
    metadata: RequestMetadata = field(default_factory=RequestMetadata)

    @classmethod
    def from_api_response(cls, body: Any, metadata: Optional[RequestMetadata] = None) -> "QueryResult":
        if not isinstance(body, dict):
            return cls(data=body, meta=None, metadata=metadata or RequestMetadata())
        meta = body.get("meta")
        return cls(
            data=body.get("data"),
            meta=meta if isinstance(meta, dict) else None,
            metadata=metadata or RequestMetadata(),
        )

    @property
    def records(self) -> List[Any]:
        if self.data is None:
            return []
        if isinstance(self.data, list):
            return list(self.data)
        return [self.data]

    @property
    def pagination(self) -> Optional[PaginationMeta]:
        return PaginationMeta.from_api_response(self.meta)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, index: int) -> Any:
        return self.records[index]

    def to_dataframe(self, include_system_fields: bool = True) -> "pd.DataFrame":
        """
        Flatten the records into a :class:`pandas.DataFrame`.

        Nested populated relations become dotted column names
        (``author.name``); populated to-many relations stay as lists.

        :param include_system_fields: Keep ``id``, ``documentId``, timestamps and ``locale``
            of the top-level records.
        :type include_system_fields: :class:`bool`
        :rtype: :class:`pandas.DataFrame`
        """
        from ..utils._pandas import records_to_dataframe, strip_system_keys

        records = self.records
        if not include_system_fields:
            records = [strip_system_keys(r) if isinstance(r, dict) else r for r in records]
        return records_to_dataframe(records)


__all__ = ["RequestMetadata", "PaginationMeta", "QueryResult"]
