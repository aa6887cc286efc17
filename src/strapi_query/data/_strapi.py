# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Low-level Strapi REST client: schema introspection and collection queries.

This module is internal. Use :class:`~strapi_query.client.StrapiClient`.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, List, Optional, Tuple

import requests

from ..common.constants import API_PREFIX, CONTENT_TYPES_PATH, DEFAULT_QUERY_ERROR_MESSAGE
from ..compiler import build_url
from ..core._auth import _AuthManager
from ..core._error_codes import _http_subcode, _is_transient_status
from ..core._http import _HttpClient
from ..core.config import StrapiConfig
from ..core.errors import HttpError
from ..core.results import RequestMetadata
from ..core.telemetry import create_telemetry_manager

logger = logging.getLogger(__name__)

_CORRELATION_ID: ContextVar[Optional[str]] = ContextVar("strapi_query_correlation_id", default=None)


class _StrapiApiClient:
    """Strapi v5 REST API client used by the operation namespaces."""

    def __init__(
        self,
        auth: _AuthManager,
        base_url: str,
        config: Optional[StrapiConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.auth = auth
        self.base_url = (base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("base_url is required.")
        self.config = config or StrapiConfig.from_env()
        self._http = _HttpClient(
            retries=self.config.http_retries,
            backoff=self.config.http_backoff,
            timeout=self.config.http_timeout,
            max_backoff=self.config.http_max_backoff,
            jitter=self.config.http_jitter if self.config.http_jitter is not None else True,
            retry_transient_errors=(
                self.config.http_retry_transient_errors
                if self.config.http_retry_transient_errors is not None
                else True
            ),
            session=session,
        )
        self._telemetry = create_telemetry_manager(self.config.telemetry)

    def close(self) -> None:
        self._http.close()

    @contextmanager
    def _call_scope(self) -> Iterator[str]:
        """Share one correlation ID across every HTTP request of a single SDK call."""
        existing = _CORRELATION_ID.get()
        if existing is not None:
            yield existing
            return
        token = _CORRELATION_ID.set(str(uuid.uuid4()))
        try:
            yield _CORRELATION_ID.get()
        finally:
            _CORRELATION_ID.reset(token)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        headers.update(self.auth._authorization_header())
        return headers

    def _request(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        collection: Optional[str] = None,
        error_message: str = DEFAULT_QUERY_ERROR_MESSAGE,
        **kwargs: Any,
    ) -> Tuple[requests.Response, RequestMetadata]:
        """
        Send one request and map a non-2xx answer to :class:`HttpError`.

        :raises ~strapi_query.core.errors.HttpError: On a non-2xx status.
        :raises requests.exceptions.RequestException: On transport failure after retries.
        """
        headers = self._headers()
        headers.update(kwargs.pop("headers", None) or {})
        client_request_id = str(uuid.uuid4())
        correlation_id = _CORRELATION_ID.get() or client_request_id
        start = time.perf_counter()

        with self._telemetry.trace_request(
            operation, method.upper(), url, client_request_id, correlation_id, collection=collection
        ) as ctx:
            response = self._http._request(method, url, headers=headers, **kwargs)
            metadata = RequestMetadata(
                client_request_id=client_request_id,
                correlation_id=correlation_id,
                http_status_code=response.status_code,
                timing_ms=(time.perf_counter() - start) * 1000,
                url=url,
            )
            if not 200 <= response.status_code < 300:
                error = self._http_error(response, error_message, client_request_id)
                self._telemetry.record_response(ctx, response.status_code, error=error)
                raise error
            self._telemetry.record_response(ctx, response.status_code)
        return response, metadata

    @staticmethod
    def _http_error(response: requests.Response, fallback: str, request_id: str) -> HttpError:
        """Build an HttpError, taking ``error.message`` from the Strapi error body when present."""
        status = response.status_code
        message = fallback
        error_name = None
        details: Dict[str, Any] = {}
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            err = body["error"]
            if err.get("message"):
                message = str(err["message"])
            error_name = err.get("name")
            if err.get("details"):
                details["error_details"] = err["details"]

        retry_after = None
        ra = (response.headers or {}).get("Retry-After")
        if ra is not None:
            try:
                retry_after = int(ra)
            except (TypeError, ValueError):
                retry_after = None

        text = getattr(response, "text", None)
        return HttpError(
            message,
            status_code=status,
            is_transient=_is_transient_status(status),
            subcode=_http_subcode(status),
            error_name=error_name,
            request_id=request_id,
            body_excerpt=text[:200] if isinstance(text, str) and text else None,
            retry_after=retry_after,
            details=details,
        )

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {}

    # --------------------------- Schema ---------------------------------

    def _list_content_types(self) -> List[Dict[str, Any]]:
        """Raw entries of ``GET /api/content-type-builder/content-types``."""
        response, _ = self._request(
            "get",
            f"{self.base_url}{CONTENT_TYPES_PATH}",
            operation="content_types.list",
            error_message="Failed to fetch content types",
        )
        body = self._json(response)
        items = body.get("data") if isinstance(body, dict) else None
        if not isinstance(items, list):
            return []
        return [x for x in items if isinstance(x, dict)]

    def _get_content_type(self, uid: str) -> Dict[str, Any]:
        """Raw detail payload (``data``) of one content type."""
        response, _ = self._request(
            "get",
            f"{self.base_url}{CONTENT_TYPES_PATH}/{uid}",
            operation="content_types.get",
            error_message=f"Failed to fetch schema for {uid}",
        )
        body = self._json(response)
        data = body.get("data") if isinstance(body, dict) else None
        return data if isinstance(data, dict) else {}

    # --------------------------- Queries --------------------------------

    def _url(self, collection: str, query_string: str = "") -> str:
        return build_url(self.base_url, collection, query_string)

    def _get_collection(self, collection: str, query_string: str = "") -> Tuple[Any, RequestMetadata]:
        """``GET /api/<collection>?<query string>``; returns the decoded body and request metadata."""
        response, metadata = self._request(
            "get",
            self._url(collection, query_string),
            operation="query.execute",
            collection=collection,
        )
        return self._json(response), metadata

    def _ping(self) -> bool:
        """Whether ``GET /api`` answers with a 2xx status."""
        try:
            self._request("get", f"{self.base_url}{API_PREFIX}", operation="connection.test")
        except (HttpError, requests.exceptions.RequestException) as e:
            logger.info("Strapi connection test failed: %s", e)
            return False
        return True
