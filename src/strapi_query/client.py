# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator, Optional

import requests

from .core._auth import StrapiCredential, _AuthManager
from .core.config import StrapiConfig
from .data._strapi import _StrapiApiClient
from .operations.content_types import ContentTypeOperations
from .operations.query import QueryOperations

DEFAULT_BASE_URL = "http://localhost:1337"


class StrapiClient:
    """
    High-level client for the Strapi v5 REST API.

    Handles the API token and delegates HTTP work to an internal
    :class:`~strapi_query.data._strapi._StrapiApiClient`.

    **Context Manager Support (Recommended)**:
        Using the client as a context manager enables connection pooling and
        releases the pooled session on exit::

            with StrapiClient("http://localhost:1337", api_token) as client:
                result = client.query.execute("articles", "fields=title")

    Namespaces:

        - ``client.query``: query execution and the fluent builder
        - ``client.content_types``: schema introspection

    :param base_url: Strapi server URL, for example ``"http://localhost:1337"``.
        Trailing slash is automatically removed.
    :type base_url: :class:`str`
    :param credential: API token, as a string or
        :class:`~azure.core.credentials.AzureKeyCredential`. May be empty for
        public endpoints.
    :type credential: :class:`str` | ~azure.core.credentials.AzureKeyCredential
    :param config: Optional configuration for timeouts, retries and telemetry.
    :type config: ~strapi_query.core.config.StrapiConfig or None

    :raises ValueError: If ``base_url`` is missing or empty after trimming.

    Example::

        from strapi_query.client import StrapiClient

        with StrapiClient("http://localhost:1337", "my-api-token") as client:
            for ct in client.content_types.list():
                print(ct.plural_name)

            result = (client.query.builder("articles")
                      .select("title")
                      .populate("author", fields=["name"])
                      .execute())
    """

    def __init__(
        self,
        base_url: str,
        credential: Optional[StrapiCredential] = None,
        config: Optional[StrapiConfig] = None,
    ) -> None:
        self.auth = _AuthManager(credential)
        self._base_url = (base_url or "").rstrip("/")
        if not self._base_url:
            raise ValueError("base_url is required.")
        self._config = config or StrapiConfig.from_env()
        self._api: Optional[_StrapiApiClient] = None
        self._session: Optional[requests.Session] = None
        self._owns_session: bool = False

        self.query = QueryOperations(self)
        self.content_types = ContentTypeOperations(self)

    @classmethod
    def from_env(cls, config: Optional[StrapiConfig] = None) -> "StrapiClient":
        """
        Create a client from ``STRAPI_URL`` (default ``http://localhost:1337``) and ``STRAPI_API_KEY``.

        :rtype: StrapiClient
        """
        return cls(
            os.environ.get("STRAPI_URL") or DEFAULT_BASE_URL,
            os.environ.get("STRAPI_API_KEY", ""),
            config=config,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def config(self) -> StrapiConfig:
        return self._config

    def __enter__(self) -> "StrapiClient":
        """
        Enter the context manager and create a pooled HTTP session.

        :return: The client instance.
        :rtype: StrapiClient
        """
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True
            # a REST client built before entering runs without the pool
            if self._api is not None:
                self._api.close()
                self._api = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """
        Close the client and release resources.

        Safe to call multiple times.
        """
        if self._api is not None:
            self._api.close()
            self._api = None
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None
            self._owns_session = False

    def _get_api(self) -> _StrapiApiClient:
        """
        Get or create the internal REST client.

        Construction is deferred until the first API call; an active pooled
        session is handed over for connection reuse.
        """
        if self._api is None:
            self._api = _StrapiApiClient(
                self.auth,
                self._base_url,
                self._config,
                session=self._session,
            )
        return self._api

    @contextmanager
    def _scoped_api(self) -> Iterator[_StrapiApiClient]:
        """Yield the low-level client while ensuring a correlation scope is active."""
        api = self._get_api()
        with api._call_scope():
            yield api

    def test_connection(self) -> bool:
        """
        Check that the server answers ``GET /api`` with a 2xx status.

        :return: True when reachable; False on any HTTP or transport failure.
        :rtype: bool
        """
        with self._scoped_api() as api:
            return api._ping()


__all__ = ["StrapiClient"]
