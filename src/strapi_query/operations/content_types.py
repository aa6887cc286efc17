# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Content-type schema operations namespace."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

import requests

from ..core.errors import StrapiError
from ..models.content_type import ContentTypeInfo

if TYPE_CHECKING:
    from ..client import StrapiClient

logger = logging.getLogger(__name__)


class ContentTypeOperations:
    """
    Schema introspection through the content-type-builder API.

    Accessed via ``client.content_types``. Listing content types requires a
    token with access to the content-type-builder; without it the list is
    empty and callers fall back to typing field names by hand.

    Example::

        for ct in client.content_types.list():
            print(ct.plural_name, ct.scalar_fields())
    """

    def __init__(self, client: "StrapiClient") -> None:
        self._client = client

    def list(self) -> List[ContentTypeInfo]:
        """
        List the API content types (UID prefix ``api::`` by default) with their attributes.

        A failing detail fetch keeps the basic list entry. A failing list fetch
        returns an empty list. Neither raises.

        :return: Content types in the order Strapi lists them.
        :rtype: list[~strapi_query.models.content_type.ContentTypeInfo]
        """
        prefix = self._client._config.content_type_prefix
        with self._client._scoped_api() as api:
            try:
                entries = api._list_content_types()
            except (StrapiError, requests.exceptions.RequestException) as e:
                logger.warning("Error fetching content types: %s", e)
                return []

            content_types: List[ContentTypeInfo] = []
            for entry in entries:
                uid = entry.get("uid")
                if not isinstance(uid, str) or not uid.startswith(prefix):
                    continue
                try:
                    detail = api._get_content_type(uid)
                except (StrapiError, requests.exceptions.RequestException) as e:
                    logger.warning("Failed to fetch schema for %s: %s", uid, e)
                    detail = {}
                content_types.append(ContentTypeInfo.from_api_response(detail or entry))
            return content_types

    def get(self, collection: str) -> Optional[ContentTypeInfo]:
        """
        Find the content type served at ``collection`` (plural name or API ID).

        :return: The matching content type, or None when unknown or unavailable.
        :rtype: ~strapi_query.models.content_type.ContentTypeInfo | None
        """
        for ct in self.list():
            if ct.matches(collection):
                return ct
        return None


__all__ = ["ContentTypeOperations"]
