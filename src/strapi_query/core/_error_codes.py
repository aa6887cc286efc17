# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Subcode constants attached to :class:`~strapi_query.core.errors.StrapiError` instances."""

from __future__ import annotations

from typing import Optional

# HTTP subcode constants
HTTP_400 = "http_400"
HTTP_401 = "http_401"
HTTP_403 = "http_403"
HTTP_404 = "http_404"
HTTP_405 = "http_405"
HTTP_409 = "http_409"
HTTP_429 = "http_429"
HTTP_500 = "http_500"
HTTP_502 = "http_502"
HTTP_503 = "http_503"
HTTP_504 = "http_504"

ALL_HTTP_SUBCODES = {
    HTTP_400,
    HTTP_401,
    HTTP_403,
    HTTP_404,
    HTTP_405,
    HTTP_409,
    HTTP_429,
    HTTP_500,
    HTTP_502,
    HTTP_503,
    HTTP_504,
}

TRANSIENT_STATUS = {429, 502, 503, 504}

# Validation subcodes
VALIDATION_COLLECTION_REQUIRED = "validation_collection_required"
VALIDATION_FILTER_VALUE_REQUIRED = "validation_filter_value_required"
VALIDATION_CIRCULAR_POPULATE = "validation_circular_populate"
VALIDATION_POPULATE_PATH_NOT_FOUND = "validation_populate_path_not_found"
VALIDATION_CONDITION_INDEX = "validation_condition_index"

# Schema subcodes
SCHEMA_CONTENT_TYPE_NOT_FOUND = "schema_content_type_not_found"
SCHEMA_ATTRIBUTE_NOT_RELATION = "schema_attribute_not_relation"


def _http_subcode(status: int) -> Optional[str]:
    """Map an HTTP status to its subcode constant, or None when it has none."""
    code = f"http_{status}"
    return code if code in ALL_HTTP_SUBCODES else None


def _is_transient_status(status: int) -> bool:
    return status in TRANSIENT_STATUS
