# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Constants for the Strapi v5 REST API.

These constants define the URL paths, query parameter keys and defaults
used when compiling and executing queries.
"""

# REST paths, relative to the Strapi base URL
API_PREFIX = "/api"
CONTENT_TYPES_PATH = "/api/content-type-builder/content-types"

# Content types generated by the user (as opposed to plugin/admin types)
API_CONTENT_TYPE_PREFIX = "api::"

# Top-level query parameter keys
PARAM_FIELDS = "fields"
PARAM_POPULATE = "populate"
PARAM_SORT = "sort"
PARAM_FILTERS = "filters"
PARAM_PAGINATION = "pagination"

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 25

# Characters JavaScript's encodeURIComponent leaves untouched besides
# alphanumerics and "_.-~", which urllib.parse.quote never escapes.
URI_COMPONENT_SAFE = "!*'()"

# Fallback message when an error response carries no usable body
DEFAULT_QUERY_ERROR_MESSAGE = "Failed to execute query"

# OpenTelemetry attribute names
OTEL_ATTR_DB_SYSTEM = "db.system"
OTEL_ATTR_DB_OPERATION = "db.operation"
OTEL_ATTR_HTTP_METHOD = "http.request.method"
OTEL_ATTR_HTTP_URL = "url.full"
OTEL_ATTR_HTTP_STATUS_CODE = "http.response.status_code"
OTEL_ATTR_STRAPI_COLLECTION = "strapi.collection"
OTEL_ATTR_STRAPI_REQUEST_ID = "strapi.client_request_id"
OTEL_ATTR_STRAPI_CORRELATION_ID = "strapi.correlation_id"
