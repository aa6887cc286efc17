# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Strapi v5 REST query SDK.

Compiles structured query specifications (fields, populate, sort, filters,
pagination) into Strapi's bracket-notation query strings and runs them
against a Strapi server.

Example::

    from strapi_query import StrapiClient

    with StrapiClient("http://localhost:1337", "my-api-token") as client:
        result = client.query.builder("articles").select("title").page(1, 10).execute()
"""

__version__ = "0.1.0"

from .client import StrapiClient
from .compiler import build_query_string, build_url, compile_query
from .models.query_builder import QueryBuilder
from .session import QuerySession

__all__ = [
    "StrapiClient",
    "QueryBuilder",
    "QuerySession",
    "build_query_string",
    "build_url",
    "compile_query",
    "__version__",
]
