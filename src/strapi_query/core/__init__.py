# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the Strapi query SDK.

This module contains the foundational components including authentication,
configuration, HTTP client, telemetry and error handling.
"""

from .results import (
    PaginationMeta,
    QueryResult,
    RequestMetadata,
)

__all__ = [
    "PaginationMeta",
    "QueryResult",
    "RequestMetadata",
]
