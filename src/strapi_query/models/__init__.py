# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data models and type definitions for the Strapi query SDK.

- :mod:`~strapi_query.models.query`: query specification dataclasses and enums.
- :mod:`~strapi_query.models.query_builder`: fluent query builder.
- :mod:`~strapi_query.models.content_type`: content-type schema models.

Note:
    This ``__init__.py`` does NOT import/export models.
    Import directly from the specific module files.
"""

__all__ = []
