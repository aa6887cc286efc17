# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Operation namespace classes for the Strapi query SDK.

- QueryOperations: query execution and fluent query building
- ContentTypeOperations: content-type schema introspection
"""

__all__ = []
