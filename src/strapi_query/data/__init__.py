# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data access layer for the Strapi query SDK.

This module contains the internal Strapi REST client used by the operation namespaces.
"""

__all__ = []
