# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal helpers for the Strapi query SDK."""

__all__ = []
