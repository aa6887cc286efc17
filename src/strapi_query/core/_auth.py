# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""API token handling for Strapi requests."""

from __future__ import annotations

from typing import Union

from azure.core.credentials import AzureKeyCredential

StrapiCredential = Union[str, AzureKeyCredential]


class _AuthManager:
    """
    Holds the Strapi API token and produces the ``Authorization`` header.

    Accepts a plain token string or an :class:`~azure.core.credentials.AzureKeyCredential`,
    whose key can be rotated in place with ``credential.update(new_key)``.
    """

    def __init__(self, credential: StrapiCredential) -> None:
        if isinstance(credential, str):
            credential = AzureKeyCredential(credential) if credential else None
        elif credential is not None and not isinstance(credential, AzureKeyCredential):
            raise TypeError("credential must be an API token string or azure.core.credentials.AzureKeyCredential.")
        self.credential = credential

    def _authorization_header(self) -> dict:
        if self.credential is None:
            return {}
        return {"Authorization": f"Bearer {self.credential.key}"}
