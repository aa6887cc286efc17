# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Quickstart for the Strapi query SDK.

This example shows:
- Connecting with an API token taken from the environment
- Listing content types and their fields
- Building, printing and running a query with the fluent builder
- Converting the result to a pandas DataFrame

Prerequisites:
- pip install strapi-query
- A running Strapi v5 server (STRAPI_URL, default http://localhost:1337)
- An API token in STRAPI_API_KEY with read access to the collection
"""

import sys

from strapi_query.client import StrapiClient
from strapi_query.core.errors import HttpError


def log_call(description):
    print(f"\n→ {description}")


def main():
    collection = sys.argv[1] if len(sys.argv) > 1 else "articles"

    with StrapiClient.from_env() as client:
        log_call(f"client.test_connection() against {client.base_url}")
        if not client.test_connection():
            print("✗ Strapi is not reachable; check STRAPI_URL.")
            sys.exit(1)
        print("✓ Connected")

        log_call("client.content_types.list()")
        for ct in client.content_types.list():
            print(f"  {ct.plural_name:<20} fields={ct.scalar_fields()} relations={ct.relation_fields()}")

        query = client.query.builder(collection).order_by("createdAt", descending=True).page(1, 5)
        log_call(f"GET {query.url(client.base_url)}")
        try:
            result = query.execute()
        except HttpError as e:
            print(f"✗ {e.status_code}: {e.message}")
            sys.exit(1)

        print(f"✓ {len(result)} record(s), total={result.pagination.total if result.pagination else 'n/a'}")
        print(result.to_dataframe(include_system_fields=False).head())


if __name__ == "__main__":
    main()
