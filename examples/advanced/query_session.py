# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Interactive-style query editing with QuerySession.

This example shows:
- Seeding a session with the server's content types
- Populating nested relations, with circular relations refused
- Adding filter conditions from user-typed text
- Executing and reading results and errors from the session

Prerequisites:
- pip install strapi-query
- STRAPI_URL / STRAPI_API_KEY set for a Strapi v5 server with an "articles"
  collection related to "authors"
"""

from strapi_query.client import StrapiClient
from strapi_query.core.errors import ValidationError
from strapi_query.models.query import PopulateField, SortOption, parse_filter_value
from strapi_query.session import QuerySession


def main():
    with StrapiClient.from_env() as client:
        session = QuerySession(client.content_types.list(), default_page_size=client.config.default_page_size)
        session.select_collection("articles")
        print("Fields:", session.available_fields())
        print("Relations:", session.relation_candidates())

        session.add_field("title")
        session.add_populate(PopulateField("author"))
        session.add_populate_field(["author"], "name")
        print("Nested candidates under author:", session.relation_candidates(["author"]))

        try:
            session.add_nested_populate(["author"], "articles")
        except ValidationError as e:
            print("Refused:", e.message)

        session.add_sort(SortOption("title", "asc"))
        session.add_condition("title", "$containsi", parse_filter_value("$containsi", "strapi"))
        session.add_condition("id", "$in", parse_filter_value("$in", "1, 2, 3"))
        session.set_pagination(page=1, page_size=10)

        print("\nQuery string:", session.query_string)
        print("URL:", session.url(client.base_url))

        if session.execute(client):
            print(f"\n{len(session.data)} record(s)")
            for record in session.data:
                print(" ", record.get("title"), "-", (record.get("author") or {}).get("name"))
        else:
            print("\nQuery failed:", session.error)


if __name__ == "__main__":
    main()
