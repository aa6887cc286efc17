# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures and configuration for Strapi query SDK tests.

This module provides common test fixtures, mock objects, and configuration
that can be used across all test modules.
"""

import pytest
from unittest.mock import Mock

from strapi_query.core.config import StrapiConfig
from strapi_query.models.content_type import ContentTypeInfo


@pytest.fixture
def test_config():
    """Test configuration with safe defaults."""
    return StrapiConfig(http_retries=1, http_backoff=0.01, http_timeout=5, http_jitter=False)


@pytest.fixture
def mock_http_client():
    """Mock HTTP client for unit tests."""
    mock = Mock()
    mock._request.return_value = Mock(status_code=200, headers={})
    return mock


@pytest.fixture
def sample_base_url():
    """Standard test base URL."""
    return "http://localhost:1337"


def _content_type(uid, plural, singular, attributes):
    return ContentTypeInfo.from_api_response(
        {
            "uid": uid,
            "apiID": singular,
            "schema": {
                "kind": "collectionType",
                "singularName": singular,
                "pluralName": plural,
                "displayName": singular.title(),
                "attributes": attributes,
            },
        }
    )


@pytest.fixture
def blog_content_types():
    """Articles -> author -> company, with a back-reference from authors to articles."""
    return [
        _content_type(
            "api::article.article",
            "articles",
            "article",
            {
                "title": {"type": "string", "required": True},
                "views": {"type": "integer"},
                "author": {"type": "relation", "relation": "manyToOne", "target": "api::author.author"},
                "tags": {"type": "relation", "relation": "manyToMany", "target": "api::tag.tag"},
            },
        ),
        _content_type(
            "api::author.author",
            "authors",
            "author",
            {
                "name": {"type": "string"},
                "articles": {"type": "relation", "relation": "oneToMany", "target": "api::article.article"},
                "company": {"type": "relation", "relation": "manyToOne", "target": "api::company.company"},
            },
        ),
        _content_type(
            "api::company.company",
            "companies",
            "company",
            {
                "name": {"type": "string"},
                "authors": {"type": "relation", "relation": "oneToMany", "target": "api::author.author"},
            },
        ),
        _content_type("api::tag.tag", "tags", "tag", {"label": {"type": "string"}}),
    ]
