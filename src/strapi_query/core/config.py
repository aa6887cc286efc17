# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.constants import API_CONTENT_TYPE_PREFIX, DEFAULT_PAGE_SIZE
from .telemetry import TelemetryConfig


@dataclass(frozen=True)
class StrapiConfig:
    """
    Configuration settings for Strapi client operations.

    :param http_retries: Maximum number of attempts for HTTP requests (default: 5).
    :type http_retries: int or None
    :param http_backoff: Base delay in seconds for exponential backoff (default: 0.5).
    :type http_backoff: float or None
    :param http_max_backoff: Maximum delay between retry attempts in seconds (default: 60.0).
    :type http_max_backoff: float or None
    :param http_timeout: Request timeout in seconds (default: method-dependent).
    :type http_timeout: float or None
    :param http_jitter: Whether to add jitter to retry delays (default: True).
    :type http_jitter: bool or None
    :param http_retry_transient_errors: Whether to retry 429, 502, 503, 504 responses (default: True).
    :type http_retry_transient_errors: bool or None
    :param default_page_size: Page size a fresh or reset query session starts with.
    :type default_page_size: int
    :param content_type_prefix: UID prefix of the content types listed by schema introspection.
    :type content_type_prefix: str
    :param telemetry: Optional logging/tracing/metrics configuration.
    :type telemetry: ~strapi_query.core.telemetry.TelemetryConfig or None
    """

    # HTTP retry and resilience configuration
    http_retries: Optional[int] = None
    http_backoff: Optional[float] = None
    http_max_backoff: Optional[float] = None
    http_timeout: Optional[float] = None
    http_jitter: Optional[bool] = None
    http_retry_transient_errors: Optional[bool] = None

    default_page_size: int = DEFAULT_PAGE_SIZE
    content_type_prefix: str = API_CONTENT_TYPE_PREFIX

    telemetry: Optional[TelemetryConfig] = None

    @classmethod
    def from_env(cls) -> "StrapiConfig":
        """
        Create a configuration instance with default settings.

        :return: Configuration instance with default values.
        :rtype: ~strapi_query.core.config.StrapiConfig
        """
        # Environment-free defaults; None values are resolved in _HttpClient
        return cls(
            http_retries=None,
            http_backoff=None,
            http_max_backoff=None,
            http_timeout=None,
            http_jitter=None,
            http_retry_transient_errors=None,
        )
