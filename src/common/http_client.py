"""Shared HTTP helpers used by the package source clients.

Encapsulates timeout, retry, caching and error translation so registry modules
only deal with status codes and payloads. Transport failures are raised as
``RegistryConnectionError``; they are never mapped to "package not found".
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional, Tuple

import requests

from constants import Constants
from common.errors import RegistryConnectionError, RegistryProtocolError
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

# Simple in-memory cache for HTTP responses
_http_cache: Dict[str, Tuple[Any, float]] = {}


def _get_cache_key(method: str, url: str, headers: Optional[Dict[str, str]] = None) -> str:
    """Generate cache key from request parameters."""
    headers_str = str(sorted(headers.items())) if headers else ""
    return f"{method}:{url}:{headers_str}"


def _is_cache_valid(cache_entry: Tuple[Any, float]) -> bool:
    """Check if cache entry is still valid."""
    _, cached_time = cache_entry
    return time.time() - cached_time < Constants.HTTP_CACHE_TTL_SEC


def clear_cache() -> None:
    """Drop every cached response."""
    _http_cache.clear()


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], str]:
    """Perform GET request with timeout, retries, and caching with DEBUG traces.

    Returns:
        Tuple of (status_code, headers_dict, body_text). 4xx responses are
        returned as-is for the caller to interpret.

    Raises:
        RegistryConnectionError: on timeouts, connection errors or 5xx replies
            once every retry has been used.
    """
    cache_key = _get_cache_key('GET', url, headers)
    safe_target = safe_url(url)

    if cache_key in _http_cache and _is_cache_valid(_http_cache[cache_key]):
        cached_data, _ = _http_cache[cache_key]
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP cache hit",
                extra=extra_context(
                    event="cache_hit",
                    component="http_client",
                    action="GET",
                    target=safe_target
                )
            )
        return cached_data

    last_problem = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        if attempt:
            time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** (attempt - 1)))
        with Timer() as t:
            try:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="GET",
                            target=safe_target,
                            attempt=attempt + 1
                        )
                    )

                response = requests.get(
                    url,
                    timeout=Constants.REQUEST_TIMEOUT,
                    headers=headers,
                    **kwargs
                )
            except requests.Timeout:
                last_problem = f"timed out after {Constants.REQUEST_TIMEOUT} seconds"
                continue
            except requests.RequestException as exc:  # includes ConnectionError
                last_problem = str(exc)
                continue

        if response.status_code >= 500:
            last_problem = f"HTTP {response.status_code}"
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP server error",
                    extra=extra_context(
                        event="http_response",
                        component="http_client",
                        action="GET",
                        outcome="server_error",
                        status_code=response.status_code,
                        attempt=attempt + 1,
                        target=safe_target
                    )
                )
            continue

        result = (response.status_code, dict(response.headers), response.text)
        if response.status_code == 200:
            _http_cache[cache_key] = (result, time.time())

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response ok",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success",
                    status_code=response.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target
                )
            )
        return result

    logger.error("GET %s failed after %s attempts: %s", safe_target, Constants.HTTP_RETRY_MAX, last_problem)
    raise RegistryConnectionError(
        f"GET {safe_target} failed after {Constants.HTTP_RETRY_MAX} attempts: {last_problem}"
    )


def get_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Optional[Any]]:
    """Perform GET request and parse a JSON body.

    Args:
        url: Target URL
        headers: Optional request headers
        **kwargs: Additional requests.get parameters

    Returns:
        Tuple of (status_code, parsed_json). ``parsed_json`` is None for any
        status other than 200.

    Raises:
        RegistryProtocolError: when a 200 reply does not carry valid JSON.
    """
    request_headers = {"Accept": "application/json"}
    request_headers.update(headers or {})
    status_code, _, text = robust_get(url, headers=request_headers, **kwargs)
    if status_code != 200:
        return status_code, None
    try:
        return status_code, json.loads(text)
    except json.JSONDecodeError as exc:
        raise RegistryProtocolError(f"Invalid JSON from {safe_url(url)}: {exc}") from exc
