"""Tests for the shared HTTP helpers."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from common import http_client
from common.errors import RegistryConnectionError, RegistryProtocolError


def make_response(status_code, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.headers = {}
    return response


@pytest.fixture(autouse=True)
def fresh_cache():
    http_client.clear_cache()
    yield
    http_client.clear_cache()


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("common.http_client.time.sleep"):
        yield


class TestRobustGet:
    """Test retries, caching and error translation."""

    @patch("common.http_client.requests.get")
    def test_caches_successful_responses(self, mock_get):
        """A second GET for the same URL is served from cache."""
        mock_get.return_value = make_response(200, "{}")

        http_client.robust_get("https://feed/index.json")
        http_client.robust_get("https://feed/index.json")

        assert mock_get.call_count == 1

    @patch("common.http_client.requests.get")
    def test_returns_client_errors(self, mock_get):
        """4xx replies are returned to the caller, not retried or cached."""
        mock_get.return_value = make_response(404)

        status, _, _ = http_client.robust_get("https://feed/missing")
        http_client.robust_get("https://feed/missing")

        assert status == 404
        assert mock_get.call_count == 2

    @patch("common.http_client.requests.get")
    def test_retries_then_succeeds(self, mock_get):
        """Transient failures are retried."""
        mock_get.side_effect = [requests.ConnectionError("reset"), make_response(503), make_response(200, "ok")]

        status, _, text = http_client.robust_get("https://feed/flaky")

        assert (status, text) == (200, "ok")
        assert mock_get.call_count == 3

    @patch("common.http_client.requests.get")
    def test_raises_after_exhausting_retries(self, mock_get):
        """Persistent timeouts become RegistryConnectionError."""
        mock_get.side_effect = requests.Timeout("slow")

        with pytest.raises(RegistryConnectionError):
            http_client.robust_get("https://feed/down")


class TestGetJson:
    """Test JSON decoding."""

    @patch("common.http_client.requests.get")
    def test_parses_json(self, mock_get):
        """A 200 reply is decoded."""
        mock_get.return_value = make_response(200, '{"a": 1}')
        assert http_client.get_json("https://feed/x") == (200, {"a": 1})

    @patch("common.http_client.requests.get")
    def test_non_200_has_no_body(self, mock_get):
        """Non-200 replies carry no parsed body."""
        mock_get.return_value = make_response(404, "not here")
        assert http_client.get_json("https://feed/x") == (404, None)

    @patch("common.http_client.requests.get")
    def test_invalid_json_is_protocol_error(self, mock_get):
        """A 200 reply with a broken body aborts."""
        mock_get.return_value = make_response(200, "<html>")
        with pytest.raises(RegistryProtocolError):
            http_client.get_json("https://feed/x")
