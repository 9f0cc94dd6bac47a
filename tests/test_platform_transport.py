"""
Tests for services/platform_transport.py.

The chain combinator is tested with plain functions as transports; the
real transports mock requests.request - no real API calls are made.
"""
from unittest.mock import patch, MagicMock

import pytest
import requests

from models.user import PlatformConfig
from services.platform_transport import (
    PlatformRequest,
    PlatformResponse,
    TransportError,
    AllTransportsFailed,
    direct_transport,
    make_relay_transport,
    make_private_relay_transport,
    build_transports,
    run_chain,
    transport_name,
)

CONFIG = PlatformConfig(store_domain="demo.myshopify.com", access_token="shpat_abc")
PRODUCTS = [{"id": 1, "title": "Mug"}]


def _mock_response(status_code=200, json_data=None, text="", reason="", headers=None):
    """Create a mock requests.Response."""
    mock = MagicMock()
    mock.status_code = status_code
    mock.ok = 200 <= status_code < 400
    mock.reason = reason
    mock.headers = headers or {}
    mock.text = text
    if json_data is None:
        mock.json.side_effect = ValueError("No JSON")
    else:
        mock.json.return_value = json_data
    return mock


def _request(config=CONFIG, **kwargs):
    return PlatformRequest(endpoint="/products.json", config=config, **kwargs)


def _failing(name, status=None):
    def transport(request):
        raise TransportError(f"{name} broke: HTTP {status}", status_code=status)
    transport.transport_name = name
    return transport


def _succeeding(name, data):
    def transport(request):
        return PlatformResponse(200, data, name)
    transport.transport_name = name
    return transport


class TestPlatformRequest:
    """Tests for PlatformRequest URL and headers."""

    def test_url(self):
        req = PlatformRequest(endpoint="/shop.json", config=CONFIG, api_version="2024-04")
        assert req.url == "https://demo.myshopify.com/admin/api/2024-04/shop.json"

    def test_headers_carry_token(self):
        assert _request().headers()["X-Shopify-Access-Token"] == "shpat_abc"

    def test_get_has_no_body(self):
        assert _request(body={"a": 1}).has_body is False
        assert _request(method="POST", body={"a": 1}).has_body is True


class TestRunChain:
    """Tests for the run_chain combinator."""

    def test_first_success_wins(self):
        second = MagicMock(side_effect=AssertionError("must not run"))
        result = run_chain([_succeeding("one", PRODUCTS), second], _request())
        assert result.data == PRODUCTS
        assert result.transport == "one"

    def test_500_then_200(self):
        """Transport 1 answers 500, transport 2 answers 200 with products."""
        result = run_chain(
            [_failing("one", 500), _succeeding("two", {"products": PRODUCTS})],
            _request(),
        )
        assert result.data == {"products": PRODUCTS}

    def test_client_errors_also_fall_through(self):
        """4xx is not treated as final; the next transport is tried."""
        result = run_chain(
            [_failing("one", 404), _failing("two", 403), _succeeding("three", [])],
            _request(),
        )
        assert result.transport == "three"

    def test_all_failed_aggregates_attempts(self):
        with pytest.raises(AllTransportsFailed) as exc_info:
            run_chain([_failing("one", 500), _failing("two", 502)], _request())

        exc = exc_info.value
        assert [name for name, _ in exc.attempts] == ["one", "two"]
        assert exc.status_codes == [500, 502]
        assert "one broke" in str(exc) and "two broke" in str(exc)

    def test_empty_chain_fails(self):
        with pytest.raises(AllTransportsFailed):
            run_chain([], _request())

    def test_transport_name_falls_back_to_function_name(self):
        def plain(request):
            return None
        assert transport_name(plain) == "plain"


class TestDirectTransport:
    """Tests for direct_transport."""

    @patch("services.platform_transport.requests.request")
    def test_success(self, mock_request):
        mock_request.return_value = _mock_response(200, {"products": PRODUCTS})
        response = direct_transport(_request())

        assert response.data == {"products": PRODUCTS}
        assert response.transport == "direct"
        args, kwargs = mock_request.call_args
        assert args == ("GET", "https://demo.myshopify.com/admin/api/2024-04/products.json")
        assert kwargs["headers"]["X-Shopify-Access-Token"] == "shpat_abc"
        assert kwargs["json"] is None

    @patch("services.platform_transport.requests.request")
    def test_empty_token_fails_without_network(self, mock_request):
        """A missing token is a 401-shaped failure before any call."""
        with pytest.raises(TransportError) as exc_info:
            direct_transport(_request(config=PlatformConfig(store_domain="demo.myshopify.com")))

        assert exc_info.value.status_code == 401
        assert "401" in str(exc_info.value)
        mock_request.assert_not_called()

    @patch("services.platform_transport.requests.request")
    def test_missing_domain_fails_without_network(self, mock_request):
        with pytest.raises(TransportError, match="Store domain"):
            direct_transport(_request(config=PlatformConfig(access_token="tok")))
        mock_request.assert_not_called()

    @patch("services.platform_transport.requests.request")
    def test_http_error(self, mock_request):
        mock_request.return_value = _mock_response(
            401, text='{"errors":"Invalid API key"}', reason="Unauthorized"
        )
        with pytest.raises(TransportError, match="HTTP 401 Unauthorized") as exc_info:
            direct_transport(_request())
        assert exc_info.value.status_code == 401

    @patch("services.platform_transport.requests.request")
    def test_post_sends_json_body(self, mock_request):
        mock_request.return_value = _mock_response(200, {"inventory_level": {}})
        direct_transport(_request(method="POST", body={"available": 3}))
        assert mock_request.call_args[1]["json"] == {"available": 3}

    @patch("services.platform_transport.requests.request")
    def test_timeout(self, mock_request):
        mock_request.side_effect = requests.Timeout()
        with pytest.raises(TransportError, match="timed out") as exc_info:
            direct_transport(_request())
        assert exc_info.value.status_code == 408

    @patch("services.platform_transport.requests.request")
    def test_connection_error(self, mock_request):
        mock_request.side_effect = requests.ConnectionError()
        with pytest.raises(TransportError, match="Could not connect"):
            direct_transport(_request())

    @patch("services.platform_transport.requests.request")
    def test_non_json_success_returns_text(self, mock_request):
        mock_request.return_value = _mock_response(200, text="plain body")
        assert direct_transport(_request()).data == "plain body"


class TestRelayTransport:
    """Tests for make_relay_transport."""

    @patch("services.platform_transport.requests.request")
    def test_encoded_url_template(self, mock_request):
        mock_request.return_value = _mock_response(200, PRODUCTS)
        transport = make_relay_transport("https://relay.test/raw?url={url_encoded}")

        response = transport(_request())

        called_url = mock_request.call_args[0][1]
        assert called_url == (
            "https://relay.test/raw?url=https%3A%2F%2Fdemo.myshopify.com"
            "%2Fadmin%2Fapi%2F2024-04%2Fproducts.json"
        )
        assert response.transport == "relay:relay.test"
        assert response.data == PRODUCTS

    @patch("services.platform_transport.requests.request")
    def test_raw_url_template(self, mock_request):
        mock_request.return_value = _mock_response(200, {})
        make_relay_transport("https://cors.test/{url}")(_request())
        assert mock_request.call_args[0][1] == (
            "https://cors.test/https://demo.myshopify.com/admin/api/2024-04/products.json"
        )
        assert mock_request.call_args[1]["headers"]["X-Requested-With"] == "XMLHttpRequest"

    @patch("services.platform_transport.requests.request")
    def test_html_error_page_summarized_by_title(self, mock_request):
        mock_request.return_value = _mock_response(
            503,
            text="<html><head><title>Service Unavailable</title></head><body>...</body></html>",
            headers={"Content-Type": "text/html"},
        )
        with pytest.raises(TransportError, match="Service Unavailable") as exc_info:
            make_relay_transport("https://cors.test/{url}")(_request())
        assert "<html>" not in str(exc_info.value)


class TestPrivateRelayTransport:
    """Tests for make_private_relay_transport."""

    @patch("services.platform_transport.requests.request")
    def test_envelope_sent_and_unwrapped(self, mock_request):
        mock_request.return_value = _mock_response(200, {
            "success": True, "data": {"products": PRODUCTS}, "status": 200, "statusText": "OK",
        })
        transport = make_private_relay_transport("https://app.test/api/relay")

        response = transport(_request(method="POST", body={"x": 1}))

        args, kwargs = mock_request.call_args
        assert args == ("POST", "https://app.test/api/relay")
        assert kwargs["json"] == {
            "endpoint": "/products.json",
            "method": "POST",
            "body": {"x": 1},
            "storeDomain": "demo.myshopify.com",
            "accessToken": "shpat_abc",
        }
        assert response.data == {"products": PRODUCTS}
        assert response.transport == "private-relay"

    @patch("services.platform_transport.requests.request")
    def test_unsuccessful_envelope(self, mock_request):
        mock_request.return_value = _mock_response(403, {
            "success": False, "data": {}, "status": 403, "statusText": "Forbidden",
        })
        with pytest.raises(TransportError, match="403 Forbidden") as exc_info:
            make_private_relay_transport("https://app.test/api/relay")(_request())
        assert exc_info.value.status_code == 403

    @patch("services.platform_transport.requests.request")
    def test_error_payload(self, mock_request):
        mock_request.return_value = _mock_response(500, {"error": "Internal server error"})
        with pytest.raises(TransportError, match="Internal server error"):
            make_private_relay_transport("https://app.test/api/relay")(_request())

    @patch("services.platform_transport.requests.request")
    def test_non_json_answer(self, mock_request):
        mock_request.return_value = _mock_response(404, text="Not Found")
        with pytest.raises(TransportError, match="HTTP 404"):
            make_private_relay_transport("https://app.test/api/relay")(_request())


class TestBuildTransports:
    """Tests for build_transports ordering."""

    def test_order(self):
        transports = build_transports(
            ["https://a.test/{url}", "https://b.test/{url}"], "https://app.test/api/relay"
        )
        assert [transport_name(t) for t in transports] == [
            "direct", "relay:a.test", "relay:b.test", "private-relay",
        ]

    def test_without_private_relay(self):
        assert [transport_name(t) for t in build_transports([], "")] == ["direct"]
