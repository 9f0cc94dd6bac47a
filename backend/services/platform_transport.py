"""
Platform transports - ordered ways of reaching the Shopify Admin REST API.

A transport is a callable taking a PlatformRequest and returning a
PlatformResponse, raising TransportError on any failure (network error,
non-2xx status, missing credentials). run_chain() tries a list of them in
order and returns the first success:

  1. direct         - straight to https://{domain}/admin/api/{version}{endpoint}
  2. relay:<host>   - one per public CORS relay, fixed order
  3. private-relay  - our own /api/relay endpoint, JSON envelope in and out

No backoff, no de-duplication of identical calls, no memory of earlier
failures. Each call walks the whole chain from the top.
"""
import logging
from dataclasses import dataclass
from urllib.parse import quote, urlsplit

import requests
from bs4 import BeautifulSoup

from models.user import PlatformConfig

logger = logging.getLogger(__name__)

ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"
DEFAULT_API_VERSION = "2024-04"


class TransportError(Exception):
    """Raised when a single transport attempt fails."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class AllTransportsFailed(Exception):
    """Raised when every transport in the chain failed."""

    def __init__(self, attempts):
        self.attempts = attempts
        details = "; ".join(f"{name}: {exc}" for name, exc in attempts)
        super().__init__(f"All connection strategies failed. {details}")

    @property
    def status_codes(self):
        return [exc.status_code for _, exc in self.attempts if exc.status_code]


@dataclass
class PlatformRequest:
    endpoint: str
    config: PlatformConfig
    method: str = "GET"
    body: object = None
    api_version: str = DEFAULT_API_VERSION
    timeout: object = None

    @property
    def url(self):
        return (
            f"https://{self.config.store_domain}/admin/api/"
            f"{self.api_version}{self.endpoint}"
        )

    @property
    def has_body(self):
        return self.body is not None and self.method.upper() != "GET"

    def headers(self):
        return {
            ACCESS_TOKEN_HEADER: self.config.access_token,
            "Content-Type": "application/json",
        }


@dataclass
class PlatformResponse:
    status: int
    data: object
    transport: str


def transport_name(transport):
    return getattr(transport, "transport_name", None) or transport.__name__


def _require_credentials(request):
    if not request.config.store_domain:
        raise TransportError("Store domain is not configured")
    if not request.config.access_token:
        raise TransportError(
            "HTTP 401 Unauthorized - access token is missing", status_code=401
        )


def _send(method, url, timeout, headers, json_body=None):
    try:
        return requests.request(
            method,
            url,
            headers=headers,
            json=json_body,
            timeout=timeout,
        )
    except requests.Timeout:
        raise TransportError(f"Request to {urlsplit(url).netloc} timed out", status_code=408)
    except requests.ConnectionError:
        raise TransportError(f"Could not connect to {urlsplit(url).netloc}")
    except requests.RequestException as exc:
        raise TransportError(f"Request to {urlsplit(url).netloc} failed: {exc}")


def _summarize_body(resp):
    """Short, readable description of an error body. HTML pages are reduced to their title."""
    text = resp.text or ""
    content_type = resp.headers.get("Content-Type") or ""
    if "html" in content_type or text.lstrip().startswith("<"):
        soup = BeautifulSoup(text, "html.parser")
        title = soup.find("title")
        if title and title.get_text(strip=True):
            return title.get_text(strip=True)
        return soup.get_text(separator=" ", strip=True)[:200]
    return text[:200]


def _parse_body(resp):
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _check_status(resp, label):
    if 200 <= resp.status_code < 300:
        return
    summary = _summarize_body(resp)
    message = f"{label}: HTTP {resp.status_code} {resp.reason or ''}".rstrip()
    if summary:
        message = f"{message} - {summary}"
    raise TransportError(message, status_code=resp.status_code)


def direct_transport(request):
    """Call the platform URL directly with the access token header."""
    _require_credentials(request)
    resp = _send(
        request.method,
        request.url,
        request.timeout,
        request.headers(),
        request.body if request.has_body else None,
    )
    _check_status(resp, "Shopify API error")
    return PlatformResponse(resp.status_code, _parse_body(resp), "direct")


direct_transport.transport_name = "direct"


def make_relay_transport(template):
    """
    Build a transport that rewrites the target URL through a public relay.

    Args:
        template: Relay URL with a {url} or {url_encoded} placeholder.
    """
    name = f"relay:{urlsplit(template).netloc or template}"

    def relay_transport(request):
        _require_credentials(request)
        relay_url = template.format(
            url=request.url,
            url_encoded=quote(request.url, safe=""),
        )
        headers = request.headers()
        headers["X-Requested-With"] = "XMLHttpRequest"
        resp = _send(
            request.method,
            relay_url,
            request.timeout,
            headers,
            request.body if request.has_body else None,
        )
        _check_status(resp, f"Relay {name} failed")
        return PlatformResponse(resp.status_code, _parse_body(resp), name)

    relay_transport.transport_name = name
    return relay_transport


def make_private_relay_transport(relay_url):
    """
    Build the transport that goes through our own relay endpoint.

    Sends {endpoint, method, body, storeDomain, accessToken} and unwraps
    {success, data, status, statusText}.
    """

    def private_relay_transport(request):
        _require_credentials(request)
        envelope = {
            "endpoint": request.endpoint,
            "method": request.method,
            "body": request.body,
            "storeDomain": request.config.store_domain,
            "accessToken": request.config.access_token,
        }
        resp = _send(
            "POST",
            relay_url,
            request.timeout,
            {"Content-Type": "application/json"},
            envelope,
        )

        try:
            payload = resp.json()
        except ValueError:
            message = f"Private relay returned HTTP {resp.status_code}"
            summary = _summarize_body(resp)
            if summary:
                message = f"{message} - {summary}"
            raise TransportError(message, status_code=resp.status_code)

        if not isinstance(payload, dict) or "success" not in payload:
            error = ""
            if isinstance(payload, dict):
                error = payload.get("message") or payload.get("error") or ""
            raise TransportError(
                f"Private relay failed: HTTP {resp.status_code} {error or ''}".rstrip(),
                status_code=resp.status_code,
            )

        if not payload["success"]:
            status = payload.get("status") or resp.status_code
            raise TransportError(
                f"Shopify API error via relay: {status} {payload.get('statusText') or ''}".rstrip(),
                status_code=status,
            )

        return PlatformResponse(
            payload.get("status") or resp.status_code,
            payload.get("data"),
            "private-relay",
        )

    private_relay_transport.transport_name = "private-relay"
    return private_relay_transport


def build_transports(public_relays, relay_url):
    """Direct first, then each public relay in order, then the private relay."""
    transports = [direct_transport]
    transports.extend(make_relay_transport(t) for t in public_relays or [])
    if relay_url:
        transports.append(make_private_relay_transport(relay_url))
    return transports


def run_chain(transports, request):
    """
    Try each transport in order and return the first success.

    Every failure, including 4xx/5xx answers, moves on to the next
    transport. The first success returns immediately.

    Raises:
        AllTransportsFailed: with (name, TransportError) for every attempt.
    """
    attempts = []
    for transport in transports:
        name = transport_name(transport)
        try:
            response = transport(request)
        except TransportError as exc:
            logger.info("[--] %s %s via %s failed: %s", request.method, request.endpoint, name, exc)
            attempts.append((name, exc))
            continue
        logger.info("[OK] %s %s via %s (HTTP %d)", request.method, request.endpoint, name, response.status)
        return response

    logger.error(
        "[ERR] %s %s failed on all %d transports", request.method, request.endpoint, len(attempts)
    )
    raise AllTransportsFailed(attempts)
