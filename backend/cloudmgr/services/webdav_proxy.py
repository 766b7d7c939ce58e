"""WebDAV reverse proxy — relays browser requests to a fixed upstream.

Browsers cannot talk to most hosted WebDAV providers directly because the
providers do not answer CORS preflights. The proxy forwards the method,
a filtered header set and the body to ``{upstream}/{path}``, relays the
upstream status, headers and body, and grants CORS unconditionally.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Iterable
from urllib.parse import quote

import httpx

from cloudmgr.config import settings

logger = logging.getLogger(__name__)

# Hop-by-hop or browser-only headers that confuse the upstream
STRIPPED_REQUEST_HEADERS = frozenset({
    "host",
    "origin",
    "referer",
    "cookie",
    "connection",
    "accept-encoding",
})

# httpx already decoded the body, and CORS is answered by the proxy itself
STRIPPED_RESPONSE_HEADERS = frozenset({
    "content-encoding",
    "content-length",
    "access-control-allow-origin",
})

CORS_HEADERS: tuple[tuple[str, str], ...] = (
    ("Access-Control-Allow-Origin", "*"),
    (
        "Access-Control-Allow-Methods",
        "GET, POST, PUT, DELETE, OPTIONS, PROPFIND, MKCOL, MOVE, COPY, LOCK, UNLOCK",
    ),
    (
        "Access-Control-Allow-Headers",
        "Authorization, Content-Type, Depth, If-Match, If-Modified-Since, "
        "If-None-Match, If-Unmodified-Since, Destination, Overwrite, User-Agent, "
        "X-Requested-With",
    ),
)

BODYLESS_METHODS = frozenset({"GET", "HEAD"})

# Characters kept literal when a decoded path segment is re-encoded
_SEGMENT_SAFE = "!$&'()*+,;=:@~"


@dataclass
class ProxyRequest:
    method: str
    path_segments: list[str] = field(default_factory=list)
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes | None = None


@dataclass
class ProxyResponse:
    status_code: int
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""


def filter_request_headers(
    headers: Iterable[tuple[str, str]], user_agent: str
) -> list[tuple[str, str]]:
    """Drop browser-only headers and force the upstream-compatible user agent."""
    filtered = [
        (name, value)
        for name, value in headers
        if name.lower() not in STRIPPED_REQUEST_HEADERS and name.lower() != "user-agent"
    ]
    filtered.append(("user-agent", user_agent))
    return filtered


def filter_response_headers(headers: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    return [
        (name, value)
        for name, value in headers
        if name.lower() not in STRIPPED_RESPONSE_HEADERS
    ]


def with_cors(headers: list[tuple[str, str]]) -> list[tuple[str, str]]:
    """Prepend the CORS grant; an upstream header of the same name wins."""
    present = {name.lower() for name, _ in headers}
    cors = [(name, value) for name, value in CORS_HEADERS if name.lower() not in present]
    return cors + headers


class WebDAVProxy:
    """Stateless pass-through to a single WebDAV origin."""

    def __init__(
        self,
        upstream_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        upstream_url = upstream_url or settings.proxy_upstream_url
        self._upstream_url = upstream_url if upstream_url.endswith("/") else upstream_url + "/"
        self._user_agent = user_agent or settings.proxy_user_agent
        self._timeout = timeout if timeout is not None else settings.proxy_timeout_seconds
        self._transport = transport

    @property
    def upstream_url(self) -> str:
        return self._upstream_url

    def build_target_url(self, path_segments: list[str]) -> str:
        """Join the upstream base with the path segments, order preserved."""
        return self._upstream_url + "/".join(
            quote(segment, safe=_SEGMENT_SAFE) for segment in path_segments
        )

    async def handle(self, request: ProxyRequest) -> ProxyResponse:
        method = request.method.upper()

        # Preflight never reaches the upstream
        if method == "OPTIONS":
            return ProxyResponse(status_code=200, headers=list(CORS_HEADERS))

        target_url = self.build_target_url(request.path_segments)
        headers = filter_request_headers(request.headers, self._user_agent)
        content = None
        if method not in BODYLESS_METHODS and request.body:
            content = request.body

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                # httpx adds some of these as client defaults
                for name in STRIPPED_REQUEST_HEADERS:
                    client.headers.pop(name, None)
                upstream = await client.request(
                    method, target_url, headers=headers, content=content,
                )
        except Exception as exc:
            logger.error("Proxy error for %s %s: %s", method, target_url, exc)
            return self._error_response(exc)

        logger.debug("Proxied %s %s -> %d", method, target_url, upstream.status_code)
        return ProxyResponse(
            status_code=upstream.status_code,
            headers=with_cors(filter_response_headers(upstream.headers.multi_items())),
            body=upstream.content,
        )

    @staticmethod
    def _error_response(exc: Exception) -> ProxyResponse:
        message = str(exc) or exc.__class__.__name__
        return ProxyResponse(
            status_code=500,
            headers=with_cors([("content-type", "application/json")]),
            body=json.dumps({"error": message}).encode(),
        )
