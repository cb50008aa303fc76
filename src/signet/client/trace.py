"""Diagnostic tracing of registry HTTP traffic.

:class:`TraceTransport` wraps another :class:`httpx.BaseTransport` and prints
every request and response line with its headers to the diagnostic output.
Credential-bearing header values are replaced by their scheme and
``*****``; bodies are never printed, since token exchanges carry secrets
in them.
"""

from __future__ import annotations

import httpx

from signet.output import get_output

REDACTED = "*****"
_SENSITIVE_HEADERS = frozenset(
    {"authorization", "proxy-authorization", "cookie", "set-cookie"}
)


def redact_header(name: str, value: str) -> str:
    """Return *value* safe for printing.

    ``Authorization: Bearer abc`` becomes ``Bearer *****``; other sensitive
    headers are fully replaced.
    """
    if name.lower() not in _SENSITIVE_HEADERS:
        return value
    if name.lower() in ("authorization", "proxy-authorization"):
        scheme, sep, _ = value.partition(" ")
        if sep:
            return f"{scheme} {REDACTED}"
    return REDACTED


class TraceTransport(httpx.BaseTransport):
    """Transport wrapper that traces requests and responses.

    Args:
        transport: The transport that actually sends requests.

    Example::

        client = httpx.Client(transport=TraceTransport(httpx.HTTPTransport()))
    """

    def __init__(self, transport: httpx.BaseTransport) -> None:
        self._transport = transport

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        output = get_output()
        output.info(f"> {request.method} {request.url}")
        for name, value in request.headers.items():
            output.info(f">   {name}: {redact_header(name, value)}")

        response = self._transport.handle_request(request)

        output.info(f"< {response.status_code} {request.method} {request.url}")
        for name, value in response.headers.items():
            output.info(f"<   {name}: {redact_header(name, value)}")
        return response

    def close(self) -> None:
        self._transport.close()
