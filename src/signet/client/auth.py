"""Registry authentication for :mod:`httpx`.

:class:`HostBoundCredential` pins a resolved credential to the one registry
host it was resolved for.  It is built once, when the client is built, and
answers every later question "what credential goes to host X" by
returning the pinned credential for the pinned host and the empty
credential for anything else.  Nothing consults the resolver or the store
again per request.

:class:`RegistryAuth` is the :class:`httpx.Auth` flow registries expect:

1. send the request (with a previously obtained ``Authorization`` for the
   host, if any);
2. on ``401`` read the ``WWW-Authenticate`` challenge;
3. ``Basic`` -- retry with the username/password;
   ``Bearer realm=...,service=...,scope=...`` -- obtain a token from the
   realm and retry with it.

Token requests use the distribution token protocol: a refresh token is
exchanged with ``POST grant_type=refresh_token``; a username/password or an
anonymous client uses ``GET`` (with Basic auth when there is a password).
An access-token credential is sent as ``Bearer`` directly.
"""

from __future__ import annotations

import base64
import re
from collections.abc import Generator
from dataclasses import dataclass
from typing import Optional

import httpx

from signet.exceptions import AuthError
from signet.models import EMPTY_CREDENTIAL, Credential, CredentialKind

CLIENT_ID = "signet"

_CHALLENGE_PARAM_RE = re.compile(r'(\w+)\s*=\s*(?:"((?:[^"\\]|\\.)*)"|([^\s,]+))')


@dataclass(frozen=True)
class HostBoundCredential:
    """A credential that is only ever handed out for one host."""

    host: str
    credential: Credential

    def __call__(self, host: str) -> Credential:
        if host == self.host:
            return self.credential
        return EMPTY_CREDENTIAL


def request_host(url: httpx.URL) -> str:
    """Return ``host[:port]`` of *url* in the same form as a registry address."""
    host = url.host
    if ":" in host:
        host = f"[{host}]"
    return host if url.port is None else f"{host}:{url.port}"


def parse_challenge(header: str) -> Optional[tuple[str, dict[str, str]]]:
    """Parse a ``WWW-Authenticate`` header into ``(scheme, params)``.

    The scheme is lower-cased.  Returns ``None`` for an empty header.
    """
    header = header.strip()
    if not header:
        return None
    scheme, _, rest = header.partition(" ")
    params = {
        match.group(1).lower(): (
            match.group(2).replace('\\"', '"') if match.group(2) is not None else match.group(3)
        )
        for match in _CHALLENGE_PARAM_RE.finditer(rest)
    }
    return scheme.lower(), params


def basic_header(username: str, password: str) -> str:
    raw = f"{username}:{password}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


class RegistryAuth(httpx.Auth):
    """Challenge-driven registry authentication bound to one host.

    Obtained ``Authorization`` values are remembered per host and per
    challenge scope for the lifetime of the client.  Requests to any host
    other than the bound one are sent without credentials.

    This flow reads token responses inline and is meant for
    :class:`httpx.Client`.

    Args:
        credential: The host-bound credential of the client.
        user_agent: ``User-Agent`` for token requests.
        client_id: OAuth2 client identifier sent with token requests.
    """

    def __init__(
        self,
        credential: HostBoundCredential,
        user_agent: str,
        client_id: str = CLIENT_ID,
    ) -> None:
        self._credential = credential
        self._user_agent = user_agent
        self._client_id = client_id
        self._headers: dict[str, str] = {}
        self._tokens: dict[tuple[str, str, str], str] = {}

    @property
    def bound_host(self) -> str:
        return self._credential.host

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        host = request_host(request.url)
        if host != self._credential.host:
            yield request
            return

        credential = self._credential(host)
        if credential.kind is CredentialKind.ACCESS_TOKEN:
            request.headers["Authorization"] = f"Bearer {credential.access_token}"
            yield request
            return

        cached = self._headers.get(host)
        if cached is not None:
            request.headers["Authorization"] = cached
        response = yield request
        if response.status_code != 401:
            return
        # A redirect may have ended on another host; its challenge is not ours to answer.
        if request_host(response.request.url) != host:
            return

        challenge = parse_challenge(response.headers.get("WWW-Authenticate", ""))
        if challenge is None:
            return
        scheme, params = challenge

        if scheme == "basic":
            if credential.kind is not CredentialKind.BASIC:
                return
            header = basic_header(credential.username, credential.password)
        elif scheme == "bearer":
            token = yield from self._fetch_token(host, params, credential)
            header = f"Bearer {token}"
        else:
            return

        self._headers[host] = header
        request.headers["Authorization"] = header
        yield request

    def _fetch_token(
        self,
        host: str,
        params: dict[str, str],
        credential: Credential,
    ) -> Generator[httpx.Request, httpx.Response, str]:
        realm = params.get("realm")
        if not realm:
            raise AuthError(f"Bearer challenge from {host} has no realm")
        service = params.get("service", "")
        scope = params.get("scope", "")

        key = (host, service, scope)
        cached = self._tokens.get(key)
        if cached is not None:
            return cached

        headers = {"User-Agent": self._user_agent}
        if credential.kind is CredentialKind.REFRESH_TOKEN:
            form = {
                "grant_type": "refresh_token",
                "refresh_token": credential.refresh_token,
                "service": service,
                "client_id": self._client_id,
            }
            if scope:
                form["scope"] = scope
            token_request = httpx.Request("POST", realm, headers=headers, data=form)
            field_names = ("access_token",)
        else:
            query = {"service": service} if service else {}
            if scope:
                query["scope"] = scope
            if credential.kind is CredentialKind.BASIC:
                headers["Authorization"] = basic_header(credential.username, credential.password)
            token_request = httpx.Request("GET", realm, headers=headers, params=query)
            field_names = ("token", "access_token")

        token_response = yield token_request
        token_response.read()
        if token_response.status_code != 200:
            raise AuthError(
                f"Token request to {realm} for {host} failed: HTTP {token_response.status_code}"
            )
        try:
            body = token_response.json()
        except ValueError as exc:
            raise AuthError(f"Token response from {realm} is not JSON") from exc
        if not isinstance(body, dict):
            raise AuthError(f"Token response from {realm} is not a JSON object")

        token = next((body[name] for name in field_names if body.get(name)), None)
        if not token:
            raise AuthError(f"Token response from {realm} contains no token")
        self._tokens[key] = token
        return token
