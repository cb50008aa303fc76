"""Construction of authenticated registry clients.

:class:`AuthenticatedClientFactory` is where the subsystem comes together.
For an artifact reference it:

1. parses the reference (before any I/O, so a malformed one fails fast);
2. asks the :class:`~signet.security.ConnectionSecurityPolicy` for plain
   HTTP or TLS;
3. asks the :class:`~signet.auth.resolver.CredentialResolver` for the
   credential;
4. pins that credential to the reference's host in a
   :class:`~signet.client.auth.HostBoundCredential`;
5. builds an :class:`httpx.Client` with :class:`~signet.client.auth.RegistryAuth`,
   the signet ``User-Agent`` and, when diagnostics are on, a
   :class:`~signet.client.trace.TraceTransport`.

Store errors from step 3 propagate unchanged.  Network errors raised by the
returned client are :mod:`httpx` exceptions and are left to the caller.
"""

from __future__ import annotations

from typing import Optional

import httpx

from signet.auth.chain import StoreChain
from signet.auth.resolver import CredentialResolver
from signet.cache import CredentialCache
from signet.client.auth import CLIENT_ID, HostBoundCredential, RegistryAuth
from signet.client.trace import TraceTransport
from signet.config import load_global_config
from signet.models import GlobalConfig, SecurityDecision
from signet.output import get_output
from signet.reference import Reference, normalize_host
from signet.security import ConnectionSecurityPolicy
from signet.version import user_agent


class _SharedTransport(httpx.BaseTransport):
    """Delegates to a caller-owned transport without closing it."""

    def __init__(self, transport: httpx.BaseTransport) -> None:
        self._transport = transport

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        return self._transport.handle_request(request)

    def close(self) -> None:
        pass


class RegistryClient:
    """An authenticated HTTP client for one registry host.

    Use as a context manager, or call :meth:`close`, to release the
    underlying connection pool.

    Attributes:
        host: The host the credential is bound to.
        security: The transport security decision for :attr:`host`.
        credential: The host-bound credential the client authenticates with.
        http: The configured :class:`httpx.Client`.
    """

    def __init__(
        self,
        host: str,
        security: SecurityDecision,
        credential: HostBoundCredential,
        http: httpx.Client,
    ) -> None:
        self.host = host
        self.security = security
        self.credential = credential
        self.http = http

    @property
    def plain_http(self) -> bool:
        return self.security is SecurityDecision.PLAIN_HTTP

    @property
    def base_url(self) -> str:
        return f"{self.security.scheme}://{self.host}"

    def url(self, path: str) -> str:
        """Absolute URL of *path* on this registry."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> RegistryClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class RepositoryClient(RegistryClient):
    """A :class:`RegistryClient` scoped to one artifact reference."""

    def __init__(
        self,
        reference: Reference,
        security: SecurityDecision,
        credential: HostBoundCredential,
        http: httpx.Client,
    ) -> None:
        super().__init__(reference.host, security, credential, http)
        self.reference = reference

    def __enter__(self) -> RepositoryClient:
        return self


class AuthenticatedClientFactory:
    """Build registry clients from a resolver and a security policy.

    Args:
        resolver: Resolves the credential for a registry host.
        policy: Decides plain HTTP vs. TLS.
        transport: Base :class:`httpx.BaseTransport` shared by every client
            this factory builds.  The caller owns it: closing a built client
            leaves it open.  Without one, each client gets its own
            :class:`httpx.HTTPTransport`, closed with the client.
        timeout: Timeout passed to :class:`httpx.Client`.

    Example::

        factory = AuthenticatedClientFactory.from_config()
        with factory.build("localhost:5000/net-monitor:v1", diagnostics=True) as repo:
            repo.http.get(repo.url("/v2/"))
    """

    def __init__(
        self,
        resolver: CredentialResolver,
        policy: ConnectionSecurityPolicy,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30.0,
    ) -> None:
        self._resolver = resolver
        self._policy = policy
        self._transport = transport
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: Optional[GlobalConfig] = None) -> AuthenticatedClientFactory:
        """Wire the default store chain, a fresh session cache, and the config's policy."""
        if config is None:
            config = load_global_config()
        resolver = CredentialResolver(StoreChain.from_config(config), CredentialCache())
        return cls(resolver, ConnectionSecurityPolicy.from_config(config))

    @property
    def resolver(self) -> CredentialResolver:
        return self._resolver

    @property
    def policy(self) -> ConnectionSecurityPolicy:
        return self._policy

    def build(
        self,
        reference: str,
        plain_http: bool = False,
        username: Optional[str] = None,
        password: Optional[str] = None,
        diagnostics: bool = False,
    ) -> RepositoryClient:
        """Build a client for the repository named by *reference*.

        Credentials are looked up under the registry as written in the
        reference and bound to the host actually connected to (these differ
        only for Docker Hub).

        Raises:
            InvalidReferenceError: If *reference* is malformed.
            StoreError: If the credential store fails.
        """
        ref = Reference.parse(reference)
        security = self._policy.decide(ref.registry, plain_http)
        credential = self._resolver.resolve(ref.registry, username, password)
        bound = HostBoundCredential(ref.host, credential)
        http = self._http_client(bound, security, diagnostics)
        return RepositoryClient(ref, security, bound, http)

    def build_registry(
        self,
        server_address: str,
        plain_http: bool = False,
        username: Optional[str] = None,
        password: Optional[str] = None,
        diagnostics: bool = False,
    ) -> RegistryClient:
        """Build a registry-level client for *server_address* (``host[:port]``).

        Used to verify credentials at login, before anything is stored.

        Raises:
            InvalidReferenceError: If *server_address* is malformed.
            StoreError: If the credential store fails.
        """
        host = normalize_host(server_address)
        security = self._policy.decide(host, plain_http)
        credential = self._resolver.resolve(host, username, password)
        bound = HostBoundCredential(host, credential)
        http = self._http_client(bound, security, diagnostics)
        return RegistryClient(host, security, bound, http)

    def _http_client(
        self,
        credential: HostBoundCredential,
        security: SecurityDecision,
        diagnostics: bool,
    ) -> httpx.Client:
        agent = user_agent()
        if self._transport is not None:
            transport: httpx.BaseTransport = _SharedTransport(self._transport)
        else:
            transport = httpx.HTTPTransport()
        if diagnostics:
            transport = TraceTransport(transport)
        get_output().debug(
            f"Connecting to {credential.host} over {security.scheme} "
            f"({credential.credential.kind.value} credential)"
        )
        return httpx.Client(
            base_url=f"{security.scheme}://{credential.host}",
            headers={"User-Agent": agent},
            auth=RegistryAuth(credential, user_agent=agent, client_id=CLIENT_ID),
            transport=transport,
            timeout=self._timeout,
            follow_redirects=True,
        )
