"""Authenticated registry client construction.

Classes:
    :class:`AuthenticatedClientFactory` -- builds clients from a resolver
        and a security policy.
    :class:`RegistryClient` / :class:`RepositoryClient` -- the built clients,
        wrapping :class:`httpx.Client`.
    :class:`RegistryAuth` -- the :class:`httpx.Auth` challenge flow.
    :class:`HostBoundCredential` -- a credential pinned to one host.
    :class:`TraceTransport` -- redacting diagnostic transport.

Example::

    from signet.client import AuthenticatedClientFactory

    factory = AuthenticatedClientFactory.from_config()
    with factory.build("registry.example.com/app:v1") as repo:
        resp = repo.http.get(repo.url("/v2/"))
"""

from signet.client.auth import HostBoundCredential, RegistryAuth
from signet.client.factory import (
    AuthenticatedClientFactory,
    RegistryClient,
    RepositoryClient,
)
from signet.client.trace import TraceTransport

__all__ = [
    "AuthenticatedClientFactory",
    "HostBoundCredential",
    "RegistryAuth",
    "RegistryClient",
    "RepositoryClient",
    "TraceTransport",
]
