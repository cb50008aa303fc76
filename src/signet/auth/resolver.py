"""Credential resolution for one registry host.

:class:`CredentialResolver` turns a host plus optional explicit inputs into
exactly one :class:`~signet.models.Credential`.  Precedence (high to low):

1. explicit username **and** password -- used as-is; cache and store are
   not consulted;
2. explicit password alone -- a refresh (identity) token;
3. the session cache;
4. the session's credential store (see :class:`~signet.auth.chain.StoreChain`).

A host with nothing stored resolves to the empty credential, because
anonymous access is valid.  Any other store failure propagates and leaves
the cache untouched.  Store results, including the empty credential, are
cached so that the store is read at most once per host per session.
"""

from __future__ import annotations

from typing import Optional

from signet.auth.chain import StoreChain
from signet.cache import CredentialCache
from signet.config import explicit_credentials_from_env
from signet.exceptions import CredentialNotFoundError
from signet.models import EMPTY_CREDENTIAL, Credential
from signet.output import get_output
from signet.reference import normalize_host


class CredentialResolver:
    """Resolve the credential to present to a registry host.

    Args:
        chain: The session's store chain.
        cache: Session cache shared by every resolution in this session.

    Example::

        resolver = CredentialResolver(StoreChain.from_config(), CredentialCache())
        cred = resolver.resolve("registry.example.com")
        if cred.is_empty:
            ...  # anonymous
    """

    def __init__(self, chain: StoreChain, cache: CredentialCache) -> None:
        self._chain = chain
        self._cache = cache

    @property
    def chain(self) -> StoreChain:
        return self._chain

    @property
    def cache(self) -> CredentialCache:
        return self._cache

    def resolve(
        self,
        host: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Credential:
        """Resolve the credential for *host*.

        Args:
            host: Registry ``host[:port]``.
            username: Explicit username from the caller.
            password: Explicit password, or a refresh token when given
                without *username*.

        Returns:
            The credential to present; the empty credential when none is
            known.

        Raises:
            InvalidReferenceError: If *host* is not a valid registry address.
            StoreError: If the credential store fails for a reason other
                than a missing entry.
        """
        if username and password:
            return Credential(username=username, password=password)
        if password:
            return Credential(refresh_token=password)

        host = normalize_host(host)
        cached = self._cache.get(host)
        if cached is not None:
            return cached

        try:
            credential = self._chain.get(host)
        except CredentialNotFoundError:
            get_output().debug(f"No stored credential for {host}; using anonymous access")
            credential = EMPTY_CREDENTIAL
        self._cache.set(host, credential)
        return credential

    def resolve_from_env(self, host: str) -> Credential:
        """Resolve with ``SIGNET_USERNAME`` / ``SIGNET_PASSWORD`` as explicit inputs."""
        username, password = explicit_credentials_from_env()
        return self.resolve(host, username, password)
