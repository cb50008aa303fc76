"""Credential manager -- login and logout against the session's store.

The :class:`CredentialManager` is the write side of the auth subsystem.  It
writes to, or erases from, the single store chosen by
:class:`~signet.auth.chain.StoreChain`, never to more than one, and keeps
the session :class:`~signet.cache.CredentialCache` consistent with what it
wrote so that a later resolution in the same session sees the change.

See Also:
    :class:`~signet.auth.resolver.CredentialResolver` -- the read side.
"""

from __future__ import annotations

from signet.auth.chain import StoreChain
from signet.cache import CredentialCache
from signet.models import Credential
from signet.output import get_output
from signet.reference import normalize_host


class CredentialManager:
    """Persist and remove registry credentials.

    Args:
        chain: The session's store chain.
        cache: The session cache shared with the resolver.

    Example::

        manager = CredentialManager(chain, cache)
        manager.login("registry.example.com", Credential(username="u", password="p"))
        manager.logout("registry.example.com")
    """

    def __init__(self, chain: StoreChain, cache: CredentialCache) -> None:
        self._chain = chain
        self._cache = cache

    def login(self, host: str, credential: Credential) -> None:
        """Store *credential* for *host* in the selected store.

        The cache is updated only after the store write succeeded, so a
        rejected or failed write leaves both unchanged.

        Raises:
            InvalidReferenceError: If *host* is not a valid registry address.
            SecretWriteRejectedError: If the store refuses a plaintext write.
            StoreUnavailableError: If the store cannot be written.
            ValueError: If *credential* is empty.
        """
        host = normalize_host(host)
        self._chain.put(host, credential)
        self._cache.set(host, credential)
        get_output().debug(
            f"Saved credential for {host} to {self._chain.descriptor.kind.value} store"
        )

    def logout(self, host: str) -> None:
        """Remove the credential for *host* from the selected store.

        Raises:
            InvalidReferenceError: If *host* is not a valid registry address.
            CredentialNotFoundError: If nothing is stored for *host*.
            StoreUnavailableError: If the store cannot be written.
        """
        host = normalize_host(host)
        try:
            self._chain.delete(host)
        finally:
            self._cache.invalidate(host)
        get_output().debug(
            f"Removed credential for {host} from {self._chain.descriptor.kind.value} store"
        )
