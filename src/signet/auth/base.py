"""The credential store interface.

Every credential backend -- the tool's own credentials file, a
docker-compatible ``config.json``, the OS secret manager -- satisfies the
:class:`CredentialStore` protocol.  Implementations are independent classes
with no common base; :class:`~signet.auth.chain.StoreChain` only relies on
the methods declared here, so adding a backend never requires touching the
others.

Errors follow :mod:`signet.exceptions`:

- a missing entry raises :class:`~signet.exceptions.CredentialNotFoundError`;
- an unreadable or unreachable backend raises
  :class:`~signet.exceptions.StoreUnavailableError`;
- a write that would leak a secret in plaintext raises
  :class:`~signet.exceptions.SecretWriteRejectedError`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from signet.models import Credential, CredentialStoreDescriptor


@runtime_checkable
class CredentialStore(Protocol):
    """Uniform get/put/delete of a credential keyed by registry host."""

    @property
    def descriptor(self) -> CredentialStoreDescriptor:
        """What kind of store this is, where it lives, and its plaintext policy."""
        ...

    def is_configured(self) -> bool:
        """Whether this store should be selected by the store chain.

        Each implementation documents its own probe.
        """
        ...

    def get(self, host: str) -> Credential:
        """Return the credential stored for *host*.

        Raises:
            CredentialNotFoundError: If the store has no entry for *host*.
            StoreUnavailableError: If the store cannot be read.
        """
        ...

    def put(self, host: str, credential: Credential) -> None:
        """Store *credential* for *host*, replacing any existing entry.

        Raises:
            SecretWriteRejectedError: If the write would persist a secret in
                plaintext and this store disallows that.
            StoreUnavailableError: If the store cannot be written.
            ValueError: If *credential* is the empty credential.
        """
        ...

    def delete(self, host: str) -> None:
        """Remove the entry for *host*.

        Raises:
            CredentialNotFoundError: If the store has no entry for *host*.
            StoreUnavailableError: If the store cannot be written.
        """
        ...
