"""OS-native credential store backed by the system secret manager.

Platform support comes from :mod:`keyring`:

- Linux: Secret Service API (GNOME Keyring, KWallet)
- macOS: Keychain
- Windows: Windows Credential Locker

Each registry host is one keyring entry: service ``signet`` (configurable),
username = host, password = the credential serialised as JSON.  Availability
is probed once at construction; a headless system without a usable backend
reports itself unavailable instead of failing on first use.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

import keyring
from keyring.backend import KeyringBackend
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError
from pydantic import ValidationError

from signet.exceptions import CredentialNotFoundError, StoreUnavailableError
from signet.models import Credential, CredentialStoreDescriptor, StoreKind

logger = logging.getLogger(__name__)

DEFAULT_SERVICE = "signet"


class KeyringCredentialStore:
    """Credential storage in the OS secret manager.

    ``is_configured()`` returns the availability probe taken at
    construction: true when :mod:`keyring` resolved a real backend rather
    than its ``fail`` placeholder.

    Args:
        service: Keyring service name all entries are filed under.
        backend: Explicit keyring backend; defaults to
            :func:`keyring.get_keyring`.

    Example::

        store = KeyringCredentialStore()
        if store.is_configured():
            store.put("registry.example.com", Credential(refresh_token="tok"))
    """

    def __init__(
        self,
        service: str = DEFAULT_SERVICE,
        backend: Optional[KeyringBackend] = None,
    ) -> None:
        self._service = service
        self._descriptor = CredentialStoreDescriptor(
            kind=StoreKind.NATIVE,
            location=service,
            allow_plaintext_write=False,
        )
        self._backend = backend if backend is not None else self._discover_backend()
        self._available = self._backend is not None and not isinstance(
            self._backend, fail.Keyring
        )

    @property
    def descriptor(self) -> CredentialStoreDescriptor:
        return self._descriptor

    @property
    def available(self) -> bool:
        """Whether a usable secret manager was found at construction."""
        return self._available

    def is_configured(self) -> bool:
        return self._available

    def get(self, host: str) -> Credential:
        backend = self._require_backend()
        try:
            secret = backend.get_password(self._service, host)
        except KeyringError as exc:
            raise StoreUnavailableError(
                f"Keyring lookup for '{host}' failed: {exc}"
            ) from exc
        if secret is None:
            raise CredentialNotFoundError(host)
        try:
            return Credential.model_validate(json.loads(secret))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise StoreUnavailableError(
                f"Keyring entry for '{host}' is not a valid credential"
            ) from exc

    def put(self, host: str, credential: Credential) -> None:
        if credential.is_empty:
            raise ValueError("Cannot store an empty credential")
        backend = self._require_backend()
        secret = credential.model_dump_json(exclude_defaults=True)
        try:
            backend.set_password(self._service, host, secret)
        except KeyringError as exc:
            raise StoreUnavailableError(
                f"Failed to store credential for '{host}' in keyring: {exc}"
            ) from exc
        logger.info("Stored credential in keyring: %s/%s", self._service, host)

    def delete(self, host: str) -> None:
        backend = self._require_backend()
        try:
            if backend.get_password(self._service, host) is None:
                raise CredentialNotFoundError(host)
            backend.delete_password(self._service, host)
        except PasswordDeleteError:
            raise CredentialNotFoundError(host) from None
        except KeyringError as exc:
            raise StoreUnavailableError(
                f"Failed to delete credential for '{host}' from keyring: {exc}"
            ) from exc
        logger.info("Deleted credential from keyring: %s/%s", self._service, host)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _discover_backend() -> Optional[KeyringBackend]:
        try:
            return keyring.get_keyring()
        except Exception as exc:
            logger.debug("Keyring not available: %s", exc)
            return None

    def _require_backend(self) -> KeyringBackend:
        if not self._available or self._backend is None:
            raise StoreUnavailableError(
                "OS secret manager is not available",
            )
        return self._backend
