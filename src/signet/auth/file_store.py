"""The tool's own file-backed credential store.

Stores credentials in ``~/.local/share/signet/credentials.json`` (XDG) or the
platform-equivalent directory, as a versioned host -> credential mapping
(see :class:`~signet.models.CredentialsFile`).  Files are written atomically
via :func:`~signet.config._atomic_write` with ``0o600`` permissions so that
secrets are never world-readable, even momentarily.

The file is read once, at construction.  A file that exists but cannot be
read or parsed makes the store unavailable rather than empty: treating a
corrupt credentials file as "no credentials" would silently drop
authentication.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from signet.config import _atomic_write
from signet.exceptions import (
    CredentialNotFoundError,
    SecretWriteRejectedError,
    StoreUnavailableError,
)
from signet.models import (
    Credential,
    CredentialsFile,
    CredentialStoreDescriptor,
    StoreKind,
)
from signet.output import get_output

SUPPORTED_VERSION = 1


class FileCredentialStore:
    """Read/write credentials in the dedicated signet credentials file.

    ``is_configured()`` is true when the file holds at least one entry.  A
    missing file is a valid, empty, unconfigured store; writing to it creates
    the file.

    Args:
        path: Location of the credentials file.
        allow_plaintext_write: Whether :meth:`put` may persist secrets.  The
            file is unencrypted, so every non-empty credential is plaintext.

    Raises:
        StoreUnavailableError: If the file exists but cannot be read, is not
            valid JSON, or has an unsupported version.

    Example::

        store = FileCredentialStore(credentials_file_path(), allow_plaintext_write=True)
        store.put("registry.example.com", Credential(username="u", password="p"))
        store.get("registry.example.com").username
        # 'u'
    """

    def __init__(self, path: Path, allow_plaintext_write: bool = False) -> None:
        self._path = Path(path)
        self._descriptor = CredentialStoreDescriptor(
            kind=StoreKind.FILE,
            location=str(self._path),
            allow_plaintext_write=allow_plaintext_write,
        )
        self._data = self._load()

    @property
    def path(self) -> Path:
        """The filesystem path of the credentials file."""
        return self._path

    @property
    def descriptor(self) -> CredentialStoreDescriptor:
        return self._descriptor

    def is_configured(self) -> bool:
        return bool(self._data.auths)

    def hosts(self) -> list[str]:
        """Return the hosts with a stored credential, sorted."""
        return sorted(self._data.auths)

    def get(self, host: str) -> Credential:
        try:
            return self._data.auths[host]
        except KeyError:
            raise CredentialNotFoundError(host) from None

    def put(self, host: str, credential: Credential) -> None:
        if credential.is_empty:
            raise ValueError("Cannot store an empty credential")
        if not self._descriptor.allow_plaintext_write:
            raise SecretWriteRejectedError(
                f"Refusing to store the credential for '{host}' in plaintext at "
                f"{self._path}; plaintext writes are disabled for this store"
            )
        auths = dict(self._data.auths)
        auths[host] = credential
        self._save(CredentialsFile(version=SUPPORTED_VERSION, auths=auths))
        get_output().warning(f"Credential for '{host}' is stored unencrypted in {self._path}")

    def delete(self, host: str) -> None:
        if host not in self._data.auths:
            raise CredentialNotFoundError(host)
        auths = {k: v for k, v in self._data.auths.items() if k != host}
        self._save(CredentialsFile(version=SUPPORTED_VERSION, auths=auths))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _load(self) -> CredentialsFile:
        if not self._path.exists():
            return CredentialsFile()
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreUnavailableError(
                f"Cannot read credentials file {self._path}: {exc}"
            ) from exc
        if not text.strip():
            return CredentialsFile()
        try:
            data = CredentialsFile.model_validate(json.loads(text))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise StoreUnavailableError(
                f"Corrupt credentials file {self._path}: {exc}"
            ) from exc
        if data.version != SUPPORTED_VERSION:
            raise StoreUnavailableError(
                f"Unsupported credentials file version {data.version} at {self._path}"
            )
        return data

    def _save(self, data: CredentialsFile) -> None:
        """Write *data* to disk, then make it the in-memory state."""
        payload = {
            "version": data.version,
            "auths": {
                host: cred.model_dump(mode="json", exclude_defaults=True)
                for host, cred in sorted(data.auths.items())
            },
        }
        text = json.dumps(payload, indent=2) + "\n"
        try:
            _atomic_write(self._path, text, mode=0o600)
        except OSError as exc:
            raise StoreUnavailableError(
                f"Cannot write credentials file {self._path}: {exc}"
            ) from exc
        self._data = data
