"""Shared test fixtures for signet.

Provides reusable fixtures for isolating configuration and credential files,
managing output state, and swapping in deterministic credential backends.
These fixtures are automatically discovered by pytest and available to all
test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.backends import fail
from keyring.errors import PasswordDeleteError

from signet.exceptions import CredentialNotFoundError
from signet.models import Credential, CredentialStoreDescriptor, StoreKind
from signet.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches a reference to sys.stderr at creation time.
    When pytest's capture swaps the stream between tests the cached
    reference goes stale, so a fresh manager is created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration and credential files to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_DATA_HOME, and DOCKER_CONFIG to
    subdirectories of tmp_path so that tests never touch real user
    credentials, and clears the explicit credential variables.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("signet.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("DOCKER_CONFIG", str(tmp_path / "docker"))
    for var in ["SIGNET_USERNAME", "SIGNET_PASSWORD"]:
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture
def credentials_path(isolated_config: Path) -> Path:
    """Location of the signet credentials file inside the isolated config."""
    return isolated_config / "data" / "signet" / "credentials.json"


@pytest.fixture
def docker_config(isolated_config: Path) -> Path:
    """Location of the docker config file inside the isolated config."""
    return isolated_config / "docker" / "config.json"


def write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless output manager."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def verbose_output() -> OutputManager:
    """Install a verbose, colourless output manager so debug lines reach stderr."""
    output = OutputManager(no_color=True, verbose=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Keyring backends
# ---------------------------------------------------------------------------


class MemoryKeyring(KeyringBackend):
    """In-memory keyring backend."""

    priority = 1

    def __init__(self) -> None:
        super().__init__()
        self.entries: dict[tuple[str, str], str] = {}

    def get_password(self, service: str, username: str) -> Optional[str]:
        return self.entries.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        self.entries[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        try:
            del self.entries[(service, username)]
        except KeyError:
            raise PasswordDeleteError(username) from None


@pytest.fixture
def memory_keyring(monkeypatch: pytest.MonkeyPatch) -> MemoryKeyring:
    """Make :func:`keyring.get_keyring` return a fresh in-memory backend."""
    backend = MemoryKeyring()
    monkeypatch.setattr(keyring, "get_keyring", lambda: backend)
    return backend


@pytest.fixture
def no_keyring(monkeypatch: pytest.MonkeyPatch) -> fail.Keyring:
    """Make :func:`keyring.get_keyring` report that no secret manager exists."""
    backend = fail.Keyring()
    monkeypatch.setattr(keyring, "get_keyring", lambda: backend)
    return backend


# ---------------------------------------------------------------------------
# Instrumented store
# ---------------------------------------------------------------------------


class CountingStore:
    """Dict-backed credential store that counts lookups."""

    def __init__(
        self,
        entries: Optional[dict[str, Credential]] = None,
        kind: StoreKind = StoreKind.FILE,
        configured: Optional[bool] = None,
    ) -> None:
        self.entries = dict(entries or {})
        self.gets = 0
        self.puts = 0
        self._configured = configured
        self._descriptor = CredentialStoreDescriptor(
            kind=kind, location=f"memory:{kind.value}", allow_plaintext_write=True
        )

    @property
    def descriptor(self) -> CredentialStoreDescriptor:
        return self._descriptor

    def is_configured(self) -> bool:
        if self._configured is not None:
            return self._configured
        return bool(self.entries)

    def get(self, host: str) -> Credential:
        self.gets += 1
        try:
            return self.entries[host]
        except KeyError:
            raise CredentialNotFoundError(host) from None

    def put(self, host: str, credential: Credential) -> None:
        self.puts += 1
        self.entries[host] = credential

    def delete(self, host: str) -> None:
        if host not in self.entries:
            raise CredentialNotFoundError(host)
        del self.entries[host]


@pytest.fixture
def counting_store() -> CountingStore:
    """An empty :class:`CountingStore` that reports itself configured."""
    return CountingStore(configured=True)
