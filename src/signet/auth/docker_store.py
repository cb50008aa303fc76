"""Docker-compatible credential store.

Reads and writes the ``config.json`` used by docker and other container
tooling, so that ``docker login`` credentials are usable without a separate
login.  The file lives at ``$DOCKER_CONFIG/config.json`` or
``~/.docker/config.json`` (see :func:`~signet.config.docker_config_path`).

Layout of the parts this store understands::

    {
      "auths": {
        "registry.example.com": {"auth": "<base64 user:pass>"},
        "ghcr.io": {"identitytoken": "..."}
      },
      "credsStore": "desktop",
      "credHelpers": {"123.dkr.ecr.us-east-1.amazonaws.com": "ecr-login"}
    }

Per host, a ``credHelpers`` entry wins over ``credsStore``, which wins over
an inline ``auths`` entry.  Secrets handed to a credential helper are
protected by that helper; inline ``auths`` entries are plaintext.  Every key
this store does not understand is preserved on write.
"""

from __future__ import annotations

import base64
import binascii
import copy
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

from signet.auth.helper import CredentialHelper
from signet.config import _atomic_write
from signet.exceptions import (
    CredentialNotFoundError,
    SecretWriteRejectedError,
    StoreUnavailableError,
)
from signet.models import Credential, CredentialStoreDescriptor, StoreKind
from signet.output import get_output
from signet.reference import DOCKER_HUB_HOST, DOCKER_HUB_REGISTRY

logger = logging.getLogger(__name__)

DOCKER_HUB_LEGACY_KEY = "https://index.docker.io/v1/"


def _candidate_keys(host: str) -> list[str]:
    """Keys under which docker tooling may have recorded *host*."""
    keys = [
        host,
        f"https://{host}",
        f"http://{host}",
        f"https://{host}/",
        f"https://{host}/v1/",
        f"https://{host}/v2/",
    ]
    if host in (DOCKER_HUB_REGISTRY, DOCKER_HUB_HOST, "index.docker.io"):
        keys.append(DOCKER_HUB_LEGACY_KEY)
    return keys


def _decode_entry(host: str, entry: dict[str, Any]) -> Optional[Credential]:
    """Turn an ``auths`` entry into a credential, or ``None`` when it holds nothing."""
    for field in ("identitytoken", "registrytoken", "auth", "username", "password"):
        if not isinstance(entry.get(field) or "", str):
            raise StoreUnavailableError(
                f"Invalid '{field}' value for '{host}' in docker config: expected a string"
            )
    if entry.get("identitytoken"):
        return Credential(refresh_token=entry["identitytoken"])
    if entry.get("registrytoken"):
        return Credential(access_token=entry["registrytoken"])
    if entry.get("auth"):
        try:
            decoded = base64.b64decode(entry["auth"], validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise StoreUnavailableError(
                f"Invalid 'auth' value for '{host}' in docker config"
            ) from exc
        username, sep, password = decoded.partition(":")
        if not sep:
            raise StoreUnavailableError(
                f"Invalid 'auth' value for '{host}' in docker config: missing ':'"
            )
        return Credential(username=username, password=password)
    if entry.get("username") or entry.get("password"):
        return Credential(username=entry.get("username", ""), password=entry.get("password", ""))
    return None


def _is_mapping_of(value: Any, value_type: type) -> bool:
    """Whether *value* is absent or a JSON object whose values are all *value_type*."""
    if value is None:
        return True
    return isinstance(value, dict) and all(isinstance(v, value_type) for v in value.values())


def _encode_entry(credential: Credential) -> dict[str, str]:
    if credential.refresh_token:
        return {"identitytoken": credential.refresh_token}
    if credential.access_token:
        return {"registrytoken": credential.access_token}
    raw = f"{credential.username}:{credential.password}".encode("utf-8")
    return {"auth": base64.b64encode(raw).decode("ascii")}


class DockerCredentialStore:
    """Read/write credentials in a docker-compatible ``config.json``.

    ``is_configured()`` is true when the file names a ``credsStore``, has any
    ``credHelpers``, or has at least one ``auths`` entry.  A file that merely
    exists, or holds only unrelated settings, does not count.

    Args:
        path: Location of ``config.json``.
        allow_plaintext_write: Whether :meth:`put` may write inline ``auths``
            entries.  Writes delegated to a credential helper are always
            allowed.
        helper_factory: Builds a :class:`~signet.auth.helper.CredentialHelper`
            from a helper name; replaceable in tests.

    Raises:
        StoreUnavailableError: If the file exists but cannot be read or is
            not a JSON object.
    """

    def __init__(
        self,
        path: Path,
        allow_plaintext_write: bool = False,
        helper_factory: Callable[[str], CredentialHelper] = CredentialHelper,
    ) -> None:
        self._path = Path(path)
        self._helper_factory = helper_factory
        self._descriptor = CredentialStoreDescriptor(
            kind=StoreKind.DOCKER,
            location=str(self._path),
            allow_plaintext_write=allow_plaintext_write,
        )
        self._config = self._load()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def descriptor(self) -> CredentialStoreDescriptor:
        return self._descriptor

    def is_configured(self) -> bool:
        return bool(
            self._config.get("credsStore")
            or self._config.get("credHelpers")
            or self._config.get("auths")
        )

    def get(self, host: str) -> Credential:
        helper = self._helper_for(host)
        if helper is not None:
            return helper.get(host)

        key = self._find_key(host)
        if key is not None:
            credential = _decode_entry(host, self._auths()[key])
            if credential is not None:
                return credential
        raise CredentialNotFoundError(host)

    def put(self, host: str, credential: Credential) -> None:
        if credential.is_empty:
            raise ValueError("Cannot store an empty credential")

        helper = self._helper_for(host)
        if helper is not None:
            helper.store(host, credential)
            return

        if not self._descriptor.allow_plaintext_write:
            raise SecretWriteRejectedError(
                f"Refusing to store the credential for '{host}' in plaintext at "
                f"{self._path}; configure a 'credsStore' or enable plaintext writes"
            )
        config = copy.deepcopy(self._config)
        auths = config.get("auths") or {}
        auths[host] = _encode_entry(credential)
        config["auths"] = auths
        self._save(config)
        get_output().warning(f"Credential for '{host}' is stored unencrypted in {self._path}")

    def delete(self, host: str) -> None:
        helper = self._helper_for(host)
        if helper is not None:
            helper.erase(host)
            return

        key = self._find_key(host)
        if key is None:
            raise CredentialNotFoundError(host)
        config = copy.deepcopy(self._config)
        del config["auths"][key]
        self._save(config)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _helper_for(self, host: str) -> Optional[CredentialHelper]:
        helpers = self._config.get("credHelpers") or {}
        name = helpers.get(host) or self._config.get("credsStore")
        if not name:
            return None
        logger.debug("Using credential helper '%s' for %s", name, host)
        return self._helper_factory(name)

    def _auths(self) -> dict[str, Any]:
        return self._config.get("auths") or {}

    def _find_key(self, host: str) -> Optional[str]:
        auths = self._auths()
        for key in _candidate_keys(host):
            if key in auths:
                return key
        return None

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreUnavailableError(
                f"Cannot read docker config {self._path}: {exc}"
            ) from exc
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StoreUnavailableError(
                f"Corrupt docker config {self._path}: {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise StoreUnavailableError(
                f"Corrupt docker config {self._path}: expected a JSON object"
            )
        if not _is_mapping_of(data.get("auths"), dict):
            raise StoreUnavailableError(
                f"Corrupt docker config {self._path}: 'auths' must map hosts to objects"
            )
        if not _is_mapping_of(data.get("credHelpers"), str):
            raise StoreUnavailableError(
                f"Corrupt docker config {self._path}: 'credHelpers' must map hosts to helper names"
            )
        if not isinstance(data.get("credsStore") or "", str):
            raise StoreUnavailableError(
                f"Corrupt docker config {self._path}: 'credsStore' must be a helper name"
            )
        return data

    def _save(self, config: dict[str, Any]) -> None:
        text = json.dumps(config, indent="\t") + "\n"
        try:
            _atomic_write(self._path, text, mode=0o600)
        except OSError as exc:
            raise StoreUnavailableError(
                f"Cannot write docker config {self._path}: {exc}"
            ) from exc
        self._config = config
