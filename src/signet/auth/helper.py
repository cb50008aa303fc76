"""Client for the docker credential-helper protocol.

A docker ``config.json`` may delegate secret storage to an external program
named ``docker-credential-<name>`` through its ``credsStore`` or
``credHelpers`` keys.  The program is driven over stdin/stdout:

- ``get``   -- stdin: the server address; stdout:
  ``{"ServerURL": ..., "Username": ..., "Secret": ...}``
- ``store`` -- stdin: the same JSON document; no output.
- ``erase`` -- stdin: the server address; no output.

A username of ``<token>`` marks the secret as an identity token, which maps
to a refresh-token :class:`~signet.models.Credential`.
"""

from __future__ import annotations

import json
import logging
import subprocess

from signet.exceptions import CredentialNotFoundError, StoreUnavailableError
from signet.models import Credential

logger = logging.getLogger(__name__)

HELPER_PREFIX = "docker-credential-"
TOKEN_USERNAME = "<token>"
_NOT_FOUND_MESSAGE = "credentials not found"


class CredentialHelper:
    """One ``docker-credential-<name>`` program.

    Args:
        name: Helper suffix, e.g. ``"desktop"`` or ``"secretservice"``.
    """

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def program(self) -> str:
        """The executable invoked for this helper."""
        return f"{HELPER_PREFIX}{self._name}"

    def get(self, host: str) -> Credential:
        """Fetch the credential for *host* from the helper.

        Raises:
            CredentialNotFoundError: If the helper has no entry for *host*.
            StoreUnavailableError: If the helper cannot be run or fails.
        """
        out = self._run("get", host, host)
        try:
            data = json.loads(out)
        except json.JSONDecodeError as exc:
            raise StoreUnavailableError(
                f"Credential helper '{self.program}' returned invalid output"
            ) from exc
        if not isinstance(data, dict):
            raise StoreUnavailableError(
                f"Credential helper '{self.program}' returned {type(data).__name__}, "
                "expected a JSON object"
            )
        username = data.get("Username") or ""
        secret = data.get("Secret") or ""
        if not isinstance(username, str) or not isinstance(secret, str):
            raise StoreUnavailableError(
                f"Credential helper '{self.program}' returned non-string credentials"
            )
        if username == TOKEN_USERNAME:
            return Credential(refresh_token=secret)
        return Credential(username=username, password=secret)

    def store(self, host: str, credential: Credential) -> None:
        """Hand *credential* for *host* to the helper."""
        if credential.refresh_token:
            username, secret = TOKEN_USERNAME, credential.refresh_token
        elif credential.access_token:
            raise StoreUnavailableError(
                f"Credential helper '{self.program}' cannot store access tokens"
            )
        else:
            username, secret = credential.username, credential.password
        payload = json.dumps({"ServerURL": host, "Username": username, "Secret": secret})
        self._run("store", payload, host)

    def erase(self, host: str) -> None:
        """Remove the entry for *host* from the helper."""
        self._run("erase", host, host)

    def _run(self, action: str, stdin: str, host: str) -> str:
        logger.debug("Running %s %s for %s", self.program, action, host)
        try:
            proc = subprocess.run(
                [self.program, action],
                input=stdin,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise StoreUnavailableError(
                f"Cannot run credential helper '{self.program}': {exc}"
            ) from exc

        if proc.returncode != 0:
            message = (proc.stdout or proc.stderr).strip()
            if _NOT_FOUND_MESSAGE in message.lower():
                raise CredentialNotFoundError(host)
            raise StoreUnavailableError(
                f"Credential helper '{self.program} {action}' failed: {message}"
            )
        return proc.stdout
