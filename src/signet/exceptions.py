"""Exception hierarchy for signet.

All exceptions inherit from :class:`SignetError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`signet.exit_codes`.

Subclass hierarchy::

    SignetError (exit 1)
    +-- InvalidReferenceError         (exit 2)
    +-- AuthError                     (exit 3)
    +-- ConfigError                   (exit 1)
    +-- StoreError                    (exit 1)
        +-- StoreUnavailableError     (exit 4)
        +-- CredentialNotFoundError   (exit 5)
        +-- SecretWriteRejectedError  (exit 6)

:class:`CredentialNotFoundError` is raised by individual credential stores.
The resolver converts it into the empty credential because anonymous access
to a registry is valid; every other :class:`StoreError` propagates.
"""

from signet.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CREDENTIAL_NOT_FOUND,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_REFERENCE,
    EXIT_SECRET_WRITE_REJECTED,
    EXIT_STORE_UNAVAILABLE,
)


class SignetError(Exception):
    """Base exception for all signet errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidReferenceError(SignetError):
    """Raised for malformed artifact references or registry addresses."""

    exit_code = EXIT_INVALID_REFERENCE


class AuthError(SignetError):
    """Raised when a registry token endpoint rejects the presented credential."""

    exit_code = EXIT_AUTH_FAILURE


class ConfigError(SignetError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE


class StoreError(SignetError):
    """Base class for credential store failures."""

    exit_code = EXIT_GENERIC_FAILURE


class StoreUnavailableError(StoreError):
    """Raised when a credential store cannot be opened, read, or written.

    Covers permission problems, corrupt files, and an unreachable OS secret
    manager.  Never retried and never silently replaced by another store.
    """

    exit_code = EXIT_STORE_UNAVAILABLE


class CredentialNotFoundError(StoreError):
    """Raised by a store when it holds no entry for the requested host."""

    exit_code = EXIT_CREDENTIAL_NOT_FOUND

    def __init__(self, host: str):
        super().__init__(f"No credential stored for '{host}'")
        self.host = host


class SecretWriteRejectedError(StoreError):
    """Raised when a write would persist a secret in plaintext and that is disallowed."""

    exit_code = EXIT_SECRET_WRITE_REJECTED
