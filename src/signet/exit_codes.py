"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~signet.exceptions.SignetError` subclass.  The
command-line layer that consumes this package translates a raised error into
the process exit status, so shell wrappers can tell a bad reference from an
unreachable credential store without parsing stderr.
"""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_REFERENCE = 2
"""An artifact reference or registry address could not be parsed."""

EXIT_AUTH_FAILURE = 3
"""The registry rejected the presented credentials."""

EXIT_STORE_UNAVAILABLE = 4
"""The selected credential store could not be opened, read, or written."""

EXIT_CREDENTIAL_NOT_FOUND = 5
"""No credential is stored for the requested registry."""

EXIT_SECRET_WRITE_REJECTED = 6
"""A credential write was refused because it would be stored in plaintext."""
