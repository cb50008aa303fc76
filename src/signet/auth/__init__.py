"""Registry credential stores, store selection, and credential resolution.

The main entry points are:

- :class:`CredentialStore` -- the protocol every credential backend satisfies.
- :class:`FileCredentialStore`, :class:`DockerCredentialStore`,
  :class:`KeyringCredentialStore` -- the three backends.
- :class:`StoreChain` -- picks one backend per session.
- :class:`CredentialResolver` -- explicit input, then session cache, then store.
- :class:`CredentialManager` -- login/logout against the selected store.

Typical usage::

    from signet.auth import CredentialResolver, StoreChain
    from signet.cache import CredentialCache

    resolver = CredentialResolver(StoreChain.from_config(), CredentialCache())
    credential = resolver.resolve("registry.example.com")
"""

from signet.auth.base import CredentialStore
from signet.auth.chain import StoreChain
from signet.auth.docker_store import DockerCredentialStore
from signet.auth.file_store import FileCredentialStore
from signet.auth.helper import CredentialHelper
from signet.auth.manager import CredentialManager
from signet.auth.native_store import KeyringCredentialStore
from signet.auth.resolver import CredentialResolver

__all__ = [
    "CredentialHelper",
    "CredentialManager",
    "CredentialResolver",
    "CredentialStore",
    "DockerCredentialStore",
    "FileCredentialStore",
    "KeyringCredentialStore",
    "StoreChain",
]
