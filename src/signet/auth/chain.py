"""Once-per-session selection of the credential store.

:class:`StoreChain` walks a fixed list of candidate stores and settles on
exactly one, which then backs every read and write for the rest of the
session:

1. the signet credentials file, when it holds at least one entry;
2. the docker-compatible ``config.json``, when it is configured;
3. the OS secret manager, when one is available;
4. otherwise the signet credentials file anyway, so that there is always a
   writable destination.  Lookups against it simply find nothing.

Candidates are factories, called in order and only until one is selected,
so an unselected store is never opened.  Adding a backend means adding one
factory to the list.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Optional

from signet.auth.base import CredentialStore
from signet.auth.docker_store import DockerCredentialStore
from signet.auth.file_store import FileCredentialStore
from signet.auth.native_store import KeyringCredentialStore
from signet.config import credentials_file_path, docker_config_path, load_global_config
from signet.models import Credential, CredentialStoreDescriptor, GlobalConfig
from signet.output import get_output

StoreFactory = Callable[[], CredentialStore]


class StoreChain:
    """Deterministic, memoized choice among credential store candidates.

    Args:
        candidates: Store factories in priority order.  The first store
            whose ``is_configured()`` is true is selected.
        fallback: Factory for the store used when no candidate is
            configured.

    Example::

        chain = StoreChain.from_config(load_global_config())
        chain.get("registry.example.com")
    """

    def __init__(self, candidates: Sequence[StoreFactory], fallback: StoreFactory) -> None:
        self._candidates = tuple(candidates)
        self._fallback = fallback
        self._selected: Optional[CredentialStore] = None

    @classmethod
    def from_config(cls, config: Optional[GlobalConfig] = None) -> StoreChain:
        """Build the default file -> docker -> keyring chain.

        Args:
            config: Global configuration; loaded from disk when omitted.
        """
        if config is None:
            config = load_global_config()
        path = credentials_file_path(config)
        plaintext = config.allow_plaintext_put

        return cls(
            candidates=[
                lambda: FileCredentialStore(path, allow_plaintext_write=plaintext),
                lambda: DockerCredentialStore(docker_config_path(), allow_plaintext_write=plaintext),
                lambda: KeyringCredentialStore(config.keyring_service),
            ],
            fallback=lambda: FileCredentialStore(path, allow_plaintext_write=True),
        )

    def select(self) -> CredentialStore:
        """Return the store for this session, choosing it on first call.

        Raises:
            StoreUnavailableError: If a candidate that has to be examined
                cannot be opened.  No later candidate is tried.
        """
        if self._selected is not None:
            return self._selected

        output = get_output()
        for factory in self._candidates:
            store = factory()
            if store.is_configured():
                descriptor = store.descriptor
                output.debug(
                    f"Using {descriptor.kind.value} credential store: {descriptor.location}"
                )
                self._selected = store
                return store

        store = self._fallback()
        output.debug(
            "No configured credential store and no OS secret manager; "
            f"falling back to {store.descriptor.location}"
        )
        self._selected = store
        return store

    @property
    def descriptor(self) -> CredentialStoreDescriptor:
        """Descriptor of the selected store."""
        return self.select().descriptor

    def get(self, host: str) -> Credential:
        return self.select().get(host)

    def put(self, host: str, credential: Credential) -> None:
        self.select().put(host, credential)

    def delete(self, host: str) -> None:
        self.select().delete(host)
