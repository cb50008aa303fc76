"""In-memory credential cache for one resolution session.

The cache maps a normalized registry host to the credential resolved for it,
including the empty credential, so that every later resolution for the same
host in the same session is free of store I/O.  Keys are hosts, never full
references: ``registry.example.com/app:v1`` and
``registry.example.com/app@sha256:...`` share one entry.

Nothing here is persisted.  The cache object is created by the caller and
handed to the resolver, so tests can inspect it directly.
"""

from __future__ import annotations

from typing import Optional

from signet.models import Credential


class CredentialCache:
    """Host-keyed credential cache that lives as long as the process.

    Example::

        cache = CredentialCache()
        cache.set("registry.example.com", Credential(username="u", password="p"))
        cache.get("registry.example.com")
    """

    def __init__(self) -> None:
        self._entries: dict[str, Credential] = {}

    def get(self, host: str) -> Optional[Credential]:
        """Return the cached credential for *host*, or ``None`` on a miss.

        A hit may be the empty credential; callers must distinguish it from
        ``None``.
        """
        return self._entries.get(host)

    def set(self, host: str, credential: Credential) -> None:
        """Cache *credential* for *host*, replacing any previous entry."""
        self._entries[host] = credential

    def invalidate(self, host: str) -> None:
        """Remove the entry for *host* if there is one."""
        self._entries.pop(host, None)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def __contains__(self, host: object) -> bool:
        return host in self._entries

    def __len__(self) -> int:
        return len(self._entries)
