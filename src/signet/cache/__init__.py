"""Session-scoped credential caching for signet.

This package provides :class:`CredentialCache`, the in-memory cache that
:class:`~signet.auth.resolver.CredentialResolver` consults before touching a
credential store.  Entries are keyed by registry host only and are never
written to disk.
"""

from signet.cache.cache import CredentialCache

__all__ = ["CredentialCache"]
