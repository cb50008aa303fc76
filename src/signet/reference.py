"""Artifact reference and registry address parsing.

An artifact reference has the form::

    <registry>/<repository>[:<tag>|@<digest>]

e.g. ``localhost:5000/net-monitor:v1`` or
``registry.example.com/team/app@sha256:9f86d0...``.  The *registry* part is
the network address (``host[:port]``) used for credential lookup and
transport security decisions; repository, tag and digest never influence
either.

Parsing is strict and happens before any I/O so that a malformed reference
fails fast with :class:`~signet.exceptions.InvalidReferenceError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from signet.exceptions import InvalidReferenceError

_REPOSITORY_RE = re.compile(
    r"^[a-z0-9]+(?:(?:[._]|__|[-]*)[a-z0-9]+)*"
    r"(?:/[a-z0-9]+(?:(?:[._]|__|[-]*)[a-z0-9]+)*)*$"
)
_TAG_RE = re.compile(r"^[\w][\w.-]{0,127}$")
_DIGEST_RE = re.compile(r"^[a-z0-9]+(?:[.+_-][a-z0-9]+)*:[a-zA-Z0-9=_-]+$")

DOCKER_HUB_REGISTRY = "docker.io"
DOCKER_HUB_HOST = "registry-1.docker.io"


def normalize_host(address: str) -> str:
    """Validate a ``host[:port]`` registry address and return its normal form.

    The host name is lower-cased (host names are case-insensitive); the port
    and everything else is kept as written.  IPv6 literals must be bracketed.

    Raises:
        InvalidReferenceError: If *address* is not a bare ``host[:port]``.
    """
    if not address or address != address.strip():
        raise InvalidReferenceError(f"Invalid registry address: '{address}'")
    try:
        parts = urlsplit(f"//{address}")
        hostname = parts.hostname
        port = parts.port
    except ValueError as exc:
        raise InvalidReferenceError(f"Invalid registry address '{address}': {exc}") from exc
    if (
        not hostname
        or parts.netloc != address
        or parts.path
        or parts.query
        or parts.fragment
        or "@" in parts.netloc
    ):
        raise InvalidReferenceError(f"Invalid registry address: '{address}'")

    host = f"[{hostname}]" if ":" in hostname else hostname
    return host if port is None else f"{host}:{port}"


def split_host_port(host: str) -> tuple[str, Optional[int]]:
    """Split a normalized ``host[:port]`` into its address portion and port.

    IPv6 brackets are removed from the returned address.
    """
    parts = urlsplit(f"//{host}")
    return parts.hostname or host, parts.port


@dataclass(frozen=True)
class Reference:
    """A parsed artifact reference.

    Attributes:
        registry: Normalized ``host[:port]`` as written in the reference.
        repository: Repository path inside the registry.
        reference: Tag or digest, or ``None`` when neither was given.
    """

    registry: str
    repository: str
    reference: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> Reference:
        """Parse ``<registry>/<repository>[:<tag>|@<digest>]``.

        When both a tag and a digest are present the digest wins and the
        tag is dropped.

        Raises:
            InvalidReferenceError: On any syntax error.
        """
        registry, sep, path = raw.partition("/")
        if not sep or not path:
            raise InvalidReferenceError(
                f"Invalid reference '{raw}': missing repository"
            )

        reference: Optional[str] = None
        if "@" in path:
            repository, _, digest = path.partition("@")
            if not _DIGEST_RE.match(digest):
                raise InvalidReferenceError(f"Invalid reference '{raw}': bad digest '{digest}'")
            if ":" in repository.rsplit("/", 1)[-1]:
                # a tag in front of the digest is informational only
                repository = repository.rpartition(":")[0]
            reference = digest
        elif ":" in path.rsplit("/", 1)[-1]:
            repository, _, tag = path.rpartition(":")
            if not _TAG_RE.match(tag):
                raise InvalidReferenceError(f"Invalid reference '{raw}': bad tag '{tag}'")
            reference = tag
        else:
            repository = path

        if not _REPOSITORY_RE.match(repository):
            raise InvalidReferenceError(
                f"Invalid reference '{raw}': bad repository '{repository}'"
            )
        return cls(registry=normalize_host(registry), repository=repository, reference=reference)

    @property
    def host(self) -> str:
        """The host to connect to; Docker Hub's alias maps to its API endpoint."""
        if self.registry == DOCKER_HUB_REGISTRY:
            return DOCKER_HUB_HOST
        return self.registry

    @property
    def is_digest(self) -> bool:
        """Whether :attr:`reference` is a digest rather than a tag."""
        return self.reference is not None and _DIGEST_RE.match(self.reference) is not None

    def __str__(self) -> str:
        base = f"{self.registry}/{self.repository}"
        if self.reference is None:
            return base
        return f"{base}@{self.reference}" if self.is_digest else f"{base}:{self.reference}"
