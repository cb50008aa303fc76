"""Canonical Pydantic models shared across all signet modules.

This is the single source of truth for data shapes in the project.  The
models fall into two groups:

**Credential models** -- what is resolved, cached, and persisted per
registry host:
    :class:`CredentialKind`, :class:`Credential`, :data:`EMPTY_CREDENTIAL`,
    :class:`StoreKind`, :class:`CredentialStoreDescriptor`, and
    :class:`CredentialsFile`.

**Configuration and connection models**:
    :class:`SecurityDecision` and :class:`GlobalConfig`.

All models use Pydantic v2.  :class:`Credential` is frozen so that a
resolved value can be shared between the session cache and a client without
either side mutating it.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from signet.exceptions import InvalidReferenceError
from signet.reference import normalize_host


# --- Credentials ---


class CredentialKind(str, enum.Enum):
    """The single form a :class:`Credential` takes."""

    EMPTY = "empty"
    BASIC = "basic"
    REFRESH_TOKEN = "refresh_token"
    ACCESS_TOKEN = "access_token"


class Credential(BaseModel):
    """Credential material presented to one registry host.

    A credential holds exactly one of: a username/password pair, a refresh
    token (an identity token exchanged for access tokens), or an access token
    sent as-is.  A credential with no fields set is the empty credential and
    means anonymous access.

    Secret fields are excluded from ``repr`` so that a credential can appear
    in diagnostics without leaking its value.

    Example::

        Credential(username="alice", password="s3cret").kind
        # CredentialKind.BASIC
        Credential(refresh_token="s3cret") == Credential(username="", password="s3cret")
        # False
    """

    model_config = ConfigDict(frozen=True)

    username: str = ""
    password: str = Field(default="", repr=False)
    refresh_token: str = Field(default="", repr=False)
    access_token: str = Field(default="", repr=False)

    @model_validator(mode="after")
    def _check_single_form(self) -> Credential:
        forms = [
            bool(self.username or self.password),
            bool(self.refresh_token),
            bool(self.access_token),
        ]
        if sum(forms) > 1:
            raise ValueError(
                "A credential holds exactly one of username/password, "
                "refresh_token, or access_token"
            )
        return self

    @property
    def kind(self) -> CredentialKind:
        """The form this credential takes."""
        if self.refresh_token:
            return CredentialKind.REFRESH_TOKEN
        if self.access_token:
            return CredentialKind.ACCESS_TOKEN
        if self.username or self.password:
            return CredentialKind.BASIC
        return CredentialKind.EMPTY

    @property
    def is_empty(self) -> bool:
        """Whether this is the anonymous (empty) credential."""
        return self.kind is CredentialKind.EMPTY


EMPTY_CREDENTIAL = Credential()
"""The distinguished empty credential: anonymous access."""


# --- Stores ---


class StoreKind(str, enum.Enum):
    """Credential store variants, in no particular priority order."""

    FILE = "file"
    DOCKER = "docker"
    NATIVE = "native"


class CredentialStoreDescriptor(BaseModel):
    """Where a credential store lives and whether it may write plaintext."""

    model_config = ConfigDict(frozen=True)

    kind: StoreKind
    location: str = Field(description="File path or keyring service name")
    allow_plaintext_write: bool = Field(
        default=False,
        description="Whether secrets may be written unprotected to this store",
    )


class CredentialsFile(BaseModel):
    """On-disk layout of the file-backed credential store.

    Serialised as::

        {
          "version": 1,
          "auths": {
            "registry.example.com": {"username": "alice", "password": "s3cret"},
            "localhost:5000": {"refresh_token": "..."}
          }
        }
    """

    version: int = 1
    auths: dict[str, Credential] = Field(default_factory=dict)


# --- Connection ---


class SecurityDecision(str, enum.Enum):
    """Transport security chosen for a registry connection."""

    PLAIN_HTTP = "plain_http"
    TLS = "tls"

    @property
    def scheme(self) -> str:
        """URL scheme matching this decision."""
        return "http" if self is SecurityDecision.PLAIN_HTTP else "https"


# --- Global config ---


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/signet/config.json``.

    Loaded and saved by :func:`~signet.config.load_global_config` and
    :func:`~signet.config.save_global_config`.
    """

    insecure_registries: list[str] = Field(
        default_factory=list,
        description="Registry hosts (host[:port]) reached over plain HTTP",
    )
    allow_plaintext_put: bool = Field(
        default=False,
        description="Allow configured file-based stores to persist secrets unprotected",
    )
    credentials_file: Optional[str] = Field(
        default=None, description="Override path of the file-backed credential store"
    )
    keyring_service: str = Field(
        default="signet", description="Service name used in the OS secret manager"
    )

    @field_validator("insecure_registries")
    @classmethod
    def _normalize_registries(cls, value: list[str]) -> list[str]:
        try:
            return [normalize_host(entry) for entry in value]
        except InvalidReferenceError as exc:
            raise ValueError(str(exc)) from exc
