"""Tests for signet.models -- credential forms and enums."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from signet.models import (
    EMPTY_CREDENTIAL,
    Credential,
    CredentialKind,
    CredentialsFile,
    GlobalConfig,
    SecurityDecision,
)


class TestCredential:
    def test_empty_sentinel(self) -> None:
        assert EMPTY_CREDENTIAL.is_empty
        assert EMPTY_CREDENTIAL.kind is CredentialKind.EMPTY
        assert Credential() == EMPTY_CREDENTIAL

    def test_basic(self) -> None:
        cred = Credential(username="u", password="p")
        assert cred.kind is CredentialKind.BASIC
        assert not cred.is_empty

    def test_refresh_token(self) -> None:
        assert Credential(refresh_token="t").kind is CredentialKind.REFRESH_TOKEN

    def test_access_token(self) -> None:
        assert Credential(access_token="t").kind is CredentialKind.ACCESS_TOKEN

    def test_refresh_token_not_equal_to_password(self) -> None:
        assert Credential(refresh_token="same") != Credential(password="same")
        assert Credential(refresh_token="same") != Credential(username="u", password="same")

    @pytest.mark.parametrize(
        "fields",
        [
            {"username": "u", "password": "p", "refresh_token": "r"},
            {"password": "p", "access_token": "a"},
            {"refresh_token": "r", "access_token": "a"},
        ],
    )
    def test_multiple_forms_rejected(self, fields: dict[str, str]) -> None:
        with pytest.raises(ValidationError):
            Credential(**fields)

    def test_frozen(self) -> None:
        cred = Credential(username="u", password="p")
        with pytest.raises(ValidationError):
            cred.password = "other"  # type: ignore[misc]

    def test_repr_hides_secrets(self) -> None:
        text = repr(Credential(username="alice", password="hunter2"))
        assert "alice" in text
        assert "hunter2" not in text
        assert "tok-secret" not in repr(Credential(refresh_token="tok-secret"))

    def test_hashable(self) -> None:
        assert len({Credential(access_token="a"), Credential(access_token="a")}) == 1


class TestCredentialsFile:
    def test_defaults(self) -> None:
        data = CredentialsFile()
        assert data.version == 1
        assert data.auths == {}

    def test_validate_entries(self) -> None:
        data = CredentialsFile.model_validate(
            {"version": 1, "auths": {"r.example.com": {"refresh_token": "t"}}}
        )
        assert data.auths["r.example.com"] == Credential(refresh_token="t")


class TestSecurityDecision:
    def test_scheme(self) -> None:
        assert SecurityDecision.PLAIN_HTTP.scheme == "http"
        assert SecurityDecision.TLS.scheme == "https"


class TestGlobalConfig:
    def test_defaults(self) -> None:
        config = GlobalConfig()
        assert config.insecure_registries == []
        assert config.allow_plaintext_put is False
        assert config.credentials_file is None
        assert config.keyring_service == "signet"

    def test_insecure_registries_are_normalized(self) -> None:
        config = GlobalConfig(insecure_registries=["Registry.Example.com:5000", "localhost"])
        assert config.insecure_registries == ["registry.example.com:5000", "localhost"]

    def test_invalid_insecure_registry(self) -> None:
        with pytest.raises(ValidationError):
            GlobalConfig(insecure_registries=["https://registry.example.com"])
