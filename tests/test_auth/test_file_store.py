"""Tests for the signet credentials file store."""

from __future__ import annotations

import json
import os
import stat
import sys

import pytest

from conftest import write_json
from signet.auth.base import CredentialStore
from signet.auth.file_store import FileCredentialStore
from signet.exceptions import (
    CredentialNotFoundError,
    SecretWriteRejectedError,
    StoreUnavailableError,
)
from signet.models import EMPTY_CREDENTIAL, Credential, StoreKind

HOST = "registry.example.com"


class TestLoading:
    def test_missing_file_is_empty_and_unconfigured(self, tmp_path):
        store = FileCredentialStore(tmp_path / "credentials.json")
        assert not store.is_configured()
        assert store.hosts() == []
        with pytest.raises(CredentialNotFoundError):
            store.get(HOST)

    def test_blank_file_is_empty(self, tmp_path):
        path = tmp_path / "credentials.json"
        path.write_text("  \n")
        assert not FileCredentialStore(path).is_configured()

    def test_entries_are_loaded(self, tmp_path):
        path = tmp_path / "credentials.json"
        write_json(path, {"version": 1, "auths": {HOST: {"username": "u", "password": "p"}}})
        store = FileCredentialStore(path)
        assert store.is_configured()
        assert store.get(HOST) == Credential(username="u", password="p")

    def test_empty_auths_is_unconfigured(self, tmp_path):
        path = tmp_path / "credentials.json"
        write_json(path, {"version": 1, "auths": {}})
        assert not FileCredentialStore(path).is_configured()

    def test_corrupt_json_is_unavailable(self, tmp_path):
        path = tmp_path / "credentials.json"
        path.write_text("{not json")
        with pytest.raises(StoreUnavailableError):
            FileCredentialStore(path)

    def test_invalid_entry_is_unavailable(self, tmp_path):
        path = tmp_path / "credentials.json"
        write_json(path, {"version": 1, "auths": {HOST: {"password": "p", "access_token": "t"}}})
        with pytest.raises(StoreUnavailableError):
            FileCredentialStore(path)

    def test_unknown_version_is_unavailable(self, tmp_path):
        path = tmp_path / "credentials.json"
        write_json(path, {"version": 2, "auths": {}})
        with pytest.raises(StoreUnavailableError, match="version 2"):
            FileCredentialStore(path)


class TestDescriptor:
    def test_descriptor(self, tmp_path):
        store = FileCredentialStore(tmp_path / "c.json", allow_plaintext_write=True)
        assert store.descriptor.kind is StoreKind.FILE
        assert store.descriptor.location == str(tmp_path / "c.json")
        assert store.descriptor.allow_plaintext_write is True

    def test_satisfies_protocol(self, tmp_path):
        assert isinstance(FileCredentialStore(tmp_path / "c.json"), CredentialStore)


class TestWriting:
    def test_put_then_get(self, tmp_path):
        path = tmp_path / "nested" / "credentials.json"
        store = FileCredentialStore(path, allow_plaintext_write=True)
        store.put(HOST, Credential(refresh_token="tok"))
        assert store.get(HOST) == Credential(refresh_token="tok")
        assert store.is_configured()

        reopened = FileCredentialStore(path)
        assert reopened.get(HOST) == Credential(refresh_token="tok")

    def test_file_layout(self, tmp_path):
        path = tmp_path / "credentials.json"
        store = FileCredentialStore(path, allow_plaintext_write=True)
        store.put(HOST, Credential(username="u", password="p"))
        data = json.loads(path.read_text())
        assert data == {"version": 1, "auths": {HOST: {"username": "u", "password": "p"}}}

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_file_is_private(self, tmp_path):
        path = tmp_path / "credentials.json"
        FileCredentialStore(path, allow_plaintext_write=True).put(
            HOST, Credential(username="u", password="p")
        )
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    def test_put_replaces_existing(self, tmp_path):
        store = FileCredentialStore(tmp_path / "c.json", allow_plaintext_write=True)
        store.put(HOST, Credential(username="u", password="old"))
        store.put(HOST, Credential(username="u", password="new"))
        assert store.get(HOST).password == "new"
        assert store.hosts() == [HOST]

    def test_plaintext_write_warns(self, tmp_path, quiet_output, capsys):
        path = tmp_path / "credentials.json"
        FileCredentialStore(path, allow_plaintext_write=True).put(
            HOST, Credential(username="u", password="p")
        )
        assert capsys.readouterr().err == (
            f"Warning: Credential for '{HOST}' is stored unencrypted in {path}\n"
        )

    def test_plaintext_write_rejected(self, tmp_path):
        path = tmp_path / "credentials.json"
        store = FileCredentialStore(path, allow_plaintext_write=False)
        with pytest.raises(SecretWriteRejectedError):
            store.put(HOST, Credential(username="u", password="p"))
        assert not path.exists()
        with pytest.raises(CredentialNotFoundError):
            store.get(HOST)

    def test_empty_credential_rejected(self, tmp_path):
        store = FileCredentialStore(tmp_path / "c.json", allow_plaintext_write=True)
        with pytest.raises(ValueError):
            store.put(HOST, EMPTY_CREDENTIAL)

    def test_delete(self, tmp_path):
        path = tmp_path / "c.json"
        store = FileCredentialStore(path, allow_plaintext_write=True)
        store.put(HOST, Credential(username="u", password="p"))
        store.put("other.example.com", Credential(access_token="a"))
        store.delete(HOST)
        assert store.hosts() == ["other.example.com"]
        assert FileCredentialStore(path).hosts() == ["other.example.com"]

    def test_delete_missing(self, tmp_path):
        store = FileCredentialStore(tmp_path / "c.json")
        with pytest.raises(CredentialNotFoundError) as exc_info:
            store.delete(HOST)
        assert exc_info.value.host == HOST
