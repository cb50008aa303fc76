"""Tests for the docker-compatible config.json store."""

from __future__ import annotations

import base64
import json

import pytest

from conftest import write_json
from signet.auth.docker_store import DockerCredentialStore
from signet.exceptions import (
    CredentialNotFoundError,
    SecretWriteRejectedError,
    StoreUnavailableError,
)
from signet.models import Credential, StoreKind

HOST = "registry.example.com"


def _auth(user: str, password: str) -> str:
    return base64.b64encode(f"{user}:{password}".encode()).decode()


class FakeHelper:
    """Stands in for a docker-credential-<name> program."""

    instances: dict[str, "FakeHelper"] = {}

    def __init__(self, name: str) -> None:
        self.name = name
        self.entries: dict[str, Credential] = {}
        self.erased: list[str] = []
        FakeHelper.instances.setdefault(name, self)

    def get(self, host: str) -> Credential:
        helper = FakeHelper.instances[self.name]
        if host not in helper.entries:
            raise CredentialNotFoundError(host)
        return helper.entries[host]

    def store(self, host: str, credential: Credential) -> None:
        FakeHelper.instances[self.name].entries[host] = credential

    def erase(self, host: str) -> None:
        FakeHelper.instances[self.name].erased.append(host)


@pytest.fixture(autouse=True)
def _reset_helpers():
    FakeHelper.instances = {}
    yield
    FakeHelper.instances = {}


class TestConfigured:
    def test_missing_file(self, tmp_path):
        assert not DockerCredentialStore(tmp_path / "config.json").is_configured()

    def test_unrelated_settings_only(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"detachKeys": "ctrl-e,e", "auths": {}})
        assert not DockerCredentialStore(path).is_configured()

    @pytest.mark.parametrize(
        "config",
        [
            {"auths": {HOST: {"auth": "dTpw"}}},
            {"credsStore": "desktop"},
            {"credHelpers": {HOST: "ecr-login"}},
        ],
    )
    def test_configured(self, tmp_path, config):
        path = tmp_path / "config.json"
        write_json(path, config)
        store = DockerCredentialStore(path)
        assert store.is_configured()
        assert store.descriptor.kind is StoreKind.DOCKER

    @pytest.mark.parametrize("content", ["{broken", "[]", '{"auths": []}'])
    def test_corrupt(self, tmp_path, content):
        path = tmp_path / "config.json"
        path.write_text(content)
        with pytest.raises(StoreUnavailableError):
            DockerCredentialStore(path)

    @pytest.mark.parametrize(
        "config",
        [
            {"auths": {HOST: "bm90LWFuLW9iamVjdA=="}},
            {"auths": {HOST: ["u", "p"]}},
            {"credHelpers": ["ecr-login"]},
            {"credHelpers": {HOST: 42}},
            {"credsStore": {"name": "desktop"}},
        ],
    )
    def test_wrong_types(self, tmp_path, config):
        path = tmp_path / "config.json"
        write_json(path, config)
        with pytest.raises(StoreUnavailableError, match="Corrupt docker config"):
            DockerCredentialStore(path)


class TestInlineAuths:
    def test_basic_auth(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"auths": {HOST: {"auth": _auth("u", "p:with:colons")}}})
        assert DockerCredentialStore(path).get(HOST) == Credential(
            username="u", password="p:with:colons"
        )

    def test_identity_token(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"auths": {HOST: {"auth": _auth("u", "p"), "identitytoken": "tok"}}})
        assert DockerCredentialStore(path).get(HOST) == Credential(refresh_token="tok")

    def test_registry_token(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"auths": {HOST: {"registrytoken": "access"}}})
        assert DockerCredentialStore(path).get(HOST) == Credential(access_token="access")

    def test_url_style_key(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"auths": {f"https://{HOST}": {"auth": _auth("u", "p")}}})
        assert DockerCredentialStore(path).get(HOST).username == "u"

    def test_docker_hub_legacy_key(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"auths": {"https://index.docker.io/v1/": {"auth": _auth("hub", "p")}}})
        assert DockerCredentialStore(path).get("docker.io").username == "hub"

    def test_missing_host(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"auths": {"other.example.com": {"auth": _auth("u", "p")}}})
        with pytest.raises(CredentialNotFoundError):
            DockerCredentialStore(path).get(HOST)

    def test_empty_entry_is_not_found(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"auths": {HOST: {}}})
        with pytest.raises(CredentialNotFoundError):
            DockerCredentialStore(path).get(HOST)

    def test_bad_base64(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"auths": {HOST: {"auth": "!!!"}}})
        with pytest.raises(StoreUnavailableError):
            DockerCredentialStore(path).get(HOST)

    @pytest.mark.parametrize("field", ["auth", "identitytoken", "registrytoken", "username"])
    def test_non_string_field(self, tmp_path, field):
        path = tmp_path / "config.json"
        write_json(path, {"auths": {HOST: {field: 123}}})
        with pytest.raises(StoreUnavailableError, match=field):
            DockerCredentialStore(path).get(HOST)

    def test_put_preserves_other_keys(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"detachKeys": "ctrl-e,e", "auths": {"other.example.com": {"auth": "eDp5"}}})
        store = DockerCredentialStore(path, allow_plaintext_write=True)
        store.put(HOST, Credential(username="u", password="p"))

        data = json.loads(path.read_text())
        assert data["detachKeys"] == "ctrl-e,e"
        assert data["auths"]["other.example.com"] == {"auth": "eDp5"}
        assert data["auths"][HOST] == {"auth": _auth("u", "p")}
        assert store.get(HOST) == Credential(username="u", password="p")

    def test_put_creates_file(self, tmp_path, quiet_output, capsys):
        path = tmp_path / "docker" / "config.json"
        store = DockerCredentialStore(path, allow_plaintext_write=True)
        store.put(HOST, Credential(refresh_token="tok"))
        assert json.loads(path.read_text()) == {"auths": {HOST: {"identitytoken": "tok"}}}
        assert "stored unencrypted" in capsys.readouterr().err

    def test_put_rejected_without_plaintext(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"auths": {}})
        store = DockerCredentialStore(path, allow_plaintext_write=False)
        with pytest.raises(SecretWriteRejectedError):
            store.put(HOST, Credential(username="u", password="p"))
        assert json.loads(path.read_text()) == {"auths": {}}

    def test_delete(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"auths": {f"https://{HOST}": {"auth": _auth("u", "p")}}})
        store = DockerCredentialStore(path)
        store.delete(HOST)
        assert json.loads(path.read_text()) == {"auths": {}}
        with pytest.raises(CredentialNotFoundError):
            store.delete(HOST)


class TestHelpers:
    def test_creds_store_used_for_get(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"credsStore": "desktop", "auths": {HOST: {"auth": _auth("inline", "p")}}})
        store = DockerCredentialStore(path, helper_factory=FakeHelper)
        FakeHelper("desktop").entries[HOST] = Credential(username="helper", password="p")
        assert store.get(HOST).username == "helper"

    def test_cred_helpers_win_over_creds_store(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"credsStore": "desktop", "credHelpers": {HOST: "ecr-login"}})
        FakeHelper("desktop").entries[HOST] = Credential(username="desktop", password="p")
        FakeHelper("ecr-login").entries[HOST] = Credential(username="ecr", password="p")
        store = DockerCredentialStore(path, helper_factory=FakeHelper)
        assert store.get(HOST).username == "ecr"

    def test_put_through_helper_ignores_plaintext_policy(self, tmp_path, quiet_output, capsys):
        path = tmp_path / "config.json"
        write_json(path, {"credsStore": "desktop"})
        store = DockerCredentialStore(path, allow_plaintext_write=False, helper_factory=FakeHelper)
        store.put(HOST, Credential(username="u", password="p"))
        assert FakeHelper.instances["desktop"].entries[HOST].username == "u"
        assert "unencrypted" not in capsys.readouterr().err
        assert json.loads(path.read_text()) == {"credsStore": "desktop"}

    def test_delete_through_helper(self, tmp_path):
        path = tmp_path / "config.json"
        write_json(path, {"credHelpers": {HOST: "ecr-login"}})
        store = DockerCredentialStore(path, helper_factory=FakeHelper)
        store.delete(HOST)
        assert FakeHelper.instances["ecr-login"].erased == [HOST]
