import base64
import json
from unittest.mock import Mock

import pytest

from tasklist.adapters.datastore import credentials as creds_mod
from tasklist.adapters.datastore.credentials import DATASTORE_SCOPE, parse_credentials
from tasklist.app.settings import AppSettings
from tasklist.domain.errors import CredentialsError

KEY_INFO = {"type": "service_account", "project_id": "demo-project", "client_email": "svc@demo.iam"}


def encoded_key(info=KEY_INFO) -> str:
    return base64.b64encode(json.dumps(info).encode()).decode()


@pytest.fixture
def fake_loader(monkeypatch):
    loader = Mock(return_value=("CREDS", "demo-project"))
    monkeypatch.setattr(creds_mod.google.auth, "load_credentials_from_dict", loader)
    return loader


def test_parses_map_form(fake_loader):
    vcap = json.dumps({"my-datastore": {"credentials": {"PrivateKeyData": encoded_key()}}})

    credentials, project = parse_credentials("my-datastore", vcap)

    assert credentials == "CREDS"
    assert project == "demo-project"
    fake_loader.assert_called_once_with(KEY_INFO, scopes=[DATASTORE_SCOPE])


def test_parses_cloud_foundry_list_form(fake_loader):
    vcap = json.dumps({
        "google-datastore": [
            {"name": "other", "credentials": {"PrivateKeyData": "bm9wZQ=="}},
            {"name": "my-datastore", "credentials": {"PrivateKeyData": encoded_key()}},
        ]
    })

    parse_credentials("my-datastore", vcap)

    fake_loader.assert_called_once_with(KEY_INFO, scopes=[DATASTORE_SCOPE])


@pytest.mark.parametrize("service_name", [None, ""])
def test_service_name_is_required(service_name, fake_loader):
    with pytest.raises(CredentialsError, match="SERVICE_NAME is required"):
        parse_credentials(service_name, "{}")
    fake_loader.assert_not_called()


@pytest.mark.parametrize(
    "vcap, message",
    [
        (None, "not valid JSON"),
        ("not json", "not valid JSON"),
        ("[]", "JSON object"),
        ("{}", "not bound"),
        (json.dumps({"svc": {}}), "does not have credentials"),
        (json.dumps({"svc": {"credentials": {}}}), "PrivateKeyData"),
        (json.dumps({"svc": {"credentials": {"PrivateKeyData": "!!!"}}}), "base64"),
    ],
)
def test_malformed_vcap_services(vcap, message, fake_loader):
    with pytest.raises(CredentialsError, match=message):
        parse_credentials("svc", vcap)


def test_loader_failure_is_credentials_error(monkeypatch):
    monkeypatch.setattr(
        creds_mod.google.auth,
        "load_credentials_from_dict",
        Mock(side_effect=ValueError("missing private_key")),
    )
    vcap = json.dumps({"svc": {"credentials": {"PrivateKeyData": encoded_key()}}})

    with pytest.raises(CredentialsError, match="missing private_key"):
        parse_credentials("svc", vcap)


def test_settings_read_platform_environment(monkeypatch):
    monkeypatch.setenv("PORT", "9090")
    monkeypatch.setenv("SERVICE_NAME", "svc")
    monkeypatch.setenv("VCAP_SERVICES", "{}")
    monkeypatch.setenv("TASKLIST_BACKEND", "sql")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = AppSettings()

    assert settings.port == 9090
    assert settings.service_name == "svc"
    assert settings.vcap_services == "{}"
    assert settings.backend == "sql"
    assert settings.log_level == "DEBUG"


def test_settings_defaults(monkeypatch):
    for name in ("PORT", "SERVICE_NAME", "VCAP_SERVICES", "TASKLIST_BACKEND", "BACKEND"):
        monkeypatch.delenv(name, raising=False)

    settings = AppSettings(_env_file=None)

    assert settings.port == 8080
    assert settings.backend == "datastore"
    assert settings.service_name is None
