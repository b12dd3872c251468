from unittest.mock import Mock

import pytest
from google.cloud import datastore

from tasklist.adapters.datastore import credentials as creds_mod
from tasklist.adapters.datastore.task_repo import DatastoreTaskRepository
from tasklist.adapters.memory.task_repo import InMemoryTaskRepository
from tasklist.adapters.sql.task_repo import SqlTaskRepository
from tasklist.app.bootstrap import build_repository, build_service
from tasklist.app.settings import AppSettings
from tasklist.domain.errors import CredentialsError, StoreError


def test_memory_backend():
    repo = build_repository(AppSettings(backend="memory"))
    assert isinstance(repo, InMemoryTaskRepository)


def test_sql_backend(tmp_path):
    repo = build_repository(AppSettings(backend="sql", sql_url=f"sqlite:///{tmp_path / 'x.db'}"))
    assert isinstance(repo, SqlTaskRepository)


def test_datastore_backend_builds_one_client(monkeypatch):
    monkeypatch.setattr(creds_mod, "parse_credentials", Mock(return_value=("CREDS", "demo-project")))
    client_cls = Mock()
    monkeypatch.setattr(datastore, "Client", client_cls)

    service = build_service(AppSettings(backend="datastore", service_name="svc", vcap_services="{}"))

    client_cls.assert_called_once_with(project="demo-project", credentials="CREDS")
    assert isinstance(service.repo, DatastoreTaskRepository)
    assert service.repo.client is client_cls.return_value


def test_datastore_backend_without_credentials_raises():
    with pytest.raises(CredentialsError):
        build_repository(AppSettings(backend="datastore", service_name=None, vcap_services=None))


def test_datastore_client_failure_becomes_store_error(monkeypatch):
    monkeypatch.setattr(creds_mod, "parse_credentials", Mock(return_value=("CREDS", None)))
    monkeypatch.setattr(datastore, "Client", Mock(side_effect=OSError("Project was not passed")))

    with pytest.raises(StoreError) as exc:
        build_repository(AppSettings(backend="datastore", service_name="svc", vcap_services="{}"))

    assert exc.value.operation == "create datastore client"
    assert "Project was not passed" in str(exc.value)
