import asyncio
from unittest.mock import Mock

import pytest
from starlette.testclient import TestClient

from tasklist.api.http import MAX_MESSAGE_BYTES, create_app
from tasklist.domain.errors import StoreError
from tasklist.services.task_service import TaskService


@pytest.fixture
def http(service):
    return TestClient(create_app(service))


def test_post_creates_task_and_get_lists_it(http):
    r = http.post("/", content=b"Kup mleko")

    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text == "created new task with ID 1\n"

    listed = http.get("/")
    assert listed.status_code == 200
    body = listed.json()
    assert len(body) == 1
    assert body[0]["Id"] == 1
    assert body[0]["Desc"] == "Kup mleko"
    assert body[0]["Done"] is False
    assert body[0]["Created"].startswith("2025-01-01T12:00:00")


def test_get_empty_store_returns_empty_array(http):
    r = http.get("/")

    assert r.status_code == 200
    assert r.json() == []


def test_list_is_ordered_by_creation_time(http):
    for desc in ("first", "second", "third"):
        http.post("/", content=desc.encode())

    body = http.get("/").json()

    assert [t["Desc"] for t in body] == ["first", "second", "third"]
    assert [t["Created"] for t in body] == sorted(t["Created"] for t in body)


def test_post_truncates_description_to_256_bytes(http):
    http.post("/", content=b"a" * 1000)

    body = http.get("/").json()
    assert body[0]["Desc"] == "a" * MAX_MESSAGE_BYTES


def test_post_empty_body_is_accepted(http):
    r = http.post("/", content=b"")

    assert r.status_code == 200
    assert http.get("/").json()[0]["Desc"] == ""


def test_delete_marks_task_done_and_leaves_others(http):
    http.post("/", content=b"A")
    http.post("/", content=b"B")

    r = http.request("DELETE", "/", content=b"1")

    assert r.status_code == 200
    assert r.text == "task 1 marked done\n"
    done = {t["Id"]: t["Done"] for t in http.get("/").json()}
    assert done == {1: True, 2: False}


def test_delete_non_numeric_body_is_400(http):
    http.post("/", content=b"A")

    r = http.request("DELETE", "/", content=b"abc")

    assert r.status_code == 400
    assert "int64" in r.text
    assert http.get("/").json()[0]["Done"] is False


def test_delete_unknown_id_is_error_and_creates_nothing(http, repo):
    http.post("/", content=b"A")

    r = http.request("DELETE", "/", content=b"99")

    assert 400 <= r.status_code < 500
    assert len(repo.list_all()) == 1
    assert [t["Id"] for t in http.get("/").json()] == [1]


@pytest.mark.parametrize("method", ["PUT", "PATCH"])
def test_unsupported_method_is_405_without_touching_store(method):
    svc = Mock(spec=TaskService)
    client = TestClient(create_app(svc))

    r = client.request(method, "/", content=b"1")

    assert r.status_code == 405
    assert svc.method_calls == []


def test_store_read_error_is_500(service, repo):
    repo.list_all = Mock(side_effect=StoreError("read from datastore", "unavailable"))
    client = TestClient(create_app(service))

    r = client.get("/")

    assert r.status_code == 500
    assert r.text == "failed to read from datastore"


def test_store_write_error_is_500(service, repo):
    repo.add = Mock(side_effect=StoreError("create task", "deadline exceeded"))
    client = TestClient(create_app(service))

    r = client.post("/", content=b"A")

    assert r.status_code == 500
    assert "deadline" not in r.text


def test_unexpected_error_is_plain_500(service, repo):
    repo.list_all = Mock(side_effect=RuntimeError("boom"))
    client = TestClient(create_app(service), raise_server_exceptions=False)

    r = client.get("/")

    assert r.status_code == 500
    assert r.text == "internal server error"


def test_delete_store_error_is_500(service, repo):
    client = TestClient(create_app(service))
    client.post("/", content=b"A")
    repo.modify = Mock(side_effect=StoreError("update task", "transaction aborted"))

    r = client.request("DELETE", "/", content=b"1")

    assert r.status_code == 500
    assert r.text == "failed to update task"


def test_client_disconnect_while_reading_body_is_500(service, repo):
    app = create_app(service)
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "POST",
        "scheme": "http",
        "path": "/",
        "raw_path": b"/",
        "root_path": "",
        "query_string": b"",
        "headers": [(b"host", b"testserver")],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }
    sent = []

    async def receive():
        return {"type": "http.disconnect"}

    async def send(message):
        sent.append(message)

    asyncio.run(app(scope, receive, send))

    start = next(m for m in sent if m["type"] == "http.response.start")
    assert start["status"] == 500
    assert repo.list_all() == []
