import json
from dataclasses import dataclass, field
from typing import Any

import pytest
import requests

from jira_cli.client import JiraClient
from jira_cli.errors import NotFoundError, RemoteError


@dataclass
class _DummyResponse:
    status_code: int
    payload: Any = None
    reason: str = "OK"

    def json(self) -> Any:
        return self.payload

    @property
    def text(self) -> str:
        return "" if self.payload is None else json.dumps(self.payload)

    @property
    def content(self) -> bytes:
        return self.text.encode()


@dataclass
class _DummySession:
    responses: list = field(default_factory=list)
    request_log: list = field(default_factory=list)
    headers: dict = field(default_factory=dict)
    auth: Any = None
    verify: Any = True
    closed: bool = False

    def request(self, method, url, json=None, params=None, timeout=None):
        self.request_log.append({"method": method, "url": url, "json": json, "params": params, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


def _client(*responses, **kwargs):
    session = _DummySession(list(responses))
    client = JiraClient("https://jira.example.com/", "alice", "secret", session=session, **kwargs)
    return client, session


def test_session_setup():
    client, session = _client(cacert="/etc/ca.pem", timeout=5)
    assert session.auth == ("alice", "secret")
    assert session.headers["Accept"] == "application/json"
    assert session.verify == "/etc/ca.pem"


def test_fetch_by_id_and_key():
    client, session = _client(_DummyResponse(200, {"id": "1"}), _DummyResponse(200, {"key": "P-1"}))
    assert client.fetch_issue_by_id("00123") == {"id": "1"}
    assert client.fetch_issue_by_key("P-1") == {"key": "P-1"}
    assert session.request_log[0]["url"] == "https://jira.example.com/rest/api/2/issue/123"
    assert session.request_log[1]["url"] == "https://jira.example.com/rest/api/2/issue/P-1"


def test_search_passes_jql():
    client, session = _client(_DummyResponse(200, {"issues": [{"key": "P-1"}]}))
    assert client.search("project = P", 10) == [{"key": "P-1"}]
    assert session.request_log[0]["params"] == {"jql": "project = P", "maxResults": 10}
    assert session.request_log[0]["timeout"] == 30.0


def test_comment_and_transition_bodies():
    client, session = _client(_DummyResponse(201, {"id": "9"}), _DummyResponse(204))
    assert client.post_comment("P-1", "hello") == {"id": "9"}
    client.post_transition("P-1", "31", {"resolution": {"name": "Fixed"}})
    assert session.request_log[0]["json"] == {"body": "hello"}
    assert session.request_log[1]["json"] == {"transition": {"id": "31"}, "fields": {"resolution": {"name": "Fixed"}}}


def test_update_and_create_bodies():
    client, session = _client(_DummyResponse(204), _DummyResponse(201, {"id": "2", "key": "P-2"}))
    client.update_issue("P-1", {"summary": "s"}, {"components": [{"add": {"name": "API"}}]})
    created = client.create_issue("P", "Bug", {"summary": "s"})
    assert session.request_log[0]["method"] == "PUT"
    assert session.request_log[0]["json"] == {
        "fields": {"summary": "s"},
        "update": {"components": [{"add": {"name": "API"}}]},
    }
    assert session.request_log[1]["json"] == {
        "fields": {"project": {"key": "P"}, "issuetype": {"name": "Bug"}, "summary": "s"}
    }
    assert created["key"] == "P-2"


def test_delete():
    client, session = _client(_DummyResponse(204))
    client.delete_issue("P-1")
    assert session.request_log[0]["method"] == "DELETE"


def test_not_found():
    client, _ = _client(_DummyResponse(404, {"errorMessages": ["Issue Does Not Exist"]}, "Not Found"))
    with pytest.raises(NotFoundError) as excinfo:
        client.fetch_issue_by_key("P-404")
    assert excinfo.value.status == 404
    assert "Issue Does Not Exist" in excinfo.value.body


def test_http_error_carries_status_and_body():
    client, session = _client(_DummyResponse(500, {"message": "boom"}, "Server Error"))
    with pytest.raises(RemoteError) as excinfo:
        client.search("x")
    assert excinfo.value.status == 500
    assert "boom" in str(excinfo.value)
    assert len(session.request_log) == 1


def test_transport_error():
    client, _ = _client(requests.ConnectionError("refused"))
    with pytest.raises(RemoteError, match="refused"):
        client.fetch_comments("P-1")


def test_context_manager_closes_session():
    client, session = _client()
    with client:
        pass
    assert session.closed
