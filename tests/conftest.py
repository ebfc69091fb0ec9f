"""Shared fixtures; also puts the project root on sys.path when not installed."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def issue() -> dict:
    return {
        "id": "12345",
        "key": "PROJ-7",
        "self": "https://jira.example.com/rest/api/2/issue/12345",
        "fields": {
            "summary": "Login\r\n fails  on Windows",
            "description": "Steps:\r\n1. open\r\n2. click",
            "created": "2023-01-05T10:15:00.000+0000",
            "updated": "2023-01-06T08:00:00.000+0000",
            "priority": {"name": "Major"},
            "status": {"name": "Open"},
            "assignee": {"name": "alice", "displayName": "Alice"},
            "reporter": {"name": "bob"},
            "resolution": None,
            "components": [{"name": "Backend"}, {"name": "API"}],
            "fixVersions": [{"name": "1.0"}],
            "versions": [],
            "customfield_10010": "Sprint 4",
        },
    }


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """No .env, no home config and no JIRA_* variables leak into a test."""
    monkeypatch.chdir(tmp_path)
    for name in ("JIRA_ENDPOINT", "JIRA_USER", "JIRA_PASSWORD", "JIRA_REQUEST_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    config_path = tmp_path / "jira-cli.json"
    monkeypatch.setenv("JIRA_CLI_CONFIG", str(config_path))
    return config_path
