import pytest

from jira_cli.config import Settings, deep_merge, load_config_file, strip_comments
from jira_cli.errors import ConfigParseError


def test_strip_comments_drops_full_comment_lines():
    text = '# leading\n{\n  // inline style\n  "endpoint": "http://x#y"\n}\n'
    assert strip_comments(text) == '{\n  "endpoint": "http://x#y"\n}'


def test_missing_file_is_empty(tmp_path):
    assert load_config_file(tmp_path / "nope.json") == {}


def test_load_returns_only_set_keys(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        "# personal defaults\n"
        '{"endpoint": "https://jira.example.com/", "issueType": "Bug",\n'
        ' "fields": {"labels": "triage"}, "maxResults": 10}\n'
    )
    assert load_config_file(path) == {
        "endpoint": "https://jira.example.com",
        "issueType": "Bug",
        "fields": {"labels": "triage"},
        "maxResults": 10,
    }


def test_malformed_json_is_fatal(tmp_path):
    path = tmp_path / "config.json"
    path.write_text('{"endpoint": ')
    with pytest.raises(ConfigParseError, match="malformed JSON"):
        load_config_file(path)


def test_non_object_root_is_fatal(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2]")
    with pytest.raises(ConfigParseError):
        load_config_file(path)


def test_unknown_keys_are_rejected(tmp_path):
    path = tmp_path / "config.json"
    path.write_text('{"endpiont": "http://typo"}')
    with pytest.raises(ConfigParseError, match="endpiont"):
        load_config_file(path)


def test_wrong_value_types_are_rejected(tmp_path):
    path = tmp_path / "config.json"
    path.write_text('{"components": "Backend"}')
    with pytest.raises(ConfigParseError, match="components"):
        load_config_file(path)


def test_deep_merge_nested_maps():
    base = {"endpoint": "a", "fields": {"x": "1", "y": "2"}}
    override = {"fields": {"y": "3", "z": "4"}, "project": "P"}
    assert deep_merge(base, override) == {"endpoint": "a", "fields": {"x": "1", "y": "3", "z": "4"}, "project": "P"}
    assert base == {"endpoint": "a", "fields": {"x": "1", "y": "2"}}


def test_deep_merge_cannot_remove_keys():
    assert deep_merge({"endpoint": "a", "fields": {}}, {"endpoint": None, "fields": None}) == {
        "endpoint": "a",
        "fields": {},
    }


def test_settings_from_environment(isolated_env, monkeypatch):
    monkeypatch.setenv("JIRA_ENDPOINT", "https://jira.example.com/")
    monkeypatch.setenv("JIRA_USER", "alice")
    settings = Settings()
    assert settings.environment() == {"endpoint": "https://jira.example.com", "user": "alice"}
    assert settings.config_path == isolated_env
