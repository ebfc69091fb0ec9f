import json
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigParseError

COMMENT_MARKERS = ("#", "//")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    JIRA_ENDPOINT: str | None = None
    JIRA_USER: str | None = None
    JIRA_PASSWORD: str | None = None
    JIRA_CLI_CONFIG: str = "~/.jira-cli.json"
    JIRA_REQUEST_TIMEOUT: float = 30.0

    @field_validator("JIRA_ENDPOINT")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        return v.rstrip("/") if v else v

    @property
    def config_path(self) -> Path:
        return Path(self.JIRA_CLI_CONFIG).expanduser()

    def environment(self) -> dict[str, Any]:
        """Credentials and endpoint taken from the environment, keyed like the config file."""
        values = {"endpoint": self.JIRA_ENDPOINT, "user": self.JIRA_USER, "password": self.JIRA_PASSWORD}
        return {key: value for key, value in values.items() if value}


class PersistedConfig(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    endpoint: str | None = None
    user: str | None = None
    password: str | None = None
    project: str | None = None
    issue_type: str | None = None
    components: list[str] | None = None
    fixversions: list[str] | None = None
    affectsversions: list[str] | None = None
    fields: dict[str, str] | None = None
    columns: list[str] | None = None
    output: Literal["table", "tsv", "json"] | None = None
    max_results: int | None = None
    color: bool | None = None
    debug: bool | None = None
    cacert: str | None = None

    @field_validator("endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        return v.rstrip("/") if v else v


def strip_comments(text: str) -> str:
    kept = [line for line in text.splitlines() if not line.lstrip().startswith(COMMENT_MARKERS)]
    return "\n".join(kept)


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read the persisted config, returning only the keys it sets (config-file spelling)."""
    path = Path(path)
    if not path.exists():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigParseError(str(path), str(e)) from e

    try:
        data = json.loads(strip_comments(text) or "{}")
    except json.JSONDecodeError as e:
        raise ConfigParseError(str(path), f"malformed JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigParseError(str(path), "top-level value must be a JSON object")

    try:
        config = PersistedConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigParseError(str(path), problems) from e
    return config.model_dump(by_alias=True, exclude_none=True)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` over ``base`` without mutating either.

    Nested dicts merge key by key. A ``None`` in ``override`` never removes
    or blanks a key from ``base``.
    """
    merged = dict(base)
    for key, value in override.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
