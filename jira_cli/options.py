from enum import Enum
from typing import Any, Iterable, Literal, Mapping, Sequence

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .columns import DEFAULT_COLUMNS
from .config import deep_merge
from .errors import UsageError


class Command(str, Enum):
    QUERY = "query"
    VIEW = "view"
    VIEW_FIELD = "viewfield"
    COMMENT = "comment"
    TRANSITION = "transition"
    EDIT = "edit"
    CREATE = "create"
    DELETE = "delete"


class OptionSet(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, extra="forbid")

    endpoint: str
    user: str | None = None
    password: str | None = None
    command: Command | None = None

    issue: str | None = None
    jql: str | None = None
    field_name: str | None = None
    comment_text: str | None = None
    state: str | None = None
    resolution: str | None = None

    project: str | None = None
    issue_type: str | None = None
    summary: str | None = None
    description: str | None = None
    assignee: str | None = None
    priority: str | None = None
    components: tuple[str, ...] = ()
    fixversions: tuple[str, ...] = ()
    affectsversions: tuple[str, ...] = ()
    fields: dict[str, str] = {}

    columns: tuple[str, ...] = ()
    output: Literal["table", "tsv", "json"] = "table"
    max_results: int = 50
    detail: bool = False
    debug: bool = False
    color: bool = True
    cacert: str | None = None

    def redacted(self) -> dict[str, Any]:
        values = self.model_dump(by_alias=True, mode="json")
        if self.password:
            values["password"] = "*" * len(self.password)
        return values


DEFAULTS: dict[str, Any] = {
    "endpoint": "http://localhost:8080",
    "fields": {},
    "components": [],
    "fixversions": [],
    "affectsversions": [],
    "columns": [],
    "output": "table",
    "maxResults": 50,
    "detail": False,
    "debug": False,
    "color": True,
}

ACCUMULATING = ("components", "fixversions", "affectsversions")

# positional argument names, in order, after the command name; a trailing "*" soaks up the rest
POSITIONALS: dict[Command, tuple[str, ...]] = {
    Command.QUERY: ("jql*",),
    Command.VIEW: ("issue",),
    Command.VIEW_FIELD: ("issue", "fieldName"),
    Command.COMMENT: ("issue", "commentText*"),
    Command.TRANSITION: ("issue", "state"),
    Command.EDIT: ("issue",),
    Command.CREATE: (),
    Command.DELETE: ("issue",),
}


def expand_columns(value: str | Iterable[str]) -> list[str]:
    """Split comma-separated column lists and expand ``default`` in place."""
    parts = value.split(",") if isinstance(value, str) else [p for item in value for p in item.split(",")]
    columns: list[str] = []
    for part in (p.strip() for p in parts):
        if not part:
            continue
        if part == "default":
            columns.extend(DEFAULT_COLUMNS)
        else:
            columns.append(part)
    return columns


def parse_command(positional: Sequence[str]) -> tuple[Command, dict[str, str]]:
    if not positional:
        raise UsageError("No command given.")
    name, rest = positional[0], list(positional[1:])
    try:
        command = Command(name.lower())
    except ValueError:
        raise UsageError(f"Unknown command '{name}'.") from None

    values: dict[str, str] = {}
    for slot in POSITIONALS[command]:
        if not rest:
            break
        if slot.endswith("*"):
            values[slot[:-1]] = " ".join(rest)
            rest = []
        else:
            values[slot] = rest.pop(0)
    if rest:
        raise UsageError(f"Unexpected argument(s) for {command.value}: {' '.join(rest)}")
    return command, values


def apply_flags(merged: dict[str, Any], flags: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(merged)
    for key, value in flags.items():
        if value is None:
            continue
        if key in ACCUMULATING:
            result[key] = [*result.get(key, []), *value]
        elif key == "fields":
            result[key] = {**result.get(key, {}), **value}
        else:
            result[key] = value
    return result


def resolve(
    defaults: Mapping[str, Any],
    persisted: Mapping[str, Any],
    cli_values: Mapping[str, Any],
    positional: Sequence[str],
    environment: Mapping[str, Any] | None = None,
) -> tuple[OptionSet, Command]:
    """Build the OptionSet for one invocation.

    Later sources win: built-in defaults, the persisted config, environment
    credentials, command-line flags, then positional arguments. Component and
    version deltas accumulate across sources and ``fields`` merges key by key.
    """
    command, positional_values = parse_command(positional)

    merged = deep_merge(dict(defaults), dict(persisted))
    merged = deep_merge(merged, dict(environment or {}))
    merged = apply_flags(merged, cli_values)
    merged.update(positional_values)
    merged["columns"] = expand_columns(merged.get("columns", []))
    merged["command"] = command

    return OptionSet.model_validate(merged), command
