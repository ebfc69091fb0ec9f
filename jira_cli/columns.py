import json
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping

from .errors import FormatError


class _Absent:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()
PLACEHOLDER = "<none>"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
UNREGISTERED_WEIGHT = math.inf

DEFAULT_COLUMNS = ("key", "priority", "status", "assignee", "summary")


def dig(record: Any, *path: str) -> Any:
    """Walk nested mappings, returning ABSENT at the first missing or null level."""
    current = record
    for part in path:
        if not isinstance(current, Mapping):
            return ABSENT
        current = current.get(part)
        if current is None:
            return ABSENT
    return current


def _names(record: Any, *path: str) -> list[str]:
    items = dig(record, *path)
    if items is ABSENT or not isinstance(items, list):
        return []
    names = []
    for item in items:
        name = dig(item, "name")
        if name is not ABSENT:
            names.append(name)
    return names


def _default_extract(name: str, record: Any) -> Any:
    return dig(record, "fields", name)


def _text(value: Any) -> str:
    if value is ABSENT:
        return PLACEHOLDER
    return str(value)


def _free_text(value: Any) -> str:
    # Windows copy/paste leaves stray carriage returns in summaries and bodies.
    return _text(value).replace("\r", "")


def _quoted_list(value: Any) -> str:
    if value is ABSENT or not value:
        return ""
    return ", ".join(f"'{item}'" for item in value)


def parse_timestamp(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass
    # Jira emits offsets without a colon, e.g. 2023-01-05T10:15:00.000+0000
    for pattern in ("%Y-%m-%dT%H:%M:%S.%f%z", "%Y-%m-%dT%H:%M:%S%z"):
        try:
            return datetime.strptime(value, pattern)
        except ValueError:
            continue
    raise ValueError(f"not an ISO-8601 timestamp: {value!r}")


def _default_format(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return _text(value)


@dataclass(frozen=True)
class Column:
    name: str
    extractor: Callable[[Any], Any]
    formatter: Callable[[Any], str] = _text
    weight: float = UNREGISTERED_WEIGHT
    style: str | None = None


class ColumnRegistry:
    """Fixed table of column strategies with a fallback for unknown names.

    Unknown column names are never rejected: they are read from the issue's
    ``fields`` mapping, printed verbatim and sorted after every known column.
    """

    def __init__(
        self,
        columns: Iterable[Column],
        default_extractor: Callable[[str, Any], Any] = _default_extract,
        default_formatter: Callable[[Any], str] = _default_format,
    ) -> None:
        self._columns = {column.name: column for column in columns}
        self._default_extractor = default_extractor
        self._default_formatter = default_formatter

    def is_registered(self, name: str) -> bool:
        return name in self._columns

    def names(self) -> list[str]:
        return sorted(self._columns, key=lambda name: (self.weight(name), name))

    def extract(self, name: str, record: Any) -> Any:
        column = self._columns.get(name)
        if column is None:
            return self._default_extractor(name, record)
        return column.extractor(record)

    def format(self, name: str, raw: Any) -> str:
        column = self._columns.get(name)
        formatter = column.formatter if column is not None else self._default_formatter
        try:
            return formatter(raw)
        except (TypeError, ValueError) as e:
            raise FormatError(name, raw, str(e)) from e

    def weight(self, name: str) -> float:
        column = self._columns.get(name)
        return column.weight if column is not None else UNREGISTERED_WEIGHT

    def style(self, name: str) -> str | None:
        column = self._columns.get(name)
        return column.style if column is not None else None


def _timestamp(value: Any) -> str:
    if value is ABSENT:
        return PLACEHOLDER
    if not isinstance(value, str):
        raise TypeError(f"expected a timestamp string, got {type(value).__name__}")
    return parse_timestamp(value).astimezone().strftime(TIMESTAMP_FORMAT)


ISSUE_COLUMNS = ColumnRegistry(
    [
        Column("id", lambda issue: dig(issue, "id"), weight=10100, style="green"),
        Column("key", lambda issue: dig(issue, "key"), weight=11000, style="green"),
        Column("priority", lambda issue: dig(issue, "fields", "priority", "name"), weight=20100, style="red"),
        Column("status", lambda issue: dig(issue, "fields", "status", "name"), weight=20200, style="red"),
        Column("resolution", lambda issue: dig(issue, "fields", "resolution", "name"), weight=20300, style="red"),
        Column("reporter", lambda issue: dig(issue, "fields", "reporter", "name"), weight=21100, style="green"),
        Column("assignee", lambda issue: dig(issue, "fields", "assignee", "name"), weight=21200, style="green"),
        Column("created", lambda issue: dig(issue, "fields", "created"), _timestamp, 22000, "white"),
        Column("updated", lambda issue: dig(issue, "fields", "updated"), _timestamp, 22100, "white"),
        Column("components", lambda issue: _names(issue, "fields", "components"), _quoted_list, 25100, "yellow"),
        Column("fixversions", lambda issue: _names(issue, "fields", "fixVersions"), _quoted_list, 25200, "cyan"),
        Column("affectsversions", lambda issue: _names(issue, "fields", "versions"), _quoted_list, 25300, "cyan"),
        Column("summary", lambda issue: dig(issue, "fields", "summary"), _free_text, 30000),
        Column("description", lambda issue: dig(issue, "fields", "description"), _free_text, 30100),
        Column("url", lambda issue: dig(issue, "self"), weight=80100),
    ]
)

COMMENT_COLUMNS = ColumnRegistry(
    [
        Column("id", lambda comment: dig(comment, "id"), weight=10100, style="green"),
        Column("author", lambda comment: dig(comment, "author", "name"), weight=21100, style="green"),
        Column("created", lambda comment: dig(comment, "created"), _timestamp, 22000, "white"),
        Column("updated", lambda comment: dig(comment, "updated"), _timestamp, 22100, "white"),
        Column("body", lambda comment: dig(comment, "body"), _free_text, 30000),
    ],
    default_extractor=lambda name, comment: dig(comment, name),
)
