from typing import Any, Iterable

from .columns import ISSUE_COLUMNS, ColumnRegistry


def sort_columns(names: Iterable[str], registry: ColumnRegistry = ISSUE_COLUMNS) -> list[str]:
    """Order columns by weight, then by name; unknown names land on the right."""
    return sorted(names, key=lambda name: (registry.weight(name), name))


def project(record: Any, requested: Iterable[str], registry: ColumnRegistry = ISSUE_COLUMNS) -> list[str]:
    row = []
    for name in sort_columns(requested, registry):
        row.append(registry.format(name, registry.extract(name, record)))
    return row


def issue_map(record: Any, registry: ColumnRegistry = ISSUE_COLUMNS) -> dict[str, Any]:
    """Raw value of every registered column, in display order."""
    return {name: registry.extract(name, record) for name in sort_columns(registry.names(), registry)}


def detail_rows(record: Any, registry: ColumnRegistry = ISSUE_COLUMNS) -> list[tuple[str, str]]:
    return [(name, registry.format(name, raw)) for name, raw in issue_map(record, registry).items()]


def field_value(record: Any, name: str, registry: ColumnRegistry = ISSUE_COLUMNS) -> str:
    if registry.is_registered(name):
        raw = issue_map(record, registry)[name]
    else:
        raw = registry.extract(name, record)
    return registry.format(name, raw)
