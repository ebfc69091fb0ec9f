import json
from typing import Iterable, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .columns import ColumnRegistry
from .projector import sort_columns


def tsv_cell(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\t", "\\t").replace("\n", "\\n")


class OutputWriter:
    """Prints projected rows as a rich table, TSV or JSON.

    TSV and JSON bypass rich rendering so tabs and newlines reach the
    output untouched.
    """

    def __init__(self, console: Console, output_format: str = "table") -> None:
        self._console = console
        self._format = output_format

    @property
    def format(self) -> str:
        return self._format

    def records(self, columns: Sequence[str], rows: Iterable[Sequence[str]], registry: ColumnRegistry) -> list[dict]:
        headers = sort_columns(columns, registry)
        return [dict(zip(headers, row)) for row in rows]

    def write_rows(
        self,
        columns: Sequence[str],
        rows: Iterable[Sequence[str]],
        registry: ColumnRegistry,
        title: str | None = None,
    ) -> None:
        headers = sort_columns(columns, registry)
        rows = list(rows)
        if self._format == "json":
            self.write_json(self.records(columns, rows, registry))
        elif self._format == "tsv":
            lines = ["\t".join(tsv_cell(h) for h in headers)]
            lines.extend("\t".join(tsv_cell(cell) for cell in row) for row in rows)
            self._write_lines(lines)
        else:
            table = Table(title=title, title_justify="left", header_style="bold")
            for header in headers:
                table.add_column(header, style=registry.style(header), overflow="fold")
            for row in rows:
                table.add_row(*(Text(cell) for cell in row))
            self._console.print(table)

    def write_pairs(self, pairs: Sequence[tuple[str, str]], registry: ColumnRegistry) -> None:
        if self._format == "json":
            self.write_json(dict(pairs))
        elif self._format == "tsv":
            self._write_lines([f"{tsv_cell(name)}\t{tsv_cell(value)}" for name, value in pairs])
        else:
            table = Table(show_header=False, box=None)
            table.add_column(style="bold")
            table.add_column(overflow="fold")
            for name, value in pairs:
                table.add_row(Text(name), Text(value, style=registry.style(name) or ""))
            self._console.print(table)

    def write_value(self, value: str) -> None:
        if self._format == "json":
            self.write_json(value)
        else:
            self._write_lines([value])

    def write_message(self, message: str) -> None:
        if self._format == "json":
            self.write_json({"message": message})
        elif self._format == "tsv":
            self._write_lines([tsv_cell(message)])
        else:
            self._console.print(Text(message))

    def write_json(self, payload: object) -> None:
        self._write_lines([json.dumps(payload, indent=2, ensure_ascii=False)])

    def _write_lines(self, lines: Iterable[str]) -> None:
        out = self._console.file
        for line in lines:
            out.write(line + "\n")
        out.flush()
