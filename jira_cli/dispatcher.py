import logging
import re

from .client import JiraClient
from .columns import COMMENT_COLUMNS, DEFAULT_COLUMNS, ISSUE_COLUMNS
from .errors import NotFoundError, UsageError
from .options import Command, OptionSet
from .projector import detail_rows, field_value, project
from .writer import OutputWriter

logger = logging.getLogger(__name__)

ISSUE_ID_PATTERN = re.compile(r"^\d+$")
COMMENT_DISPLAY_COLUMNS = ("author", "created", "body")
CREATED_DISPLAY_COLUMNS = ("id", "key", "url")

# option name -> Jira field id for list-valued deltas
DELTA_FIELDS = {
    "components": "components",
    "fixversions": "fixVersions",
    "affectsversions": "versions",
}


def target_state(transition: dict) -> str:
    """Destination status of a transition; some servers send a plain string."""
    to_value = transition.get("to") or ""
    if isinstance(to_value, dict):
        return to_value.get("name", "")
    return str(to_value)


def jql_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def split_delta(value: str) -> tuple[str, str]:
    """``-Name`` removes, ``+Name`` or a bare ``Name`` adds."""
    if value.startswith("-"):
        return "remove", value[1:]
    if value.startswith("+"):
        return "add", value[1:]
    return "add", value


class Dispatcher:
    def __init__(self, client: JiraClient, writer: OutputWriter, options: OptionSet) -> None:
        self._client = client
        self._writer = writer
        self._options = options

    @property
    def columns(self) -> list[str]:
        return list(self._options.columns or DEFAULT_COLUMNS)

    def run(self, command: Command) -> None:
        handler = getattr(self, f"_run_{command.value}")
        logger.debug("dispatching %s", command.value)
        handler()

    def resolve_issue(self) -> dict:
        issue = self._options.issue
        if ISSUE_ID_PATTERN.match(issue):
            return self._client.fetch_issue_by_id(issue)
        return self._client.fetch_issue_by_key(issue)

    def _key(self, issue: dict) -> str:
        return issue.get("key") or self._options.issue

    def _show_issues(self, issues: list[dict], title: str | None = None) -> None:
        rows = [project(issue, self.columns) for issue in issues]
        self._writer.write_rows(self.columns, rows, ISSUE_COLUMNS, title=title)

    def _run_query(self) -> None:
        issues = self._client.search(self.build_jql(), self._options.max_results)
        self._show_issues(issues)

    def build_jql(self) -> str:
        options = self._options
        clauses = [f"({options.jql})"]
        filters = {
            "project": options.project,
            "issuetype": options.issue_type,
            "assignee": options.assignee,
            "priority": options.priority,
        }
        for field, value in filters.items():
            if value:
                clauses.append(f"{field} = {jql_string(value)}")
        return " AND ".join(clauses) if len(clauses) > 1 else options.jql

    def _run_view(self) -> None:
        issue = self.resolve_issue()
        comments = self._client.fetch_comments(self._key(issue))
        comment_rows = [project(comment, COMMENT_DISPLAY_COLUMNS, COMMENT_COLUMNS) for comment in comments]

        if self._writer.format == "json":
            if self._options.detail:
                shown = dict(detail_rows(issue))
            else:
                shown = self._writer.records(self.columns, [project(issue, self.columns)], ISSUE_COLUMNS)
            self._writer.write_json(
                {
                    "issue": shown,
                    "comments": self._writer.records(COMMENT_DISPLAY_COLUMNS, comment_rows, COMMENT_COLUMNS),
                }
            )
            return

        if self._options.detail:
            self._writer.write_pairs(detail_rows(issue), ISSUE_COLUMNS)
        else:
            self._show_issues([issue])
        if comment_rows:
            self._writer.write_rows(COMMENT_DISPLAY_COLUMNS, comment_rows, COMMENT_COLUMNS, title="Comments")

    def _run_viewfield(self) -> None:
        issue = self.resolve_issue()
        self._writer.write_value(field_value(issue, self._options.field_name))

    def _run_comment(self) -> None:
        issue = self.resolve_issue()
        comment = self._client.post_comment(self._key(issue), self._options.comment_text)
        rows = [project(comment, COMMENT_DISPLAY_COLUMNS, COMMENT_COLUMNS)]
        self._writer.write_rows(COMMENT_DISPLAY_COLUMNS, rows, COMMENT_COLUMNS)

    def _run_transition(self) -> None:
        options = self._options
        issue = self.resolve_issue()
        transitions = self._client.fetch_transitions(self._key(issue))
        if not options.state:
            names = ", ".join(t.get("name", "?") for t in transitions)
            self._writer.write_message(f"Available transitions for {self._key(issue)}: {names}")
            return

        wanted = options.state.lower()
        for transition in transitions:
            names = {str(transition.get("name", "")).lower(), target_state(transition).lower()}
            if wanted in names:
                break
        else:
            available = ", ".join(t.get("name", "?") for t in transitions)
            raise NotFoundError(f"Cannot move {self._key(issue)} to '{options.state}'. Available transitions: {available}")

        fields = {"resolution": {"name": options.resolution}} if options.resolution else None
        self._client.post_transition(self._key(issue), transition["id"], fields)
        self._writer.write_message(f"{self._key(issue)} -> {target_state(transition) or options.state}")

    def _edit_fields(self) -> dict:
        options = self._options
        fields: dict = dict(options.fields)
        if options.summary:
            fields["summary"] = options.summary
        if options.description:
            fields["description"] = options.description
        if options.assignee:
            fields["assignee"] = {"name": options.assignee}
        if options.priority:
            fields["priority"] = {"name": options.priority}
        return fields

    def _deltas(self) -> dict[str, list[tuple[str, str]]]:
        deltas = {}
        for option, field in DELTA_FIELDS.items():
            values = getattr(self._options, option)
            if values:
                deltas[field] = [split_delta(value) for value in values]
        return deltas

    def _run_edit(self) -> None:
        update = {
            field: [{verb: {"name": name}} for verb, name in changes] for field, changes in self._deltas().items()
        }
        fields = self._edit_fields()
        if not fields and not update:
            raise UsageError(f"Nothing to change on {self._options.issue}.")
        issue = self.resolve_issue()
        self._client.update_issue(self._key(issue), fields, update)
        self._writer.write_message(f"Updated {self._key(issue)}")

    def _run_create(self) -> None:
        options = self._options
        fields = self._edit_fields()
        for field, changes in self._deltas().items():
            removed = [name for verb, name in changes if verb == "remove"]
            if removed:
                raise UsageError(f"Cannot remove {field} {', '.join(removed)} from an issue that does not exist yet.")
            fields[field] = [{"name": name} for _, name in changes]
        created = self._client.create_issue(options.project, options.issue_type, fields)
        self._writer.write_rows(
            CREATED_DISPLAY_COLUMNS, [project(created, CREATED_DISPLAY_COLUMNS)], ISSUE_COLUMNS
        )

    def _run_delete(self) -> None:
        self._client.delete_issue(self._options.issue)
        self._writer.write_message(f"Deleted {self._options.issue}")
