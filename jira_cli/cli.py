import logging
import sys

import click
from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)

COMMANDS_HELP = """Run one command against a Jira server.

\b
Commands:
  query JQL...            list issues matching a JQL query
  view KEY                show an issue and its comments
  viewfield KEY FIELD     print a single field of an issue
  comment KEY [TEXT...]   add a comment (or use --comment)
  transition KEY [STATE]  move an issue to another state
  edit KEY                change fields, components and versions
  create                  create an issue (--project, --type, --summary)
  delete KEY              delete an issue

KEY may be an issue key such as PROJ-7 or a numeric issue id.
Component and version values prefixed with '-' are removed, all others are added.
"""


def _parse_fields(ctx: click.Context, param: click.Parameter, values: tuple[str, ...]) -> dict[str, str] | None:
    fields = {}
    for value in values:
        name, sep, field_value = value.partition(",")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected NAME,VALUE but got {value!r}", ctx=ctx, param=param)
        fields[name.strip()] = field_value
    return fields or None


def _given(values: tuple[str, ...]) -> list[str] | None:
    return list(values) if values else None


@click.command(help=COMMANDS_HELP, context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("args", nargs=-1)
@click.option("--endpoint", default=None, help="Jira base URL")
@click.option("--user", default=None, help="Jira user name (default: $JIRA_USER)")
@click.option("--type", "issue_type", default=None, help="Issue type for create, or a query filter")
@click.option("--project", default=None, help="Project key for create, or a query filter")
@click.option("--summary", default=None, help="Issue summary")
@click.option("--description", default=None, help="Issue description")
@click.option("--assignee", default=None, help="Assignee to set, or a query filter")
@click.option("--priority", default=None, help="Priority to set, or a query filter")
@click.option("--components", multiple=True, help="Component to add (NAME) or remove (-NAME); repeatable")
@click.option("--fixversions", multiple=True, help="Fix version to add (NAME) or remove (-NAME); repeatable")
@click.option("--affectsversions", multiple=True, help="Affects version to add (NAME) or remove (-NAME); repeatable")
@click.option("--field", "fields", multiple=True, callback=_parse_fields, metavar="NAME,VALUE", help="Set any field; repeatable")
@click.option("--comment", "comment_text", default=None, help="Comment text")
@click.option("--state", default=None, help="Target state for transition")
@click.option("--resolution", default=None, help="Resolution to set when transitioning")
@click.option("--columns", default=None, help="Comma-separated columns; 'default' expands to the default set")
@click.option("--output", type=click.Choice(["table", "tsv", "json"]), default=None, help="Output format")
@click.option("--max-results", type=int, default=None, help="Maximum number of issues returned by query")
@click.option("--detail", is_flag=True, default=False, help="Show every known field in view")
@click.option("--cacert", default=None, type=click.Path(dir_okay=False), help="CA certificate bundle for TLS")
@click.option("--no-color", is_flag=True, default=False, help="Disable colored table output")
@click.option("--debug", is_flag=True, default=False, help="Log requests and responses to stderr")
@click.pass_context
def main(ctx: click.Context, args: tuple[str, ...], **flags) -> None:
    from pydantic import ValidationError

    from .client import JiraClient
    from .config import Settings, load_config_file
    from .dispatcher import Dispatcher
    from .errors import JiraCliError, UsageError
    from .logs import configure_logging
    from .options import DEFAULTS, resolve
    from .validator import validate
    from .writer import OutputWriter

    errors = Console(stderr=True, soft_wrap=True)
    configure_logging(flags["debug"], errors)

    try:
        settings = Settings()
    except ValidationError as e:
        errors.print("[red]Configuration error:[/red] invalid environment settings.")
        for err in e.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            errors.print(f"  - {field}: {escape(err['msg'])}")
        ctx.exit(1)

    cli_values = {
        "endpoint": flags["endpoint"],
        "user": flags["user"],
        "issueType": flags["issue_type"],
        "project": flags["project"],
        "summary": flags["summary"],
        "description": flags["description"],
        "assignee": flags["assignee"],
        "priority": flags["priority"],
        "components": _given(flags["components"]),
        "fixversions": _given(flags["fixversions"]),
        "affectsversions": _given(flags["affectsversions"]),
        "fields": flags["fields"],
        "commentText": flags["comment_text"],
        "state": flags["state"],
        "resolution": flags["resolution"],
        "columns": flags["columns"],
        "output": flags["output"],
        "maxResults": flags["max_results"],
        "detail": flags["detail"] or None,
        "cacert": flags["cacert"],
        "color": False if flags["no_color"] else None,
        "debug": flags["debug"] or None,
    }

    try:
        persisted = load_config_file(settings.config_path)
        options, command = resolve(DEFAULTS, persisted, cli_values, args, settings.environment())
        configure_logging(options.debug, errors)
        logger.debug("options: %s", options.redacted())
        validate(command, options)

        password = options.password
        if options.user and not password:
            password = click.prompt("Password", hide_input=True, err=True)

        out = Console(no_color=not options.color, highlight=False, emoji=False)
        writer = OutputWriter(out, options.output)
        with JiraClient(
            options.endpoint,
            options.user,
            password,
            cacert=options.cacert,
            timeout=settings.JIRA_REQUEST_TIMEOUT,
        ) as client:
            Dispatcher(client, writer, options).run(command)
    except UsageError as e:
        errors.print(f"[red]{escape(str(e))}[/red]\n")
        click.echo(ctx.get_help(), err=True)
        ctx.exit(1)
    except JiraCliError as e:
        errors.print(f"[red]Error:[/red] {escape(str(e))}")
        ctx.exit(1)


def run() -> None:
    """Console-script entry point; every failure exits with status 1."""
    try:
        rv = main.main(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(1)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    sys.exit(rv if isinstance(rv, int) else 0)
