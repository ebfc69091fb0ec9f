import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(debug: bool, console: Console | None = None) -> None:
    """Send diagnostics to stderr; ``--debug`` turns on request/response dumps."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    root = logging.getLogger("jira_cli")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if debug else logging.WARNING)
    root.propagate = False
