from .errors import MissingFieldError
from .options import Command, OptionSet

REQUIRED_FIELDS: dict[Command, tuple[str, ...]] = {
    Command.QUERY: ("jql",),
    Command.VIEW: ("issue",),
    Command.VIEW_FIELD: ("fieldName", "issue"),
    Command.COMMENT: ("issue", "commentText"),
    Command.TRANSITION: ("issue",),
    Command.EDIT: ("issue",),
    Command.CREATE: ("project", "issueType", "summary"),
    Command.DELETE: ("issue",),
}


def _present(options: OptionSet, alias: str) -> bool:
    if alias == "summary" and options.fields.get("summary"):
        return True
    values = options.model_dump(by_alias=True)
    value = values.get(alias)
    return value is not None and str(value).strip() != ""


def missing_fields(command: Command, options: OptionSet) -> list[str]:
    return [alias for alias in REQUIRED_FIELDS[command] if not _present(options, alias)]


def validate(command: Command, options: OptionSet) -> None:
    """Reject the command before any remote call if a required field is missing."""
    missing = missing_fields(command, options)
    if missing:
        raise MissingFieldError(command.value, missing)
