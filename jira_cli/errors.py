class JiraCliError(Exception):
    """Base class for every error that ends an invocation with exit status 1."""


class UsageError(JiraCliError):
    pass


class MissingFieldError(UsageError):
    def __init__(self, command: str, missing: list[str]) -> None:
        self.command = command
        self.missing = list(missing)
        super().__init__(f"{command}: missing required field(s): {', '.join(self.missing)}")


class ConfigParseError(JiraCliError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid config file {path}: {reason}")


class RemoteError(JiraCliError):
    def __init__(self, message: str, status: int | None = None, body: str = "") -> None:
        self.status = status
        self.body = body
        detail = message if status is None else f"{message} (HTTP {status})"
        if body:
            detail = f"{detail}: {body}"
        super().__init__(detail)


class NotFoundError(RemoteError):
    pass


class FormatError(JiraCliError):
    def __init__(self, column: str, value: object, reason: str) -> None:
        self.column = column
        self.value = value
        super().__init__(f"Cannot format column '{column}' value {value!r}: {reason}")
