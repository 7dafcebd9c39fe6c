"""Exception hierarchy for procfilter."""

from pathlib import Path


class ProcFilterError(Exception):
    """Base exception for all procfilter errors.

    All exceptions in this package inherit from this class,
    allowing callers to catch all procfilter errors with
    a single except clause.
    """

    pass


# Query Errors
class QueryError(ProcFilterError):
    """A query could not be parsed or compiled.

    The message is meant to be shown to the user verbatim.
    """

    def __init__(self, message: str, query: str | None = None) -> None:
        self.message = message
        self.query = query
        super().__init__(message)


class MissingClosingParenError(QueryError):
    """An opening parenthesis was never closed."""

    def __init__(self, query: str | None = None) -> None:
        super().__init__("Missing closing parenthesis", query)


class MissingOpeningParenError(QueryError):
    """A closing parenthesis has no matching opening one."""

    def __init__(self, query: str | None = None) -> None:
        super().__init__("Missing opening parenthesis", query)


class ComparatorParseError(QueryError):
    """A prefix was not followed by a usable operator and value."""

    def __init__(self, detail: str | None = None, query: str | None = None) -> None:
        self.detail = detail
        message = "Failed to parse comparator"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, query)


class MatcherCompileError(QueryError):
    """A string criterion produced an invalid regular expression."""

    def __init__(self, pattern: str, reason: str, query: str | None = None) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern '{pattern}': {reason}", query)


# Configuration Errors
class ConfigError(ProcFilterError):
    """Configuration-related errors."""

    pass


class ConfigParseError(ConfigError):
    """Configuration file has invalid syntax."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config at {path}: {detail}")


class ConfigValidationError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# Process Source Errors
class ProcessSourceError(ProcFilterError):
    """The process table could not be read."""

    pass
