"""Errors raised by swagctl.

Everything derives from :class:`SwagctlError`. Each class names its exit
status from :mod:`swagctl.exit_codes`; commands turn the error into a
message on stderr and that status through :func:`swagctl.commands.fail`,
and :func:`swagctl.app.main` does the same for anything that escapes.

::

    SwagctlError               1
    +-- ConfigError            1
    +-- InvalidUsageError      2
    |   +-- InputValidationError
    +-- AuthError              3
    +-- NotFoundError          4
    +-- ServerError            5
    +-- UnreachableError       6
    +-- SpecParseError         7
    +-- SpecInvalidError       8
"""

from __future__ import annotations

from swagctl import exit_codes


class SwagctlError(Exception):
    """Base class; ``str(exc)`` is the message shown to the user."""

    exit_code: int = exit_codes.EXIT_GENERIC_FAILURE


class ConfigError(SwagctlError):
    """A config file or environment variable holds something unusable."""


class InvalidUsageError(SwagctlError):
    exit_code = exit_codes.EXIT_INVALID_USAGE


class InputValidationError(InvalidUsageError):
    """Call arguments do not satisfy an operation's parameters.

    Attributes:
        operation: Method name that was called.
        errors: ``"/<name>: <message>"`` strings, one per problem.
    """

    def __init__(self, operation: str, errors: list[str]):
        self.operation = operation
        self.errors = list(errors)
        details = "".join(f"\n  {e}" for e in self.errors)
        super().__init__(f"Invalid input for '{operation}':{details}")


class AuthError(SwagctlError):
    """HTTP 401 or 403."""

    exit_code = exit_codes.EXIT_AUTH_FAILURE


class NotFoundError(SwagctlError):
    """HTTP 404."""

    exit_code = exit_codes.EXIT_NOT_FOUND


class ServerError(SwagctlError):
    """HTTP 5xx."""

    exit_code = exit_codes.EXIT_SERVER_ERROR


class UnreachableError(SwagctlError):
    """No response at all: refused connection, DNS failure or timeout."""

    exit_code = exit_codes.EXIT_CONNECTION_ERROR


class SpecParseError(SwagctlError):
    """A spec cannot be read, decoded, or have its ``$ref`` pointers resolved."""

    exit_code = exit_codes.EXIT_SPEC_PARSE_ERROR


class SpecInvalidError(SwagctlError):
    """A spec decodes fine but fails schema validation.

    Attributes:
        source: File path or URL of the spec.
        errors: Messages from :func:`~swagctl.parser.validator.validate_spec`.
    """

    exit_code = exit_codes.EXIT_SPEC_INVALID

    def __init__(self, source: str, errors: list[str]):
        self.source = source
        self.errors = list(errors)
        super().__init__(f"{source} has {len(self.errors)} validation error(s)")
