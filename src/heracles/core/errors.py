"""
Unified error handling for Heracles.

Every error raised by the query layer, the configuration loader and the CLI
derives from HeraclesError so callers can map it to an exit code or an HTTP
status without inspecting messages.

Exit Codes:
- 0: Success
- 10: Configuration error
- 11: Backend error (query backend failure)
- 12: Validation error
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    CONFIG_ERROR = 10
    BACKEND_ERROR = 11
    VALIDATION_ERROR = 12
    UNKNOWN_ERROR = 127


class HeraclesError(Exception):
    """Base exception for Heracles errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(HeraclesError):
    """Raised when a dashboard definition or setting is malformed."""

    exit_code = ExitCode.CONFIG_ERROR


class DurationParseError(HeraclesError, ValueError):
    """Raised when a duration string cannot be turned into a timedelta."""

    exit_code = ExitCode.VALIDATION_ERROR


class InvalidDurationSyntax(DurationParseError):
    """The duration text could not be tokenized."""


class DurationOutOfRange(DurationParseError):
    """The duration parsed but does not fit in a timedelta."""


class BackendError(HeraclesError):
    """Raised when a query backend fails to answer a query."""

    exit_code = ExitCode.BACKEND_ERROR


class BackendUnreachable(BackendError):
    """Connection failure or timeout talking to a backend."""


class BackendHTTPError(BackendError):
    """Backend answered with a non-success HTTP status."""

    def __init__(self, message: str, status: int, details: dict[str, Any] | None = None):
        super().__init__(message, {"status": status, **(details or {})})
        self.status = status


class BackendMalformedResponse(BackendError):
    """Backend payload could not be decoded into the expected shape."""


class MalformedLogRecord(BackendError):
    """A single log record could not be parsed. Dropped by the caller."""


class MissingResultField(BackendError):
    """A single result entry carries neither value nor values. Dropped by the caller."""


class QueryValidationError(HeraclesError):
    """Raised by the validate run when a configured query fails."""

    exit_code = ExitCode.VALIDATION_ERROR


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI main functions that provides unified error handling.

    Exit codes:
        - HeraclesError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except HeraclesError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=e.exit_code,
                        **e.details,
                    )
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=ExitCode.UNKNOWN_ERROR,
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: HeraclesError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
