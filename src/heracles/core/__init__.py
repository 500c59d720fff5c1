"""Core modules for Heracles - centralized error definitions."""

from heracles.core.errors import (
    BackendError,
    BackendHTTPError,
    BackendMalformedResponse,
    BackendUnreachable,
    ConfigurationError,
    DurationOutOfRange,
    DurationParseError,
    ExitCode,
    HeraclesError,
    InvalidDurationSyntax,
    MalformedLogRecord,
    MissingResultField,
    QueryValidationError,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "HeraclesError",
    "ConfigurationError",
    "DurationParseError",
    "InvalidDurationSyntax",
    "DurationOutOfRange",
    "BackendError",
    "BackendUnreachable",
    "BackendHTTPError",
    "BackendMalformedResponse",
    "MalformedLogRecord",
    "MissingResultField",
    "QueryValidationError",
    "main_with_error_handling",
    "format_error_message",
]
