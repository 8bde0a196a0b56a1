"""
Exception hierarchy for logreplay.

All logreplay exceptions inherit from LogReplayError, allowing callers to
catch every logreplay-specific exception with a single except clause.

Exception Categories:
    - ConfigError: Invalid or incomplete configuration (raised before replay)
    - InputError: The input log cannot be read or has the wrong format
    - SinkError: An output log cannot be opened or written

Per-line problems (a line that is not a trackable request, a failed HTTP
request, a failed sink write) are not raised out of the engine. Only
structural problems are: a configuration that cannot be used, an input file
that cannot be opened, and a timestamp that does not follow the access-log
layout.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Configuration errors: 1xxx
ERROR_CONFIG_INVALID = 1001
ERROR_CONFIG_MISSING_PARAMETER = 1002
ERROR_CONFIG_BASE_URL = 1003
ERROR_CONFIG_CONFLICTING_FILTERS = 1004
ERROR_CONFIG_REGEX = 1005

# Input errors: 2xxx
ERROR_INPUT_FILE = 2001
ERROR_INPUT_TIMESTAMP = 2002

# Sink errors: 3xxx
ERROR_SINK_OPEN = 3001
ERROR_SINK_WRITE = 3002


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class LogReplayError(Exception):
    """
    Base exception for all logreplay errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Configuration Errors
# =============================================================================


@dataclass
class ConfigError(LogReplayError):
    """
    Raised when the replay configuration is invalid.

    These errors occur before any line is read.
    """

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if self.code == 0:
            self.code = ERROR_CONFIG_INVALID


@dataclass
class MissingParameterError(ConfigError):
    """Raised when a required parameter was not supplied."""

    parameter: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Missing required parameter: {self.parameter}"
        if self.code == 0:
            self.code = ERROR_CONFIG_MISSING_PARAMETER
        super().__post_init__()
        self.context["parameter"] = self.parameter


@dataclass
class BaseURLInvalidError(ConfigError):
    """Raised when the base URL has no http/https scheme or no host."""

    base_url: str = ""
    reason: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid base URL {self.base_url!r}: {self.reason}"
        if self.code == 0:
            self.code = ERROR_CONFIG_BASE_URL
        if not self.suggestion:
            self.suggestion = "Supply the base URL with its scheme, e.g. --base-url=https://website.com"
        super().__post_init__()
        self.context.update({
            "base_url": self.base_url,
            "reason": self.reason,
        })


@dataclass
class ConflictingFiltersError(ConfigError):
    """Raised when both an include and an exclude pattern are configured."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = "Only one of --regex-filter and --regex-exclude can be used at once"
        if self.code == 0:
            self.code = ERROR_CONFIG_CONFLICTING_FILTERS
        super().__post_init__()


@dataclass
class RegexCompileError(ConfigError):
    """Raised when a filter pattern is not a valid regular expression."""

    option: str = ""
    pattern: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = (
                f"Could not compile the regular expression passed in {self.option}: "
                f"{self.underlying_error}"
            )
        if self.code == 0:
            self.code = ERROR_CONFIG_REGEX
        super().__post_init__()
        self.context.update({
            "option": self.option,
            "pattern": self.pattern,
            "underlying_error": self.underlying_error,
        })


# =============================================================================
# Input Errors
# =============================================================================


@dataclass
class InputError(LogReplayError):
    """
    Base class for problems with the input log.

    Attributes:
        path: Path of the input log, when known
    """

    path: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["path"] = self.path


@dataclass
class InputFileError(InputError):
    """Raised when the input log cannot be opened."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Cannot open log file {self.path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_INPUT_FILE
        if not self.suggestion:
            self.suggestion = "Check that --log-file-path points to a readable file"
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class TimestampParseError(InputError):
    """
    Raised when a line's bracketed timestamp cannot be parsed.

    This aborts the whole run: a timestamp that does not follow the
    access-log layout means the input is not an access log at all.
    """

    line: str = ""
    timestamp: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Cannot parse timestamp {self.timestamp!r}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_INPUT_TIMESTAMP
        if not self.suggestion:
            self.suggestion = "Timestamps must look like [10/Oct/2023:13:55:36 -0700]"
        super().__post_init__()
        self.context.update({
            "line": self.line,
            "timestamp": self.timestamp,
            "underlying_error": self.underlying_error,
        })


# =============================================================================
# Sink Errors
# =============================================================================


@dataclass
class SinkError(LogReplayError):
    """
    Base class for output log errors.

    Attributes:
        sink: Name of the sink ("succeeded", "failed", "failed_requests")
    """

    sink: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["sink"] = self.sink


@dataclass
class SinkOpenError(SinkError):
    """Raised when an output log cannot be opened for appending."""

    path: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Cannot open {self.sink} log {self.path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_SINK_OPEN
        super().__post_init__()
        self.context.update({
            "path": self.path,
            "underlying_error": self.underlying_error,
        })


@dataclass
class SinkWriteError(SinkError):
    """Describes a failed write; reported by the recorder, never raised out of a run."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Write to {self.sink} log failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_SINK_WRITE
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error
