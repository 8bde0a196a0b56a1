"""
Schema definitions for logreplay.

This module defines the Pydantic models that configure a replay run:
- ReplayFilter: Which lines are admitted for replay (include/exclude regex)
- SinkPaths: Where the three output logs are appended
- ReplayConfig: Everything the engine needs, validated once up front

Design Decisions:
    - The configuration is an explicit frozen value passed into the engine,
      never a module-level singleton
    - Include and exclude patterns are one enumerated filter mode, so a
      configuration holding both cannot be represented
    - Loading helpers turn Pydantic validation failures into ConfigError
      subclasses so the CLI reports them like any other logreplay error
"""

import re
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from logreplay.errors import (
    BaseURLInvalidError,
    ConfigError,
    ConflictingFiltersError,
    MissingParameterError,
    RegexCompileError,
)


# =============================================================================
# Enums
# =============================================================================


class FilterMode(str, Enum):
    """How the filter pattern decides admission."""

    NONE = "none"
    INCLUDE = "include"
    EXCLUDE = "exclude"


class LineStatus(str, Enum):
    """Where a single input line ended up."""

    REJECTED = "rejected"
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# =============================================================================
# Filter Model
# =============================================================================


class ReplayFilter(BaseModel):
    """
    Line admission filter.

    Attributes:
        mode: none (admit everything), include or exclude
        pattern: Compiled expression; present iff mode is not none
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: FilterMode = Field(
        default=FilterMode.NONE,
        description="How the pattern decides admission",
    )
    pattern: re.Pattern[str] | None = Field(
        default=None,
        description="Compiled regular expression searched anywhere in the line",
    )

    @model_validator(mode="after")
    def check_pattern_matches_mode(self) -> "ReplayFilter":
        """A pattern is required for include/exclude and forbidden otherwise."""
        if self.mode == FilterMode.NONE and self.pattern is not None:
            msg = "A filter pattern requires mode 'include' or 'exclude'"
            raise ValueError(msg)
        if self.mode != FilterMode.NONE and self.pattern is None:
            msg = f"Filter mode '{self.mode.value}' requires a pattern"
            raise ValueError(msg)
        return self

    @classmethod
    def from_patterns(
        cls,
        include: str | None = None,
        exclude: str | None = None,
    ) -> "ReplayFilter":
        """
        Build a filter from the raw --regex-filter / --regex-exclude values.

        Raises:
            ConflictingFiltersError: If both patterns are supplied
            RegexCompileError: If a pattern does not compile
        """
        if include and exclude:
            raise ConflictingFiltersError()
        if include:
            return cls(mode=FilterMode.INCLUDE, pattern=_compile(include, "--regex-filter"))
        if exclude:
            return cls(mode=FilterMode.EXCLUDE, pattern=_compile(exclude, "--regex-exclude"))
        return cls()


def _compile(expression: str, option: str) -> re.Pattern[str]:
    try:
        return re.compile(expression)
    except re.error as e:
        raise RegexCompileError(
            option=option,
            pattern=expression,
            underlying_error=str(e),
        ) from e


# =============================================================================
# Configuration Models
# =============================================================================


class SinkPaths(BaseModel):
    """
    Output logs, all opened in append mode.

    Attributes:
        succeeded: Original lines whose replay succeeded
        failed: Original lines whose replay failed
        failed_requests: One `status,"reason",url` record per failure
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    succeeded: Path = Field(default=Path("succeeded.log"))
    failed: Path = Field(default=Path("failed.log"))
    failed_requests: Path = Field(default=Path("reqs-failed.log"))


class ReplayConfig(BaseModel):
    """
    Complete configuration for one replay run.

    Attributes:
        base_url: Target host prefix (http/https with a hostname)
        log_file_path: Access log to replay
        dry_run: Print URLs instead of requesting them
        include_timestamp: Append &timestamp=<epoch-ms> from the log line
        filter: Line admission filter
        timeout_seconds: Per-request timeout for live replays
        sinks: Output log locations
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = Field(
        ...,
        description="Host to which requests are replayed, e.g. https://website.com",
    )
    log_file_path: Path = Field(
        ...,
        description="Path of the access log, e.g. /var/log/nginx/access.log",
    )
    dry_run: bool = Field(default=False)
    include_timestamp: bool = Field(default=False)
    filter: ReplayFilter = Field(default_factory=ReplayFilter)
    timeout_seconds: float = Field(default=30.0, gt=0)
    sinks: SinkPaths = Field(default_factory=SinkPaths)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http/https scheme and a hostname."""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https"):
            msg = "Base URL's scheme must be either HTTP/HTTPS"
            raise ValueError(msg)
        if not parsed.hostname:
            msg = "Base URL must have a hostname (can be either a domain name or an IP address)"
            raise ValueError(msg)
        return v


# =============================================================================
# Loading Helpers
# =============================================================================

_SUGGESTIONS = {
    "base_url": "Supply the base URL (with http/https), e.g. --base-url=https://website.com",
    "log_file_path": "Supply the log file path, e.g. --log-file-path=/var/log/nginx/access.log",
}


def build_config(data: dict[str, Any]) -> ReplayConfig:
    """
    Build a ReplayConfig from flat options.

    `regex_filter` and `regex_exclude` are folded into the `filter` field.
    Options whose value is None are treated as not supplied.

    Raises:
        ConfigError: If the options do not form a valid configuration
    """
    options = {k: v for k, v in data.items() if v is not None}
    include = options.pop("regex_filter", None)
    exclude = options.pop("regex_exclude", None)
    if include is not None or exclude is not None:
        options["filter"] = ReplayFilter.from_patterns(include, exclude)

    try:
        return ReplayConfig.model_validate(options)
    except ValidationError as e:
        raise _to_config_error(e, options) from e


def _to_config_error(exc: ValidationError, options: dict[str, Any]) -> ConfigError:
    """Map the first Pydantic error onto the matching ConfigError."""
    first = exc.errors()[0]
    field_name = ".".join(str(part) for part in first["loc"])
    if first["type"] == "missing":
        return MissingParameterError(
            parameter=field_name,
            suggestion=_SUGGESTIONS.get(field_name),
        )
    reason = str(first.get("ctx", {}).get("error", first["msg"]))
    if field_name == "base_url":
        return BaseURLInvalidError(base_url=str(options.get("base_url", "")), reason=reason)
    return ConfigError(
        message=f"Invalid configuration for {field_name}: {reason}",
        context={"field": field_name},
    )


def load_config(path: Path | str, overrides: dict[str, Any] | None = None) -> ReplayConfig:
    """
    Load a configuration from a YAML file.

    Args:
        path: Path to the YAML file
        overrides: Options that take precedence over the file (None values ignored)

    Returns:
        Validated ReplayConfig

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the merged options are invalid
    """
    path = Path(path)
    with path.open() as f:
        content = f.read()
    return load_config_from_string(content, overrides)


def load_config_from_string(content: str, overrides: dict[str, Any] | None = None) -> ReplayConfig:
    """Load a configuration from a YAML string."""
    data = yaml.safe_load(content) or {}
    if not isinstance(data, dict):
        raise ConfigError(message="Configuration file must contain a mapping")
    return build_config(merge_options(data, overrides or {}))


def merge_options(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Overlay non-None overrides on base; the `sinks` mapping is merged per key."""
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if key == "sinks" and isinstance(value, dict):
            sinks = dict(merged.get("sinks") or {})
            sinks.update({k: v for k, v in value.items() if v is not None})
            merged["sinks"] = sinks
        else:
            merged[key] = value
    return merged
