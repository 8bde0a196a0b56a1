"""
JSON summary for logreplay.

Design Principles:
    - Counters first: total, succeeded and failed at the top level
    - Settings included: enough to tell two runs apart
    - Human-readable keys: descriptive snake_case names
"""

import json
from datetime import UTC, datetime
from typing import Any

from logreplay.errors import SinkWriteError
from logreplay.schema import ReplayConfig
from logreplay.stats import RunStatistics


def config_to_dict(config: ReplayConfig) -> dict[str, Any]:
    """Describe a configuration with JSON-friendly values."""
    replay_filter = config.filter
    return {
        "base_url": config.base_url,
        "log_file_path": str(config.log_file_path),
        "dry_run": config.dry_run,
        "include_timestamp": config.include_timestamp,
        "filter": {
            "mode": replay_filter.mode.value,
            "pattern": replay_filter.pattern.pattern if replay_filter.pattern else None,
        },
        "timeout_seconds": config.timeout_seconds,
        "sinks": {
            "succeeded": str(config.sinks.succeeded),
            "failed": str(config.sinks.failed),
            "failed_requests": str(config.sinks.failed_requests),
        },
    }


def build_summary_dict(
    config: ReplayConfig,
    stats: RunStatistics,
    write_errors: list[SinkWriteError] | None = None,
) -> dict[str, Any]:
    """
    Build a summary dictionary for a run.

    Args:
        config: The configuration the run used
        stats: Final statistics
        write_errors: Sink write failures reported during the run

    Returns:
        Dictionary with counters, settings and write errors
    """
    return {
        "generated_at": datetime.now(UTC).isoformat(),
        "succeeded": stats.succeeded,
        "failed": stats.failed,
        "total": stats.total,
        "skipped": stats.skipped,
        "rejected": stats.rejected,
        "config": config_to_dict(config),
        "write_errors": [error.to_dict() for error in write_errors or []],
    }


def generate_json_summary(
    config: ReplayConfig,
    stats: RunStatistics,
    write_errors: list[SinkWriteError] | None = None,
    indent: int = 2,
) -> str:
    """Serialize build_summary_dict() as JSON."""
    return json.dumps(build_summary_dict(config, stats, write_errors), indent=indent)
