"""
Pytest configuration and fixtures for logreplay tests.

This module provides shared fixtures used across unit and integration tests.
"""

import io
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from rich.console import Console


TRACK_LINE = '1.2.3.4 - - [10/Oct/2023:13:55:36 -0700] "GET /track?x=1 HTTP/1.1" 200 512'
OTHER_TRACK_LINE = '5.6.7.8 - - [11/Oct/2023:08:00:00 +0000] "GET /track?id=42&src=mail HTTP/1.0" 200 12'
HEALTH_LINE = '9.9.9.9 - - [10/Oct/2023:13:55:37 -0700] "GET /health HTTP/1.1" 200 2'


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def console() -> Console:
    """A Console that writes plain text into a StringIO (read it with console.file.getvalue())."""
    return Console(file=io.StringIO(), width=200, color_system=None)


@pytest.fixture
def track_line() -> str:
    """A trackable request logged at 10/Oct/2023:13:55:36 -0700."""
    return TRACK_LINE


@pytest.fixture
def other_track_line() -> str:
    """A second trackable request logged at 11/Oct/2023:08:00:00 +0000."""
    return OTHER_TRACK_LINE


@pytest.fixture
def health_line() -> str:
    """A GET request that is not a /track request."""
    return HEALTH_LINE


@pytest.fixture
def sample_access_log(temp_dir: Path) -> Path:
    """Write a small access log mixing trackable and other requests."""
    path = temp_dir / "access.log"
    path.write_text("\n".join([TRACK_LINE, HEALTH_LINE, OTHER_TRACK_LINE]) + "\n")
    return path


@pytest.fixture
def sample_config_yaml() -> str:
    """Return a simple configuration YAML for testing."""
    return """
base_url: https://example.com
log_file_path: /var/log/nginx/access.log
dry_run: true
include_timestamp: true
regex_filter: "x=1"
sinks:
  succeeded: ok.log
"""
