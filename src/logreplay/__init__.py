"""
logreplay - Replay HTTP access-log traffic against a target host.

logreplay reads a web-server access log line by line and reissues every
tracked request against a base URL. It provides:
- Regex include/exclude filtering of log lines
- Optional reattachment of the original request timestamp
- Dry-run mode that prints the URLs instead of requesting them
- Append-only success, failure and failure-detail logs

Example usage:
    $ logreplay run --base-url https://website.com --log-file-path access.log --dry-run
    $ logreplay run --config replay.yaml --include-timestamp
    $ logreplay validate --config replay.yaml
"""

__version__ = "0.1.0"
__author__ = "logreplay Contributors"

__all__ = [
    "__version__",
    "__author__",
]
