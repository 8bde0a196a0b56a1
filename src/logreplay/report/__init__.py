"""
Reporting module for logreplay.

Run summaries are printed after the last line has been replayed.

Output formats:
    - Console: the succeeded/failed/total lines, plus a detail table in verbose mode
    - JSON: Structured output for programmatic consumption

Example:
    from logreplay.report import generate_json_summary, print_run_details

    print_run_details(config, stats, console=console)
    print(generate_json_summary(config, stats))
"""

from logreplay.report.console import print_config, print_run_details
from logreplay.report.json import build_summary_dict, config_to_dict, generate_json_summary

__all__ = [
    "print_config",
    "print_run_details",
    "generate_json_summary",
    "build_summary_dict",
    "config_to_dict",
]
