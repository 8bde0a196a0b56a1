"""
Line admission for replay.

A line is admitted when the configured filter lets it through:
- include: the pattern matches somewhere in the line
- exclude: the pattern matches nowhere in the line
- none: always

Rejected lines are dropped silently; they are neither echoed nor counted.
"""

from logreplay.schema import FilterMode, ReplayFilter


def admit(line: str, replay_filter: ReplayFilter) -> bool:
    """
    Decide whether a log line proceeds to reconstruction and replay.

    Args:
        line: The raw log line
        replay_filter: The run's filter

    Returns:
        True if the line should be replayed
    """
    if replay_filter.mode == FilterMode.INCLUDE:
        return replay_filter.pattern.search(line) is not None
    if replay_filter.mode == FilterMode.EXCLUDE:
        return replay_filter.pattern.search(line) is None
    return True
