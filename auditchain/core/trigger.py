"""
Block trigger evaluation.

A block is sealed when either the number of waiting events exceeds the block
size or the last execution lies further back than the configured interval, in
which case a partial block may be created.
"""

MILLIS_PER_MINUTE = 60_000


def should_seal(
    pending_count: int,
    block_size_threshold: int,
    last_execution_time: int,
    interval_minutes: int,
    now: int
) -> bool:
    """
    Decide whether a block should be sealed now.

    Both thresholds are strict: the pending count must exceed the block size
    and the elapsed time must exceed the interval.

    Args:
        pending_count: Approximate number of events waiting in the source
        block_size_threshold: Configured block size
        last_execution_time: Epoch millis of the last trigger
        interval_minutes: Configured interval in minutes
        now: Current epoch millis

    Returns:
        True if a block should be sealed in this cycle
    """
    if pending_count > block_size_threshold:
        return True
    return (now - last_execution_time) > interval_minutes * MILLIS_PER_MINUTE
