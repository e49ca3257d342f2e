"""
Host-side periodic scheduling of the block controller.

The controller itself never schedules anything; this loop invokes it every
`period_seconds` until stopped. Skipped cycles are the normal case between two
blocks. A failed invocation is logged and counted and the next cycle starts
from the chain state the failed one left untouched.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from auditchain.adapters.sources.base import EventSource
from auditchain.config.settings import BlockConfig
from auditchain.core.controller import BlockController, InvocationOutcome
from auditchain.core.exceptions import AuditChainError

logger = logging.getLogger(__name__)


@dataclass
class SchedulerStats:
    """Tally of invocation outcomes"""
    cycles: int = 0
    sealed: int = 0
    skipped: int = 0
    empty_updates: int = 0
    failures: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "cycles": self.cycles,
            "sealed": self.sealed,
            "skipped": self.skipped,
            "empty_updates": self.empty_updates,
            "failures": self.failures
        }


class BlockScheduler:
    """Invokes a block controller periodically"""

    def __init__(
        self,
        controller: BlockController,
        source: EventSource,
        config: BlockConfig,
        period_seconds: float = 1.0,
        halt_on_error: bool = False,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Args:
            controller: Controller to invoke
            source: Event source handed to every invocation
            config: Block creation options handed to every invocation
            period_seconds: Pause between invocations
            halt_on_error: Re-raise the first invocation failure instead of continuing
            sleep: Sleep function (replaceable in tests)
        """
        if period_seconds <= 0:
            raise ValueError("period_seconds must be positive")

        self.controller = controller
        self.source = source
        self.config = config
        self.period_seconds = period_seconds
        self.halt_on_error = halt_on_error
        self.sleep = sleep
        self.stats = SchedulerStats()

    def run_cycle(self) -> None:
        """Run a single invocation and record its outcome."""
        self.stats.cycles += 1
        try:
            result = self.controller.run_once(self.source, self.config)
        except AuditChainError as e:
            self.stats.failures += 1
            logger.error(f"Block invocation {self.stats.cycles} failed: {type(e).__name__}: {e}")
            if self.halt_on_error:
                raise
            return

        if result.outcome == InvocationOutcome.SEALED:
            self.stats.sealed += 1
        elif result.outcome == InvocationOutcome.EMPTY_UPDATE:
            self.stats.empty_updates += 1
        else:
            self.stats.skipped += 1

    def run(self, max_cycles: Optional[int] = None, stop_event: Optional[threading.Event] = None) -> SchedulerStats:
        """
        Invoke the controller until `max_cycles` is reached or `stop_event` is set.

        Returns:
            Outcome tally of this run
        """
        logger.info(
            f"Block scheduler started (period={self.period_seconds}s, "
            f"blocksize={self.config.block_size}, interval={self.config.interval_minutes}min)"
        )
        while not (stop_event is not None and stop_event.is_set()):
            self.run_cycle()
            if max_cycles is not None and self.stats.cycles >= max_cycles:
                break
            self.sleep(self.period_seconds)

        logger.info(f"Block scheduler stopped: {self.stats.to_dict()}")
        return self.stats
