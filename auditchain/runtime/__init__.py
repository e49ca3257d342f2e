from .scheduler import BlockScheduler, SchedulerStats

__all__ = ["BlockScheduler", "SchedulerStats"]
