from .base import EventSource
from .queue_source import QueueEventSource

__all__ = ['EventSource', 'QueueEventSource']
