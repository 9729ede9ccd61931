"""Event fanout module."""

from .fanout import EventFanout, EventListener, IEventFanout, Subscriber

__all__ = ["EventFanout", "EventListener", "IEventFanout", "Subscriber"]
