"""Team Monitor core."""

from .app import Application, IApplication
from .config import Settings
from .fanout import EventFanout, IEventFanout, Subscriber
from .loader import ISnapshotLoader, LoadReport, SnapshotLoader
from .models import (
    ChangeEvent,
    Channel,
    Member,
    Message,
    Task,
    TaskStatus,
    TeamConfig,
    TeamSummary,
)
from .store import IRecordStore, RecordStore
from .watcher import ChangeDetector, ChangeKind, FileChange, FileWatcher, IChangeDetector

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    # Models
    "TeamConfig",
    "TeamSummary",
    "Member",
    "Message",
    "Task",
    "TaskStatus",
    "ChangeEvent",
    "Channel",
    # Components
    "IRecordStore",
    "RecordStore",
    "ISnapshotLoader",
    "SnapshotLoader",
    "LoadReport",
    "IChangeDetector",
    "ChangeDetector",
    "ChangeKind",
    "FileChange",
    "FileWatcher",
    "IEventFanout",
    "EventFanout",
    "Subscriber",
]
