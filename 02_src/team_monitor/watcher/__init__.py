"""Change detection and filesystem watching."""

from .detector import (
    ChangeDetector,
    ChangeKind,
    FileChange,
    FileTarget,
    IChangeDetector,
    TargetKind,
    classify,
)
from .watcher import FileWatcher, IFileWatcher

__all__ = [
    "ChangeDetector",
    "ChangeKind",
    "FileChange",
    "FileTarget",
    "IChangeDetector",
    "TargetKind",
    "classify",
    "FileWatcher",
    "IFileWatcher",
]
