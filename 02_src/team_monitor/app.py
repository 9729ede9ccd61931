"""Application bootstrap and lifecycle management."""

from typing import Protocol

from .config import Settings
from .fanout import EventFanout
from .loader import LoadReport, SnapshotLoader
from .logging_config import get_logger
from .models import ChangeEvent
from .store import IRecordStore, RecordStore
from .watcher import ChangeDetector, FileWatcher

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    @property
    def store(self) -> IRecordStore:
        ...

    @property
    def fanout(self) -> EventFanout:
        ...


class Application:
    """Owns the store and wires loader, detector, watcher and fanout around it."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or Settings.from_env()

        # Components (will be initialized in start())
        self._store: RecordStore | None = None
        self._fanout: EventFanout | None = None
        self._loader: SnapshotLoader | None = None
        self._detector: ChangeDetector | None = None
        self._watcher: FileWatcher | None = None
        self._last_load: LoadReport | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info(
            "Starting application (teams=%s, tasks=%s)",
            self._settings.teams_dir,
            self._settings.tasks_dir,
        )

        # 1. Store (no dependencies)
        self._store = RecordStore()

        # 2. Fanout (reads the store for snapshots)
        self._fanout = EventFanout(self._store, send_timeout=self._settings.send_timeout)
        self._fanout.add_listener(self._log_activity)

        # 3. Snapshot must complete before notifications are processed
        self._loader = SnapshotLoader(
            self._store, self._settings.teams_dir, self._settings.tasks_dir
        )
        self._last_load = await self._loader.load()

        # 4. Detector (store + fanout)
        self._detector = ChangeDetector(
            store=self._store,
            fanout=self._fanout,
            teams_dir=self._settings.teams_dir,
            tasks_dir=self._settings.tasks_dir,
            emit_inbox_removed=self._settings.emit_inbox_removed,
        )

        # 5. Watcher (drives the detector)
        self._watcher = FileWatcher(
            self._detector, [self._settings.teams_dir, self._settings.tasks_dir]
        )
        await self._watcher.start()
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._watcher:
            await self._watcher.stop()
        if self._store:
            logger.info("Store released: %s", self._store.counts)
        logger.info("Application stopped")

    async def _log_activity(self, event: ChangeEvent) -> None:
        logger.info(
            "%s published",
            event.name,
            extra={
                "event": event.name,
                "team": event.team_name,
                "context": {"channels": [str(c) for c in event.channels()]},
            },
        )

    @property
    def store(self) -> RecordStore:
        """Get store instance."""
        if not self._store:
            raise RuntimeError("Application not started")
        return self._store

    @property
    def fanout(self) -> EventFanout:
        """Get fanout instance."""
        if not self._fanout:
            raise RuntimeError("Application not started")
        return self._fanout

    @property
    def watcher(self) -> FileWatcher:
        """Get watcher instance."""
        if not self._watcher:
            raise RuntimeError("Application not started")
        return self._watcher

    @property
    def last_load(self) -> LoadReport | None:
        return self._last_load

