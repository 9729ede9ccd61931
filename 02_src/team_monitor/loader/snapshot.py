"""Startup scan that fills the record store before the watch begins."""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from ..config import CONFIG_FILE_NAME, INBOX_DIR_NAME
from ..files import is_record_file, load_inbox, load_task, load_team_config, record_stem
from ..logging_config import get_logger
from ..models import Message, RecordParseError, Task, TeamConfig
from ..store import IRecordStore

logger = get_logger(__name__)


@dataclass
class TeamSnapshot:
    """Everything read from disk for one team directory."""

    dir_name: str
    team: TeamConfig
    inboxes: dict[str, list[Message]] = field(default_factory=dict)
    tasks: list[Task] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


@dataclass
class LoadReport:
    """Outcome of a snapshot load."""

    teams: int = 0
    inboxes: int = 0
    tasks: int = 0
    skipped: list[str] = field(default_factory=list)


class ISnapshotLoader(Protocol):
    """One-time scan of the teams and tasks roots."""

    async def load(self) -> LoadReport:
        """Populate the store; returns only after every file was processed."""
        ...


class SnapshotLoader:
    """Reads every team directory concurrently, then fills the store in one pass."""

    def __init__(self, store: IRecordStore, teams_dir: Path, tasks_dir: Path):
        self._store = store
        self._teams_dir = teams_dir
        self._tasks_dir = tasks_dir

    async def load(self) -> LoadReport:
        """Populate the store; returns only after every file was processed."""
        report = LoadReport()

        try:
            dir_names = await asyncio.to_thread(_list_subdirs, self._teams_dir)
        except FileNotFoundError:
            logger.warning("Teams directory not found, starting empty: %s", self._teams_dir)
            return report
        except OSError as e:
            logger.error("Failed to scan teams directory %s: %s", self._teams_dir, e)
            return report

        snapshots = await asyncio.gather(
            *[asyncio.to_thread(self._read_team_dir, name) for name in dir_names]
        )

        # Apply in directory order once all reads are done
        for snapshot in snapshots:
            if snapshot is None:
                continue
            self._apply(snapshot)
            report.teams += 1
            report.inboxes += len(snapshot.inboxes)
            report.tasks += len(snapshot.tasks)
            report.skipped.extend(snapshot.skipped)

        logger.info(
            "Loaded %d teams, %d inboxes, %d tasks (%d files skipped)",
            report.teams,
            report.inboxes,
            report.tasks,
            len(report.skipped),
        )
        return report

    def _apply(self, snapshot: TeamSnapshot) -> None:
        team_name = snapshot.team.name
        self._store.put_team(snapshot.dir_name, snapshot.team)
        for member_name, messages in snapshot.inboxes.items():
            self._store.set_messages(team_name, member_name, messages)
        for task in snapshot.tasks:
            self._store.put_task(team_name, task)

    def _read_team_dir(self, dir_name: str) -> TeamSnapshot | None:
        """Blocking read of one team directory (runs in a worker thread)."""
        team_dir = self._teams_dir / dir_name
        try:
            team = load_team_config(team_dir / CONFIG_FILE_NAME)
        except (OSError, RecordParseError):
            # No usable config yet; not an error
            return None

        snapshot = TeamSnapshot(dir_name=dir_name, team=team)

        for path in _list_records(team_dir / INBOX_DIR_NAME):
            try:
                snapshot.inboxes[record_stem(path)] = load_inbox(path)
            except (OSError, RecordParseError) as e:
                logger.warning("Skipping inbox %s: %s", path, e, extra={"path": str(path)})
                snapshot.skipped.append(str(path))

        for path in _list_records(self._tasks_dir / dir_name):
            try:
                snapshot.tasks.append(load_task(path))
            except (OSError, RecordParseError) as e:
                logger.warning("Skipping task %s: %s", path, e, extra={"path": str(path)})
                snapshot.skipped.append(str(path))

        return snapshot


def _list_subdirs(root: Path) -> list[str]:
    return sorted(
        entry.name
        for entry in root.iterdir()
        if entry.is_dir() and not entry.name.startswith(".")
    )


def _list_records(directory: Path) -> list[Path]:
    """Record files directly inside ``directory``; empty if it does not exist."""
    try:
        entries = sorted(directory.iterdir())
    except OSError:
        return []
    return [p for p in entries if p.is_file() and is_record_file(p)]
