"""Turns raw filesystem notifications into store updates and change events."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from ..config import CONFIG_FILE_NAME, INBOX_DIR_NAME
from ..fanout import IEventFanout
from ..files import is_record_file, load_inbox, load_task, load_team_config, record_stem
from ..logging_config import get_logger
from ..models import (
    ChangeEvent,
    InboxRemoved,
    MessageReceived,
    RecordParseError,
    TaskCreated,
    TaskDeleted,
    TaskUpdated,
    TeamDeleted,
    TeamUpdated,
    find_new_messages,
)
from ..store import IRecordStore

logger = get_logger(__name__)


class ChangeKind(str, Enum):
    """Filesystem notification kinds."""

    CREATED = "created"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class FileChange:
    """One raw notification from the watcher."""

    path: Path
    kind: ChangeKind


class TargetKind(str, Enum):
    """What a watched file holds."""

    TEAM_CONFIG = "team_config"
    INBOX = "inbox"
    TASK = "task"


@dataclass(frozen=True)
class FileTarget:
    """A classified path: record kind, team directory, and record name."""

    kind: TargetKind
    team_dir: str
    record: str | None = None  # member name or task id


def classify(path: Path, teams_dir: Path, tasks_dir: Path) -> FileTarget | None:
    """Classify ``path`` by its position under the watched roots.

    Layouts:
        <teams_dir>/<team>/config.json          team config
        <teams_dir>/<team>/inboxes/<member>.json inbox
        <tasks_dir>/<team>/<task_id>.json       task

    Anything else (including hidden files) returns None.
    """
    if path.name.startswith("."):
        return None

    parts = _relative_parts(path, teams_dir)
    if parts is not None:
        if len(parts) == 2 and parts[1] == CONFIG_FILE_NAME:
            return FileTarget(TargetKind.TEAM_CONFIG, parts[0])
        if len(parts) == 3 and parts[1] == INBOX_DIR_NAME and is_record_file(path):
            return FileTarget(TargetKind.INBOX, parts[0], record_stem(path))

    parts = _relative_parts(path, tasks_dir)
    if parts is not None and len(parts) == 2 and is_record_file(path):
        return FileTarget(TargetKind.TASK, parts[0], record_stem(path))

    return None


def _relative_parts(path: Path, root: Path) -> tuple[str, ...] | None:
    try:
        return path.relative_to(root).parts
    except ValueError:
        return None


class IChangeDetector(Protocol):
    """Applies notifications to the record store and publishes what changed."""

    def apply(self, change: FileChange) -> list[ChangeEvent]:
        """Update the store for one notification; return the resulting events."""
        ...

    async def process(self, change: FileChange) -> list[ChangeEvent]:
        """Apply one notification, then publish its events in order."""
        ...


class ChangeDetector:
    """Diffs re-read files against the store.

    Team, inbox and task keys are resolved to the configured team name through
    the store's directory index, so a team whose directory and config name
    differ is inserted and evicted under the same key.
    """

    def __init__(
        self,
        store: IRecordStore,
        fanout: IEventFanout,
        teams_dir: Path,
        tasks_dir: Path,
        emit_inbox_removed: bool = False,
    ):
        self._store = store
        self._fanout = fanout
        self._teams_dir = teams_dir
        self._tasks_dir = tasks_dir
        self._emit_inbox_removed = emit_inbox_removed

    def classify(self, path: Path) -> FileTarget | None:
        return classify(path, self._teams_dir, self._tasks_dir)

    async def process(self, change: FileChange) -> list[ChangeEvent]:
        """Apply one notification, then publish its events in order."""
        events = self.apply(change)
        for event in events:
            await self._fanout.publish(event)
        return events

    def apply(self, change: FileChange) -> list[ChangeEvent]:
        """Update the store for one notification; return the resulting events.

        Never raises for bad file content; the failure is logged and the
        cached state is left as it was.
        """
        target = self.classify(change.path)
        if target is None:
            return []

        removed = change.kind == ChangeKind.REMOVED
        try:
            if target.kind == TargetKind.TEAM_CONFIG:
                return self._apply_team(target, change.path, removed)
            if target.kind == TargetKind.INBOX:
                return self._apply_inbox(target, change.path, removed)
            return self._apply_task(target, change.path, removed)
        except (OSError, RecordParseError) as e:
            logger.warning(
                "Failed to read %s %s: %s",
                target.kind.value,
                change.path,
                e,
                extra={"path": str(change.path), "context": {"kind": change.kind.value}},
            )
            return []

    def _apply_team(self, target: FileTarget, path: Path, removed: bool) -> list[ChangeEvent]:
        if removed:
            team_name = self._store.remove_team(target.team_dir) or target.team_dir
            remaining = self._store.get_team(team_name)
            if remaining is not None:
                logger.info(
                    "Team %s still provided by another directory", team_name, extra={"team": team_name}
                )
                return [TeamUpdated(remaining)]
            logger.info("Team removed: %s", team_name, extra={"team": team_name})
            return [TeamDeleted(team_name)]

        team = load_team_config(path)
        events: list[ChangeEvent] = []
        renamed_from = self._store.put_team(target.team_dir, team)
        if renamed_from is not None:
            events.append(TeamDeleted(renamed_from))
        events.append(TeamUpdated(team))
        logger.info(
            "Team updated: %s (%d members)", team.name, len(team.members), extra={"team": team.name}
        )
        return events

    def _apply_inbox(self, target: FileTarget, path: Path, removed: bool) -> list[ChangeEvent]:
        team_name = self._store.resolve_team(target.team_dir)
        member_name = target.record or ""

        if removed:
            existed = self._store.remove_messages(team_name, member_name)
            if existed and self._emit_inbox_removed:
                return [InboxRemoved(team_name, member_name)]
            return []

        messages = load_inbox(path)
        previous = self._store.get_messages(team_name, member_name)
        new_messages = find_new_messages(previous, messages)
        self._store.set_messages(team_name, member_name, messages)

        if new_messages:
            logger.info(
                "%d new messages for %s/%s",
                len(new_messages),
                team_name,
                member_name,
                extra={"team": team_name, "member": member_name},
            )
        return [MessageReceived(team_name, member_name, m) for m in new_messages]

    def _apply_task(self, target: FileTarget, path: Path, removed: bool) -> list[ChangeEvent]:
        team_name = self._store.resolve_team(target.team_dir)
        task_id = target.record or ""

        if removed:
            if self._store.remove_task(team_name, task_id) is None:
                return []
            return [TaskDeleted(team_name, task_id)]

        task = load_task(path)
        if self._store.put_task(team_name, task):
            return [TaskCreated(team_name, task)]
        return [TaskUpdated(team_name, task)]
