"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add parent directory (and this one, for helpers) to path
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from helpers import RecordingSubscriber, TeamTree  # noqa: E402


@pytest.fixture
def tree(tmp_path):
    """Empty teams/tasks layout."""
    return TeamTree(tmp_path)


@pytest.fixture
def store():
    """Create an empty record store."""
    from team_monitor.store import RecordStore

    return RecordStore()


@pytest.fixture
def fanout(store):
    """Create EventFanout over the store."""
    from team_monitor.fanout import EventFanout

    return EventFanout(store)


@pytest.fixture
def published(fanout):
    """Every event the fanout publishes, in order."""
    events = []

    async def listener(event):
        events.append(event)

    fanout.add_listener(listener)
    return events


@pytest.fixture
def detector(store, fanout, tree):
    """Create ChangeDetector wired to the store and fanout."""
    from team_monitor.watcher import ChangeDetector

    return ChangeDetector(
        store=store,
        fanout=fanout,
        teams_dir=tree.teams_dir,
        tasks_dir=tree.tasks_dir,
    )


@pytest.fixture
def settings(tree):
    """Settings pointing at the temp layout."""
    from team_monitor.config import Settings

    return Settings(teams_dir=tree.teams_dir, tasks_dir=tree.tasks_dir)


@pytest.fixture
def observer():
    """A recording subscriber."""
    return RecordingSubscriber()
