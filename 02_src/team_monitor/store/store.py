"""In-memory record store for teams, inboxes and tasks."""

from typing import Protocol

from ..models import Member, Message, Task, TeamConfig, TeamSummary


class IRecordStore(Protocol):
    """Last-known parsed state of every watched file.

    Mutated only by the change detector (and the snapshot loader before the
    watch starts). All access happens on the event loop thread, so no locking
    is done here; a threaded caller must serialize access itself.
    """

    # Teams
    def put_team(self, dir_name: str, team: TeamConfig) -> str | None:
        """Store a team under its configured name and index its directory."""
        ...

    def remove_team(self, dir_name: str) -> str | None:
        """Drop the config loaded from ``dir_name``. Return its team name, if any."""
        ...

    def resolve_team(self, dir_name: str) -> str:
        """Map a directory name to the team name it was loaded under."""
        ...

    def get_team(self, team_name: str) -> TeamConfig | None:
        ...

    def list_teams(self) -> list[TeamConfig]:
        ...

    def list_team_summaries(self) -> list[TeamSummary]:
        ...

    def get_members(self, team_name: str) -> list[Member]:
        ...

    def get_member(self, team_name: str, member_name: str) -> Member | None:
        ...

    # Inboxes
    def get_messages(self, team_name: str, member_name: str) -> list[Message]:
        ...

    def set_messages(self, team_name: str, member_name: str, messages: list[Message]) -> None:
        ...

    def remove_messages(self, team_name: str, member_name: str) -> bool:
        ...

    # Tasks
    def get_tasks(self, team_name: str) -> list[Task]:
        ...

    def get_task(self, team_name: str, task_id: str) -> Task | None:
        ...

    def put_task(self, team_name: str, task: Task) -> bool:
        """Store a task. Return True if its id was not present before."""
        ...

    def remove_task(self, team_name: str, task_id: str) -> Task | None:
        ...

    # Lifecycle
    def clear(self) -> None:
        ...


class RecordStore:
    """Dict-backed record store."""

    def __init__(self) -> None:
        self._teams: dict[str, TeamConfig] = {}
        self._team_dirs: dict[str, TeamConfig] = {}  # directory name -> its config
        self._inboxes: dict[tuple[str, str], list[Message]] = {}
        self._tasks: dict[str, dict[str, Task]] = {}

    # Teams
    def put_team(self, dir_name: str, team: TeamConfig) -> str | None:
        """Store a team under its configured name and index its directory.

        Inboxes and tasks cached under the directory name (files seen before
        the config) or under the previous name (config renamed in place) move
        to the new name.

        Returns the previous name when the rename evicted it, else None. The
        previous name is kept if another directory still provides it.
        """
        previous = self._team_dirs.get(dir_name)
        first_seen = previous is None and dir_name != team.name and dir_name not in self._teams
        self._team_dirs[dir_name] = team
        self._teams[team.name] = team

        if first_seen:
            self._move_records(dir_name, team.name)
            return None
        if previous is None or previous.name == team.name:
            return None
        if self._reinstate(previous.name):
            return None
        self._move_records(previous.name, team.name)
        return previous.name

    def remove_team(self, dir_name: str) -> str | None:
        """Drop the config loaded from ``dir_name``. Return its team name, if any.

        The team itself stays when another directory provides the same name;
        ``get_team`` then returns that directory's config.
        """
        previous = self._team_dirs.pop(dir_name, None)
        if previous is None:
            return None
        self._reinstate(previous.name)
        return previous.name

    def resolve_team(self, dir_name: str) -> str:
        """Map a directory name to the team name it was loaded under.

        Directories without a loaded config resolve to themselves.
        """
        team = self._team_dirs.get(dir_name)
        return team.name if team is not None else dir_name

    def _reinstate(self, team_name: str) -> bool:
        """Point ``team_name`` at a remaining directory's config, or evict it."""
        for team in self._team_dirs.values():
            if team.name == team_name:
                self._teams[team_name] = team
                return True
        self._teams.pop(team_name, None)
        return False

    def _move_records(self, old_name: str, new_name: str) -> None:
        for key in [k for k in self._inboxes if k[0] == old_name]:
            messages = self._inboxes.pop(key)
            self._inboxes.setdefault((new_name, key[1]), messages)
        old_tasks = self._tasks.pop(old_name, None)
        if old_tasks:
            new_tasks = self._tasks.setdefault(new_name, {})
            for task_id, task in old_tasks.items():
                new_tasks.setdefault(task_id, task)

    def get_team(self, team_name: str) -> TeamConfig | None:
        return self._teams.get(team_name)

    def list_teams(self) -> list[TeamConfig]:
        return list(self._teams.values())

    def list_team_summaries(self) -> list[TeamSummary]:
        return [team.summary() for team in self._teams.values()]

    def get_members(self, team_name: str) -> list[Member]:
        team = self._teams.get(team_name)
        return list(team.members) if team else []

    def get_member(self, team_name: str, member_name: str) -> Member | None:
        team = self._teams.get(team_name)
        return team.get_member(member_name) if team else None

    # Inboxes
    def get_messages(self, team_name: str, member_name: str) -> list[Message]:
        return list(self._inboxes.get((team_name, member_name), []))

    def set_messages(self, team_name: str, member_name: str, messages: list[Message]) -> None:
        self._inboxes[(team_name, member_name)] = list(messages)

    def remove_messages(self, team_name: str, member_name: str) -> bool:
        return self._inboxes.pop((team_name, member_name), None) is not None

    # Tasks
    def get_tasks(self, team_name: str) -> list[Task]:
        return list(self._tasks.get(team_name, {}).values())

    def get_task(self, team_name: str, task_id: str) -> Task | None:
        return self._tasks.get(team_name, {}).get(task_id)

    def put_task(self, team_name: str, task: Task) -> bool:
        """Store a task. Return True if its id was not present before."""
        team_tasks = self._tasks.setdefault(team_name, {})
        created = task.id not in team_tasks
        team_tasks[task.id] = task
        return created

    def remove_task(self, team_name: str, task_id: str) -> Task | None:
        team_tasks = self._tasks.get(team_name)
        if not team_tasks:
            return None
        return team_tasks.pop(task_id, None)

    # Lifecycle
    def clear(self) -> None:
        self._teams.clear()
        self._team_dirs.clear()
        self._inboxes.clear()
        self._tasks.clear()

    @property
    def counts(self) -> dict[str, int]:
        """Sizes of each record kind, for logging."""
        return {
            "teams": len(self._teams),
            "inboxes": len(self._inboxes),
            "tasks": sum(len(t) for t in self._tasks.values()),
        }
