"""Change events and the channels they are delivered on."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Union

from .messages import Message
from .tasks import Task
from .team import TeamConfig

# Snapshot frames sent outside the change stream
TEAMS_INITIAL = "teams:initial"
TASKS_INITIAL = "tasks:initial"


class ChannelKind(str, Enum):
    """Fanout channel scopes."""

    ALL = "all"
    TEAM = "team"
    MEMBER = "member"
    TASKS = "tasks"


@dataclass(frozen=True)
class Channel:
    """Identity of one fanout channel (a room)."""

    kind: ChannelKind
    team: str | None = None
    member: str | None = None

    @classmethod
    def all(cls) -> "Channel":
        return cls(ChannelKind.ALL)

    @classmethod
    def for_team(cls, team: str) -> "Channel":
        return cls(ChannelKind.TEAM, team)

    @classmethod
    def for_member(cls, team: str, member: str) -> "Channel":
        return cls(ChannelKind.MEMBER, team, member)

    @classmethod
    def for_tasks(cls, team: str) -> "Channel":
        return cls(ChannelKind.TASKS, team)

    def __str__(self) -> str:
        parts = [self.kind.value, self.team, self.member]
        return ":".join(p for p in parts if p is not None)


@dataclass(frozen=True)
class TeamUpdated:
    name: ClassVar[str] = "team:updated"

    team: TeamConfig

    @property
    def team_name(self) -> str:
        return self.team.name

    def channels(self) -> list[Channel]:
        return [Channel.all(), Channel.for_team(self.team_name)]

    def to_payload(self) -> dict[str, Any]:
        return self.team.to_dict()


@dataclass(frozen=True)
class TeamDeleted:
    name: ClassVar[str] = "team:deleted"

    team_name: str

    def channels(self) -> list[Channel]:
        return [Channel.all(), Channel.for_team(self.team_name)]

    def to_payload(self) -> dict[str, Any]:
        return {"teamName": self.team_name}


@dataclass(frozen=True)
class MessageReceived:
    name: ClassVar[str] = "message:received"

    team_name: str
    member_name: str
    message: Message

    def channels(self) -> list[Channel]:
        return [
            Channel.all(),
            Channel.for_team(self.team_name),
            Channel.for_member(self.team_name, self.member_name),
        ]

    def to_payload(self) -> dict[str, Any]:
        return {
            "teamName": self.team_name,
            "memberName": self.member_name,
            "message": self.message.to_dict(),
        }


@dataclass(frozen=True)
class InboxRemoved:
    """Only published when inbox-removal events are enabled."""

    name: ClassVar[str] = "inbox:removed"

    team_name: str
    member_name: str

    def channels(self) -> list[Channel]:
        return [
            Channel.all(),
            Channel.for_team(self.team_name),
            Channel.for_member(self.team_name, self.member_name),
        ]

    def to_payload(self) -> dict[str, Any]:
        return {"teamName": self.team_name, "memberName": self.member_name}


@dataclass(frozen=True)
class _TaskChange:
    name: ClassVar[str]

    team_name: str
    task: Task

    def channels(self) -> list[Channel]:
        return [Channel.all(), Channel.for_team(self.team_name), Channel.for_tasks(self.team_name)]

    def to_payload(self) -> dict[str, Any]:
        return {"teamName": self.team_name, "task": self.task.to_dict()}


@dataclass(frozen=True)
class TaskCreated(_TaskChange):
    name: ClassVar[str] = "task:created"


@dataclass(frozen=True)
class TaskUpdated(_TaskChange):
    name: ClassVar[str] = "task:updated"


@dataclass(frozen=True)
class TaskDeleted:
    name: ClassVar[str] = "task:deleted"

    team_name: str
    task_id: str

    def channels(self) -> list[Channel]:
        return [Channel.all(), Channel.for_team(self.team_name), Channel.for_tasks(self.team_name)]

    def to_payload(self) -> dict[str, Any]:
        return {"teamName": self.team_name, "taskId": self.task_id}


ChangeEvent = Union[
    TeamUpdated,
    TeamDeleted,
    MessageReceived,
    InboxRemoved,
    TaskCreated,
    TaskUpdated,
    TaskDeleted,
]
