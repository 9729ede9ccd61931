"""Core data models for Team Monitor."""

from .errors import RecordParseError
from .events import (
    TASKS_INITIAL,
    TEAMS_INITIAL,
    ChangeEvent,
    Channel,
    ChannelKind,
    InboxRemoved,
    MessageReceived,
    TaskCreated,
    TaskDeleted,
    TaskUpdated,
    TeamDeleted,
    TeamUpdated,
)
from .messages import Message, find_new_messages, parse_inbox, parse_protocol_message
from .tasks import Task, TaskStatus
from .team import Member, TeamConfig, TeamSummary

__all__ = [
    # Records
    "TeamConfig",
    "TeamSummary",
    "Member",
    "Message",
    "Task",
    "TaskStatus",
    "RecordParseError",
    "parse_inbox",
    "find_new_messages",
    "parse_protocol_message",
    # Events
    "ChangeEvent",
    "Channel",
    "ChannelKind",
    "TeamUpdated",
    "TeamDeleted",
    "MessageReceived",
    "InboxRemoved",
    "TaskCreated",
    "TaskUpdated",
    "TaskDeleted",
    "TEAMS_INITIAL",
    "TASKS_INITIAL",
]
