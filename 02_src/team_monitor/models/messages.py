"""Inbox message data models."""

import json
from typing import Any

from pydantic import Field

from .base import RecordModel
from .errors import RecordParseError

MessageKey = tuple[str, str]  # (sender, timestamp)


class Message(RecordModel):
    """A single entry in a member's inbox file."""

    sender: str = Field(alias="from")
    text: str = ""
    timestamp: str  # as written by the sender, not parsed
    color: str | None = None
    read: bool | None = None

    @property
    def key(self) -> MessageKey:
        """Identity used for change detection; other fields are ignored."""
        return (self.sender, self.timestamp)

    def protocol_payload(self) -> dict[str, Any] | None:
        return parse_protocol_message(self.text)


def parse_inbox(data: Any) -> list[Message]:
    """Decode an inbox file (a JSON array of messages), keeping file order."""
    if not isinstance(data, list):
        raise RecordParseError("inbox must be a JSON array")
    return [Message.from_dict(item) for item in data]


def find_new_messages(previous: list[Message], current: list[Message]) -> list[Message]:
    """Return entries of ``current`` whose (sender, timestamp) is not in ``previous``.

    Order follows ``current``. Duplicate keys inside ``current`` are reported once.
    """
    seen = {m.key for m in previous}
    new: list[Message] = []
    for message in current:
        if message.key in seen:
            continue
        seen.add(message.key)
        new.append(message)
    return new


def parse_protocol_message(text: str) -> dict[str, Any] | None:
    """Return the decoded object if ``text`` is a JSON object with a ``type`` key.

    Agents exchange structured control messages (shutdown requests, idle
    notifications, ...) as JSON in the text body; everything else is prose.
    """
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        return None
    if isinstance(parsed, dict) and "type" in parsed:
        return parsed
    return None
