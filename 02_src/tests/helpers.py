"""Shared test helpers: recording subscribers and an on-disk team layout."""

import asyncio
import json
from pathlib import Path
from typing import Any


class RecordingSubscriber:
    """Fanout subscriber that keeps every frame it is sent."""

    def __init__(self, name: str = "observer"):
        self.name = name
        self.frames: list[tuple[str, Any]] = []

    async def send(self, event: str, data: Any) -> None:
        self.frames.append((event, data))

    def events(self, name: str) -> list[Any]:
        return [data for event, data in self.frames if event == name]

    def __repr__(self) -> str:
        return f"RecordingSubscriber({self.name!r})"


class FailingSubscriber(RecordingSubscriber):
    """Subscriber whose connection is gone."""

    async def send(self, event: str, data: Any) -> None:
        raise ConnectionError("socket closed")


class TeamTree:
    """Builds a teams/ + tasks/ directory layout under a temp dir."""

    def __init__(self, root: Path):
        self.teams_dir = root / "teams"
        self.tasks_dir = root / "tasks"
        self.teams_dir.mkdir()
        self.tasks_dir.mkdir()

    def config_path(self, dir_name: str) -> Path:
        return self.teams_dir / dir_name / "config.json"

    def inbox_path(self, dir_name: str, member: str) -> Path:
        return self.teams_dir / dir_name / "inboxes" / f"{member}.json"

    def task_path(self, dir_name: str, task_id: str) -> Path:
        return self.tasks_dir / dir_name / f"{task_id}.json"

    def write_config(
        self,
        dir_name: str,
        name: str | None = None,
        members: list[str] | None = None,
        **extra: Any,
    ) -> Path:
        data = {
            "name": name or dir_name,
            "description": f"{name or dir_name} team",
            "createdAt": 1700000000000,
            "leadAgentId": f"team-lead@{name or dir_name}",
            "leadSessionId": "session-1",
            "members": [member_dict(m) for m in (members or ["team-lead"])],
        }
        data.update(extra)
        return self._write(self.config_path(dir_name), data)

    def write_inbox(self, dir_name: str, member: str, messages: list[dict]) -> Path:
        return self._write(self.inbox_path(dir_name, member), messages)

    def write_task(self, dir_name: str, task_id: str, data: dict) -> Path:
        return self._write(self.task_path(dir_name, task_id), data)

    def write_raw(self, path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def _write(self, path: Path, data: Any) -> Path:
        return self.write_raw(path, json.dumps(data))


def member_dict(name: str, **extra: Any) -> dict:
    data = {
        "agentId": f"{name}@team",
        "name": name,
        "agentType": "team-lead" if name == "team-lead" else "general-purpose",
        "model": "claude-sonnet",
        "joinedAt": 1700000000000,
        "cwd": "/work",
        "subscriptions": [],
    }
    data.update(extra)
    return data


def message_dict(sender: str, ts: str, text: str = "hi") -> dict:
    return {"from": sender, "text": text, "timestamp": ts}


def task_dict(subject: str = "Do it", status: str = "pending", **extra: Any) -> dict:
    data = {
        "subject": subject,
        "description": f"{subject} properly",
        "status": status,
        "blocks": [],
        "blockedBy": [],
    }
    data.update(extra)
    return data



class StalledSubscriber(RecordingSubscriber):
    """Subscriber whose peer stopped reading; sends never complete."""

    async def send(self, event: str, data: Any) -> None:
        await asyncio.Event().wait()
