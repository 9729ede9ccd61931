"""Tests for EventFanout."""

import asyncio

import pytest

from helpers import FailingSubscriber, RecordingSubscriber, StalledSubscriber
from team_monitor.fanout import EventFanout
from team_monitor.models import (
    Channel,
    Message,
    MessageReceived,
    Task,
    TaskCreated,
    TaskStatus,
    TeamConfig,
    TeamDeleted,
    TeamUpdated,
)


def message_event(team: str, member: str = "worker", ts: str = "T1") -> MessageReceived:
    return MessageReceived(team, member, Message(sender="lead", text="hi", timestamp=ts))


def task_event(team: str, task_id: str = "1") -> TaskCreated:
    return TaskCreated(team, Task(id=task_id, subject="x", status=TaskStatus.PENDING))


class TestFanoutSubscribe:
    """Tests for channel membership."""

    def test_subscribe_team(self, fanout, observer):
        """Team subscriptions are recorded per channel."""
        fanout.subscribe_team(observer, "Alpha")
        assert fanout.channels_of(observer) == {Channel.for_team("Alpha")}
        assert fanout.subscriber_count(Channel.for_team("Alpha")) == 1

    def test_subscribe_twice_is_noop(self, fanout, observer):
        """Repeated subscribe calls do not duplicate membership."""
        fanout.subscribe_team(observer, "Alpha")
        fanout.subscribe_team(observer, "Alpha")
        assert fanout.subscriber_count(Channel.for_team("Alpha")) == 1

    def test_subscriptions_accumulate(self, fanout, observer):
        """More subscribe calls widen what an observer receives."""
        fanout.subscribe_team(observer, "Alpha")
        fanout.subscribe_member(observer, "Beta", "worker")
        assert fanout.channels_of(observer) == {
            Channel.for_team("Alpha"),
            Channel.for_member("Beta", "worker"),
        }

    def test_unsubscribe_removes_everywhere(self, fanout, observer):
        """Disconnect drops every membership."""
        fanout.subscribe_all(observer)
        fanout.subscribe_team(observer, "Alpha")
        fanout.unsubscribe(observer)
        assert fanout.channels_of(observer) == set()
        assert fanout.subscriber_count() == 0
        assert fanout.subscriber_count(Channel.all()) == 0


class TestFanoutConnect:
    """Tests for the initial snapshot."""

    async def test_connect_sends_teams_snapshot(self, fanout, store, observer):
        """New connections get every team and join the global channel."""
        store.put_team("a", TeamConfig(name="Alpha"))
        store.put_team("b", TeamConfig(name="Beta"))

        await fanout.connect(observer)

        (snapshot,) = observer.events("teams:initial")
        assert sorted(t["name"] for t in snapshot) == ["Alpha", "Beta"]
        assert Channel.all() in fanout.channels_of(observer)

    async def test_connect_narrow(self, fanout, observer):
        """Narrow connections skip the global channel."""
        await fanout.connect(observer, join_global=False)

        assert observer.events("teams:initial") == [[]]
        assert fanout.channels_of(observer) == set()
        assert fanout.subscriber_count() == 1

    async def test_subscribe_tasks_sends_current_list(self, fanout, store, observer):
        """A late task subscriber sees existing tasks immediately."""
        store.put_task("Alpha", Task(id="1", subject="x", status=TaskStatus.PENDING))
        store.put_task("Alpha", Task(id="2", subject="y", status=TaskStatus.COMPLETED))

        await fanout.subscribe_tasks(observer, "Alpha")

        (snapshot,) = observer.events("tasks:initial")
        assert snapshot["teamName"] == "Alpha"
        assert sorted(t["id"] for t in snapshot["tasks"]) == ["1", "2"]
        assert Channel.for_tasks("Alpha") in fanout.channels_of(observer)

    async def test_subscribe_tasks_unknown_team(self, fanout, observer):
        """Subscribing to a team without tasks sends an empty list."""
        await fanout.subscribe_tasks(observer, "Nobody")

        assert observer.events("tasks:initial") == [{"teamName": "Nobody", "tasks": []}]


class TestFanoutPublish:
    """Tests for event delivery."""

    async def test_team_scoping(self, fanout):
        """A team subscriber never sees another team's messages; global sees both."""
        alpha = RecordingSubscriber("alpha")
        everyone = RecordingSubscriber("global")
        fanout.subscribe_team(alpha, "Alpha")
        fanout.subscribe_all(everyone)

        await fanout.publish(message_event("Alpha"))
        await fanout.publish(message_event("Beta"))

        assert [d["teamName"] for d in alpha.events("message:received")] == ["Alpha"]
        assert [d["teamName"] for d in everyone.events("message:received")] == ["Alpha", "Beta"]

    async def test_member_channel(self, fanout):
        """Member subscribers only get that member's inbox events."""
        worker = RecordingSubscriber("worker")
        fanout.subscribe_member(worker, "Alpha", "worker")

        await fanout.publish(message_event("Alpha", "worker"))
        await fanout.publish(message_event("Alpha", "lead"))
        await fanout.publish(TeamUpdated(TeamConfig(name="Alpha")))

        assert [d["memberName"] for d in worker.events("message:received")] == ["worker"]
        assert worker.events("team:updated") == []

    async def test_tasks_channel(self, fanout):
        """Task subscribers get task events but not messages."""
        tasks = RecordingSubscriber("tasks")
        fanout.subscribe(tasks, Channel.for_tasks("Alpha"))

        await fanout.publish(task_event("Alpha"))
        await fanout.publish(message_event("Alpha"))
        await fanout.publish(task_event("Beta"))

        assert [event for event, _ in tasks.frames] == ["task:created"]

    async def test_one_copy_per_subscriber(self, fanout, observer):
        """Membership in several target channels still yields one delivery."""
        fanout.subscribe_all(observer)
        fanout.subscribe_team(observer, "Alpha")
        fanout.subscribe_member(observer, "Alpha", "worker")

        await fanout.publish(message_event("Alpha"))

        assert len(observer.frames) == 1

    async def test_per_entity_order(self, fanout, observer):
        """Events reach a subscriber in publish order."""
        fanout.subscribe_team(observer, "Alpha")

        for ts in ("T1", "T2", "T3"):
            await fanout.publish(message_event("Alpha", ts=ts))

        assert [d["message"]["timestamp"] for _, d in observer.frames] == ["T1", "T2", "T3"]

    async def test_failed_subscriber_dropped(self, fanout):
        """A subscriber whose send fails is removed; others still receive."""
        broken = FailingSubscriber("broken")
        healthy = RecordingSubscriber("healthy")
        fanout.subscribe_all(broken)
        fanout.subscribe_all(healthy)

        await fanout.publish(TeamDeleted("Alpha"))

        assert healthy.events("team:deleted") == [{"teamName": "Alpha"}]
        assert fanout.channels_of(broken) == set()

    async def test_stalled_subscriber_dropped(self, store):
        """A subscriber that never accepts the frame is dropped after the timeout."""
        fanout = EventFanout(store, send_timeout=0.05)
        stalled = StalledSubscriber("stalled")
        healthy = RecordingSubscriber("healthy")
        fanout.subscribe_all(stalled)
        fanout.subscribe_all(healthy)

        await asyncio.wait_for(fanout.publish(TeamDeleted("Alpha")), timeout=2)

        assert healthy.events("team:deleted") == [{"teamName": "Alpha"}]
        assert fanout.channels_of(stalled) == set()
        assert fanout.subscriber_count(Channel.all()) == 1

    async def test_stalled_subscriber_does_not_hold_later_events(self, store):
        """Once dropped, a stalled subscriber no longer delays publishing."""
        fanout = EventFanout(store, send_timeout=0.05)
        healthy = RecordingSubscriber("healthy")
        fanout.subscribe_all(StalledSubscriber("stalled"))
        fanout.subscribe_all(healthy)

        await fanout.publish(TeamDeleted("Alpha"))
        await asyncio.wait_for(fanout.publish(TeamDeleted("Beta")), timeout=1)

        assert [d["teamName"] for d in healthy.events("team:deleted")] == ["Alpha", "Beta"]

    async def test_listeners_see_every_event(self, fanout, published):
        """In-process listeners receive events regardless of channels."""
        event = message_event("Alpha")

        await fanout.publish(event)

        assert published == [event]

    async def test_listener_error_isolated(self, fanout, observer):
        """A failing listener does not stop delivery."""
        calls = []

        async def failing(event):
            raise RuntimeError("boom")

        async def normal(event):
            calls.append(event)

        fanout.add_listener(failing)
        fanout.add_listener(normal)
        fanout.subscribe_all(observer)

        await fanout.publish(TeamDeleted("Alpha"))

        assert len(calls) == 1
        assert len(observer.frames) == 1

    @pytest.mark.asyncio
    async def test_no_subscribers(self, fanout):
        """Publishing with nobody listening is fine."""
        await fanout.publish(TeamDeleted("Alpha"))
