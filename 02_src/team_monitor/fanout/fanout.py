"""Channel-based fanout of change events to observers."""

import asyncio
from typing import Any, Awaitable, Callable, Protocol

from ..logging_config import get_logger
from ..models import TASKS_INITIAL, TEAMS_INITIAL, ChangeEvent, Channel
from ..store import IRecordStore

logger = get_logger(__name__)

SEND_TIMEOUT = 5.0


class Subscriber(Protocol):
    """A remote observer (one websocket connection, usually)."""

    async def send(self, event: str, data: Any) -> None:
        """Deliver one named frame to the observer."""
        ...


EventListener = Callable[[ChangeEvent], Awaitable[None]]


class IEventFanout(Protocol):
    """Delivers each change event to every channel it belongs to."""

    async def publish(self, event: ChangeEvent) -> None:
        """Send ``event`` to all subscribers of its channels and to all listeners."""
        ...

    def add_listener(self, listener: EventListener) -> None:
        """Register an in-process callback that sees every event."""
        ...

    async def connect(self, subscriber: Subscriber, join_global: bool = True) -> None:
        """Send the teams snapshot and optionally join the global channel."""
        ...

    def subscribe_team(self, subscriber: Subscriber, team_name: str) -> None:
        ...

    def subscribe_member(self, subscriber: Subscriber, team_name: str, member_name: str) -> None:
        ...

    async def subscribe_tasks(self, subscriber: Subscriber, team_name: str) -> None:
        """Join the team's task channel and send its current task list."""
        ...

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Remove ``subscriber`` from every channel (on disconnect)."""
        ...


class EventFanout:
    """Explicit channel -> subscribers table.

    A subscriber present in several target channels of one event receives
    that event once. A subscriber that fails a send, or takes longer than
    ``send_timeout`` to accept one, is dropped from every channel.
    """

    def __init__(self, store: IRecordStore, send_timeout: float = SEND_TIMEOUT):
        self._store = store
        self._channels: dict[Channel, set[Subscriber]] = {}
        self._memberships: dict[Subscriber, set[Channel]] = {}
        self._listeners: list[EventListener] = []
        self._send_timeout = send_timeout

    def add_listener(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    # Subscriptions
    def subscribe(self, subscriber: Subscriber, channel: Channel) -> None:
        """Join ``channel``; joining twice is a no-op."""
        self._channels.setdefault(channel, set()).add(subscriber)
        self._memberships.setdefault(subscriber, set()).add(channel)
        logger.debug("Subscriber joined %s", channel)

    def subscribe_all(self, subscriber: Subscriber) -> None:
        self.subscribe(subscriber, Channel.all())

    def subscribe_team(self, subscriber: Subscriber, team_name: str) -> None:
        self.subscribe(subscriber, Channel.for_team(team_name))

    def subscribe_member(self, subscriber: Subscriber, team_name: str, member_name: str) -> None:
        self.subscribe(subscriber, Channel.for_member(team_name, member_name))

    async def subscribe_tasks(self, subscriber: Subscriber, team_name: str) -> None:
        """Join the team's task channel and send its current task list."""
        # Join before the send so nothing published meanwhile is missed
        tasks = [task.to_dict() for task in self._store.get_tasks(team_name)]
        self.subscribe(subscriber, Channel.for_tasks(team_name))
        await subscriber.send(TASKS_INITIAL, {"teamName": team_name, "tasks": tasks})

    async def connect(self, subscriber: Subscriber, join_global: bool = True) -> None:
        """Send the teams snapshot and optionally join the global channel."""
        teams = [team.to_dict() for team in self._store.list_teams()]
        if join_global:
            self.subscribe_all(subscriber)
        else:
            self._memberships.setdefault(subscriber, set())
        await subscriber.send(TEAMS_INITIAL, teams)

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Remove ``subscriber`` from every channel (on disconnect)."""
        for channel in self._memberships.pop(subscriber, set()):
            members = self._channels.get(channel)
            if members is None:
                continue
            members.discard(subscriber)
            if not members:
                del self._channels[channel]

    def channels_of(self, subscriber: Subscriber) -> set[Channel]:
        return set(self._memberships.get(subscriber, set()))

    def subscriber_count(self, channel: Channel | None = None) -> int:
        if channel is None:
            return len(self._memberships)
        return len(self._channels.get(channel, set()))

    # Delivery
    async def publish(self, event: ChangeEvent) -> None:
        """Send ``event`` to all subscribers of its channels and to all listeners."""
        targets: set[Subscriber] = set()
        for channel in event.channels():
            targets.update(self._channels.get(channel, set()))

        logger.info(
            "Publishing %s for team %s to %d subscribers",
            event.name,
            event.team_name,
            len(targets),
            extra={"event": event.name, "team": event.team_name, "subscribers": len(targets)},
        )

        payload = event.to_payload()
        recipients = list(targets)
        if recipients:
            results = await asyncio.gather(
                *[
                    asyncio.wait_for(subscriber.send(event.name, payload), self._send_timeout)
                    for subscriber in recipients
                ],
                return_exceptions=True,
            )
            for subscriber, result in zip(recipients, results):
                if isinstance(result, asyncio.TimeoutError):
                    logger.warning(
                        "Dropping subscriber slower than %.1fs on %s",
                        self._send_timeout,
                        event.name,
                    )
                    self.unsubscribe(subscriber)
                elif isinstance(result, Exception):
                    logger.warning("Dropping subscriber after send failure: %s", result)
                    self.unsubscribe(subscriber)

        if self._listeners:
            results = await asyncio.gather(
                *[listener(event) for listener in self._listeners],
                return_exceptions=True,
            )
            for i, result in enumerate(results):
                if isinstance(result, Exception):
                    logger.error("Error in listener %s: %s", i, result)
