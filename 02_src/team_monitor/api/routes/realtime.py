"""WebSocket endpoint for push updates."""

import asyncio
import json
from typing import Any

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from ...app import IApplication
from ...fanout import IEventFanout
from ...logging_config import get_logger

logger = get_logger(__name__)


class WebSocketSubscriber:
    """Fanout subscriber writing ``{"event", "data"}`` frames to one socket."""

    def __init__(self, websocket: WebSocket):
        self._websocket = websocket
        # Frames must leave in the order they were produced
        self._lock = asyncio.Lock()

    async def send(self, event: str, data: Any) -> None:
        async with self._lock:
            await self._websocket.send_json({"event": event, "data": data})


class SubscribeError(ValueError):
    """A client frame could not be understood."""


async def handle_frame(fanout: IEventFanout, subscriber: WebSocketSubscriber, frame: Any) -> None:
    """Apply one client frame (a subscribe request or a ping)."""
    if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
        raise SubscribeError("frame must be an object with an 'event' field")

    event = frame["event"]
    data = frame.get("data")

    if event == "ping":
        await subscriber.send("pong", None)
        return

    if event == "subscribe:team":
        team_name = _require_str(data, "teamName")
        fanout.subscribe_team(subscriber, team_name)
        logger.info("Subscribed to team %s", team_name)
        await subscriber.send("subscribed", {"channel": f"team:{team_name}"})
        return

    if event == "subscribe:member":
        if not isinstance(data, dict):
            raise SubscribeError("subscribe:member expects {teamName, memberName}")
        team_name = _require_str(data.get("teamName"), "teamName")
        member_name = _require_str(data.get("memberName"), "memberName")
        fanout.subscribe_member(subscriber, team_name, member_name)
        logger.info("Subscribed to member %s/%s", team_name, member_name)
        await subscriber.send("subscribed", {"channel": f"member:{team_name}:{member_name}"})
        return

    if event == "subscribe:tasks":
        team_name = _require_str(data, "teamName")
        await fanout.subscribe_tasks(subscriber, team_name)
        logger.info("Subscribed to tasks of %s", team_name)
        await subscriber.send("subscribed", {"channel": f"tasks:{team_name}"})
        return

    raise SubscribeError(f"unknown event {event!r}")


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value:
        raise SubscribeError(f"{field_name} must be a non-empty string")
    return value


def create_realtime_router(app: IApplication) -> APIRouter:
    """Create realtime router."""
    router = APIRouter(tags=["realtime"])

    @router.websocket("/ws")
    async def websocket_endpoint(
        websocket: WebSocket,
        scope: str = Query("global", description="'narrow' skips the global channel"),
    ) -> None:
        """Initial snapshot, then subscription-scoped change events."""
        await websocket.accept()
        fanout = app.fanout
        subscriber = WebSocketSubscriber(websocket)
        try:
            await fanout.connect(subscriber, join_global=scope != "narrow")
            logger.info("Client connected (scope=%s)", scope)

            while True:
                text = await websocket.receive_text()
                try:
                    await handle_frame(fanout, subscriber, json.loads(text))
                except ValueError as e:
                    # Bad JSON or a malformed subscribe request
                    await subscriber.send("error", {"message": str(e)})
        except WebSocketDisconnect:
            logger.info("Client disconnected")
        finally:
            fanout.unsubscribe(subscriber)

    return router
