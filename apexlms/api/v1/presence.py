# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Presence WebSocket API endpoint.

This module provides real-time presence and progress broadcast:
- WebSocket /ws - Presence and progress stream

Clients authenticate with a JWT (query param or first message), then:
- {"type": "join", "name": "..."} marks the user as online. Every
  connection receives {"type": "presence_update", "users": [...]}.
- {"type": "progress_update", "data": {...}} is relayed to every other
  connection as {"type": "user_progress", ...}.
- {"type": "ping"} is answered with {"type": "pong"}.

Lesson completions and graded quizzes published on the event bus are
forwarded to every connection as user_progress messages.

Delivery is best-effort. A message that cannot be sent to a connection is
dropped for that connection only.

Example:
    const ws = new WebSocket(`wss://lms.example.com/api/v1/presence/ws?token=${jwt}`);
    ws.onopen = () => ws.send(JSON.stringify({type: "join", name: "Ada"}));
"""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from apexlms.api.middleware.auth import CurrentUser
from apexlms.core.config import get_settings
from apexlms.domains.auth.jwt import JWTError, JWTManager
from apexlms.infrastructure.events import EventBus, EventData, EventTypes
from apexlms.utils.datetime import format_iso, utc_now

logger = logging.getLogger(__name__)

router = APIRouter()

AUTH_TIMEOUT_SECONDS = 30.0

FORWARDED_EVENTS = (
    EventTypes.Progress.LESSON_COMPLETED,
    EventTypes.Quiz.SUBMISSION_GRADED,
)


class ConnectionState:
    """State of one presence connection.

    Attributes:
        websocket: The WebSocket connection.
        user: Authenticated user.
        presence: Presence entry shown to others once joined, else None.
        message_queue: Outgoing messages.
    """

    def __init__(self, websocket: WebSocket, user: CurrentUser) -> None:
        self.websocket = websocket
        self.user = user
        self.presence: dict[str, Any] | None = None
        self.message_queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._closed = False

    @property
    def joined(self) -> bool:
        """Check whether the connection announced itself."""
        return self.presence is not None

    def send_message(self, message: dict[str, Any]) -> None:
        """Queue a message for sending."""
        if not self._closed:
            self.message_queue.put_nowait(message)

    def close(self) -> None:
        """Stop accepting messages."""
        self._closed = True


class PresenceHub:
    """Tracks presence connections and fans out messages.

    Attributes:
        _connections: Registered connections.
        _event_bus: Bus the hub is attached to, if any.
    """

    def __init__(self) -> None:
        self._connections: list[ConnectionState] = []
        self._event_bus: EventBus | None = None

    @property
    def connection_count(self) -> int:
        """Number of registered connections."""
        return len(self._connections)

    def online_users(self) -> list[dict[str, Any]]:
        """Presence entries of joined connections, in join order."""
        return [state.presence for state in self._connections if state.presence is not None]

    def attach(self, event_bus: EventBus) -> None:
        """Forward learning events from a bus to connected clients."""
        if self._event_bus is event_bus:
            return
        self.detach()
        for event_type in FORWARDED_EVENTS:
            event_bus.subscribe(event_type, self._handle_event)
        self._event_bus = event_bus
        logger.info("Presence hub subscribed to event bus")

    def detach(self) -> None:
        """Stop forwarding events."""
        if self._event_bus is None:
            return
        for event_type in FORWARDED_EVENTS:
            self._event_bus.unsubscribe(event_type, self._handle_event)
        self._event_bus = None

    def register(self, state: ConnectionState) -> None:
        """Register a new connection."""
        self._connections.append(state)
        logger.info("Presence connection registered: user=%s", state.user.id)

    def unregister(self, state: ConnectionState) -> None:
        """Unregister a connection and announce its departure."""
        state.close()
        if state not in self._connections:
            return

        self._connections.remove(state)
        logger.info("Presence connection unregistered: user=%s", state.user.id)

        if state.joined:
            self._broadcast_presence()

    def join(self, state: ConnectionState, name: str | None = None) -> None:
        """Mark a connection as online and announce it."""
        state.presence = {
            "id": state.user.id,
            "name": name or state.user.email or state.user.id,
            "role": state.user.role,
        }
        self._broadcast_presence()

    def relay_progress(self, sender: ConnectionState, data: dict[str, Any]) -> None:
        """Relay a client progress update to every other connection."""
        message = {
            "type": "user_progress",
            "user_id": sender.user.id,
            "data": data,
            "timestamp": format_iso(utc_now()),
        }
        for state in self._connections:
            if state is not sender:
                state.send_message(message)

    def broadcast(self, message: dict[str, Any]) -> None:
        """Queue a message for every connection."""
        for state in self._connections:
            state.send_message(message)

    def _broadcast_presence(self) -> None:
        self.broadcast({"type": "presence_update", "users": self.online_users()})

    async def _handle_event(self, event: EventData) -> None:
        """Forward a bus event as a user_progress message."""
        self.broadcast({
            "type": "user_progress",
            "user_id": event.learner_id,
            "event_type": event.event_type,
            "data": event.payload,
            "timestamp": format_iso(event.timestamp),
        })


_presence_hub: PresenceHub | None = None


def get_presence_hub() -> PresenceHub:
    """Get the process-wide presence hub."""
    global _presence_hub
    if _presence_hub is None:
        _presence_hub = PresenceHub()
    return _presence_hub


def reset_presence_hub() -> None:
    """Drop the process-wide presence hub.

    Used by tests to start from a clean state.
    """
    global _presence_hub
    if _presence_hub is not None:
        _presence_hub.detach()
    _presence_hub = None


def _authenticate(token: str | None) -> CurrentUser | None:
    """Resolve a WebSocket token to a user."""
    if not token:
        return None

    try:
        payload = JWTManager(get_settings().jwt).decode_token(token)
    except JWTError as e:
        logger.debug("WebSocket auth failed: %s", str(e))
        return None
    return CurrentUser(payload)


async def _send_error(websocket: WebSocket, code: str, message: str) -> None:
    await websocket.send_json({"type": "error", "code": code, "message": message})


@router.websocket("/ws")
async def presence_websocket(websocket: WebSocket) -> None:
    """WebSocket endpoint for presence and progress broadcast.

    Args:
        websocket: WebSocket connection.
    """
    await websocket.accept()

    hub = get_presence_hub()
    user = _authenticate(websocket.query_params.get("token"))

    if user is None:
        await websocket.send_json({
            "type": "auth_required",
            "message": "Send auth message with token: {\"type\": \"auth\", \"token\": \"...\"}",
        })
        try:
            auth_data = await asyncio.wait_for(
                websocket.receive_json(),
                timeout=AUTH_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            await _send_error(websocket, "AUTH_TIMEOUT", "Authentication timeout")
            await websocket.close()
            return
        except WebSocketDisconnect:
            return
        except ValueError:
            auth_data = None

        if isinstance(auth_data, dict) and auth_data.get("type") == "auth":
            user = _authenticate(auth_data.get("token"))

    if user is None:
        await _send_error(websocket, "AUTH_FAILED", "Invalid or expired token")
        await websocket.close()
        return

    state = ConnectionState(websocket, user)
    hub.register(state)

    await websocket.send_json({"type": "connected", "user_id": user.id})

    sender_task = asyncio.create_task(_message_sender(websocket, state))
    try:
        while True:
            try:
                data = await websocket.receive_json()
            except ValueError:
                state.send_message({
                    "type": "error",
                    "code": "INVALID_MESSAGE",
                    "message": "Messages must be JSON",
                })
                continue

            msg_type = data.get("type") if isinstance(data, dict) else None

            if msg_type == "join":
                hub.join(state, data.get("name"))

            elif msg_type == "progress_update":
                payload = data.get("data")
                hub.relay_progress(state, payload if isinstance(payload, dict) else {})

            elif msg_type == "ping":
                state.send_message({"type": "pong", "timestamp": format_iso(utc_now())})

            else:
                state.send_message({
                    "type": "error",
                    "code": "UNKNOWN_MESSAGE_TYPE",
                    "message": f"Unknown message type: {msg_type}",
                })

    except WebSocketDisconnect:
        logger.debug("Presence WebSocket disconnected: user=%s", user.id)
    finally:
        hub.unregister(state)
        sender_task.cancel()
        try:
            await sender_task
        except asyncio.CancelledError:
            pass


async def _message_sender(websocket: WebSocket, state: ConnectionState) -> None:
    """Send queued messages until the connection goes away.

    Args:
        websocket: WebSocket connection.
        state: Connection state with message queue.
    """
    while True:
        message = await state.message_queue.get()
        try:
            await websocket.send_json(message)
        except (RuntimeError, WebSocketDisconnect) as e:
            logger.debug("Failed to send presence message: %s", str(e))
            return
