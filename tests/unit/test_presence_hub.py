# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the presence hub."""

from unittest.mock import MagicMock

import pytest

from apexlms.api.middleware.auth import CurrentUser
from apexlms.api.v1.presence import ConnectionState, PresenceHub, get_presence_hub
from apexlms.domains.auth.jwt import TokenPayload
from apexlms.infrastructure.events import EventBus, EventTypes


def make_state(user_id: str, email: str | None = None, role: str = "LEARNER") -> ConnectionState:
    user = CurrentUser(TokenPayload(sub=user_id, role=role, email=email, exp=4102444800))
    return ConnectionState(MagicMock(), user)


def drain(state: ConnectionState) -> list[dict]:
    messages = []
    while not state.message_queue.empty():
        messages.append(state.message_queue.get_nowait())
    return messages


@pytest.fixture
def hub() -> PresenceHub:
    return PresenceHub()


class TestPresence:
    """Tests for join and leave announcements."""

    @pytest.mark.asyncio
    async def test_join_broadcasts_online_users(self, hub: PresenceHub) -> None:
        ada = make_state("ada", email="ada@example.com")
        grace = make_state("grace", role="INSTRUCTOR")
        hub.register(ada)
        hub.register(grace)

        hub.join(ada, "Ada")
        hub.join(grace)

        last = drain(ada)[-1]
        assert last["type"] == "presence_update"
        assert last["users"] == [
            {"id": "ada", "name": "Ada", "role": "LEARNER"},
            {"id": "grace", "name": "grace", "role": "INSTRUCTOR"},
        ]

    @pytest.mark.asyncio
    async def test_name_falls_back_to_email(self, hub: PresenceHub) -> None:
        ada = make_state("ada", email="ada@example.com")
        hub.register(ada)

        hub.join(ada)

        assert hub.online_users() == [{"id": "ada", "name": "ada@example.com", "role": "LEARNER"}]

    @pytest.mark.asyncio
    async def test_leaving_announces_remaining_users(self, hub: PresenceHub) -> None:
        ada = make_state("ada")
        grace = make_state("grace")
        for state in (ada, grace):
            hub.register(state)
            hub.join(state)
        drain(grace)

        hub.unregister(ada)

        assert hub.connection_count == 1
        assert drain(grace) == [
            {"type": "presence_update", "users": [{"id": "grace", "name": "grace", "role": "LEARNER"}]}
        ]

    @pytest.mark.asyncio
    async def test_unjoined_departure_is_silent(self, hub: PresenceHub) -> None:
        ada = make_state("ada")
        grace = make_state("grace")
        hub.register(ada)
        hub.register(grace)

        hub.unregister(ada)
        hub.unregister(ada)

        assert drain(grace) == []

    @pytest.mark.asyncio
    async def test_closed_connection_receives_nothing(self, hub: PresenceHub) -> None:
        ada = make_state("ada")
        hub.register(ada)
        hub.unregister(ada)

        ada.send_message({"type": "pong"})

        assert drain(ada) == []


class TestProgressRelay:
    """Tests for progress fan-out."""

    @pytest.mark.asyncio
    async def test_relay_skips_sender(self, hub: PresenceHub) -> None:
        ada = make_state("ada")
        grace = make_state("grace")
        hub.register(ada)
        hub.register(grace)

        hub.relay_progress(ada, {"lesson_id": "l1"})

        assert drain(ada) == []
        message = drain(grace)[0]
        assert message["type"] == "user_progress"
        assert message["user_id"] == "ada"
        assert message["data"] == {"lesson_id": "l1"}

    @pytest.mark.asyncio
    async def test_forwards_bus_events(self, hub: PresenceHub) -> None:
        bus = EventBus()
        grace = make_state("grace")
        hub.register(grace)
        hub.attach(bus)

        await bus.publish(
            EventTypes.Progress.LESSON_COMPLETED,
            {"course_id": "c", "lesson_id": "l1"},
            learner_id="ada",
        )
        await bus.publish(EventTypes.Quiz.ATTEMPT_STARTED, {"quiz_id": "z"}, learner_id="ada")

        messages = drain(grace)
        assert len(messages) == 1
        assert messages[0]["event_type"] == EventTypes.Progress.LESSON_COMPLETED
        assert messages[0]["user_id"] == "ada"

    @pytest.mark.asyncio
    async def test_detach_stops_forwarding(self, hub: PresenceHub) -> None:
        bus = EventBus()
        grace = make_state("grace")
        hub.register(grace)
        hub.attach(bus)
        hub.attach(bus)

        hub.detach()
        await bus.publish(EventTypes.Quiz.SUBMISSION_GRADED, {"score": 100}, learner_id="ada")

        assert drain(grace) == []
        assert bus.get_stats()["total_handlers"] == 0


def test_process_wide_hub() -> None:
    assert get_presence_hub() is get_presence_hub()
