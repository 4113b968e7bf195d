"""Shared test fixtures."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone

import pytest

from sms_relay.application.exceptions import NotFoundError
from sms_relay.domain.entities.message import SmsMessage
from sms_relay.infrastructure.db.repositories.message import validate_message

T0 = datetime(2025, 12, 27, 15, 42, 3, tzinfo=timezone.utc)


def make_message(
    *,
    message_id: int = 1,
    sender: str = "+1000000000",
    body: str = "code 4242",
    origin_timestamp: str | None = None,
    received_at: datetime = T0,
) -> SmsMessage:
    return SmsMessage(
        id=message_id,
        sender=sender,
        body=body,
        origin_timestamp=origin_timestamp,
        received_at=received_at,
    )


@dataclass
class FixedClock:
    """Advances by ``step`` on every read so timestamps stay ordered."""

    current: datetime = T0
    step: timedelta = timedelta(seconds=1)

    def now(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@dataclass
class FakeMessageStore:
    """In-memory store for unit tests."""

    clock: FixedClock = field(default_factory=FixedClock)
    _messages: dict[int, SmsMessage] = field(default_factory=dict)
    _next_id: int = 1
    fail_append: Exception | None = None
    fail_mark: Exception | None = None
    mark_calls: list[int] = field(default_factory=list)

    async def append(self, sender: str, body: str, origin_timestamp: str | None) -> SmsMessage:
        if self.fail_append is not None:
            raise self.fail_append
        validate_message(sender, body, origin_timestamp)
        msg = make_message(
            message_id=self._next_id,
            sender=sender,
            body=body,
            origin_timestamp=origin_timestamp,
            received_at=self.clock.now(),
        )
        self._messages[msg.id] = msg
        self._next_id += 1
        return msg

    async def find_pending(self) -> list[SmsMessage]:
        pending = [m for m in self._messages.values() if not m.delivered]
        return sorted(pending, key=lambda m: (m.received_at, m.id))

    async def mark_delivered(self, message_id: int) -> bool:
        self.mark_calls.append(message_id)
        if self.fail_mark is not None:
            raise self.fail_mark
        msg = await self.get(message_id)
        if msg.delivered:
            return False
        self._messages[message_id] = replace(msg, delivered=True, delivered_at=self.clock.now())
        return True

    async def get(self, message_id: int) -> SmsMessage:
        try:
            return self._messages[message_id]
        except KeyError:
            raise NotFoundError(f"SMS {message_id} not found") from None

    async def count_pending(self) -> int:
        return len(await self.find_pending())


@dataclass
class FakeSink:
    """Scripted delivery sink. Pops one outcome per call, then uses ``default``."""

    default: bool = True
    outcomes: list[bool] = field(default_factory=list)
    attempts: list[int] = field(default_factory=list)
    on_send: asyncio.Event | None = None
    raise_for: set[int] = field(default_factory=set)

    async def send(self, message: SmsMessage) -> bool:
        self.attempts.append(message.id)
        if message.id in self.raise_for:
            raise RuntimeError("Cannot send a request, as the client has been closed.")
        if self.on_send is not None:
            self.on_send.set()
        if self.outcomes:
            return self.outcomes.pop(0)
        return self.default


@pytest.fixture
def store() -> FakeMessageStore:
    return FakeMessageStore()


@pytest.fixture
def failing_sink() -> FakeSink:
    return FakeSink(default=False)


@pytest.fixture
def ok_sink() -> FakeSink:
    return FakeSink(default=True)
