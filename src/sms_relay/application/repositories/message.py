from __future__ import annotations

from typing import Protocol

from sms_relay.domain.entities.message import SmsMessage


class MessageStore(Protocol):
    async def append(
        self,
        sender: str,
        body: str,
        origin_timestamp: str | None,
    ) -> SmsMessage: ...

    async def find_pending(self) -> list[SmsMessage]: ...

    async def mark_delivered(self, message_id: int) -> bool: ...

    async def get(self, message_id: int) -> SmsMessage: ...

    async def count_pending(self) -> int: ...
