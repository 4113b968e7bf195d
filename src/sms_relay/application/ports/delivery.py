from __future__ import annotations

from typing import Protocol

from sms_relay.domain.entities.message import SmsMessage


class DeliverySink(Protocol):
    """Relays one message to the notification channel.

    Every call is a single attempt. Transport errors, timeouts and rejected
    requests are reported as ``False``; implementations never retry.
    """

    async def send(self, message: SmsMessage) -> bool: ...
