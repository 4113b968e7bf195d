from __future__ import annotations

import logging

from sms_relay.application.ports.delivery import DeliverySink
from sms_relay.domain.entities.message import SmsMessage

logger = logging.getLogger(__name__)


async def attempt_delivery(sink: DeliverySink, message: SmsMessage) -> bool:
    """One delivery attempt. A sink that raises counts as a failed attempt."""
    try:
        return await sink.send(message)
    except Exception:
        logger.exception("Delivery sink raised for SMS id=%d", message.id)
        return False
