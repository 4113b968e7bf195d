from __future__ import annotations

import logging

from sms_relay.application.dto.acknowledgement import Acknowledgement
from sms_relay.application.exceptions import AppError
from sms_relay.application.ports.delivery import DeliverySink
from sms_relay.application.repositories.message import MessageStore
from sms_relay.services.delivery_service import attempt_delivery

logger = logging.getLogger(__name__)


async def receive_sms(
    sender: str,
    body: str,
    origin_timestamp: str | None,
    store: MessageStore,
    sink: DeliverySink,
) -> Acknowledgement:
    """Persist an inbound SMS and make one immediate delivery attempt.

    Failures of ``store.append`` propagate and nothing is acknowledged. Once
    the message is stored the acknowledgement is returned whatever the
    delivery outcome; undelivered messages stay pending for the retry worker.
    """
    logger.info("Received SMS from %s", sender)
    msg = await store.append(sender, body, origin_timestamp)

    if not await attempt_delivery(sink, msg):
        logger.warning("Delivery failed for SMS id=%d, will retry later", msg.id)
        return Acknowledgement(id=msg.id)

    try:
        await store.mark_delivered(msg.id)
    except AppError:
        logger.exception(
            "SMS id=%d was delivered but could not be marked, it stays pending",
            msg.id,
        )

    return Acknowledgement(id=msg.id)
