from __future__ import annotations

from sms_relay.domain.entities.message import SmsMessage
from sms_relay.infrastructure.db.models.message import SmsMessageModel


def model_to_entity(model: SmsMessageModel) -> SmsMessage:
    return SmsMessage(
        id=model.id,
        sender=model.sender,
        body=model.body,
        origin_timestamp=model.origin_timestamp,
        received_at=model.received_at,
        delivered=model.delivered,
        delivered_at=model.delivered_at,
    )
