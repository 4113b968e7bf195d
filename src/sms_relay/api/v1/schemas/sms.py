from __future__ import annotations

from pydantic import BaseModel, Field

from sms_relay.domain.entities.message import ORIGIN_TIMESTAMP_MAX_LENGTH, SENDER_MAX_LENGTH


class SmsRequest(BaseModel):
    sender: str = Field(min_length=1, max_length=SENDER_MAX_LENGTH)
    text: str = Field(min_length=1)
    timestamp: str | None = Field(default=None, max_length=ORIGIN_TIMESTAMP_MAX_LENGTH)


class SmsReceivedResponse(BaseModel):
    status: str = "received"
    id: int
