from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

SENDER_MAX_LENGTH = 50
ORIGIN_TIMESTAMP_MAX_LENGTH = 50


@dataclass(frozen=True, slots=True)
class SmsMessage:
    id: int
    sender: str
    body: str
    origin_timestamp: str | None
    received_at: datetime
    delivered: bool = False
    delivered_at: datetime | None = None
