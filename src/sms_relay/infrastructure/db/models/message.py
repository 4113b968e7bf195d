from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Index, Integer, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from sms_relay.domain.entities.message import ORIGIN_TIMESTAMP_MAX_LENGTH, SENDER_MAX_LENGTH
from sms_relay.infrastructure.db.base import Base
from sms_relay.infrastructure.db.types import UTCDateTime


class SmsMessageModel(Base):
    __tablename__ = "sms_messages"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    sender: Mapped[str] = mapped_column(String(SENDER_MAX_LENGTH), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    origin_timestamp: Mapped[str | None] = mapped_column(
        String(ORIGIN_TIMESTAMP_MAX_LENGTH),
        nullable=True,
    )
    received_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    delivered: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    delivered_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "(delivered AND delivered_at IS NOT NULL) OR (NOT delivered AND delivered_at IS NULL)",
            name="ck_sms_messages_delivered_at",
        ),
        Index("ix_sms_messages_delivered", "delivered"),
        Index("ix_sms_messages_received_at", "received_at"),
        # ids are never reused, even after the newest row is removed
        {"sqlite_autoincrement": True},
    )
