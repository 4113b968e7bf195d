"""Render an SMS as an HTML Telegram message."""
from __future__ import annotations

import html
import re
from datetime import datetime, timezone

from sms_relay.domain.entities.message import SmsMessage

_CODE_RE = re.compile(r"\b(\d{4,})\b")
_TS_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def _format_ts(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    raw = value.strftime(_TS_FORMAT)
    # +0300 -> +03:00
    return f"{raw[:-2]}:{raw[-2:]}"


def _sent_time(message: SmsMessage) -> str:
    if not message.origin_timestamp:
        return _format_ts(message.received_at)
    try:
        return _format_ts(datetime.fromisoformat(message.origin_timestamp))
    except ValueError:
        return message.origin_timestamp


def highlight_codes(text: str) -> str:
    """Wrap standalone runs of 4+ digits (OTP codes) in <code> for easy copying."""
    return _CODE_RE.sub(r"<code>\1</code>", text)


def format_message(message: SmsMessage) -> str:
    body = highlight_codes(html.escape(message.body, quote=False))
    return (
        f"{body}\n\n"
        f"👤 {html.escape(message.sender, quote=False)}\n"
        f"🕒 {html.escape(_sent_time(message), quote=False)}\n"
        f"📥 {_format_ts(message.received_at)}"
    )
