"""Telegram Bot API delivery sink."""
from __future__ import annotations

import logging

import httpx

from sms_relay.domain.entities.message import SmsMessage
from sms_relay.infrastructure.delivery.formatting import format_message

logger = logging.getLogger(__name__)


class TelegramDeliverySink:
    """Implements application.ports.delivery.DeliverySink."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        bot_token: str,
        chat_id: str,
        *,
        base_url: str = "https://api.telegram.org",
        timeout: float = 10.0,
    ) -> None:
        self._client = client
        self._url = f"{base_url.rstrip('/')}/bot{bot_token}/sendMessage"
        self._chat_id = chat_id
        self._timeout = timeout

    async def send(self, message: SmsMessage) -> bool:
        payload = {
            "chat_id": self._chat_id,
            "text": format_message(message),
            "parse_mode": "HTML",
        }
        logger.info("Sending SMS to Telegram id=%d", message.id)
        try:
            response = await self._client.post(self._url, json=payload, timeout=self._timeout)
        except httpx.HTTPError as exc:
            logger.warning(
                "Failed to send SMS to Telegram id=%d: %s: %s",
                message.id,
                type(exc).__name__,
                exc,
            )
            return False
        except Exception:
            logger.exception("Unexpected error sending SMS to Telegram id=%d", message.id)
            return False

        if response.is_success:
            logger.info("SMS sent to Telegram id=%d", message.id)
            return True

        logger.warning(
            "Telegram API error id=%d status=%d response=%s",
            message.id,
            response.status_code,
            response.text,
        )
        return False
