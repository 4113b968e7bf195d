"""Entrypoint: python -m sms_relay"""
from __future__ import annotations

import uvicorn

from sms_relay.config import settings
from sms_relay.log_config import configure_logging


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "sms_relay.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
