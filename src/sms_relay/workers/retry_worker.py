"""Retry worker: periodically re-attempts delivery of every pending SMS."""
from __future__ import annotations

import asyncio
import logging
import signal

import httpx

from sms_relay.application.exceptions import AppError
from sms_relay.application.ports.delivery import DeliverySink
from sms_relay.application.repositories.message import MessageStore
from sms_relay.config import Settings, settings
from sms_relay.infrastructure.db.repositories.message import SqlAlchemyMessageStore
from sms_relay.infrastructure.db.session import build_engine, build_session_factory, create_schema
from sms_relay.infrastructure.delivery.telegram import TelegramDeliverySink
from sms_relay.log_config import configure_logging
from sms_relay.services.delivery_service import attempt_delivery

logger = logging.getLogger(__name__)


class RetryScheduler:
    """Background loop owning its own stop signal.

    Sleeps ``interval`` seconds, then runs one batch over the pending
    messages in receive order. Only one batch runs at a time. The stop
    signal is honoured while sleeping and between two messages, never
    between a successful send and the matching ``mark_delivered``.
    """

    def __init__(
        self,
        store: MessageStore,
        sink: DeliverySink,
        interval: float = 300.0,
    ) -> None:
        self._store = store
        self._sink = sink
        self._interval = interval
        self._stopping = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self.run(), name="sms-retry-worker")

    async def stop(self) -> None:
        self._stopping.set()
        if self._task:
            await self._task
            self._task = None

    async def run(self) -> None:
        logger.info("Retry worker started (interval=%.1fs)", self._interval)
        while not await self._sleep():
            try:
                await self.run_once()
            except Exception:
                logger.exception("Retry worker batch failed")
        logger.info("Retry worker stopped")

    async def _sleep(self) -> bool:
        """Wait one interval. Returns True when stop was requested."""
        try:
            await asyncio.wait_for(self._stopping.wait(), timeout=self._interval)
        except asyncio.TimeoutError:
            return False
        return True

    async def run_once(self) -> int:
        """Attempt every pending message once. Returns how many were delivered."""
        pending = await self._store.find_pending()
        if not pending:
            return 0

        logger.info("Retrying %d unsent SMS", len(pending))
        delivered = 0
        for index, msg in enumerate(pending):
            if self._stopping.is_set():
                logger.info("Stop requested, leaving %d SMS for later", len(pending) - index)
                break
            if not await attempt_delivery(self._sink, msg):
                continue
            try:
                if await self._store.mark_delivered(msg.id):
                    delivered += 1
            except AppError:
                logger.exception("Could not mark SMS id=%d as delivered", msg.id)

        if delivered:
            logger.info("Delivered %d of %d pending SMS", delivered, len(pending))
        return delivered


async def run_retry_worker(cfg: Settings, stop_requested: asyncio.Event | None = None) -> None:
    """Run the scheduler until SIGINT/SIGTERM or until ``stop_requested`` is set."""
    cfg.require_secrets()
    engine = build_engine(
        cfg.DATABASE_URL,
        pool_size=cfg.DB_POOL_SIZE,
        max_overflow=cfg.DB_MAX_OVERFLOW,
        pool_recycle=cfg.DB_POOL_RECYCLE,
    )
    await create_schema(engine)
    store = SqlAlchemyMessageStore(build_session_factory(engine))

    async with httpx.AsyncClient() as client:
        sink = TelegramDeliverySink(
            client,
            cfg.TELEGRAM_BOT_TOKEN,
            cfg.TELEGRAM_CHAT_ID,
            base_url=cfg.TELEGRAM_API_BASE_URL,
            timeout=cfg.TELEGRAM_TIMEOUT,
        )
        scheduler = RetryScheduler(store, sink, cfg.RETRY_INTERVAL_SECONDS)

        loop = asyncio.get_running_loop()
        if stop_requested is None:
            stop_requested = asyncio.Event()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop_requested.set)

        await scheduler.start()
        try:
            await stop_requested.wait()
        finally:
            await scheduler.stop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
            await engine.dispose()
            logger.info("Retry worker process exited")


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(run_retry_worker(settings))


if __name__ == "__main__":
    main()
