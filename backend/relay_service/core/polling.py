"""
Long-poll loop used in development mode.
"""

import asyncio
from typing import Optional, Set

from relay_service.errors import TelegramApiError
from relay_service.infrastructure.logging import RelayLogger

POLL_TIMEOUT = 30
ERROR_PAUSE = 3


async def run_polling(telegram, handler, log: Optional[RelayLogger] = None, poll_timeout: int = POLL_TIMEOUT, max_batches: Optional[int] = None) -> None:
    """
    Fetch updates with getUpdates and handle each one as its own task.

    Args:
        telegram: TelegramClient
        handler: MessageHandler
        log: Logger
        poll_timeout: Long-poll timeout in seconds
        max_batches: Stop after this many getUpdates calls (None runs forever)
    """
    log = log or RelayLogger(component="Polling")
    await asyncio.to_thread(telegram.delete_webhook)
    log.info("Long-poll mode started")

    offset = None
    tasks: Set[asyncio.Task] = set()
    batches = 0

    while max_batches is None or batches < max_batches:
        batches += 1
        try:
            updates = await asyncio.to_thread(telegram.get_updates, offset, poll_timeout)
        except TelegramApiError as e:
            log.warning(f"getUpdates failed: {e}")
            await asyncio.sleep(ERROR_PAUSE)
            continue

        for update in updates:
            offset = update.update_id + 1
            task = asyncio.create_task(handler.handle_update(update))
            tasks.add(task)
            task.add_done_callback(tasks.discard)

    if tasks:
        await asyncio.gather(*tasks)
