"""
Per-message pipeline.

Each inbound update is handled on its own: download (for files), extract,
log, relay to the backend, reply. Blocking work (HTTP, OCR, PDF rendering)
runs in worker threads so concurrent chats interleave on the event loop.
Failures end the request with a fixed reply and never affect other requests.
"""

import asyncio
import traceback
from typing import Optional

from relay_service.api.telegram_models import Message, Update
from relay_service.errors import BackendFailure, TelegramApiError
from relay_service.infrastructure.logging import RelayLogger
from relay_service.infrastructure.staging import sanitize_filename
from relay_service.processing.router import ExtractionResult
from . import messages


class MessageHandler:
    """Route chat updates through extraction and the conversation relay."""

    def __init__(
        self,
        telegram,
        router,
        relay,
        extraction_log,
        staging,
        max_image_bytes: int,
        max_document_bytes: int,
        log: Optional[RelayLogger] = None,
    ):
        self.telegram = telegram
        self.router = router
        self.relay = relay
        self.extraction_log = extraction_log
        self.staging = staging
        self.max_image_bytes = max_image_bytes
        self.max_document_bytes = max_document_bytes
        self.log = log or RelayLogger(component="Handler")

    @classmethod
    def from_config(cls, config, telegram, router, relay, extraction_log, staging, log=None):
        return cls(
            telegram,
            router,
            relay,
            extraction_log,
            staging,
            max_image_bytes=config.max_image_bytes,
            max_document_bytes=config.max_document_bytes,
            log=log,
        )

    # ========== Outbound helpers ==========

    async def reply(self, chat_id: int, text: str) -> None:
        await asyncio.to_thread(self.telegram.send_message, chat_id, text)

    async def safe_reply(self, chat_id: int, text: str) -> None:
        """Reply from an error path; a failing send is logged, not raised."""
        try:
            await self.reply(chat_id, text)
        except TelegramApiError as e:
            self.log.error("Could not send reply to chat %s: %s", chat_id, e)

    async def typing(self, chat_id: int) -> None:
        await asyncio.to_thread(self.telegram.send_chat_action, chat_id, "typing")

    # ========== Pipeline steps ==========

    def _extract_staged(self, staged_name: str, data: bytes, name: str, mime_type: Optional[str]) -> ExtractionResult:
        with self.staging.stage(staged_name, data) as path:
            return self.router.extract_file(path, name=name, mime_type=mime_type)

    async def _relay_and_reply(self, chat_id: int, user_id: str, text: str) -> None:
        await self.typing(chat_id)
        answer = await asyncio.to_thread(self.relay.relay, user_id, text)
        await self.reply(chat_id, answer)

    # ========== Update kinds ==========

    async def handle_start(self, message: Message) -> None:
        await self.reply(message.chat.id, messages.START)

    async def handle_text(self, message: Message, user_id: str) -> None:
        chat_id = message.chat.id
        text = message.text or ""
        try:
            await asyncio.to_thread(self.extraction_log.append, user_id, "text", None, text)
            await self._relay_and_reply(chat_id, user_id, text)
        except Exception as e:
            self.log.error("Text message from %s failed: %s", user_id, e)
            self.log.debug(traceback.format_exc())
            await self.safe_reply(chat_id, messages.CONNECTION_ERROR)

    async def handle_photo(self, message: Message, user_id: str) -> None:
        chat_id = message.chat.id
        best = message.photo[-1]

        if best.file_size and best.file_size > self.max_image_bytes:
            self.log.info("Rejected photo from %s: %d bytes", user_id, best.file_size)
            await self.reply(chat_id, messages.IMAGE_TOO_LARGE.format(limit=self.max_image_bytes // (1024 * 1024)))
            return

        await self.reply(chat_id, messages.IMAGE_RECEIVED)

        try:
            data = await asyncio.to_thread(self.telegram.download_file, best.file_id)
            file_name = f"photo_{best.file_id}.jpg"
            staged_name = f"{chat_id}_{message.message_id}_{file_name}"
            result = await asyncio.to_thread(self._extract_staged, staged_name, data, file_name, "image")

            await asyncio.to_thread(self.extraction_log.append, user_id, "photo", file_name, result.text)

            if not result.text.strip():
                await self.reply(chat_id, messages.IMAGE_NO_TEXT)
                return

            await self._relay_and_reply(chat_id, user_id, result.text)
        except BackendFailure as e:
            self.log.error("Backend failed for photo from %s: %s", user_id, e)
            await self.safe_reply(chat_id, messages.CONNECTION_ERROR)
        except Exception as e:
            self.log.error("Photo from %s failed: %s", user_id, e)
            self.log.debug(traceback.format_exc())
            await self.safe_reply(chat_id, messages.IMAGE_FAILED)

    async def handle_document(self, message: Message, user_id: str) -> None:
        chat_id = message.chat.id
        doc = message.document

        self.log.debug(
            "Document meta: file_id=%s name=%s mime=%s size=%s",
            doc.file_id, doc.file_name, doc.mime_type, doc.file_size,
        )

        if doc.file_size and doc.file_size > self.max_document_bytes:
            self.log.info("Rejected document from %s: %d bytes", user_id, doc.file_size)
            await self.reply(chat_id, messages.DOCUMENT_TOO_LARGE.format(limit=self.max_document_bytes // (1024 * 1024)))
            return

        await self.reply(chat_id, messages.DOCUMENT_RECEIVED)

        try:
            data = await asyncio.to_thread(self.telegram.download_file, doc.file_id)
            safe_name = sanitize_filename(doc.file_name or f"doc_{doc.file_id}")
            saved_name = f"{doc.file_id}_{safe_name}"
            staged_name = f"{chat_id}_{message.message_id}_{saved_name}"
            result = await asyncio.to_thread(
                self._extract_staged, staged_name, data, doc.file_name or saved_name, doc.mime_type
            )

            await asyncio.to_thread(
                self.extraction_log.append, user_id, "document", doc.file_name or saved_name, result.text
            )

            if not result.text.strip():
                await self.reply(chat_id, messages.DOCUMENT_NO_TEXT)
                return

            await self._relay_and_reply(chat_id, user_id, result.text)
        except BackendFailure as e:
            self.log.error("Backend failed for document from %s: %s", user_id, e)
            await self.safe_reply(chat_id, messages.CONNECTION_ERROR)
        except Exception as e:
            self.log.error("Document from %s failed: %s", user_id, e)
            self.log.debug(traceback.format_exc())
            await self.safe_reply(chat_id, messages.DOCUMENT_FAILED)

    async def handle_update(self, update: Update) -> None:
        """
        Handle one update end to end.

        Args:
            update: Parsed Telegram update; updates without a message are ignored
        """
        message = update.message
        if message is None:
            self.log.debug("Ignoring update %d without a message", update.update_id)
            return

        user_id = str(message.from_user.id if message.from_user else message.chat.id)

        try:
            if message.is_start_command:
                await self.handle_start(message)
            elif message.photo:
                await self.handle_photo(message, user_id)
            elif message.document:
                await self.handle_document(message, user_id)
            elif message.text:
                await self.handle_text(message, user_id)
            else:
                self.log.debug("Ignoring unsupported message %d", message.message_id)
        except TelegramApiError as e:
            self.log.error("Update %d failed: %s", update.update_id, e)
