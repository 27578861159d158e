"""
Minimal Telegram Bot API client.

Covers file resolution and download, replies, the typing indicator and
webhook/long-poll management. All calls are blocking; async callers run
them with asyncio.to_thread.
"""

from typing import Any, Dict, List, Optional

import requests

from relay_service.errors import DownloadFailure, TelegramApiError
from relay_service.infrastructure.logging import RelayLogger
from .telegram_models import Update

API_BASE = "https://api.telegram.org"
DOWNLOAD_TIMEOUT = 60
REQUEST_TIMEOUT = 30


class TelegramClient:
    def __init__(
        self,
        token: str,
        api_base: str = API_BASE,
        session: Optional[requests.Session] = None,
        monitor=None,
        log: Optional[RelayLogger] = None,
    ):
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.session = session or requests.Session()
        self.monitor = monitor
        self.log = log or RelayLogger(component="Telegram")

    def _record(self, endpoint: str, status: str) -> None:
        if self.monitor is not None:
            self.monitor.log_request("telegram", endpoint, status)

    def call(self, method: str, http_timeout: float = REQUEST_TIMEOUT, **params) -> Any:
        """
        Call a Bot API method.

        Args:
            method: Bot API method name (e.g. sendMessage)
            http_timeout: Request timeout in seconds
            **params: Method parameters (None values are dropped)

        Returns:
            The "result" field of the response

        Raises:
            TelegramApiError: If the request fails or Telegram answers ok=false
        """
        url = f"{self.api_base}/bot{self.token}/{method}"
        body = {k: v for k, v in params.items() if v is not None}
        try:
            res = self.session.post(url, json=body, timeout=http_timeout)
            data = res.json()
        except (requests.RequestException, ValueError) as e:
            self._record(method, "error")
            raise TelegramApiError(f"{method} failed: {e}") from e

        if not data.get("ok"):
            self._record(method, "error")
            raise TelegramApiError(f"{method} failed: {data.get('description', 'unknown error')}")

        self._record(method, "success")
        return data.get("result")

    def get_file_url(self, file_id: str) -> str:
        """Resolve a file_id into a download URL."""
        try:
            result = self.call("getFile", file_id=file_id)
        except TelegramApiError as e:
            raise DownloadFailure(f"Could not resolve file {file_id}: {e}") from e

        file_path = (result or {}).get("file_path")
        if not file_path:
            raise DownloadFailure(f"Telegram returned no file_path for {file_id}")
        return f"{self.api_base}/file/bot{self.token}/{file_path}"

    def download(self, url: str, timeout: float = DOWNLOAD_TIMEOUT) -> bytes:
        """
        Download a file.

        Raises:
            DownloadFailure: On any network or HTTP error
        """
        try:
            res = self.session.get(url, timeout=timeout)
            res.raise_for_status()
        except requests.RequestException as e:
            self._record("download", "error")
            raise DownloadFailure(f"Download failed: {e}") from e

        self._record("download", "success")
        self.log.debug("Downloaded %d bytes", len(res.content))
        return res.content

    def download_file(self, file_id: str) -> bytes:
        return self.download(self.get_file_url(file_id))

    def send_message(self, chat_id: int, text: str) -> Dict[str, Any]:
        return self.call("sendMessage", chat_id=chat_id, text=text)

    def send_chat_action(self, chat_id: int, action: str = "typing") -> None:
        self.call("sendChatAction", chat_id=chat_id, action=action)

    def set_webhook(self, url: str) -> None:
        self.call("setWebhook", url=url)

    def delete_webhook(self) -> None:
        self.call("deleteWebhook")

    def get_updates(self, offset: Optional[int] = None, timeout: int = 30) -> List[Update]:
        """Long-poll for updates; the HTTP timeout outlasts the poll timeout."""
        result = self.call(
            "getUpdates",
            http_timeout=timeout + 10,
            offset=offset,
            timeout=timeout,
            allowed_updates=["message"],
        )
        return [Update.model_validate(item) for item in result or []]
