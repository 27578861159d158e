"""
Tests for the Telegram Bot API client.
"""

import pytest
import requests

from relay_service.api.telegram_client import TelegramClient
from relay_service.errors import DownloadFailure, TelegramApiError


class FakeResponse:
    def __init__(self, json_data=None, status_code=200, content=b""):
        self.json_data = json_data
        self.status_code = status_code
        self.content = content

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}", response=self)

    def json(self):
        return self.json_data


class FakeSession:
    def __init__(self, post_responses=None, get_response=None, get_error=None):
        self.post_responses = list(post_responses or [])
        self.get_response = get_response
        self.get_error = get_error
        self.posts = []
        self.gets = []

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json, timeout))
        return self.post_responses.pop(0)

    def get(self, url, timeout=None):
        self.gets.append((url, timeout))
        if self.get_error is not None:
            raise self.get_error
        return self.get_response


def _client(session):
    return TelegramClient("123:abc", session=session)


def test_get_file_url():
    session = FakeSession([FakeResponse({"ok": True, "result": {"file_path": "photos/file_1.jpg"}})])
    url = _client(session).get_file_url("AgAD")

    assert url == "https://api.telegram.org/file/bot123:abc/photos/file_1.jpg"
    assert session.posts[0][0] == "https://api.telegram.org/bot123:abc/getFile"
    assert session.posts[0][1] == {"file_id": "AgAD"}


def test_get_file_url_failure_is_download_failure():
    session = FakeSession([FakeResponse({"ok": False, "description": "file is too big"})])
    with pytest.raises(DownloadFailure, match="file is too big"):
        _client(session).get_file_url("AgAD")


def test_download_uses_timeout():
    session = FakeSession(get_response=FakeResponse(content=b"bytes"))
    assert _client(session).download("https://files/x") == b"bytes"
    assert session.gets == [("https://files/x", 60)]


@pytest.mark.parametrize("session", [
    FakeSession(get_response=FakeResponse(status_code=404)),
    FakeSession(get_error=requests.Timeout("slow")),
])
def test_download_errors(session):
    with pytest.raises(DownloadFailure):
        _client(session).download("https://files/x")


def test_send_message_drops_none_params():
    session = FakeSession([FakeResponse({"ok": True, "result": {"message_id": 9}})])
    result = _client(session).send_message(5, "hi")
    assert result == {"message_id": 9}
    assert session.posts[0][1] == {"chat_id": 5, "text": "hi"}


def test_api_error_raises():
    session = FakeSession([FakeResponse({"ok": False, "description": "chat not found"})])
    with pytest.raises(TelegramApiError, match="chat not found"):
        _client(session).send_chat_action(5)


def test_get_updates_parses_models():
    updates = [{"update_id": 3, "message": {"message_id": 1, "chat": {"id": 2}, "text": "hey"}}]
    session = FakeSession([FakeResponse({"ok": True, "result": updates})])
    result = _client(session).get_updates(offset=3, timeout=25)

    assert result[0].update_id == 3
    assert result[0].message.text == "hey"
    url, body, timeout = session.posts[0]
    assert body == {"offset": 3, "timeout": 25, "allowed_updates": ["message"]}
    assert timeout == 35
