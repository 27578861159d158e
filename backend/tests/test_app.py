"""
Tests for the webhook HTTP surface.
"""

from types import SimpleNamespace
from urllib.parse import urlparse

import pytest
from fastapi.testclient import TestClient

from app import create_app, webhook_target
from relay_service.config import RelayConfig
from relay_service.infrastructure import RelayLogger, UsageMonitor


class RecordingHandler:
    def __init__(self):
        self.updates = []

    async def handle_update(self, update):
        self.updates.append(update)


@pytest.fixture
def services(tmp_path):
    config = RelayConfig(
        telegram_token="123:abc",
        backend_api_key="key",
        backend_version_id="v1",
        log_dir=tmp_path,
    )
    return SimpleNamespace(
        config=config,
        log=RelayLogger(component="App"),
        handler=RecordingHandler(),
        telegram=None,
        monitor=UsageMonitor(tmp_path),
    )


@pytest.fixture
def client(services):
    return TestClient(create_app(services, warm_ocr=False))


def test_root(client):
    assert client.get("/").json() == {"message": "Document Relay"}


def test_webhook_accepts_update(client, services):
    update = {
        "update_id": 100,
        "message": {"message_id": 1, "chat": {"id": 5}, "from": {"id": 5}, "text": "hello"},
    }
    res = client.post("/webhook", json=update)

    assert res.status_code == 200
    assert res.json()["ok"] is True
    assert [u.update_id for u in services.handler.updates] == [100]
    assert services.handler.updates[0].message.text == "hello"


def test_webhook_rejects_garbage(client, services):
    res = client.post("/webhook", content=b"{not json", headers={"Content-Type": "application/json"})
    assert res.status_code == 500
    assert res.json()["ok"] is False
    assert services.handler.updates == []


def test_webhook_rejects_invalid_update(client):
    res = client.post("/webhook", json={"message": {"text": "no ids"}})
    assert res.status_code == 500


@pytest.mark.parametrize("method", ["get", "put", "delete"])
def test_non_post_webhook_is_forbidden(client, method):
    res = getattr(client, method)("/webhook")
    assert res.status_code == 403
    assert res.text == "Forbidden"


def test_health_reports_usage(client, services):
    services.monitor.log_request("telegram", "sendMessage")
    services.monitor.log_request("voiceflow", "interact", "error")

    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["mode"] == "polling"
    assert body["stats"]["10min"]["total_requests"] == 2
    assert body["stats"]["10min"]["total_errors"] == 1
    assert body["stats"]["1hour"]["api_breakdown"]["voiceflow"] == {"total": 1, "errors": 1}


class RecordingTelegram:
    def __init__(self):
        self.webhooks = []

    def set_webhook(self, url):
        self.webhooks.append(url)


def _production_services(tmp_path, webhook_url):
    config = RelayConfig(
        telegram_token="123:abc",
        backend_api_key="key",
        backend_version_id="v1",
        production=True,
        webhook_url=webhook_url,
        log_dir=tmp_path,
    )
    return SimpleNamespace(
        config=config,
        log=RelayLogger(component="App"),
        handler=RecordingHandler(),
        telegram=RecordingTelegram(),
        monitor=UsageMonitor(tmp_path),
    )


@pytest.mark.parametrize("url,registered", [
    ("https://bot.example.com", "https://bot.example.com/webhook"),
    ("https://bot.example.com/", "https://bot.example.com/webhook"),
    ("https://bot.example.com/webhook", "https://bot.example.com/webhook"),
])
def test_webhook_target(url, registered):
    assert webhook_target(url) == registered


def test_registered_webhook_url_is_served(tmp_path):
    services = _production_services(tmp_path, "https://bot.example.com")
    with TestClient(create_app(services, warm_ocr=False)) as client:
        assert services.telegram.webhooks == ["https://bot.example.com/webhook"]
        path = urlparse(services.telegram.webhooks[0]).path
        res = client.post(path, json={"update_id": 1})

    assert res.status_code == 200
    assert [u.update_id for u in services.handler.updates] == [1]


def test_update_posted_to_root_is_accepted(tmp_path):
    services = _production_services(tmp_path, "https://bot.example.com")
    with TestClient(create_app(services, warm_ocr=False)) as client:
        res = client.post("/", json={"update_id": 2})

    assert res.status_code == 200
    assert res.json()["ok"] is True
    assert [u.update_id for u in services.handler.updates] == [2]


def test_production_without_webhook_url_warns(tmp_path, capsys):
    services = _production_services(tmp_path, "")
    with TestClient(create_app(services, warm_ocr=False)):
        pass

    assert services.telegram.webhooks == []
    assert "WEBHOOK_URL is not set" in capsys.readouterr().err
