import asyncio
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from models import HealthStatusResponse, RootResponse, UsageStats, WebhookAck
from relay_service.api import ConversationRelay, TelegramClient, Update
from relay_service.config import RelayConfig
from relay_service.core import MessageHandler, run_polling
from relay_service.errors import ConfigurationError, TelegramApiError
from relay_service.infrastructure import (
    ExtractionLog,
    RelayLogger,
    StagingArea,
    UsageMonitor,
    get_logger,
)
from relay_service.processing import build_router, init_model


WEBHOOK_PATH = "/webhook"


def webhook_target(url: str) -> str:
    """Full webhook URL to register: the service URL with the webhook path appended once."""
    url = url.rstrip("/")
    if url.endswith(WEBHOOK_PATH):
        return url
    return url + WEBHOOK_PATH


class Services:
    """Everything one running relay needs, wired from a RelayConfig."""

    def __init__(self, config: RelayConfig, reader=None):
        self.config = config
        self.log = get_logger("App", config.log)
        self.monitor = UsageMonitor(config.log_dir, log=get_logger("Monitor", config.log))
        self.telegram = TelegramClient(
            config.telegram_token,
            monitor=self.monitor,
            log=get_logger("Telegram", config.log),
        )
        self.relay = ConversationRelay(
            config.backend_api_key,
            config.backend_version_id,
            base_url=config.backend_base_url,
            max_text=config.max_text_chars,
            monitor=self.monitor,
            log=get_logger("Backend", config.log),
        )
        self.router = build_router(config, reader=reader)
        self.handler = MessageHandler.from_config(
            config,
            self.telegram,
            self.router,
            self.relay,
            ExtractionLog(config.log_dir, log=get_logger("ExtractionLog", config.log)),
            StagingArea(config.tmp_dir, log=get_logger("Staging", config.log)),
            log=get_logger("Handler", config.log),
        )

    def warm_up(self) -> None:
        self.log.info("Loading OCR model...")
        init_model(self.config.ocr_languages, self.log)
        self.log.info("OCR model loaded.")


def create_app(services, warm_ocr: bool = True) -> FastAPI:
    """
    Build the FastAPI app serving the Telegram webhook.

    Args:
        services: Services (or any object with config, handler, telegram, monitor, log)
        warm_ocr: Load the OCR model at startup
    """
    config = services.config
    log: RelayLogger = services.log

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if warm_ocr:
            await asyncio.to_thread(services.warm_up)
        if config.production and not config.webhook_url:
            log.warning("RELAY_ENV=production but WEBHOOK_URL is not set; the webhook will not be registered")
        elif config.production:
            target = webhook_target(config.webhook_url)
            try:
                await asyncio.to_thread(services.telegram.set_webhook, target)
                log.info(f"Telegram webhook set to: {target}")
            except TelegramApiError as e:
                log.error(f"Failed to set webhook: {e}")
        yield

    app = FastAPI(lifespan=lifespan)

    @app.get("/", response_model=RootResponse)
    async def root():
        return {"message": "Document Relay"}

    @app.get("/health", response_model=HealthStatusResponse)
    async def health():
        stats = {}
        for time_range in ("10min", "1hour"):
            raw = await asyncio.to_thread(services.monitor.get_stats, time_range)
            stats[time_range] = UsageStats(
                total_requests=raw["total_requests"],
                total_errors=raw["total_errors"],
                api_breakdown=raw["api_breakdown"],
            )
        return {
            "status": "ok",
            "mode": "webhook" if config.production else "polling",
            "stats": stats,
        }

    @app.post("/", response_model=WebhookAck, include_in_schema=False)
    @app.post(WEBHOOK_PATH, response_model=WebhookAck)
    async def webhook(request: Request, background_tasks: BackgroundTasks):
        """
        Telegram webhook endpoint.

        The update is acknowledged immediately and processed in the
        background so that slow OCR never trips Telegram's webhook timeout.
        """
        try:
            body = await request.json()
            update = Update.model_validate(body)
        except (ValueError, ValidationError) as e:
            log.error(f"Webhook error: {e}")
            return JSONResponse({"ok": False, "error": str(e)}, status_code=500)

        background_tasks.add_task(services.handler.handle_update, update)
        return {"ok": True}

    @app.api_route(WEBHOOK_PATH, methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
    async def webhook_forbidden():
        return PlainTextResponse("Forbidden", status_code=403)

    return app


def main(config: Optional[RelayConfig] = None) -> None:
    try:
        config = config or RelayConfig.from_env()
    except ConfigurationError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)

    services = Services(config)

    if config.production:
        import uvicorn
        print(f"Bot is running in WEBHOOK mode on port {config.port}...")
        uvicorn.run(create_app(services), host="0.0.0.0", port=config.port)
    else:
        print("Bot is running in LONG-POLL mode...")
        services.warm_up()
        try:
            asyncio.run(run_polling(services.telegram, services.handler, log=get_logger("Polling", config.log)))
        except KeyboardInterrupt:
            print("Shutting down...")


if __name__ == "__main__":
    main()
