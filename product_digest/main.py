"""Application entry point"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv

# Load .env before any module reads configuration.
try:
    load_dotenv()
except Exception as e:  # noqa: BLE001
    print(f"Warning: Failed to load .env file: {e}. Continuing with environment variables...")

from fastapi import FastAPI
from loguru import logger

from .config_loader import load_channel_settings, load_digest_schedule
from .db.database import init_db
from .infrastructure import SchedulerManager, setup_logging
from .infrastructure.notifiers import TelegramClient
from .services.digest_service import get_digest_service

DAILY_DIGEST_JOB_ID = "daily_product_digest"

scheduler_manager: Optional[SchedulerManager] = None


async def _register_telegram_webhook() -> None:
    settings = load_channel_settings()
    if not (settings.telegram_bot_token and settings.telegram_webhook_url):
        logger.info("[telegram] Webhook URL not configured, operator commands disabled")
        return
    client = TelegramClient(settings.telegram_bot_token, timeout=settings.http_timeout)
    try:
        await client.set_webhook(
            settings.telegram_webhook_url, settings.telegram_webhook_secret or None
        )
    except Exception as e:  # noqa: BLE001
        logger.error(f"[telegram] Webhook registration failed: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the digest scheduler on startup and stop it on shutdown"""
    global scheduler_manager

    setup_logging()
    logger.info("=" * 80)
    logger.info("Application starting, initialising database and scheduler...")

    try:
        await init_db()
        logger.info("[database] Database initialised")
    except Exception as e:  # noqa: BLE001
        # Requests that need the database will fail with 500 until it is reachable.
        logger.error(f"[database] Database initialisation failed: {e}")

    await _register_telegram_webhook()

    schedule = load_digest_schedule()
    if schedule.enabled:
        scheduler_manager = SchedulerManager(timezone="UTC")
        scheduler_manager.create_scheduler()
        scheduler_manager.add_interval_job(
            get_digest_service().tick,
            seconds=schedule.check_interval_seconds,
            job_id=DAILY_DIGEST_JOB_ID,
        )
        scheduler_manager.start()
        logger.info(f"[scheduler] Daily digest scheduled at {schedule.run_time} UTC")
    else:
        logger.info("[scheduler] DIGEST_SCHEDULER_ENABLED is off, daily digest not scheduled")

    yield

    if scheduler_manager is not None:
        scheduler_manager.shutdown(wait=True)
        scheduler_manager = None


def create_app() -> FastAPI:
    app = FastAPI(
        title="Product Digest API",
        description="Daily product update digest published to Telegram, Discord, Twitter and WeCom",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    @app.get("/health")
    async def health_check():
        return {
            "status": "ok",
            "service": "product-digest",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "scheduler_running": bool(scheduler_manager and scheduler_manager.running),
        }

    from .presentation.routes import telegram, updates
    app.include_router(updates.router, prefix="/updates", tags=["updates"])
    app.include_router(telegram.router, prefix="/telegram", tags=["telegram"])

    return app


app = create_app()
