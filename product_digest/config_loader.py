import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from loguru import logger


def _project_root() -> Path:
    # product_digest/config_loader.py -> project_root
    return Path(__file__).resolve().parents[1]


DEFAULT_SCHEDULE_UTC = "08:00"
DEFAULT_CHECK_INTERVAL_MS = 60000
DEFAULT_HTTP_TIMEOUT_SECONDS = 10.0


@dataclass
class DigestSchedule:
    """
    Daily digest schedule.

    - The digest runs once per UTC day at ``hour:minute``
    - The scheduler wakes up every ``check_interval_ms`` and checks whether
      the current minute is the run minute
    """

    hour: int = 8
    minute: int = 0
    check_interval_ms: int = DEFAULT_CHECK_INTERVAL_MS
    enabled: bool = True

    @property
    def run_time(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    @property
    def check_interval_seconds(self) -> float:
        return self.check_interval_ms / 1000


@dataclass
class ChannelSettings:
    """Credentials and endpoints of the delivery channels. Empty means not configured."""

    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    telegram_webhook_url: str = ""
    telegram_webhook_secret: str = ""
    discord_webhook_url: str = ""
    twitter_publish_webhook: str = ""
    wecom_webhook: str = ""
    http_timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS


def _env_file_path() -> Path:
    return _project_root() / ".env"


def load_env_var(key: str) -> str:
    """Read a variable from the project .env file, falling back to the process environment."""
    env_path = _env_file_path()
    if not env_path.exists():
        return os.getenv(key, "")

    try:
        with env_path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" in line:
                    k, v = line.split("=", 1)
                    k = k.strip()
                    v = v.strip().strip('"').strip("'")
                    if k == key:
                        return v
    except Exception as exc:  # noqa: BLE001
        logger.error(f"Failed to read .env file: {exc}")

    return os.getenv(key, "")


def _parse_run_time(raw: str) -> Optional[tuple]:
    parts = raw.strip().split(":")
    if len(parts) != 2:
        return None
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute


def _parse_bool(raw: str, fallback: bool) -> bool:
    if not raw:
        return fallback
    return raw.strip().lower() not in {"0", "false", "no", "off"}


def load_digest_schedule() -> DigestSchedule:
    """
    Load the digest schedule from the environment.

    DIGEST_SCHEDULE_UTC="08:00"
    DIGEST_CHECK_INTERVAL_MS=60000
    DIGEST_SCHEDULER_ENABLED=true
    """
    default = DigestSchedule()

    raw_time = load_env_var("DIGEST_SCHEDULE_UTC") or DEFAULT_SCHEDULE_UTC
    parsed = _parse_run_time(raw_time)
    if parsed is None:
        logger.warning(
            f"Invalid DIGEST_SCHEDULE_UTC={raw_time!r}, fallback to {DEFAULT_SCHEDULE_UTC}."
        )
        parsed = (default.hour, default.minute)
    hour, minute = parsed

    interval = default.check_interval_ms
    raw_interval = load_env_var("DIGEST_CHECK_INTERVAL_MS")
    if raw_interval:
        try:
            interval = int(raw_interval)
        except (TypeError, ValueError):
            logger.warning(
                f"Invalid DIGEST_CHECK_INTERVAL_MS={raw_interval!r}, fallback to {interval}."
            )
        if interval <= 0:
            logger.warning(
                f"DIGEST_CHECK_INTERVAL_MS must be positive, fallback to {DEFAULT_CHECK_INTERVAL_MS}."
            )
            interval = DEFAULT_CHECK_INTERVAL_MS

    return DigestSchedule(
        hour=hour,
        minute=minute,
        check_interval_ms=interval,
        enabled=_parse_bool(load_env_var("DIGEST_SCHEDULER_ENABLED"), default.enabled),
    )


def load_channel_settings() -> ChannelSettings:
    timeout = DEFAULT_HTTP_TIMEOUT_SECONDS
    raw_timeout = load_env_var("HTTP_TIMEOUT_SECONDS")
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            logger.warning(f"Invalid HTTP_TIMEOUT_SECONDS={raw_timeout!r}, fallback to {timeout}.")

    return ChannelSettings(
        telegram_bot_token=load_env_var("TELEGRAM_BOT_TOKEN"),
        telegram_chat_id=load_env_var("TELEGRAM_CHAT_ID"),
        telegram_webhook_url=load_env_var("TELEGRAM_WEBHOOK_URL"),
        telegram_webhook_secret=load_env_var("TELEGRAM_WEBHOOK_SECRET"),
        discord_webhook_url=load_env_var("DISCORD_WEBHOOK_URL"),
        twitter_publish_webhook=load_env_var("TWITTER_PUBLISH_WEBHOOK"),
        wecom_webhook=load_env_var("WECOM_WEBHOOK"),
        http_timeout=timeout,
    )


def load_admin_ids() -> List[str]:
    """Telegram user ids allowed to run operator commands."""
    raw = load_env_var("TELEGRAM_ADMIN_IDS")
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_admin_code() -> str:
    return load_env_var("DIGEST_ADMIN_CODE")


def load_database_url() -> str:
    url = load_env_var("DATABASE_URL")
    if url:
        return url
    db_path = _project_root() / "data" / "digest.db"
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite+aiosqlite:///{db_path}"
