"""loguru file sinks for the digest service"""

from pathlib import Path
from typing import List, Optional

from loguru import logger

DETAILED_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"
PIPELINE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {message}"

# Component prefixes that make up the digest pipeline trail.
PIPELINE_PREFIXES = (
    "[daily-digest]",
    "[publisher]",
    "[publish-log]",
    "[scheduler]",
    "[manual-publish]",
    "[telegram]",
)


def pipeline_filter(record) -> bool:
    return record["message"].startswith(PIPELINE_PREFIXES)


def _default_logs_dir() -> Path:
    # product_digest/infrastructure/logging.py -> project_root/logs
    return Path(__file__).resolve().parents[2] / "logs"


def setup_logging(logs_dir: Optional[Path] = None) -> List[int]:
    """
    Attach the daily-rotated file sinks and return their handler ids.

    ========================  ======  =========  ==============================
    file                      level   retention  content
    ========================  ======  =========  ==============================
    ``app_<date>.log``        INFO    30 days    every record
    ``error_<date>.log``      ERROR   90 days    errors with tracebacks
    ``pipeline_<date>.log``   INFO    90 days    digest job, publishing, bot
    ========================  ======  =========  ==============================
    """
    logs_dir = logs_dir or _default_logs_dir()
    logs_dir.mkdir(parents=True, exist_ok=True)

    sinks = [
        ("app", "INFO", "30 days", DETAILED_FORMAT, None),
        ("error", "ERROR", "90 days", DETAILED_FORMAT, None),
        ("pipeline", "INFO", "90 days", PIPELINE_FORMAT, pipeline_filter),
    ]
    handler_ids = []
    for stem, level, retention, fmt, record_filter in sinks:
        handler_ids.append(
            logger.add(
                logs_dir / f"{stem}_{{time:YYYY-MM-DD}}.log",
                level=level,
                format=fmt,
                filter=record_filter,
                rotation="00:00",
                retention=retention,
                compression="zip",
                encoding="utf-8",
                enqueue=True,
            )
        )

    logger.info(f"[logging] {len(handler_ids)} file sinks under {logs_dir}")
    return handler_ids
