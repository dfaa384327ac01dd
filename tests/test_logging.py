"""Log sink tests"""
from loguru import logger

from product_digest.infrastructure import setup_logging


def _read(logs_dir, stem):
    (path,) = logs_dir.glob(f"{stem}_*.log")
    return path.read_text(encoding="utf-8")


def test_sinks_split_by_level_and_component(tmp_path):
    handler_ids = setup_logging(tmp_path)
    try:
        logger.info("[publisher] Digest delivered to 2/4 channel(s)")
        logger.info("Sites listed")
        logger.error("[daily-digest] Scheduled run failed: boom")
    finally:
        for handler_id in handler_ids:
            logger.remove(handler_id)

    app_log = _read(tmp_path, "app")
    assert "Digest delivered" in app_log
    assert "Sites listed" in app_log

    error_log = _read(tmp_path, "error")
    assert "Scheduled run failed" in error_log
    assert "Sites listed" not in error_log

    pipeline_log = _read(tmp_path, "pipeline")
    assert "Digest delivered" in pipeline_log
    assert "Scheduled run failed" in pipeline_log
    assert "Sites listed" not in pipeline_log
