"""Scheduler manager tests"""
from unittest.mock import AsyncMock

import pytest

from product_digest.infrastructure import SchedulerManager


@pytest.mark.asyncio
async def test_interval_job_lifecycle():
    manager = SchedulerManager(timezone="UTC")
    manager.create_scheduler()
    manager.add_interval_job(AsyncMock(), seconds=60, job_id="daily_product_digest")

    manager.start()
    try:
        assert manager.running
        job = manager.scheduler.get_job("daily_product_digest")
        assert job.max_instances == 1
        assert job.coalesce is True
        assert job.trigger.interval.total_seconds() == 60
    finally:
        manager.shutdown(wait=False)

    assert not manager.running


def test_add_job_requires_scheduler():
    with pytest.raises(RuntimeError):
        SchedulerManager().add_interval_job(AsyncMock(), seconds=1, job_id="x")
