"""Tests for CleanupScheduler."""

import pytest

from pricefeed.config import load_config
from pricefeed.db import ReceiptDB


def test_scheduler_import_error():
    """CleanupScheduler raises ImportError if apscheduler is missing."""
    # This test verifies behavior whether or not apscheduler is installed
    try:
        from pricefeed.scheduler import CleanupScheduler

        config = load_config()
        scheduler = CleanupScheduler(config)
        assert scheduler is not None
        assert scheduler.running is False
    except ImportError:
        pass


def test_scheduler_setup_jobs():
    """The cleanup job is registered on the configured schedule."""
    try:
        from pricefeed.scheduler import CleanupScheduler

        config = load_config()
        config.receipts.cleanup_schedule = "30 4 * * *"

        scheduler = CleanupScheduler(config)
        scheduler.setup_jobs()

        job_ids = {j["id"] for j in scheduler.get_jobs()}
        assert job_ids == {"cleanup_receipts"}
    except ImportError:
        pytest.skip("apscheduler not installed")


def test_scheduler_invalid_cron():
    try:
        from pricefeed.scheduler import CleanupScheduler

        config = load_config()
        config.receipts.cleanup_schedule = "every night"

        scheduler = CleanupScheduler(config)
        with pytest.raises(ValueError, match="Invalid cron"):
            scheduler.setup_jobs()
    except ImportError:
        pytest.skip("apscheduler not installed")


@pytest.mark.asyncio
async def test_cleanup_job_deletes_expired(tmp_path):
    from pricefeed.scheduler import CleanupScheduler

    config = load_config()
    config.database.path = str(tmp_path / "test.db")
    try:
        scheduler = CleanupScheduler(config)
    except ImportError:
        pytest.skip("apscheduler not installed")

    db = ReceiptDB(config.database.path)
    expired = db.create_receipt(1, image_key="receipts/old.jpg", ttl_days=-1)
    kept = db.create_receipt(1)

    await scheduler._job_cleanup_receipts()

    assert db.get_receipt(expired) is None
    assert db.get_receipt(kept) is not None
    db.close()


@pytest.mark.asyncio
async def test_cleanup_job_logs_errors(tmp_path, caplog):
    try:
        from pricefeed.scheduler import CleanupScheduler

        config = load_config()
        # A directory cannot be opened as a database file
        config.database.path = str(tmp_path)
        scheduler = CleanupScheduler(config)
    except ImportError:
        pytest.skip("apscheduler not installed")

    await scheduler._job_cleanup_receipts()
    assert "Expired receipt cleanup failed" in caplog.text
