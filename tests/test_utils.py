"""Tests for logging setup."""

from loguru import logger

from schema_sync.utils import setup_logging


def test_setup_logging_file_sink(tmp_path):
    log_file = tmp_path / "logs" / "schema-sync.log"

    setup_logging("DEBUG", log_file=log_file, console=False)
    logger.info("extraction finished")
    logger.remove()  # drains the enqueued sink

    content = log_file.read_text(encoding="utf-8")
    assert "Logging configured: level=DEBUG" in content
    assert "extraction finished" in content


def test_setup_logging_level_filters(tmp_path):
    log_file = tmp_path / "schema-sync.log"

    setup_logging("WARNING", log_file=log_file, console=False)
    logger.info("routine detail")
    logger.warning("dropped topic")
    logger.remove()

    content = log_file.read_text(encoding="utf-8")
    assert "routine detail" not in content
    assert "dropped topic" in content
