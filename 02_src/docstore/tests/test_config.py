"""
Unit tests for docstore configuration helpers.
"""
import logging

import pytest

from docstore.config import ensure_directory, get_store_config, setup_logging


class TestStoreConfig:
    """Tests for get_store_config and ensure_directory."""

    def test_defaults(self, monkeypatch):
        """Without environment variables the defaults are used."""
        monkeypatch.delenv("DOCSTORE_DIRECTORY", raising=False)
        monkeypatch.delenv("DOCSTORE_LOG_FILE", raising=False)

        config = get_store_config()

        assert config == {"directory": "data/", "log_file": None}

    def test_env_overrides(self, monkeypatch, tmp_path):
        """Environment variables override the defaults."""
        monkeypatch.setenv("DOCSTORE_DIRECTORY", str(tmp_path / "records"))
        monkeypatch.setenv("DOCSTORE_LOG_FILE", str(tmp_path / "store.log"))

        config = get_store_config()

        assert config["directory"] == str(tmp_path / "records")
        assert config["log_file"] == str(tmp_path / "store.log")

    def test_ensure_directory_creates(self, monkeypatch, tmp_path):
        """ensure_directory creates the configured directory."""
        target = tmp_path / "a" / "b"
        monkeypatch.setenv("DOCSTORE_DIRECTORY", str(target))

        assert ensure_directory() == target
        assert target.is_dir()


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def clean_logger(self):
        """Detach handlers added to the docstore logger by a test."""
        logger = logging.getLogger("docstore")
        saved_handlers = list(logger.handlers)
        saved_level = logger.level
        yield logger
        for handler in logger.handlers:
            if handler not in saved_handlers:
                handler.close()
        logger.handlers = saved_handlers
        logger.setLevel(saved_level)

    def test_file_handler(self, tmp_path, clean_logger):
        """A log file gets a FileHandler and receives records."""
        log_file = tmp_path / "logs" / "docstore.log"
        clean_logger.handlers = []

        setup_logging(log_file=str(log_file), level=logging.DEBUG)
        logging.getLogger("docstore.document_store").debug("hello from the store")
        for handler in clean_logger.handlers:
            handler.flush()

        assert len(clean_logger.handlers) == 1
        assert "hello from the store" in log_file.read_text(encoding="utf-8")

    def test_same_file_reuses_handler(self, tmp_path, clean_logger):
        """Calling setup_logging twice for one file keeps a single handler."""
        clean_logger.handlers = []
        log_file = str(tmp_path / "one.log")

        returned = setup_logging(log_file=log_file)
        setup_logging(log_file=log_file, level=logging.WARNING)

        assert returned is clean_logger
        assert len(clean_logger.handlers) == 1
        assert clean_logger.handlers[0].level == logging.WARNING
        assert clean_logger.level == logging.WARNING

    def test_other_file_adds_handler(self, tmp_path, clean_logger):
        """A different log file gets its own handler."""
        clean_logger.handlers = []

        setup_logging(log_file=str(tmp_path / "one.log"))
        setup_logging(log_file=str(tmp_path / "two.log"))

        assert len(clean_logger.handlers) == 2

    def test_without_file_sets_level_only(self, clean_logger):
        """Without a log file only the level changes."""
        clean_logger.handlers = []

        setup_logging(level=logging.DEBUG)

        assert clean_logger.handlers == []
        assert clean_logger.level == logging.DEBUG
