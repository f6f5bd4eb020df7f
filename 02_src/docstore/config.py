"""
Configuration for the docstore package.

Loads environment variables (and a local .env file) for the store directory.
Provides optional logging setup for standalone usage.
"""
import logging
import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_store_config() -> Dict[str, Optional[str]]:
    """
    Get store configuration from environment variables.

    Returns:
        Dict with keys:
        - directory: Directory holding the JSON records (default: "data/")
        - log_file: Optional log file for setup_logging (default: None)

    Examples:
        >>> config = get_store_config()
        >>> directory = config["directory"]
    """
    directory = os.getenv("DOCSTORE_DIRECTORY", "data/")
    log_file = os.getenv("DOCSTORE_LOG_FILE") or None

    return {
        "directory": directory,
        "log_file": log_file,
    }


def ensure_directory() -> Path:
    """
    Ensure the configured store directory exists.

    DocumentStore never creates its directory, so standalone callers use this
    before constructing a store from the configuration.
    """
    directory = Path(get_store_config()["directory"])
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def setup_logging(log_file: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Route docstore logs to a file (optional, for standalone usage such as the CLI).

    The "docstore" logger gets the level and, with log_file, a FileHandler.
    Calling again with a file that already has a handler only updates its
    level. Records keep propagating, so application-level config still applies.

    Args:
        log_file: Path to log file (e.g., 'logs/docstore.log'), created with
                  its parent directory if needed
        level: Logging level (default: INFO)

    Returns:
        The "docstore" logger
    """
    package_logger = logging.getLogger("docstore")
    package_logger.setLevel(level)
    package_logger.propagate = True

    if not log_file:
        return package_logger

    log_path = os.path.abspath(log_file)
    for handler in package_logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == log_path:
            handler.setLevel(level)
            return package_logger

    Path(log_path).parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(file_handler)
    return package_logger
