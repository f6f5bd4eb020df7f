"""
Pytest configuration for docstore tests.

Ensures proper module resolution and provides store fixtures.
"""
import sys
from pathlib import Path

import pytest

# Add 02_src to PYTHONPATH for absolute imports
src_root = Path(__file__).parent.parent.parent
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from docstore.document_store import DocumentStore  # noqa: E402


@pytest.fixture
def store_dir(tmp_path):
    """Empty existing directory for a store."""
    directory = tmp_path / "data"
    directory.mkdir()
    return directory


@pytest.fixture
def store(store_dir):
    """DocumentStore on an empty temporary directory."""
    return DocumentStore(str(store_dir))


@pytest.fixture
def write_raw(store_dir):
    """Write raw text into a file of the store directory, bypassing the store."""

    def _write(file_name: str, content: str) -> Path:
        path = store_dir / file_name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
