import io
import logging
from pathlib import Path

import pytest

from .fakes import InMemoryStorage


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("pluginuploader")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    log_stream.close()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def plugin_file(tmp_path) -> Path:
    path = tmp_path / "my-plugin-1.0.zip"
    path.write_bytes(b"PK\x03\x04 plugin archive")
    return path
