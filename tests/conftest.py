"""Shared test fixtures."""

import os
from pathlib import Path

# Must be set before streamscribe.config.config_loader is first imported.
os.environ.setdefault(
    "STREAMSCRIBE_CONFIG", str(Path(__file__).parent / "config.test.yml")
)

import numpy as np  # noqa: E402
import pytest  # noqa: E402


@pytest.fixture
def make_chunk():
    """Build a read-only int16 chunk."""

    def _make(values):
        chunk = np.asarray(values, dtype=np.int16)
        chunk.flags.writeable = False
        return chunk

    return _make
