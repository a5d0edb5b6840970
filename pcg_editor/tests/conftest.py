"""
Shared pytest fixtures and configuration for PCG editor tests
"""

import logging
import tempfile
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from pcg_editor.character_store import CharacterStore
from pcg_editor.constants import TOTAL_BYTES, X1_PALETTE
from pcg_editor.logging_config import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_logging():
    """Remove handlers added by setup_logging during a test"""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def empty_store():
    """A store with every character black"""
    return CharacterStore()


@pytest.fixture
def pattern_data():
    """6144 bytes of a pattern that is easy to verify"""
    return bytes((i * 7 + i // 24) % 256 for i in range(TOTAL_BYTES))


@pytest.fixture
def pattern_store(pattern_data):
    """A store filled with pattern_data"""
    store = CharacterStore()
    store.set_all_data(pattern_data)
    return store


@pytest.fixture
def palette_image():
    """128x128 RGB image cycling through the 8 palette colors"""
    indices = (np.arange(128 * 128).reshape(128, 128) // 3) % 8
    rgb = np.array(X1_PALETTE, dtype=np.uint8)[indices]
    return Image.fromarray(rgb)


@pytest.fixture
def gradient_image():
    """64x48 RGB gradient with colors outside the palette"""
    y, x = np.mgrid[0:48, 0:64]
    rgb = np.stack([x * 4, y * 5, (x + y) * 2], axis=-1).astype(np.uint8)
    return Image.fromarray(rgb)
