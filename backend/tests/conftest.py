"""
Test Configuration
==================

Shared fixtures: API test client and in-memory images.
"""

from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from slide_renderer.main import app


def make_png(size=(200, 100), color=(255, 0, 0, 255)) -> bytes:
    """Encode a solid-colour RGBA image as PNG bytes."""
    buffer = BytesIO()
    Image.new("RGBA", size, color).save(buffer, "PNG")
    return buffer.getvalue()


def char_width_measure(width_per_char: int = 10):
    """Measurer where every character is the same number of pixels wide."""
    return lambda s: len(s) * width_per_char


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def red_png() -> bytes:
    return make_png()
