"""
Test configuration and fixtures for Chromacut tests.
"""
import base64
import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Import the main app
from main import app
from chromacut.utils.metrics import reset_metrics


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics_between_tests():
    """Reset metrics before each test."""
    reset_metrics()


def make_png_bytes(rgba: np.ndarray) -> bytes:
    """Encode an (H, W, 4) uint8 array as PNG."""
    buffer = io.BytesIO()
    Image.fromarray(rgba).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def two_block_rgba():
    """40x40 image: left half red, right half blue, fully opaque."""
    rgba = np.zeros((40, 40, 4), dtype=np.uint8)
    rgba[:, :20] = (220, 30, 30, 255)
    rgba[:, 20:] = (30, 30, 220, 255)
    return rgba


@pytest.fixture
def two_block_png(tmp_path, two_block_rgba):
    """Path to the two-block image saved as PNG."""
    path = tmp_path / "two_blocks.png"
    path.write_bytes(make_png_bytes(two_block_rgba))
    return path


@pytest.fixture
def two_block_data_uri(two_block_rgba):
    """The two-block image as a base64 data URI."""
    payload = base64.b64encode(make_png_bytes(two_block_rgba)).decode("ascii")
    return f"data:image/png;base64,{payload}"
