from __future__ import annotations

import os
import sys

import pytest
from PIL import Image

# Add repository root to sys.path for `import shock_style.*` in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


@pytest.fixture
def make_image(tmp_path):
    """Return a factory writing a solid-color image under tmp_path."""

    def _make(name="source.png", size=(64, 48), fmt="PNG", mode="RGB"):
        color = (200, 40, 40) if mode == "RGB" else (200, 40, 40, 128)
        path = tmp_path / name
        Image.new(mode, size, color).save(path, fmt)
        return str(path)

    return _make


@pytest.fixture
def png_path(make_image):
    return make_image()
