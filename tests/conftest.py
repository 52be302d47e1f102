"""
Test fixtures: small synthetic images written to disk and a reporter that
records what the pipeline says.
"""

import numpy as np
import pytest
from PIL import Image

from report import NullReporter


class RecordingReporter(NullReporter):
    def __init__(self):
        self.messages = []
        self.warnings = []

    def message(self, msg):
        self.messages.append(msg)

    def warning(self, msg):
        self.warnings.append(msg)


def write_gray(path, pixels):
    Image.fromarray(pixels.astype(np.uint8)).save(path)
    return str(path)


def random_pixels(shape, seed):
    return np.random.RandomState(seed).randint(0, 256, size=shape).astype(np.uint8)


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def image_64(tmp_path):
    """64x64 grayscale image with known pixels: (path, pixels in [0, 1])."""
    pixels = random_pixels((64, 64), seed=0)
    return write_gray(tmp_path / "im64.png", pixels), pixels / 255.0


@pytest.fixture
def image_128(tmp_path):
    pixels = random_pixels((128, 128), seed=1)
    return write_gray(tmp_path / "im128.png", pixels), pixels / 255.0


@pytest.fixture
def tiny_image(tmp_path):
    return write_gray(tmp_path / "tiny.png", random_pixels((16, 16), seed=2))


@pytest.fixture
def image_dir(tmp_path):
    folder = tmp_path / "images"
    folder.mkdir()
    for i in range(3):
        write_gray(folder / f"im{i}.png", random_pixels((64, 64), seed=10 + i))
    return folder
