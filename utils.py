"""
File and image helpers shared by the training scripts.
"""

import os
import glob

import numpy as np
from PIL import Image

from config import IMAGE_EXTENSIONS


def makedirs(path):
    os.makedirs(path, exist_ok=True)


def is_image_file(path):
    return path.lower().endswith(IMAGE_EXTENSIONS)


def list_image_files(folder):
    """All image files below `folder`, sorted so runs are reproducible."""
    files = []
    for root, _, names in os.walk(folder):
        for name in names:
            if is_image_file(name):
                files.append(os.path.join(root, name))
    return sorted(files)


def read_image_gray(path):
    """
    Load an image as a float64 grayscale array in [0, 1].
    Color images are averaged over their RGB channels.
    """
    with Image.open(path) as img:
        im = np.asarray(img.convert("RGB"), dtype=np.float64) / 255.0
    return im.mean(axis=2)


def resolve_stream(stream):
    """
    Turn a stream specification into a list of image paths.

    `stream` may be a directory (searched recursively), a text file with one
    path per line, a glob pattern or an iterable of paths.
    """
    if isinstance(stream, (str, os.PathLike)):
        stream = os.fspath(stream)
        if os.path.isdir(stream):
            files = list_image_files(stream)
        elif os.path.isfile(stream) and not is_image_file(stream):
            base = os.path.dirname(stream)
            with open(stream) as fh:
                lines = [line.strip() for line in fh]
            files = [p if os.path.isabs(p) else os.path.join(base, p) for p in lines if p and not p.startswith("#")]
        elif os.path.isfile(stream):
            files = [stream]
        else:
            files = sorted(glob.glob(stream))
            if not files:
                raise FileNotFoundError(f"No images found for stream {stream!r}")
    else:
        files = [os.fspath(p) for p in stream]
    return files
