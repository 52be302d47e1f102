"""
Per-column normalization of the harvested data store.

The gray rows and the HOG rows of every column are normalized independently:
 - gray: subtract the column mean, scale to unit L2 norm
 - HOG:  same as gray, or, when whitening, W * (hog - mu) with no rescale
Work happens in blocks of columns to bound temporary memory.
"""

import numpy as np

from config import NORMALIZE_BLOCK_SIZE
from report import get_reporter

EPS = np.finfo(np.float64).eps


def center_and_scale(block):
    """Zero-mean, unit-norm columns, in place."""
    block -= block.mean(axis=0, keepdims=True)
    block /= np.sqrt(np.sum(block ** 2, axis=0, keepdims=True) + EPS)
    return block


def normalize(data, graysize, hogsize, whitening=None, block_size=NORMALIZE_BLOCK_SIZE, reporter=None):
    """
    data: (graysize + hogsize, N), modified in place and returned
    whitening: optional Whitening (matrix, mean) applied to the HOG rows
    """
    reporter = get_reporter(reporter)
    if data.shape[0] != graysize + hogsize:
        raise ValueError(f"expected {graysize + hogsize} rows, got {data.shape[0]}")

    if whitening is not None:
        reporter.message("normalize images and whiten HOG")
        whog = whitening.matrix
        muhog = whitening.mean.reshape(hogsize, 1)
    else:
        reporter.message("normalize images and HOG")

    n = data.shape[1]
    for start in reporter.progress(range(0, n, block_size), desc="Normalizing"):
        iii = slice(start, min(start + block_size, n))
        center_and_scale(data[:graysize, iii])
        if whitening is not None:
            data[graysize:, iii] = whog.dot(data[graysize:, iii] - muhog)
        else:
            center_and_scale(data[graysize:, iii])
    return data
