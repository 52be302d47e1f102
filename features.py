"""
HOG feature grid used on both sides of the paired dictionary.

features(im, sbin) returns one histogram per cell, with the outer ring of
cells dropped: grid cell (i, j) covers the pixels starting at
((i+1)*sbin, (j+1)*sbin). A template of ny x nx cells at (i, j) therefore
lines up with the pixel window im[i*sbin:(i+ny+2)*sbin, j*sbin:(j+nx+2)*sbin],
one cell of context on every side.
"""

import numpy as np
from skimage.feature import hog

from config import HOG_ORIENTATIONS


def features_dim():
    return HOG_ORIENTATIONS


def features(im, sbin):
    """
    im: (H, W) or (H, W, 3) float image
    returns (H//sbin - 2, W//sbin - 2, features_dim())
    """
    rows = im.shape[0] // sbin - 2
    cols = im.shape[1] // sbin - 2
    if rows <= 0 or cols <= 0:
        return np.zeros((max(rows, 0), max(cols, 0), features_dim()))
    grid = hog(
        im,
        orientations=features_dim(),
        pixels_per_cell=(sbin, sbin),
        cells_per_block=(1, 1),
        block_norm="L2-Hys",
        feature_vector=False,
        channel_axis=-1 if im.ndim == 3 else None,
    )
    # (cells_row, cells_col, 1, 1, orientations) -> drop block axes and border
    grid = grid.reshape(grid.shape[0], grid.shape[1], features_dim())
    return grid[1:-1, 1:-1, :]
