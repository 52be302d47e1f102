"""
Harvest aligned (grayscale, HOG) training windows from a stream of images.

Each training vector is one column of a float32 data store:
    [ gray window (graysize) ; HOG window (hogsize) ]
Columns are filled in the order windows are found; if the stream runs out
before the store is full we wrap around and read it again.
"""

import numpy as np
from sklearn.utils import check_random_state

from config import DENSE_THRESHOLD, KEEP_PROBABILITY, MAX_PASSES, MAX_DATA_BYTES
from features import features, features_dim
from report import get_reporter
from utils import read_image_gray


class DataStoreTooLargeError(MemoryError):
    pass


class InsufficientSamplesError(RuntimeError):
    pass


def gray_size(ny, nx, sbin):
    return (ny + 2) * (nx + 2) * sbin ** 2


def hog_size(ny, nx):
    return ny * nx * features_dim()


def data_store_bytes(n, dim, sbin):
    ny, nx = dim
    return (gray_size(ny, nx, sbin) + hog_size(ny, nx)) * n * np.dtype(np.float32).itemsize


def _valid_range(n_cells, im_len, size, sbin):
    # window must fit in the grid and its padded pixel window in the image
    return max(0, min(n_cells - size, im_len // sbin - size - 2) + 1)


def check_data_store(n, dim, sbin, max_bytes=MAX_DATA_BYTES):
    """Projected store size in bytes; raises if it exceeds max_bytes."""
    nbytes = data_store_bytes(n, dim, sbin)
    if max_bytes is not None and nbytes > max_bytes:
        raise DataStoreTooLargeError(
            f"data store of {nbytes / 1024 ** 3:.2f}GB exceeds the {max_bytes / 1024 ** 3:.2f}GB limit; "
            f"lower n ({n}) or the patch size")
    return nbytes


def window_offsets(feat_shape, im_shape, dim, sbin):
    """Top-left cells (i, j) whose HOG window and padded pixel window both fit."""
    ny, nx = dim
    for i in range(_valid_range(feat_shape[0], im_shape[0], ny, sbin)):
        for j in range(_valid_range(feat_shape[1], im_shape[1], nx, sbin)):
            yield i, j


def count_windows(feat_shape, im_shape, dim, sbin):
    ny, nx = dim
    return _valid_range(feat_shape[0], im_shape[0], ny, sbin) * _valid_range(feat_shape[1], im_shape[1], nx, sbin)


def sample_windows(im, feat, dim, sbin, keep_probability=1.0, random_state=None):
    """
    Yield (graypoint, featpoint) for the windows of one image.
    When keep_probability < 1 each window is kept independently with that
    probability; the draw happens before anything is sliced.
    """
    rng = check_random_state(random_state)
    ny, nx = dim
    for i, j in window_offsets(feat.shape, im.shape, dim, sbin):
        if keep_probability < 1.0 and rng.rand() > keep_probability:
            continue
        featpoint = feat[i:i + ny, j:j + nx, :]
        graypoint = im[i * sbin:(i + ny + 2) * sbin, j * sbin:(j + nx + 2) * sbin]
        yield graypoint, featpoint


def load_image_features(path, sbin):
    im = read_image_gray(path)
    feat = features(np.repeat(im[:, :, None], 3, axis=2), sbin)
    return im, feat


def harvest(stream, n, dim, sbin, random_state=None, reporter=None,
            keep_probability=KEEP_PROBABILITY, dense_threshold=DENSE_THRESHOLD,
            max_passes=MAX_PASSES, max_bytes=MAX_DATA_BYTES):
    """
    Fill a (graysize + hogsize, n) store with windows from `stream`.

    Returns (data, images) where images are the paths that were read: the
    prefix of the stream up to the image that completed the store, or the
    whole stream if we had to wrap around.
    """
    reporter = get_reporter(reporter)
    rng = check_random_state(random_state)
    ny, nx = dim
    graysize = gray_size(ny, nx, sbin)
    nbytes = data_store_bytes(n, dim, sbin)

    reporter.message("allocating data store: %.02fGB" % (nbytes / 1024 ** 3))
    check_data_store(n, dim, sbin, max_bytes)
    try:
        data = np.zeros((graysize + hog_size(ny, nx), n), dtype=np.float32)
    except MemoryError as e:
        raise DataStoreTooLargeError(f"could not allocate {nbytes / 1024 ** 3:.2f}GB data store") from e

    stream = list(stream)
    if not stream:
        raise InsufficientSamplesError("stream contains no images")
    if n == 0:
        return data, []

    keep = keep_probability if n < dense_threshold else 1.0
    c = 0
    npass = 0
    while True:
        candidates = 0
        for k, path in enumerate(reporter.progress(stream, desc="Loading data")):
            im, feat = load_image_features(path, sbin)
            candidates += count_windows(feat.shape, im.shape, dim, sbin)
            for graypoint, featpoint in sample_windows(im, feat, dim, sbin, keep, rng):
                data[:graysize, c] = graypoint.ravel()
                data[graysize:, c] = featpoint.ravel()
                c += 1
                if c == n:
                    reporter.message(f"loaded {c} windows (100.0%) in {npass + 1} passes")
                    return data, stream if npass > 0 else stream[:k + 1]
        npass += 1
        reporter.message(f"pass {npass}: {c}/{n} windows ({100.0 * c / n:.1f}%)")
        if candidates == 0:
            raise InsufficientSamplesError(
                f"no image in the stream is large enough for a {ny}x{nx} window at sbin={sbin}")
        if max_passes is not None and npass >= max_passes:
            raise InsufficientSamplesError(
                f"only {c} of {n} windows after {npass} passes over {len(stream)} images")
        reporter.warning(f"wrapping around dataset! (pass {npass + 1})")
