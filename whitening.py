"""
Optional whitening of the HOG half of the training data.

WhiteningConfig says what the caller wants:
 - disabled():          plain per-column normalization of HOG
 - provided(W, mu):     use the given matrix and mean
 - auto_estimate():     estimate W and mu from HOG windows of the stream
resolve() turns it into a Whitening (matrix, mean) pair or None.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from config import WHITEN_SAMPLES, WHITEN_EPS
from harvest import InsufficientSamplesError, load_image_features, sample_windows
from report import get_reporter


class DimensionMismatchError(ValueError):
    pass


class WhiteningMode(Enum):
    DISABLED = "disabled"
    PROVIDED = "provided"
    AUTO = "auto"


@dataclass(frozen=True)
class Whitening:
    matrix: np.ndarray  # (hogsize, hogsize)
    mean: np.ndarray    # (hogsize, 1)


@dataclass(frozen=True)
class WhiteningConfig:
    mode: WhiteningMode = WhiteningMode.DISABLED
    matrix: Optional[np.ndarray] = None
    mean: Optional[np.ndarray] = None

    def __post_init__(self):
        has_arrays = (self.matrix is not None, self.mean is not None)
        if self.mode is WhiteningMode.PROVIDED and has_arrays != (True, True):
            raise ValueError("provided whitening needs both a matrix and a mean vector")
        if self.mode is not WhiteningMode.PROVIDED and any(has_arrays):
            raise ValueError(f"{self.mode.value} whitening takes no matrix or mean vector")

    @classmethod
    def disabled(cls):
        return cls(WhiteningMode.DISABLED)

    @classmethod
    def provided(cls, matrix, mean):
        if matrix is None or mean is None:
            raise ValueError("whitening needs both a matrix and a mean vector")
        return cls(WhiteningMode.PROVIDED, np.asarray(matrix, dtype=np.float64), np.asarray(mean, dtype=np.float64))

    @classmethod
    def auto_estimate(cls):
        return cls(WhiteningMode.AUTO)

    @classmethod
    def from_arrays(cls, whog=None, muhog=None):
        """
        Legacy convention: both empty disables whitening, a bare scalar in
        either slot asks for estimation, two arrays are used as given.
        """
        if (whog is not None and np.ndim(whog) == 0) or (muhog is not None and np.ndim(muhog) == 0):
            return cls.auto_estimate()
        has_whog = whog is not None and np.size(whog) > 0
        has_muhog = muhog is not None and np.size(muhog) > 0
        if not has_whog and not has_muhog:
            return cls.disabled()
        if has_whog != has_muhog:
            raise ValueError("whitening needs both a matrix and a mean vector, got only one")
        return cls.provided(whog, muhog)

    @property
    def enabled(self):
        return self.mode is not WhiteningMode.DISABLED

    def validate(self, hogsize):
        if self.mode is not WhiteningMode.PROVIDED:
            return
        if self.matrix.shape != (hogsize, hogsize):
            raise DimensionMismatchError(f"expected whog to be {hogsize}x{hogsize}, got {self.matrix.shape}")
        if self.mean.shape not in ((hogsize,), (hogsize, 1)):
            raise DimensionMismatchError(f"expected muhog to be {hogsize}x1, got {self.mean.shape}")

    def resolve(self, hogsize, stream=None, dim=None, sbin=None, reporter=None):
        """Whitening to apply, or None when disabled."""
        if self.mode is WhiteningMode.DISABLED:
            return None
        if self.mode is WhiteningMode.AUTO:
            matrix, mean = estimate_whitening(stream, dim, sbin, reporter=reporter)
            return Whitening(matrix, mean)
        self.validate(hogsize)
        return Whitening(self.matrix, self.mean.reshape(hogsize, 1))


def collect_hog_windows(stream, dim, sbin, n=WHITEN_SAMPLES, reporter=None):
    """Up to n flattened HOG windows from one pass over the stream, (hogsize, m)."""
    reporter = get_reporter(reporter)
    points = []
    for path in reporter.progress(stream, desc="Collecting HOG"):
        im, feat = load_image_features(path, sbin)
        for _, featpoint in sample_windows(im, feat, dim, sbin):
            points.append(featpoint.ravel())
            if len(points) == n:
                return np.stack(points, axis=1)
    if len(points) < 2:
        raise InsufficientSamplesError(f"need at least 2 HOG windows to estimate whitening, found {len(points)}")
    return np.stack(points, axis=1)


def estimate_whitening(stream, dim, sbin, n=WHITEN_SAMPLES, eps=WHITEN_EPS, reporter=None):
    """
    ZCA whitening of HOG windows: W = V diag(1/sqrt(lambda + eps)) V^T
    returns (W (hogsize, hogsize), mu (hogsize, 1))
    """
    reporter = get_reporter(reporter)
    reporter.message("estimating HOG whitening matrix")
    X = collect_hog_windows(stream, dim, sbin, n=n, reporter=reporter)
    mu = X.mean(axis=1, keepdims=True)
    cov = np.cov(X - mu, rowvar=True)
    eigvals, eigvecs = np.linalg.eigh(cov)
    eigvals = np.clip(eigvals, 0.0, None)
    W = eigvecs.dot(np.diag(1.0 / np.sqrt(eigvals + eps))).dot(eigvecs.T)
    reporter.message(f"whitening estimated from {X.shape[1]} windows")
    return W, mu
