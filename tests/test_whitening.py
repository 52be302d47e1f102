import numpy as np
import pytest

from harvest import InsufficientSamplesError
from whitening import (DimensionMismatchError, Whitening, WhiteningConfig, WhiteningMode, collect_hog_windows,
                       estimate_whitening)
from report import NullReporter


HOGSIZE = 36


def test_from_arrays_both_empty_disables():
    assert WhiteningConfig.from_arrays().mode is WhiteningMode.DISABLED
    assert WhiteningConfig.from_arrays(np.zeros((0, 0)), np.zeros((0,))).mode is WhiteningMode.DISABLED


def test_from_arrays_scalar_requests_estimation():
    assert WhiteningConfig.from_arrays(1, None).mode is WhiteningMode.AUTO
    assert WhiteningConfig.from_arrays(np.eye(3), 0).mode is WhiteningMode.AUTO


def test_from_arrays_rejects_one_sided():
    with pytest.raises(ValueError):
        WhiteningConfig.from_arrays(np.eye(HOGSIZE), None)
    with pytest.raises(ValueError):
        WhiteningConfig.provided(None, np.zeros(HOGSIZE))


def test_provided_is_enabled_and_resolves():
    cfg = WhiteningConfig.from_arrays(np.eye(HOGSIZE), np.zeros(HOGSIZE))
    assert cfg.mode is WhiteningMode.PROVIDED
    assert cfg.enabled
    white = cfg.resolve(HOGSIZE)
    assert isinstance(white, Whitening)
    assert white.mean.shape == (HOGSIZE, 1)


def test_disabled_resolves_to_none():
    cfg = WhiteningConfig.disabled()
    assert not cfg.enabled
    assert cfg.resolve(HOGSIZE) is None


@pytest.mark.parametrize("shape", [(HOGSIZE + 1, HOGSIZE), (HOGSIZE, HOGSIZE + 1), (HOGSIZE,)])
def test_matrix_shape_mismatch(shape):
    cfg = WhiteningConfig.provided(np.ones(shape), np.zeros((HOGSIZE, 1)))
    with pytest.raises(DimensionMismatchError):
        cfg.validate(HOGSIZE)


@pytest.mark.parametrize("shape", [(HOGSIZE + 1, 1), (1, HOGSIZE), (HOGSIZE, 2)])
def test_mean_shape_mismatch(shape):
    cfg = WhiteningConfig.provided(np.eye(HOGSIZE), np.zeros(shape))
    with pytest.raises(DimensionMismatchError):
        cfg.validate(HOGSIZE)


def test_collect_hog_windows_single_pass(image_128):
    path, _ = image_128
    X = collect_hog_windows([path], (2, 2), 8, reporter=NullReporter())
    assert X.shape == (HOGSIZE, 13 * 13)
    assert collect_hog_windows([path], (2, 2), 8, n=10, reporter=NullReporter()).shape == (HOGSIZE, 10)


def test_collect_needs_windows(tiny_image):
    with pytest.raises(InsufficientSamplesError):
        collect_hog_windows([tiny_image], (2, 2), 8, reporter=NullReporter())


def test_estimate_whitening_decorrelates(image_128):
    path, _ = image_128
    W, mu = estimate_whitening([path], (2, 2), 8, reporter=NullReporter())
    assert W.shape == (HOGSIZE, HOGSIZE)
    assert mu.shape == (HOGSIZE, 1)
    np.testing.assert_allclose(W, W.T, atol=1e-10)

    X = collect_hog_windows([path], (2, 2), 8, reporter=NullReporter())
    np.testing.assert_allclose(mu, X.mean(axis=1, keepdims=True))
    cov = np.cov(W.dot(X - mu), rowvar=True)
    assert np.all(np.linalg.eigvalsh(cov) <= 1.0 + 1e-8)


def test_auto_estimate_resolves_from_stream(image_128):
    path, _ = image_128
    white = WhiteningConfig.auto_estimate().resolve(HOGSIZE, stream=[path], dim=(2, 2), sbin=8,
                                                    reporter=NullReporter())
    assert white.matrix.shape == (HOGSIZE, HOGSIZE)
    assert white.mean.shape == (HOGSIZE, 1)


def test_provided_mode_requires_both_arrays():
    with pytest.raises(ValueError):
        WhiteningConfig(WhiteningMode.PROVIDED)
    with pytest.raises(ValueError):
        WhiteningConfig(WhiteningMode.PROVIDED, matrix=np.eye(HOGSIZE))


def test_other_modes_take_no_arrays():
    with pytest.raises(ValueError):
        WhiteningConfig(WhiteningMode.AUTO, matrix=np.eye(HOGSIZE))
    with pytest.raises(ValueError):
        WhiteningConfig(WhiteningMode.DISABLED, mean=np.zeros(HOGSIZE))
