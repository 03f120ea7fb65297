import numpy as np
import pytest

from tabscale.preprocessing.scalers import MinMaxScaler, StandardScaler, CustomScaler, Binarizer
from tabscale.preprocessing.scaling import min_max_scale, range_scale, standard_scale, custom_scale, binarize
from tabscale.preprocessing.stats import ColumnStats

try:
    import torch
    HAS_TORCH = True
except Exception:
    HAS_TORCH = False


def test_transform_before_fit_raises():
    with pytest.raises(RuntimeError):
        StandardScaler().transform(np.ones((3, 2)))


def test_fit_records_only_feature_count():
    sc = MinMaxScaler().fit(np.ones((4, 3)))
    assert sc.fitted_ is True
    assert sc.n_features_in_ == 3
    # 統計量は保持しない
    assert not any(isinstance(v, (np.ndarray, ColumnStats)) for v in vars(sc).values())


def test_feature_count_mismatch_raises():
    sc = Binarizer(0.5).fit(np.ones((2, 3)))
    with pytest.raises(ValueError):
        sc.transform(np.ones((2, 4)))


@pytest.mark.parametrize("scaler,fn", [
    (MinMaxScaler(), min_max_scale),
    (MinMaxScaler((-3.0, 5.0)), lambda X: range_scale(X, -3.0, 5.0)),
    (StandardScaler(), standard_scale),
    (StandardScaler(ddof=0), lambda X: standard_scale(X, ddof=0)),
    (CustomScaler(1.0, 2.0), lambda X: custom_scale(X, 1.0, 2.0)),
    (Binarizer(0.0), lambda X: binarize(X, 0.0)),
])
def test_fit_transform_equals_functional(scaler, fn, reference_X):
    assert np.array_equal(scaler.fit_transform(reference_X), fn(reference_X))


def test_statistics_are_recomputed_per_transform():
    rng = np.random.default_rng(0)
    X1 = rng.normal(size=(10, 3))
    X2 = rng.normal(loc=5.0, size=(6, 3))
    sc = StandardScaler().fit(X1)
    assert np.array_equal(sc.transform(X2), standard_scale(X2))


def test_min_max_scaler_stats_and_inverse():
    X = np.array([[1.0, 7.0, -2.0], [3.0, 7.0, 0.5], [2.0, 7.0, 4.0]])
    sc = MinMaxScaler(transform_stats=True).fit(X)
    Y, stats = sc.transform(X)
    assert isinstance(stats, ColumnStats)
    assert np.array_equal(stats.min, [1.0, 7.0, -2.0])
    assert np.array_equal(Y[:, 1], np.zeros(3))
    X_rec = sc.inverse_transform(Y, stats=stats)
    assert np.allclose(X_rec, X, atol=1e-12)


def test_min_max_scaler_custom_range_inverse():
    rng = np.random.default_rng(1)
    X = rng.uniform(-4, 9, size=(8, 2))
    sc = MinMaxScaler(feature_range=(-1.0, 1.0), transform_stats=True).fit(X)
    Y, stats = sc.transform(X)
    assert Y.min() == -1.0 and Y.max() == 1.0
    assert np.allclose(sc.inverse_transform(Y, stats=stats), X, atol=1e-12)


def test_min_max_scaler_rejects_inverted_range():
    sc = MinMaxScaler(feature_range=(1.0, 0.0)).fit(np.ones((2, 2)))
    with pytest.raises(ValueError):
        sc.transform(np.ones((2, 2)))


def test_standard_scaler_stats_and_inverse_with_constant_column():
    X = np.array([[1.0, 0.1], [0.0, 0.1], [2.0, 0.1], [5.0, 0.1]])
    sc = StandardScaler(transform_stats=True).fit(X)
    Y, stats = sc.transform(X)
    assert stats.ddof == 1
    assert stats.degenerate.tolist() == [False, True]
    assert np.array_equal(Y[:, 1], np.zeros(4))
    X_rec = sc.inverse_transform(Y, stats=stats)
    assert np.allclose(X_rec, X, atol=1e-12)
    # 定数列は元の定数にそのまま戻る
    assert np.array_equal(X_rec[:, 1], X[:, 1])


def test_inverse_rejects_mismatched_stats():
    X = np.ones((3, 2))
    sc = StandardScaler(transform_stats=True).fit(X)
    _, stats = sc.transform(X)
    with pytest.raises(ValueError):
        sc.inverse_transform(np.ones((3, 3)), stats=stats)


def test_custom_scaler_inverse_round_trip(reference_X):
    sc = CustomScaler(offset=-0.5, factor=4.0).fit(reference_X)
    Y = sc.transform(reference_X)
    assert np.allclose(sc.inverse_transform(Y), reference_X)


def test_custom_scaler_zero_factor_not_invertible():
    sc = CustomScaler(offset=1.0, factor=0.0).fit(np.ones((2, 2)))
    assert np.array_equal(sc.transform(np.ones((2, 2))), np.zeros((2, 2)))
    with pytest.raises(ValueError):
        sc.inverse_transform(np.zeros((2, 2)))


@pytest.mark.skipif(not HAS_TORCH, reason="torch is not installed")
def test_scalers_accept_torch_tensors():
    x = torch.tensor([[0.1, 0.2, 0.5], [2.0, 1.0, 4.0], [1.0, 3.0, 0.0]], dtype=torch.float32)
    sc = StandardScaler(transform_stats=True).fit(x)
    y, stats = sc.transform(x)
    assert isinstance(y, torch.Tensor) and y.dtype == torch.float32
    assert isinstance(stats, ColumnStats)
    x_rec = sc.inverse_transform(y, stats=stats)
    assert isinstance(x_rec, torch.Tensor)
    assert torch.allclose(x_rec, x, atol=1e-6)


def test_inverse_transforms_recover_huge_finite_values():
    X = np.array([[-1e308, 1.0], [1e308, 2.0], [0.0, 4.0]])
    for sc in (MinMaxScaler(transform_stats=True), StandardScaler(transform_stats=True)):
        Y, stats = sc.fit(X).transform(X)
        assert np.isfinite(Y).all()
        X_rec = sc.inverse_transform(Y, stats=stats)
        assert np.isfinite(X_rec).all()
        assert np.allclose(X_rec, X, rtol=1e-12)


def test_base_transform_must_be_overridden():
    from tabscale.preprocessing.scalers import _StatelessTransformer
    base = _StatelessTransformer().fit(np.ones((2, 2)))
    with pytest.raises(NotImplementedError):
        base.transform(np.ones((2, 2)))
