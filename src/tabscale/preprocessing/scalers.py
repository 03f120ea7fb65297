from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from ._array import as_numpy, back_to_original_type, check_matrix
from .scaling import (
    _apply,
    _check_finite,
    _range_scale_numpy,
    _standard_scale_numpy,
    binarize,
    custom_scale,
)
from .stats import DEFAULT_DDOF, ColumnStats, _column_stats_numpy

__all__ = [
    "MinMaxScaler",
    "StandardScaler",
    "CustomScaler",
    "Binarizer",
]


@dataclass
class _StatelessTransformer:
    """
    sklearn 風インターフェイスの共通部分。

    - fit() はパイプライン互換のための No-Op（n_features_in_ を記録するだけ）。
      データの統計量は保持しない。
    - transform() は毎回、渡された X から統計量を計算し直す。
    """
    # sklearn 互換の属性
    n_features_in_: int | None = field(default=None, init=False)
    fitted_: bool = field(default=False, init=False)

    def fit(self, X, y=None):
        X_np, _, _ = as_numpy(X)
        X_np = check_matrix(X_np)
        self.n_features_in_ = int(X_np.shape[1])
        self.fitted_ = True
        return self

    def _check_fitted(self):
        if not self.fitted_:
            raise RuntimeError(
                f"{type(self).__name__} is not fitted yet. Call .fit(X) before .transform(X)."
            )

    def _check_input(self, X) -> Tuple[np.ndarray, bool, object]:
        self._check_fitted()
        X_np, is_torch, meta = as_numpy(X)
        X_np = check_matrix(X_np)
        if X_np.shape[1] != self.n_features_in_:
            raise ValueError(
                f"X has {X_np.shape[1]} features, but {type(self).__name__} "
                f"was fitted with {self.n_features_in_} features."
            )
        return X_np, is_torch, meta

    def transform(self, X):  # pragma: no cover
        """サブクラスで実装する（統計量は毎回 X から計算し直すこと）。"""
        raise NotImplementedError

    def fit_transform(self, X, y=None):
        return self.fit(X, y).transform(X)


def _check_stats(stats: ColumnStats, n_features: int) -> None:
    if stats.n_features != n_features:
        raise ValueError(
            f"stats describe {stats.n_features} features, got Y with {n_features} features."
        )


@dataclass
class MinMaxScaler(_StatelessTransformer):
    """
    列ごとの [feature_range[0], feature_range[1]] スケーリング（既定は [0, 1]）。

    transform_stats=True のとき transform() は (Y, stats) を返し、
    その stats を inverse_transform に渡すことで元スケールに戻せます。
    """
    feature_range: Tuple[float, float] = (0.0, 1.0)
    transform_stats: bool = False

    def _bounds(self) -> Tuple[float, float]:
        lo = _check_finite("feature_range[0]", self.feature_range[0])
        hi = _check_finite("feature_range[1]", self.feature_range[1])
        if lo > hi:
            raise ValueError(f"feature_range must satisfy min <= max, got {self.feature_range}.")
        return lo, hi

    def transform(self, X):
        X_np, is_torch, meta = self._check_input(X)
        lo, hi = self._bounds()
        x = X_np.astype(np.float64, copy=False)
        stats = _column_stats_numpy(x, DEFAULT_DDOF)
        y = _range_scale_numpy(x, lo, hi, stats=stats, op="MinMaxScaler")
        y_out = back_to_original_type(y.astype(X_np.dtype, copy=False), is_torch, meta)
        if not self.transform_stats:
            return y_out
        return y_out, stats

    def inverse_transform(self, Y, *, stats: ColumnStats):
        """
        transform 時の統計（stats）を明示的に受け取って復元する。
        定数列は元の定数値に戻る。
        """
        Y_np, is_torch, meta = as_numpy(Y)
        Y_np = check_matrix(Y_np, name="Y")
        _check_stats(stats, Y_np.shape[1])
        lo, hi = self._bounds()
        y = Y_np.astype(np.float64, copy=False)
        span = hi - lo
        unit = (y - lo) / span if span != 0.0 else np.zeros_like(y)
        lo_s = stats.min / stats.scale
        x = (unit * (stats.max / stats.scale - lo_s) + lo_s) * stats.scale
        x[:, stats.degenerate] = stats.min[stats.degenerate]
        return back_to_original_type(x.astype(Y_np.dtype, copy=False), is_torch, meta)


@dataclass
class StandardScaler(_StatelessTransformer):
    """
    列ごとの標準化 z = (x - mean) / std。std は既定で標本標準偏差（ddof=1）。
    """
    ddof: int = DEFAULT_DDOF
    transform_stats: bool = False

    def transform(self, X):
        X_np, is_torch, meta = self._check_input(X)
        if self.ddof < 0:
            raise ValueError(f"ddof must be >= 0, got {self.ddof}.")
        x = X_np.astype(np.float64, copy=False)
        stats = _column_stats_numpy(x, int(self.ddof))
        y = _standard_scale_numpy(x, int(self.ddof), stats=stats)
        y_out = back_to_original_type(y.astype(X_np.dtype, copy=False), is_torch, meta)
        if not self.transform_stats:
            return y_out
        return y_out, stats

    def inverse_transform(self, Y, *, stats: ColumnStats):
        Y_np, is_torch, meta = as_numpy(Y)
        Y_np = check_matrix(Y_np, name="Y")
        _check_stats(stats, Y_np.shape[1])
        y = Y_np.astype(np.float64, copy=False)
        x = (y * stats.scaled_std + stats.mean / stats.scale) * stats.scale
        # 定数列は元の定数（min == max）に戻す
        x[:, stats.degenerate] = stats.min[stats.degenerate]
        return back_to_original_type(x.astype(Y_np.dtype, copy=False), is_torch, meta)


@dataclass
class CustomScaler(_StatelessTransformer):
    """利用者指定のアフィン変換 z = (x + offset) * factor。"""
    offset: float = 0.0
    factor: float = 1.0

    def transform(self, X):
        self._check_input(X)
        return custom_scale(X, self.offset, self.factor)

    def inverse_transform(self, Y):
        fac = _check_finite("factor", self.factor)
        if fac == 0.0:
            raise ValueError("CustomScaler with factor=0 is not invertible.")
        off = _check_finite("offset", self.offset)
        return _apply(Y, lambda y: y / fac - off)


@dataclass
class Binarizer(_StatelessTransformer):
    """x < threshold → 0, それ以外 → 1。"""
    threshold: float = 0.0

    def transform(self, X):
        self._check_input(X)
        return binarize(X, self.threshold)

