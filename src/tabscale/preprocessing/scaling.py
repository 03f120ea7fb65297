from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Callable, overload

import numpy as np

from ._array import as_numpy, back_to_original_type, check_matrix
from .stats import DEFAULT_DDOF, ColumnStats, _column_stats_numpy

if TYPE_CHECKING:
    import torch

__all__ = [
    "DEGENERATE_FILL",
    "min_max_scale",
    "range_scale",
    "standard_scale",
    "custom_scale",
    "binarize",
]

logger = logging.getLogger(__name__)

# 定数列（range=0 / std=0）に割り当てる値
DEGENERATE_FILL = 0.0


def _apply(X, fn: Callable[[np.ndarray], np.ndarray]):
    """入力チェック → float64 で計算 → 入力と同じ dtype / フレームワークで返す。"""
    x_np, is_torch, meta = as_numpy(X)
    x = check_matrix(x_np)
    y = fn(x.astype(np.float64, copy=False))
    y = y.astype(x.dtype, copy=False)
    return back_to_original_type(y, is_torch, meta)


def _check_finite(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}.")
    return value


def _log_degenerate(op: str, stats: ColumnStats, fill: float) -> None:
    deg = stats.degenerate
    if deg.any():
        logger.debug(
            "%s: constant columns %s mapped to %s",
            op, np.flatnonzero(deg).tolist(), fill,
        )


# -------------------------
# numpy 実装（float64 前提、入力は書き換えない）
# -------------------------
def _range_scale_numpy(
    x: np.ndarray,
    feature_min: float,
    feature_max: float,
    stats: ColumnStats | None = None,
    op: str = "range_scale",
) -> np.ndarray:
    s = stats if stats is not None else _column_stats_numpy(x, DEFAULT_DDOF)
    deg = s.degenerate
    # 列スケールで割ってから差を取る（max - min が inf にならない）
    lo_s = s.min / s.scale
    span_s = np.where(deg, 1.0, s.max / s.scale - lo_s)
    unit = (x / s.scale - lo_s) / span_s
    unit[:, deg] = DEGENERATE_FILL
    _log_degenerate(op, s, feature_min)
    return unit * feature_max + (1.0 - unit) * feature_min


def _standard_scale_numpy(x: np.ndarray, ddof: int, stats: ColumnStats | None = None) -> np.ndarray:
    s = stats if stats is not None else _column_stats_numpy(x, ddof)
    deg = s.degenerate
    denom = np.where(deg, 1.0, s.scaled_std)
    z = (x / s.scale - s.mean / s.scale) / denom
    z[:, deg] = DEGENERATE_FILL
    _log_degenerate("standard_scale", s, DEGENERATE_FILL)
    return z


# -------------------------
# 公開 API（関数版, stateless）
# -------------------------
@overload
def min_max_scale(X: np.ndarray) -> np.ndarray: ...
@overload
def min_max_scale(X: "torch.Tensor") -> "torch.Tensor": ...

def min_max_scale(X):
    """
    各列を [0, 1] に線形変換する。``range_scale(X, 0.0, 1.0)`` と等価。

    z = (x - min(x)) / (max(x) - min(x))

    Parameters
    ----------
    X : (N, C) np.ndarray | torch.Tensor | array-like
        入力行列。統計量は毎回この X から計算する。

    Returns
    -------
    Z : (N, C)
        新しく確保した配列（入力と同じ dtype / フレームワーク）。
        定数列はすべて 0。

    Example
    -------
    >>> min_max_scale([[-1.0, 2.0], [-0.5, 6.0], [0.0, 10.0], [1.0, 18.0]])
    array([[0.  , 0.  ],
           [0.25, 0.25],
           [0.5 , 0.5 ],
           [1.  , 1.  ]])
    """
    return _apply(X, lambda x: _range_scale_numpy(x, 0.0, 1.0, op="min_max_scale"))


@overload
def range_scale(X: np.ndarray, feature_min: float = ..., feature_max: float = ...) -> np.ndarray: ...
@overload
def range_scale(X: "torch.Tensor", feature_min: float = ..., feature_max: float = ...) -> "torch.Tensor": ...

def range_scale(X, feature_min: float = 0.0, feature_max: float = 1.0):
    """
    各列を [feature_min, feature_max] に線形変換する。

    z = (x - min(x)) / (max(x) - min(x)) * (feature_max - feature_min) + feature_min

    定数列は feature_min に写る。feature_min > feature_max や非有限値は ValueError。

    Example
    -------
    >>> range_scale([[-1.0, 2.0], [-0.5, 6.0], [0.0, 10.0], [1.0, 18.0]], -3.0, 5.0)
    array([[-3., -3.],
           [-1., -1.],
           [ 1.,  1.],
           [ 5.,  5.]])
    """
    lo = _check_finite("feature_min", feature_min)
    hi = _check_finite("feature_max", feature_max)
    if lo > hi:
        raise ValueError(f"feature_min must be <= feature_max, got ({lo}, {hi}).")
    return _apply(X, lambda x: _range_scale_numpy(x, lo, hi))


@overload
def standard_scale(X: np.ndarray, *, ddof: int = ...) -> np.ndarray: ...
@overload
def standard_scale(X: "torch.Tensor", *, ddof: int = ...) -> "torch.Tensor": ...

def standard_scale(X, *, ddof: int = DEFAULT_DDOF):
    """
    各列を平均 0・標準偏差 1 に標準化する。

    z = (x - mean(x)) / std(x)

    Parameters
    ----------
    X : (N, C) np.ndarray | torch.Tensor | array-like
        入力行列。
    ddof : int, default 1
        std の自由度補正（既定は標本標準偏差）。N <= ddof なら ddof=0 を使う。

    Returns
    -------
    Z : (N, C)
        std=0 の列はすべて 0（NaN / Inf は出さない）。

    Example
    -------
    >>> standard_scale([[2.0, 0.0], [0.0, 2.0]])
    array([[ 0.70710678, -0.70710678],
           [-0.70710678,  0.70710678]])
    """
    if ddof < 0:
        raise ValueError(f"ddof must be >= 0, got {ddof}.")
    return _apply(X, lambda x: _standard_scale_numpy(x, int(ddof)))


@overload
def custom_scale(X: np.ndarray, offset: float = ..., factor: float = ...) -> np.ndarray: ...
@overload
def custom_scale(X: "torch.Tensor", offset: float = ..., factor: float = ...) -> "torch.Tensor": ...

def custom_scale(X, offset: float = 0.0, factor: float = 1.0):
    """
    利用者指定のアフィン変換を全セルに一様に適用する（統計量は使わない）。

    z = (x + offset) * factor

    factor == 0 は全要素 0 になるが、エラーではない。
    """
    off = _check_finite("offset", offset)
    fac = _check_finite("factor", factor)
    return _apply(X, lambda x: (x + off) * fac)


@overload
def binarize(X: np.ndarray, threshold: float = ...) -> np.ndarray: ...
@overload
def binarize(X: "torch.Tensor", threshold: float = ...) -> "torch.Tensor": ...

def binarize(X, threshold: float = 0.0):
    """
    閾値で 0 / 1 に二値化する。

    x < threshold → 0, それ以外 → 1（閾値と等しいセルは 1）。
    NaN は「threshold 未満」と判定されないため 1 になる。

    Example
    -------
    >>> binarize([[-1.0, 2.0], [0.0, -3.0]], 0.0)
    array([[0., 1.],
           [1., 0.]])
    """
    t = float(threshold)
    if math.isnan(t):
        raise ValueError("threshold must not be NaN.")
    return _apply(X, lambda x: np.where(x < t, 0.0, 1.0))
