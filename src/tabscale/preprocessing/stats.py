from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from ._array import as_numpy, check_matrix

__all__ = [
    "DEFAULT_DDOF",
    "ColumnStats",
    "column_stats",
]

logger = logging.getLogger(__name__)

# 標本標準偏差（不偏分散の平方根）
DEFAULT_DDOF = 1


@dataclass(frozen=True, eq=False)
class ColumnStats:
    """
    列ごとの統計量（1 回の変換呼び出しの中だけで使い捨てる）。

    Attributes
    ----------
    min, max, mean, std : (C,) np.ndarray
        各列の最小値・最大値・平均・標準偏差（float64）。
    n_samples : int
        統計に使った行数 N。
    ddof : int
        std の計算に実際に使った自由度補正（N <= ddof のときは 0 に落ちる）。
    scale : (C,) np.ndarray
        列ごとのスケール（有限値の max-abs 以下で最大の 2 のべき乗）。x / scale は (-2, 2) に収まる。
    scaled_std : (C,) np.ndarray
        x / scale の標準偏差。std = scaled_std * scale は極端な列で inf になり得るが、
        変換はこちらを使うので NaN / Inf は出さない。
    """
    min: np.ndarray
    max: np.ndarray
    mean: np.ndarray
    std: np.ndarray
    n_samples: int
    ddof: int
    scale: np.ndarray
    scaled_std: np.ndarray

    @property
    def n_features(self) -> int:
        return int(self.mean.shape[0])

    @property
    def degenerate(self) -> np.ndarray:
        """値がすべて等しい列（range=0 または std=0）の bool マスク。"""
        return (self.max == self.min) | (self.scaled_std == 0.0)

    @property
    def range(self) -> np.ndarray:
        return self.max - self.min


def _column_scale(x: np.ndarray) -> np.ndarray:
    """列ごとの有限値 max-abs 以下で最大の 2 のべき乗（全 0 / 非有限のみの列は 0.5）。"""
    absx = np.where(np.isfinite(x), np.abs(x), 0.0)
    _, exp = np.frexp(absx.max(axis=0))
    return np.ldexp(1.0, exp - 1)


def _column_stats_numpy(x: np.ndarray, ddof: int) -> ColumnStats:
    n = x.shape[0]
    if not np.isfinite(x).all():
        logger.warning(
            "input contains non-finite values; they propagate through column statistics."
        )
    # 1 行しかない等で N <= ddof のときは ddof=0 にフォールバックし NaN を出さない
    eff_ddof = ddof if n > ddof else 0
    scale = _column_scale(x)
    # 2 のべき乗で割るので丸めは入らず、和や差が float64 の上限を超えない
    xs = x / scale
    mu_s = xs.mean(axis=0)
    sd_s = xs.std(axis=0, ddof=eff_ddof)
    with np.errstate(over="ignore"):
        sd = sd_s * scale
    return ColumnStats(
        min=x.min(axis=0),
        max=x.max(axis=0),
        mean=mu_s * scale,
        std=sd,
        n_samples=int(n),
        ddof=int(eff_ddof),
        scale=scale,
        scaled_std=sd_s,
    )


def column_stats(X, ddof: int = DEFAULT_DDOF) -> ColumnStats:
    """
    列ごとの min / max / mean / std をまとめて計算する。

    Parameters
    ----------
    X : (N, C) np.ndarray | torch.Tensor | array-like
        入力行列（行=サンプル、列=特徴量）。
    ddof : int, default 1
        標準偏差の自由度補正。既定は標本標準偏差。

    Returns
    -------
    stats : ColumnStats
        統計は float64 で返す（入力 dtype によらない）。

    Example
    -------
    >>> s = column_stats([[2.0, 0.0], [0.0, 2.0]])
    >>> s.mean, s.std
    (array([1., 1.]), array([1.41421356, 1.41421356]))
    """
    if ddof < 0:
        raise ValueError(f"ddof must be >= 0, got {ddof}.")
    x_np, _, _ = as_numpy(X)
    x_np = check_matrix(x_np)
    return _column_stats_numpy(x_np.astype(np.float64, copy=False), int(ddof))
