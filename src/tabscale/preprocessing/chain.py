from __future__ import annotations

from typing import Tuple

import numpy as np

from ._array import as_numpy, check_matrix
from .scaling import binarize, custom_scale, min_max_scale, range_scale, standard_scale
from .stats import DEFAULT_DDOF

__all__ = [
    "Chain",
    "chain",
]


class Chain:
    """
    変換をメソッドチェーンで連結するための薄いラッパー。

    各メソッドは新しい Chain を返し、呼び出し元の Chain と配列は書き換えない。
    中間変数を持たずに ``scale → scale → binarize`` と書ける。

    Example
    -------
    >>> X = [[-1.0, 2.0], [-0.5, 6.0], [0.0, 10.0], [1.0, 18.0]]
    >>> chain(X).min_max_scale().standard_scale().binarize(0.0).values
    array([[0., 0.],
           [0., 0.],
           [1., 1.],
           [1., 1.]])
    """

    __slots__ = ("_values", "_steps")

    def __init__(self, X, *, _steps: Tuple[str, ...] = ()):
        x_np, is_torch, _ = as_numpy(X)
        check_matrix(x_np)
        # 呼び出し側の配列と共有しない
        self._values = X.clone() if is_torch else np.array(x_np, copy=True)
        self._steps = tuple(_steps)

    def _then(self, step: str, y) -> "Chain":
        return Chain(y, _steps=self._steps + (step,))

    # ---- 変換 ----------------------------------------------------------
    def min_max_scale(self) -> "Chain":
        return self._then("min_max_scale", min_max_scale(self._values))

    def range_scale(self, feature_min: float = 0.0, feature_max: float = 1.0) -> "Chain":
        return self._then("range_scale", range_scale(self._values, feature_min, feature_max))

    def standard_scale(self, *, ddof: int = DEFAULT_DDOF) -> "Chain":
        return self._then("standard_scale", standard_scale(self._values, ddof=ddof))

    def custom_scale(self, offset: float = 0.0, factor: float = 1.0) -> "Chain":
        return self._then("custom_scale", custom_scale(self._values, offset, factor))

    def binarize(self, threshold: float = 0.0) -> "Chain":
        return self._then("binarize", binarize(self._values, threshold))

    # ---- 取り出し ------------------------------------------------------
    @property
    def values(self):
        """現在の行列（入力が torch.Tensor なら Tensor、それ以外は np.ndarray）。"""
        return self._values

    @property
    def shape(self) -> Tuple[int, int]:
        return tuple(self._values.shape)

    @property
    def steps(self) -> Tuple[str, ...]:
        return self._steps

    def __array__(self, dtype=None, copy=None):
        x_np, _, _ = as_numpy(self._values)
        return np.array(x_np, dtype=dtype, copy=True)

    def __repr__(self) -> str:
        steps = " -> ".join(self._steps) or "(identity)"
        return f"Chain(shape={self.shape}, steps={steps})"


def chain(X) -> Chain:
    """``Chain(X)`` の短縮形。"""
    return Chain(X)
