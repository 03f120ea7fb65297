from __future__ import annotations

import numpy as np

try:
    import torch
    _HAS_TORCH = True
except Exception:  # pragma: no cover
    _HAS_TORCH = False

__all__ = [
    "as_numpy",
    "back_to_original_type",
    "check_matrix",
]


def as_numpy(x):
    """Return (array, is_torch, torch_meta) where torch_meta=(device, dtype) if torch tensor."""
    if _HAS_TORCH and isinstance(x, torch.Tensor):
        meta = (x.device, x.dtype)
        t = x.detach().cpu()
        # numpy に対応する dtype がないので float32 経由（戻すときに meta の dtype へ）
        if t.dtype == torch.bfloat16:
            t = t.float()
        return t.numpy(), True, meta
    try:
        return np.asarray(x), False, None
    except ValueError as e:
        # ragged な入れ子リストは numpy 側で弾かれる
        raise ValueError(f"X must be a rectangular 2D array: {e}") from e


def back_to_original_type(y: np.ndarray, is_torch: bool, torch_meta):
    if is_torch:
        device, dtype = torch_meta
        t = torch.from_numpy(np.ascontiguousarray(y))
        # 整数テンソル入力は float64 のまま返す（0/1 や比率を丸めない）
        if dtype.is_floating_point:
            return t.to(device=device, dtype=dtype)
        return t.to(device=device)
    return y


def check_matrix(x: np.ndarray, name: str = "X") -> np.ndarray:
    """
    変換の入口で一度だけ行う形状・型チェック。

    - 2D 以外、行数 0、列数 0 は ValueError
    - 数値以外の dtype は TypeError
    - 整数 / bool は float64 に昇格、float32 / float64 はそのまま

    Returns
    -------
    X : (N, C) np.ndarray
        浮動小数 dtype の配列（入力と同一オブジェクトの場合もあるので書き込み禁止）。
    """
    if x.dtype == object:
        raise ValueError(f"{name} must be a rectangular 2D numeric array, got dtype=object.")
    if not (np.issubdtype(x.dtype, np.number) or x.dtype == np.bool_):
        raise TypeError(f"{name} must be numeric, got dtype={x.dtype}.")
    if np.issubdtype(x.dtype, np.complexfloating):
        raise TypeError(f"{name} must be real-valued, got dtype={x.dtype}.")
    if x.ndim != 2:
        raise ValueError(f"{name} must be 2D, got shape={x.shape}.")
    n, c = x.shape
    if n == 0 or c == 0:
        raise ValueError(f"{name} must have at least one row and one column, got shape={x.shape}.")
    if not np.issubdtype(x.dtype, np.floating):
        x = x.astype(np.float64)
    return x
