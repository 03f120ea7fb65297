"""
tabscale: column-wise scaling and binarization for 2D float feature matrices.
"""

from ._version import __version__

# 公開サブパッケージをインポート
from . import preprocessing
from .preprocessing import (
    min_max_scale,
    standard_scale,
    custom_scale,
    range_scale,
    binarize,
    chain,
)

__all__ = [
    "__version__",
    "preprocessing",
    "min_max_scale",
    "standard_scale",
    "custom_scale",
    "range_scale",
    "binarize",
    "chain",
]
