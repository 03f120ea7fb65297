"""
Column-wise preprocessing for 2D float feature matrices.

Currently includes:
- min-max / range / standard / custom (affine) scaling and binarization as functional API
- stateless sklearn-style transformers (fit is a no-op; statistics are recomputed per call)
- Chain: fluent method chaining over the functional API
"""

from .stats import ColumnStats, column_stats
from .scaling import min_max_scale, range_scale, standard_scale, custom_scale, binarize
from .scalers import MinMaxScaler, StandardScaler, CustomScaler, Binarizer
from .chain import Chain, chain

__all__ = [
    "ColumnStats",
    "column_stats",
    "min_max_scale",
    "range_scale",
    "standard_scale",
    "custom_scale",
    "binarize",
    "MinMaxScaler",
    "StandardScaler",
    "CustomScaler",
    "Binarizer",
    "Chain",
    "chain",
]
