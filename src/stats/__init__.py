"""
Statistics — описательная статистика и generic dispatch.

Публичный API: одна точка входа на операцию для любого числового типа
(синхронная и асинхронная формы с идентичным результатом).
"""

from .engine import (
    BINARY_FLOAT_ENGINE,
    FIXED_POINT_ENGINE,
    StatisticsEngine,
    engine_for,
)
from .generic import (
    coefficient_of_variation,
    coefficient_of_variation_async,
    power,
    power_async,
    square_root,
    square_root_async,
    standard_deviation,
    standard_deviation_async,
    to_float_sequence,
    to_float_sequence_async,
    z_score,
    z_score_async,
)

__all__ = [
    # Engine
    "BINARY_FLOAT_ENGINE",
    "FIXED_POINT_ENGINE",
    "StatisticsEngine",
    "engine_for",
    # Generic dispatch
    "coefficient_of_variation",
    "coefficient_of_variation_async",
    "power",
    "power_async",
    "square_root",
    "square_root_async",
    "standard_deviation",
    "standard_deviation_async",
    "to_float_sequence",
    "to_float_sequence_async",
    "z_score",
    "z_score_async",
]
