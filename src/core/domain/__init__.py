"""
Domain — канонические представления чисел и доступ к последовательностям.
"""

from .representation import (
    BINARY_FLOAT,
    CANONICAL_REPRESENTATIONS,
    FIXED_POINT,
    BinaryFloat,
    CanonicalRepresentation,
    FixedPointDecimal,
    representation_of,
)
from .sequences import (
    NumericSequence,
    at_index,
    average,
    average_async,
    first,
    get_length,
    maximum,
    maximum_async,
    sum_of,
    sum_of_async,
    to_sequence,
)

__all__ = [
    # Representations
    "BINARY_FLOAT",
    "CANONICAL_REPRESENTATIONS",
    "FIXED_POINT",
    "BinaryFloat",
    "CanonicalRepresentation",
    "FixedPointDecimal",
    "representation_of",
    # Sequences
    "NumericSequence",
    "at_index",
    "average",
    "average_async",
    "first",
    "get_length",
    "maximum",
    "maximum_async",
    "sum_of",
    "sum_of_async",
    "to_sequence",
]
