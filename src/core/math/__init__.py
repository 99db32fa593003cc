"""
Core math modules

Численные примитивы fixed-point/float и проверяемые конверсии.
"""

# Numerical Safeguards
from src.core.math.numerical_safeguards import (
    # Constants
    DECIMAL_TWO,
    FAST_ACCURACY,
    PRECISION_ACCURACY,
    # Exceptions
    AdvancedMathError,
    EmptySequenceError,
    OverflowOrPrecisionLoss,
    # Fixed-point context
    clamp_tolerance,
    get_fixed_point_context,
    make_fixed_point_context,
    # Conversions
    from_canonical_checked,
    is_valid_float,
    to_decimal_checked,
    to_float_checked,
)

# Primitives
from src.core.math.primitives import (
    decimal_power,
    decimal_power_async,
    decimal_square_root,
    decimal_square_root_async,
    float_power,
    float_square_root,
)

# Validators
from src.core.math.validators import (
    less_than_or_equal_to_zero,
    many_less_than_or_equal_to_zero,
    many_less_than_or_equal_to_zero_async,
)

__all__ = [
    # Numerical Safeguards — Constants
    "DECIMAL_TWO",
    "FAST_ACCURACY",
    "PRECISION_ACCURACY",
    # Numerical Safeguards — Exceptions
    "AdvancedMathError",
    "EmptySequenceError",
    "OverflowOrPrecisionLoss",
    # Numerical Safeguards — Fixed-point context
    "clamp_tolerance",
    "get_fixed_point_context",
    "make_fixed_point_context",
    # Numerical Safeguards — Conversions
    "from_canonical_checked",
    "is_valid_float",
    "to_decimal_checked",
    "to_float_checked",
    # Primitives
    "decimal_power",
    "decimal_power_async",
    "decimal_square_root",
    "decimal_square_root_async",
    "float_power",
    "float_square_root",
    # Validators
    "less_than_or_equal_to_zero",
    "many_less_than_or_equal_to_zero",
    "many_less_than_or_equal_to_zero_async",
]
