"""
Numerical Safeguards — Checked Conversions & Fixed-Point Context

Модуль обеспечивает единые правила работы с двумя каноническими
представлениями чисел:
- FixedPointDecimal: decimal.Decimal в выделенном контексте (28 цифр)
- BinaryFloat: встроенный float (IEEE-754 binary64)

Содержит:
- Иерархию исключений ядра
- Константы точности (tolerance, precision floor)
- Fixed-point контекст Decimal (общий для всех потоков)
- Проверяемые (checked) конверсии между представлениями и типом вызывающего
- NaN/Inf проверки float

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Конверсия с потерей диапазона никогда не проходит молча
   (OverflowOrPrecisionLoss)
2. Все fixed-point операции выполняются через методы контекста,
   а не через thread-local decimal.getcontext()
3. Tolerance всегда >= PRECISION_ACCURACY
"""

import math
from decimal import (
    ROUND_HALF_EVEN,
    Context,
    Decimal,
    DecimalException,
    DivisionByZero,
    InvalidOperation,
    Overflow,
)
from functools import lru_cache
from numbers import Rational
from typing import Any, Final

from src.core.config.settings import get_settings


# =============================================================================
# EXCEPTIONS
# =============================================================================


class AdvancedMathError(Exception):
    """Базовое исключение численного ядра."""


class OverflowOrPrecisionLoss(AdvancedMathError, OverflowError):
    """
    Конверсия между представлениями вышла за допустимый диапазон.

    Не перехватывается внутри ядра, за исключением z_score, где
    заменяется на fallback-значение вызывающего.
    """


class EmptySequenceError(AdvancedMathError, ValueError):
    """
    Среднее по пустой последовательности.

    Ошибка вызывающего: значение по умолчанию не определено.
    """


# Арифметические ошибки, которые запускают fallback-пути
# (ZeroDivisionError, OverflowError, decimal.DivisionByZero, decimal.Overflow, ...)
ARITHMETIC_FAULTS: Final[tuple[type[BaseException], ...]] = (ArithmeticError,)


# =============================================================================
# КОНСТАНТЫ ТОЧНОСТИ
# =============================================================================

# Tolerance по умолчанию для квадратного корня (быстрая сходимость)
FAST_ACCURACY: Final[Decimal] = Decimal("0.0001")

# Минимально допустимая tolerance (precision floor)
# Меньшая tolerance молча поднимается до этого значения
PRECISION_ACCURACY: Final[Decimal] = Decimal("1e-28")

DECIMAL_TWO: Final[Decimal] = Decimal(2)


# =============================================================================
# FIXED-POINT КОНТЕКСТ
# =============================================================================


def make_fixed_point_context(precision: int = 28, emax: int = 28) -> Context:
    """
    Создание Decimal контекста fixed-point представления.

    Args:
        precision: Число значащих цифр
        emax: Максимальная экспонента; Emin = -emax

    Returns:
        Контекст с ROUND_HALF_EVEN и ловушками на InvalidOperation,
        DivisionByZero, Overflow
    """
    return Context(
        prec=precision,
        rounding=ROUND_HALF_EVEN,
        Emin=-emax,
        Emax=emax,
        capitals=1,
        clamp=0,
        flags=[],
        traps=[InvalidOperation, DivisionByZero, Overflow],
    )


@lru_cache(maxsize=8)
def _cached_context(precision: int, emax: int) -> Context:
    return make_fixed_point_context(precision=precision, emax=emax)


def get_fixed_point_context() -> Context:
    """
    Процессный fixed-point контекст, построенный из NumericSettings.

    Контекст кэшируется по (precision, emax), поэтому после reset_settings()
    новые значения настроек вступают в силу без отдельного сброса.
    """
    settings = get_settings()
    return _cached_context(settings.fixed_point_precision, settings.fixed_point_emax)


def clamp_tolerance(tolerance: Decimal) -> Decimal:
    """
    Ограничение tolerance снизу precision floor.

    Examples:
        >>> clamp_tolerance(Decimal("0.001"))
        Decimal('0.001')
        >>> clamp_tolerance(Decimal("1e-40"))
        Decimal('1E-28')
    """
    if tolerance < PRECISION_ACCURACY:
        return PRECISION_ACCURACY
    return tolerance


# =============================================================================
# NaN/Inf ПРОВЕРКИ
# =============================================================================


def is_valid_float(value: float) -> bool:
    """
    Проверка, является ли float валидным (не NaN, не Inf).

    Args:
        value: Проверяемое значение

    Returns:
        True если значение конечное
    """
    return math.isfinite(value)


def _is_non_finite(value: Any) -> bool:
    if isinstance(value, Decimal):
        return not value.is_finite()
    if isinstance(value, Rational):
        return False
    try:
        return not math.isfinite(value)
    except (TypeError, ValueError, OverflowError):
        return False


# =============================================================================
# CHECKED КОНВЕРСИИ
# =============================================================================


def to_float_checked(value: Any) -> float:
    """
    Проверяемая усекающая конверсия в BinaryFloat.

    Потеря младших разрядов допустима (усечение), выход за диапазон float —
    нет: конечное значение, ставшее inf, считается переполнением.

    Args:
        value: Число любого типа, поддерживающего __float__

    Returns:
        float

    Raises:
        OverflowOrPrecisionLoss: Значение вне диапазона float

    Examples:
        >>> to_float_checked(3)
        3.0
        >>> to_float_checked(Decimal("1e400"))  # doctest: +SKIP
        Traceback (most recent call last):
            ...
        OverflowOrPrecisionLoss: ...
    """
    if isinstance(value, float):
        return value

    try:
        result = float(value)
    except OverflowError as e:
        raise OverflowOrPrecisionLoss(
            f"{type(value).__name__} value out of float range: {value!r}"
        ) from e

    if math.isinf(result) and not _is_non_finite(value):
        raise OverflowOrPrecisionLoss(
            f"{type(value).__name__} value out of float range: {value!r}"
        )

    return result


def to_decimal_checked(value: Any, context: Context | None = None) -> Decimal:
    """
    Проверяемая конверсия в FixedPointDecimal.

    Значение округляется до точности контекста; NaN/Inf и выход
    за Emax отклоняются.

    Args:
        value: Decimal, int, float или иное число с __float__
        context: Fixed-point контекст (по умолчанию процессный)

    Returns:
        Decimal, округлённый в контексте

    Raises:
        OverflowOrPrecisionLoss: Значение не представимо в контексте
    """
    ctx = context or get_fixed_point_context()

    try:
        if isinstance(value, float):
            result = ctx.create_decimal_from_float(value)
        elif isinstance(value, (Decimal, int)):
            result = ctx.create_decimal(value)
        else:
            result = ctx.create_decimal_from_float(to_float_checked(value))
    except DecimalException as e:
        raise OverflowOrPrecisionLoss(
            f"{type(value).__name__} value not representable as fixed-point: {value!r}"
        ) from e

    if not result.is_finite():
        raise OverflowOrPrecisionLoss(
            f"{type(value).__name__} value not representable as fixed-point: {value!r}"
        )

    return result


def from_canonical_checked(value: Decimal | float, target_type: type) -> Any:
    """
    Проверяемая конверсия результата обратно в тип вызывающего.

    Для целых типов дробная часть усекается; NaN/Inf и переполнение
    отклоняются.

    Args:
        value: Результат в каноническом представлении
        target_type: Тип элементов вызывающего

    Returns:
        Значение типа target_type

    Raises:
        OverflowOrPrecisionLoss: Значение не представимо в target_type
    """
    if type(value) is target_type:
        return value

    if target_type is float:
        return to_float_checked(value)

    if target_type is Decimal:
        return to_decimal_checked(value)

    try:
        return target_type(value)
    except (OverflowError, ValueError, ArithmeticError) as e:
        raise OverflowOrPrecisionLoss(
            f"Cannot represent {value!r} as {target_type.__name__}"
        ) from e
