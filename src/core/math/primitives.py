"""
Numeric Primitives — Power & Square Root

Модуль реализует два примитива для канонических представлений:
- Целочисленная степень (exponentiation by squaring) с отрицательными
  показателями
- Квадратный корень методом Ньютона-Рафсона с настраиваемой tolerance

Fixed-point (Decimal) версии считаются точно в правилах округления
контекста, без промежуточной конверсии во float. Float версии
делегируют модулю math.

ПОЛИТИКА ТОТАЛЬНОСТИ (не математические тождества):
1. power(0, n) == 0 для любого n, включая отрицательные
2. square_root(v) == 0 для любого v <= 0 (без исключения)

ФОРМУЛЫ:
    power:       result *= base, если текущий бит показателя установлен;
                 base *= base; exponent >>= 1
                 при n < 0: result = 1 / result
    square_root: guess_0 = value / 2
                 guess_{k+1} = (guess_k + value / guess_k) / 2
                 стоп при |guess_k - guess_{k+1}| <= tolerance
"""

import math
from decimal import Context, Decimal

from src.core.concurrency.parallel_tasks import run_in_background, yield_control
from src.core.math.numerical_safeguards import (
    DECIMAL_TWO,
    FAST_ACCURACY,
    clamp_tolerance,
    get_fixed_point_context,
    to_decimal_checked,
)


# =============================================================================
# POWER
# =============================================================================


def decimal_power(
    value: Decimal,
    exponent: int,
    context: Context | None = None,
) -> Decimal:
    """
    Целочисленная степень fixed-point значения.

    Args:
        value: Основание
        exponent: Показатель (любого знака)
        context: Fixed-point контекст (по умолчанию процессный)

    Returns:
        value ** exponent в правилах округления контекста

    Raises:
        decimal.Overflow: Результат вне диапазона контекста

    Examples:
        >>> decimal_power(Decimal(2), -3)
        Decimal('0.125')
        >>> decimal_power(Decimal(0), -3)
        Decimal('0')
        >>> decimal_power(Decimal("1.5"), 2)
        Decimal('2.25')
    """
    if value == 0:
        return Decimal(0)

    if exponent == 0:
        return Decimal(1)

    if exponent == 1:
        return value

    ctx = context or get_fixed_point_context()

    is_negative_exponent = exponent < 0
    remaining = -exponent if is_negative_exponent else exponent

    result = Decimal(1)
    base = value

    while remaining > 0:
        if remaining & 1:
            result = ctx.multiply(result, base)

        remaining >>= 1
        # Лишнее возведение в квадрат после старшего бита может переполниться
        if remaining:
            base = ctx.multiply(base, base)

    return ctx.divide(Decimal(1), result) if is_negative_exponent else result


async def decimal_power_async(
    value: Decimal,
    exponent: int,
    context: Context | None = None,
) -> Decimal:
    """
    Асинхронный аналог decimal_power.

    Цикл выполняется в фоновой задаче с уступкой управления
    после каждого шага; результат идентичен decimal_power.
    """
    if value == 0:
        return Decimal(0)

    if exponent == 0:
        return Decimal(1)

    if exponent == 1:
        return value

    ctx = context or get_fixed_point_context()

    is_negative_exponent = exponent < 0
    remaining = -exponent if is_negative_exponent else exponent

    async def work() -> Decimal:
        nonlocal remaining
        result = Decimal(1)
        base = value

        while remaining > 0:
            if remaining & 1:
                result = ctx.multiply(result, base)

            remaining >>= 1
            if remaining:
                base = ctx.multiply(base, base)

            await yield_control()

        return ctx.divide(Decimal(1), result) if is_negative_exponent else result

    return await run_in_background(work)


def float_power(value: float, exponent: int) -> float:
    """
    Целочисленная степень float через math.pow.

    Политика power(0, n) == 0 применяется и здесь (math.pow(0, -n)
    выбросил бы ValueError).

    Raises:
        OverflowError: Результат вне диапазона float
    """
    if value == 0.0:
        return 0.0

    if exponent == 0:
        return 1.0

    if exponent == 1:
        return value

    return math.pow(value, exponent)


# =============================================================================
# SQUARE ROOT
# =============================================================================


def _resolve_tolerance(tolerance: Decimal | float, ctx: Context) -> Decimal:
    if not isinstance(tolerance, Decimal):
        tolerance = to_decimal_checked(tolerance, ctx)
    return clamp_tolerance(tolerance)


def _newton_step(value: Decimal, guess: Decimal, ctx: Context) -> Decimal:
    return ctx.divide(ctx.add(guess, ctx.divide(value, guess)), DECIMAL_TWO)


def _has_converged(
    guess: Decimal,
    result: Decimal,
    previous: Decimal | None,
    tolerance: Decimal,
    ctx: Context,
) -> bool:
    # Возврат к предыдущему приближению: округление зациклило итерацию
    # на соседних значениях, разница ниже точности контекста
    if result == previous:
        return True
    return ctx.subtract(guess, result).copy_abs() <= tolerance


def decimal_square_root(
    value: Decimal,
    tolerance: Decimal | float = FAST_ACCURACY,
    context: Context | None = None,
) -> Decimal:
    """
    Квадратный корень fixed-point значения методом Ньютона-Рафсона.

    Args:
        value: Подкоренное значение
        tolerance: Порог сходимости; ниже PRECISION_ACCURACY молча
            поднимается до PRECISION_ACCURACY
        context: Fixed-point контекст (по умолчанию процессный)

    Returns:
        Приближение sqrt(value); 0 для value <= 0

    Raises:
        decimal.DivisionByZero: Приближение обратилось в ноль (дефект итерации)

    Examples:
        >>> abs(decimal_square_root(Decimal(16)) - 4) <= FAST_ACCURACY
        True
        >>> decimal_square_root(Decimal(-4))
        Decimal('0')
    """
    if value <= 0:
        return Decimal(0)

    ctx = context or get_fixed_point_context()
    tolerance = _resolve_tolerance(tolerance, ctx)

    guess = ctx.divide(value, DECIMAL_TWO)
    result = _newton_step(value, guess, ctx)
    previous = None

    while not _has_converged(guess, result, previous, tolerance, ctx):
        previous, guess = guess, result
        result = _newton_step(value, guess, ctx)

    return result


async def decimal_square_root_async(
    value: Decimal,
    tolerance: Decimal | float = FAST_ACCURACY,
    context: Context | None = None,
) -> Decimal:
    """Асинхронный аналог decimal_square_root (уступка на каждой итерации)."""
    if value <= 0:
        return Decimal(0)

    ctx = context or get_fixed_point_context()
    tolerance = _resolve_tolerance(tolerance, ctx)

    async def work() -> Decimal:
        guess = ctx.divide(value, DECIMAL_TWO)
        result = _newton_step(value, guess, ctx)
        previous = None

        while not _has_converged(guess, result, previous, tolerance, ctx):
            previous, guess = guess, result
            result = _newton_step(value, guess, ctx)
            await yield_control()

        return result

    return await run_in_background(work)


def float_square_root(value: float) -> float:
    """Квадратный корень float через math.sqrt; 0.0 для value <= 0."""
    if value <= 0.0:
        return 0.0
    return math.sqrt(value)
