"""
Generic Dispatch — единая точка входа для любого числового типа

Для каждой операции (standard_deviation, coefficient_of_variation, z_score,
power, square_root) и её асинхронного аналога:

1. Все элементы — Decimal → FixedPointDecimal движок/примитив напрямую
2. Все элементы — float → BinaryFloat движок/примитив напрямую
3. Иначе (int, Fraction, смешанные типы, ...) → теневая float копия
   последовательности через checked конверсию, вычисление в BinaryFloat,
   checked конверсия результата обратно в тип первого элемента

Теневая копия строится параллельно, если этого требует политика
(can_parallel_process И is_large_array), иначе по порядку.

OverflowOrPrecisionLoss из конверсий не перехватывается — кроме z_score,
где любая ошибка заменяется на fallback вызывающего.
"""

import operator
from collections.abc import Iterable
from decimal import Decimal
from typing import Any, TypeVar

import structlog

from src.core.concurrency.parallel_tasks import (
    ConcurrencyPolicy,
    parallel_for,
    parallel_for_async,
    resolve_policy,
    run_in_background,
    yield_control,
)
from src.core.domain.representation import (
    BINARY_FLOAT,
    CanonicalRepresentation,
    representation_of,
)
from src.core.domain.sequences import NumericSequence
from src.core.math.numerical_safeguards import (
    FAST_ACCURACY,
    from_canonical_checked,
)
from src.stats.engine import Z_SCORE_FAULTS, StatisticsEngine, engine_for

logger = structlog.get_logger(__name__)

T = TypeVar("T")


# =============================================================================
# ВЫБОР ПУТИ
# =============================================================================


def _canonical_representation(
    sequence: NumericSequence,
) -> CanonicalRepresentation | None:
    """Представление, общее для всех элементов, или None."""
    if sequence.is_empty:
        return None

    representation = representation_of(sequence.first())
    if representation is None:
        return None

    if all(representation.accepts(value) for value in sequence):
        return representation

    return None


def _restore(result: Any, target_type: type | None) -> Any:
    if target_type is None:
        return result
    return from_canonical_checked(result, target_type)


# =============================================================================
# ТЕНЕВАЯ FLOAT КОПИЯ
# =============================================================================


def to_float_sequence(
    sequence: NumericSequence,
    policy: ConcurrencyPolicy | None = None,
) -> list[float]:
    """
    Новая float последовательность из checked конверсии каждого элемента.

    Raises:
        OverflowOrPrecisionLoss: Элемент вне диапазона float
    """
    policy = resolve_policy(policy)
    length = len(sequence)
    shadow = [0.0] * length

    def body(i: int) -> None:
        shadow[i] = BINARY_FLOAT.convert(sequence[i])

    parallel = policy.should_parallelize(length)
    logger.debug(
        "generic_float_conversion",
        element_type=getattr(sequence.element_type, "__name__", None),
        length=length,
        parallel=parallel,
    )

    if parallel:
        parallel_for(0, length, policy.parallel_settings, body)
    else:
        for i in range(length):
            body(i)

    return shadow


async def to_float_sequence_async(
    sequence: NumericSequence,
    policy: ConcurrencyPolicy | None = None,
) -> list[float]:
    """Асинхронный аналог to_float_sequence."""
    policy = resolve_policy(policy)
    length = len(sequence)
    shadow = [0.0] * length

    def body(i: int) -> None:
        shadow[i] = BINARY_FLOAT.convert(sequence[i])

    if policy.should_parallelize(length):
        await parallel_for_async(0, length, policy.parallel_settings, body)
    else:

        async def work() -> None:
            for i in range(length):
                body(i)
                await yield_control()

        await run_in_background(work)

    return shadow


# =============================================================================
# STANDARD DEVIATION / COEFFICIENT OF VARIATION
# =============================================================================


def _direct_engine(
    sequence: NumericSequence, policy: ConcurrencyPolicy | None
) -> StatisticsEngine | None:
    representation = _canonical_representation(sequence)
    if representation is None:
        return None
    return engine_for(representation, policy)


def standard_deviation(
    values: Iterable[T], *, policy: ConcurrencyPolicy | None = None
) -> T:
    """
    Выборочное стандартное отклонение для любого числового типа.

    Args:
        values: Конечная последовательность чисел одного типа
        policy: Политика параллелизма (по умолчанию процессная)

    Returns:
        Результат в типе элементов (0 при длине < 2)

    Raises:
        OverflowOrPrecisionLoss: Элемент или результат не конвертируется
    """
    sequence = NumericSequence(values)
    engine = _direct_engine(sequence, policy)
    if engine is not None:
        return engine.standard_deviation(sequence)

    shadow = to_float_sequence(sequence, policy)
    result = engine_for(BINARY_FLOAT, policy).standard_deviation(shadow)
    return _restore(result, sequence.element_type)


async def standard_deviation_async(
    values: Iterable[T], *, policy: ConcurrencyPolicy | None = None
) -> T:
    """Асинхронный аналог standard_deviation (идентичный результат)."""
    sequence = NumericSequence(values)
    engine = _direct_engine(sequence, policy)
    if engine is not None:
        return await engine.standard_deviation_async(sequence)

    shadow = await to_float_sequence_async(sequence, policy)
    result = await engine_for(BINARY_FLOAT, policy).standard_deviation_async(shadow)
    return _restore(result, sequence.element_type)


def coefficient_of_variation(
    values: Iterable[T], *, policy: ConcurrencyPolicy | None = None
) -> T:
    """
    Коэффициент вариации для любого числового типа.

    Returns:
        Результат в типе элементов (1 при длине < 2, нулевом среднем
        или результате <= 0)

    Raises:
        OverflowOrPrecisionLoss: Элемент или результат не конвертируется
        ArithmeticError: Ошибка в fallback пути standard_deviation
    """
    sequence = NumericSequence(values)
    engine = _direct_engine(sequence, policy)
    if engine is not None:
        return engine.coefficient_of_variation(sequence)

    shadow = to_float_sequence(sequence, policy)
    result = engine_for(BINARY_FLOAT, policy).coefficient_of_variation(shadow)
    return _restore(result, sequence.element_type)


async def coefficient_of_variation_async(
    values: Iterable[T], *, policy: ConcurrencyPolicy | None = None
) -> T:
    sequence = NumericSequence(values)
    engine = _direct_engine(sequence, policy)
    if engine is not None:
        return await engine.coefficient_of_variation_async(sequence)

    shadow = await to_float_sequence_async(sequence, policy)
    result = await engine_for(BINARY_FLOAT, policy).coefficient_of_variation_async(
        shadow
    )
    return _restore(result, sequence.element_type)


# =============================================================================
# Z-SCORE
# =============================================================================


def _z_score_engine(
    sequence: NumericSequence, fallback: Any, policy: ConcurrencyPolicy | None
) -> StatisticsEngine | None:
    """Прямой путь только если fallback того же представления."""
    if sequence.is_empty:
        representation = representation_of(fallback)
    else:
        representation = _canonical_representation(sequence)

    if representation is None or not representation.accepts(fallback):
        return None

    return engine_for(representation, policy)


def z_score(
    values: Iterable[T], fallback: T, *, policy: ConcurrencyPolicy | None = None
) -> T:
    """
    Агрегированная z-оценка для любого числового типа.

    Args:
        values: Конечная последовательность чисел одного типа
        fallback: Возвращается без изменений при любой ошибке
            (пустой вход, арифметическая ошибка, ошибка конверсии)
        policy: Политика параллелизма (по умолчанию процессная)

    Returns:
        Среднее поэлементных z-оценок в типе элементов;
        0 при нулевом разбросе; fallback при ошибке
    """
    sequence = NumericSequence(values)
    engine = _z_score_engine(sequence, fallback, policy)
    if engine is not None:
        return engine.z_score(sequence, fallback)

    try:
        shadow = to_float_sequence(sequence, policy)
        result = engine_for(BINARY_FLOAT, policy).compute_z_score(shadow)
        return _restore(result, sequence.element_type or type(fallback))
    except Z_SCORE_FAULTS as e:
        logger.debug("z_score_fallback", representation="generic", error=repr(e))
        return fallback


async def z_score_async(
    values: Iterable[T], fallback: T, *, policy: ConcurrencyPolicy | None = None
) -> T:
    """Асинхронный аналог z_score (идентичный результат)."""
    sequence = NumericSequence(values)
    engine = _z_score_engine(sequence, fallback, policy)
    if engine is not None:
        return await engine.z_score_async(sequence, fallback)

    try:
        shadow = await to_float_sequence_async(sequence, policy)
        result = await engine_for(BINARY_FLOAT, policy).compute_z_score_async(shadow)
        return _restore(result, sequence.element_type or type(fallback))
    except Z_SCORE_FAULTS as e:
        logger.debug("z_score_fallback", representation="generic", error=repr(e))
        return fallback


# =============================================================================
# POWER / SQUARE ROOT
# =============================================================================


def power(value: T, exponent: int) -> T:
    """
    Целочисленная степень для любого числового типа.

    Decimal — точное возведение в квадрат в fixed-point контексте,
    float — math.pow, прочие типы — через float с конверсией обратно.

    Examples:
        >>> power(2.0, -3)
        0.125
        >>> power(0, -3)
        0
        >>> power(Decimal(2), -3)
        Decimal('0.125')
    """
    exponent = operator.index(exponent)

    representation = representation_of(value)
    if representation is not None:
        return representation.power(value, exponent)

    result = BINARY_FLOAT.power(BINARY_FLOAT.convert(value), exponent)
    return from_canonical_checked(result, type(value))


async def power_async(value: T, exponent: int) -> T:
    """Асинхронный аналог power (идентичный результат)."""
    exponent = operator.index(exponent)

    representation = representation_of(value)
    if representation is not None:
        return await representation.power_async(value, exponent)

    result = BINARY_FLOAT.power(BINARY_FLOAT.convert(value), exponent)
    return from_canonical_checked(result, type(value))


def square_root(value: T, tolerance: Decimal = FAST_ACCURACY) -> T:
    """
    Квадратный корень для любого числового типа.

    Args:
        value: Подкоренное значение
        tolerance: Порог сходимости Ньютона (учитывается только для Decimal)

    Returns:
        sqrt(value) в типе value; 0 для value <= 0
    """
    representation = representation_of(value)
    if representation is not None:
        return representation.square_root(value, tolerance)

    result = BINARY_FLOAT.square_root(BINARY_FLOAT.convert(value))
    return from_canonical_checked(result, type(value))


async def square_root_async(value: T, tolerance: Decimal = FAST_ACCURACY) -> T:
    representation = representation_of(value)
    if representation is not None:
        return await representation.square_root_async(value, tolerance)

    result = BINARY_FLOAT.square_root(BINARY_FLOAT.convert(value))
    return from_canonical_checked(result, type(value))
