"""
Non-Positive Validators — short-circuit проверки "есть ли значение <= 0"

Для больших входов при достаточном числе ядер проверка выполняется
параллельно: воркеры разделяют один флаг "найдено" и сигнал отмены.
Флаг только устанавливается в True (запись идемпотентна), поэтому
блокировка не нужна; после первого совпадения остальные воркеры
выходят на следующей итерации без исключения.
"""

import threading
from collections.abc import Sequence
from typing import Any

import structlog

from src.core.concurrency.parallel_tasks import (
    ConcurrencyPolicy,
    parallel_for,
    parallel_for_async,
    resolve_policy,
    run_in_background,
    yield_control,
)

logger = structlog.get_logger(__name__)


def less_than_or_equal_to_zero(value: Any) -> bool:
    """
    Проверка value <= 0 в арифметике типа значения.

    Examples:
        >>> less_than_or_equal_to_zero(0)
        True
        >>> less_than_or_equal_to_zero(-1.5)
        True
        >>> less_than_or_equal_to_zero(2)
        False
    """
    return value <= 0


class _FoundFlag:
    """Флаг совпадения, разделяемый воркерами (только запись True)."""

    __slots__ = ("value",)

    def __init__(self) -> None:
        self.value = False


def _scan_body(
    values: Sequence[Any], found: _FoundFlag, cancellation: threading.Event
):
    def body(i: int) -> None:
        if less_than_or_equal_to_zero(values[i]):
            found.value = True
            cancellation.set()

    return body


def many_less_than_or_equal_to_zero(
    *values: Any,
    policy: ConcurrencyPolicy | None = None,
) -> bool:
    """
    Есть ли среди значений хотя бы одно <= 0.

    Args:
        *values: Проверяемые значения
        policy: Политика параллелизма (по умолчанию процессная)

    Returns:
        True для пустого набора или при наличии значения <= 0

    Examples:
        >>> many_less_than_or_equal_to_zero()
        True
        >>> many_less_than_or_equal_to_zero(1, 2, 0)
        True
        >>> many_less_than_or_equal_to_zero(1, 2, 3)
        False
    """
    if len(values) < 1:
        return True

    policy = resolve_policy(policy)

    if not policy.should_parallelize(len(values)):
        for value in values:
            if less_than_or_equal_to_zero(value):
                return True
        return False

    found = _FoundFlag()
    cancellation = threading.Event()
    completed = parallel_for(
        0,
        len(values),
        policy.parallel_settings_with_early_break(cancellation),
        _scan_body(values, found, cancellation),
    )
    logger.debug(
        "non_positive_scan", length=len(values), found=found.value, cancelled=not completed
    )
    return found.value


async def many_less_than_or_equal_to_zero_async(
    *values: Any,
    policy: ConcurrencyPolicy | None = None,
) -> bool:
    """Асинхронный аналог many_less_than_or_equal_to_zero."""
    if len(values) < 1:
        return True

    policy = resolve_policy(policy)

    if not policy.should_parallelize(len(values)):

        async def work() -> bool:
            for value in values:
                if less_than_or_equal_to_zero(value):
                    return True
                await yield_control()
            return False

        return await run_in_background(work)

    found = _FoundFlag()
    cancellation = threading.Event()
    await parallel_for_async(
        0,
        len(values),
        policy.parallel_settings_with_early_break(cancellation),
        _scan_body(values, found, cancellation),
    )
    return found.value
