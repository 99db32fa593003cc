"""
ParallelTasks — политика параллелизма и примитивы fan-out

Модуль решает, обрабатывать ли вход параллельно, и выполняет
data-parallel проход по диапазону индексов:
- ConcurrencyPolicy: решение parallel/sequential для конкретного вызова
- ParallelSettings: бюджет воркеров + опциональный сигнал отмены
- parallel_for: ограниченный пул потоков, каждый воркер пишет в свой
  непересекающийся срез индексов
- parallel_for_async: тот же пул потоков, ожидаемый из корутины
  без блокировки event loop
- run_in_background: последовательная работа в отдельной задаче

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Решение parallel/sequential принимается один раз на вызов и не кэшируется
2. Параллелизм только при can_parallel_process() И is_large_array(length)
3. Воркеры проверяют отмену между итерациями и выходят без исключения
4. Исключение в воркере пробрасывается вызывающему (первое по порядку срезов)
"""

import asyncio
import os
import threading
from collections.abc import Callable, Coroutine
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Final, TypeVar

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)

T = TypeVar("T")


# =============================================================================
# ПОРОГИ ПОЛИТИКИ
# =============================================================================

# Массивы длиннее этого порога считаются "большими"
SMALL_ARRAY_SIZE_LIMIT: Final[int] = 63

# Параллельная обработка только при числе ядер строго больше порога
PARALLEL_PROCESSOR_THRESHOLD: Final[int] = 3


def available_parallelism() -> int:
    """
    Число ядер, доступных процессу.

    Учитывает CPU affinity, если платформа её поддерживает.
    """
    if hasattr(os, "sched_getaffinity"):
        return max(1, len(os.sched_getaffinity(0)))
    return os.cpu_count() or 1


# =============================================================================
# НАСТРОЙКИ FAN-OUT
# =============================================================================


class ParallelSettings(BaseModel):
    """
    Параметры одного параллельного прохода.

    Attributes:
        max_degree_of_parallelism: Максимум одновременно работающих воркеров
        cancellation: Сигнал ранней остановки (только для short-circuit сканов)
    """

    max_degree_of_parallelism: int = Field(..., ge=1)
    cancellation: threading.Event | None = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    def is_cancelled(self) -> bool:
        return self.cancellation is not None and self.cancellation.is_set()


# =============================================================================
# ПОЛИТИКА
# =============================================================================


@dataclass(frozen=True)
class ConcurrencyPolicy:
    """
    Политика параллелизма.

    Неизменяемая и безопасная для совместного использования без блокировок.
    В тестах создаётся с явным available_parallelism, чтобы форсировать
    параллельный или последовательный путь.
    """

    available_parallelism: int = field(default_factory=available_parallelism)

    def can_parallel_process(self) -> bool:
        """Достаточно ли ядер для параллельной обработки."""
        return self.available_parallelism > PARALLEL_PROCESSOR_THRESHOLD

    @staticmethod
    def is_large_array(length: int) -> bool:
        """Оправдывает ли размер входа накладные расходы на fan-out."""
        return length > SMALL_ARRAY_SIZE_LIMIT

    @property
    def worker_budget(self) -> int:
        """Число воркеров: одно ядро всегда остаётся вызывающему."""
        return max(1, self.available_parallelism - 1)

    def should_parallelize(self, length: int) -> bool:
        """Решение parallel/sequential для входа длины length."""
        decision = self.can_parallel_process() and self.is_large_array(length)
        logger.debug(
            "parallelism_decision",
            length=length,
            available_parallelism=self.available_parallelism,
            parallel=decision,
        )
        return decision

    @property
    def parallel_settings(self) -> ParallelSettings:
        return ParallelSettings(max_degree_of_parallelism=self.worker_budget)

    def parallel_settings_with_early_break(
        self, cancellation: threading.Event
    ) -> ParallelSettings:
        """Настройки для сканов с ранней остановкой по сигналу."""
        return ParallelSettings(
            max_degree_of_parallelism=self.worker_budget,
            cancellation=cancellation,
        )


# Процессная политика: вычисляется один раз, далее только чтение
DEFAULT_POLICY: Final[ConcurrencyPolicy] = ConcurrencyPolicy()


def resolve_policy(policy: ConcurrencyPolicy | None) -> ConcurrencyPolicy:
    return DEFAULT_POLICY if policy is None else policy


# =============================================================================
# РАЗБИЕНИЕ ДИАПАЗОНА
# =============================================================================


def partition_range(start: int, stop: int, workers: int) -> list[range]:
    """
    Разбиение [start, stop) на не более workers непрерывных срезов.

    Срезы не пересекаются и покрывают весь диапазон по порядку.

    Examples:
        >>> partition_range(0, 10, 3)
        [range(0, 4), range(4, 7), range(7, 10)]
        >>> partition_range(0, 2, 4)
        [range(0, 1), range(1, 2)]
    """
    total = stop - start
    if total <= 0:
        return []

    workers = max(1, min(workers, total))
    base, extra = divmod(total, workers)

    chunks = []
    lower = start
    for index in range(workers):
        upper = lower + base + (1 if index < extra else 0)
        chunks.append(range(lower, upper))
        lower = upper

    return chunks


# =============================================================================
# СИНХРОННЫЙ FAN-OUT
# =============================================================================


def _chunk_runner(
    settings: ParallelSettings, body: Callable[[int], None]
) -> Callable[[range], None]:
    def run_chunk(chunk: range) -> None:
        for i in chunk:
            if settings.is_cancelled():
                return
            body(i)

    return run_chunk


def parallel_for(
    start: int,
    stop: int,
    settings: ParallelSettings,
    body: Callable[[int], None],
) -> bool:
    """
    Параллельный проход body(i) по индексам [start, stop).

    Args:
        start: Первый индекс
        stop: Индекс за последним
        settings: Бюджет воркеров и сигнал отмены
        body: Функция обработки одного индекса

    Returns:
        True если проход завершён полностью, False если был отменён

    Raises:
        Первое (по порядку срезов) исключение, выброшенное body
    """
    chunks = partition_range(start, stop, settings.max_degree_of_parallelism)
    if not chunks:
        return True

    run_chunk = _chunk_runner(settings, body)

    with ThreadPoolExecutor(max_workers=len(chunks)) as executor:
        futures = [executor.submit(run_chunk, chunk) for chunk in chunks]
        for future in futures:
            future.result()

    return not settings.is_cancelled()


# =============================================================================
# АСИНХРОННЫЙ FAN-OUT
# =============================================================================


async def yield_control() -> None:
    """Кооперативная уступка управления планировщику (без блокировки)."""
    await asyncio.sleep(0)


async def parallel_for_async(
    start: int,
    stop: int,
    settings: ParallelSettings,
    body: Callable[[int], None],
) -> bool:
    """
    Асинхронный аналог parallel_for.

    Срезы выполняются в том же ограниченном пуле потоков, что и
    у parallel_for; event loop не блокируется, пока воркеры работают.
    Результат и порядок проброса исключений идентичны parallel_for.
    """
    chunks = partition_range(start, stop, settings.max_degree_of_parallelism)
    if not chunks:
        return True

    run_chunk = _chunk_runner(settings, body)
    loop = asyncio.get_running_loop()

    with ThreadPoolExecutor(max_workers=len(chunks)) as executor:
        futures = [loop.run_in_executor(executor, run_chunk, chunk) for chunk in chunks]
        # Дожидаемся всех срезов, чтобы ни один воркер не пережил вызов
        outcomes = await asyncio.gather(*futures, return_exceptions=True)

    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome

    return not settings.is_cancelled()


async def run_in_background(work: Callable[[], Coroutine[Any, Any, T]]) -> T:
    """Выполнение последовательной работы в отдельной фоновой задаче."""
    return await asyncio.create_task(work())
