"""
StatisticsEngine — описательная статистика первого и второго моментов

Один движок на каноническое представление (FixedPointDecimal, BinaryFloat):
- mean: сумма / количество; пустой вход — ошибка вызывающего
- standard_deviation: выборочная (делитель n - 1) с fallback на
  популяционную (делитель n) при арифметической ошибке
- coefficient_of_variation: standard_deviation / mean
- z_score: среднее поэлементных z-оценок (скаляр, не массив)

КОНВЕНЦИИ ВЫРОЖДЕННЫХ СЛУЧАЕВ (три разные константы, не унифицировать):
1. standard_deviation при n < 2 → 0
2. coefficient_of_variation при n < 2, нулевом среднем или результате <= 0 → 1
3. z_score при нулевом разбросе → 0 (это НЕ ошибка, fallback не применяется)

ОБРАБОТКА ОШИБОК:
- standard_deviation: ArithmeticError основной формулы → fallback путь;
  ошибка fallback пути пробрасывается вызывающему
- z_score: любая ArithmeticError или EmptySequenceError → fallback вызывающего
- coefficient_of_variation, mean: ошибки пробрасываются

ФОРМУЛЫ:
    mean     = Σ x_i / n
    sample   = sqrt(Σ (x_i - mean) * (x_i - mean) / (n - 1))
    fallback = sqrt(Σ power(x_i - mean, 2) / n)
    cv       = sample / mean
    z        = mean((x_i - mean) / sample)
"""

from collections.abc import Sequence
from typing import Any, Final, Generic, TypeVar

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
    FIXED_POINT,
    CanonicalRepresentation,
)
from src.core.domain.sequences import (
    average,
    average_async,
    get_length,
    sum_of,
    sum_of_async,
)
from src.core.math.numerical_safeguards import ARITHMETIC_FAULTS, EmptySequenceError

logger = structlog.get_logger(__name__)

N = TypeVar("N")

# Ошибки, которые z_score заменяет на fallback вызывающего
Z_SCORE_FAULTS: Final[tuple[type[BaseException], ...]] = (
    *ARITHMETIC_FAULTS,
    EmptySequenceError,
)


class StatisticsEngine(Generic[N]):
    """
    Статистики для последовательностей одного канонического представления.

    Элементы должны уже принадлежать представлению; конверсию выполняет
    generic dispatch (src.stats.generic).

    Args:
        representation: Арифметика представления
        policy: Политика параллелизма (по умолчанию процессная)
    """

    def __init__(
        self,
        representation: CanonicalRepresentation,
        policy: ConcurrencyPolicy | None = None,
    ):
        self.representation = representation
        self.policy = resolve_policy(policy)

    def with_policy(self, policy: ConcurrencyPolicy | None) -> "StatisticsEngine[N]":
        """Движок того же представления с другой политикой."""
        if policy is None or policy == self.policy:
            return self
        return StatisticsEngine(self.representation, policy)

    # =========================================================================
    # MEAN
    # =========================================================================

    def mean(self, values: Sequence[N]) -> N:
        """
        Среднее арифметическое.

        Raises:
            EmptySequenceError: Пустая последовательность
        """
        return average(values, self.representation)

    async def mean_async(self, values: Sequence[N]) -> N:
        return await average_async(values, self.representation)

    # =========================================================================
    # STANDARD DEVIATION
    # =========================================================================

    def _squared_deviations(self, values: Sequence[N], mean: N) -> list[N]:
        rep = self.representation
        deviations = []
        for value in values:
            deviation = rep.subtract(value, mean)
            deviations.append(rep.multiply(deviation, deviation))
        return deviations

    def _powered_deviations(self, values: Sequence[N], mean: N) -> list[N]:
        rep = self.representation
        return [rep.power(rep.subtract(value, mean), 2) for value in values]

    def _variance(self, sum_of_squares: N, divisor: int) -> N:
        rep = self.representation
        variance = rep.divide(sum_of_squares, rep.from_count(divisor))
        return rep.ensure_finite(variance, "variance")

    def standard_deviation(self, values: Sequence[N]) -> N:
        """
        Выборочное стандартное отклонение (поправка Бесселя).

        Args:
            values: Последовательность элементов представления

        Returns:
            0 при длине < 2; иначе sqrt(Σ(x - mean)² / (n - 1)).
            При арифметической ошибке основной формулы:
            sqrt(Σ power(x - mean, 2) / n)

        Raises:
            ArithmeticError: Ошибка в fallback пути
        """
        rep = self.representation
        length = get_length(values)

        if length < 2:
            return rep.zero

        mean = self.mean(values)

        try:
            sum_of_squares = sum_of(self._squared_deviations(values, mean), rep)
            return rep.square_root(self._variance(sum_of_squares, length - 1))
        except ARITHMETIC_FAULTS as e:
            logger.debug(
                "standard_deviation_fallback",
                representation=rep.name,
                length=length,
                error=repr(e),
            )

        sum_of_squares = sum_of(self._powered_deviations(values, mean), rep)
        return rep.square_root(self._variance(sum_of_squares, length))

    async def standard_deviation_async(self, values: Sequence[N]) -> N:
        """Асинхронный аналог standard_deviation (идентичный результат)."""
        rep = self.representation
        length = get_length(values)

        if length < 2:
            return rep.zero

        mean = await self.mean_async(values)

        try:
            sum_of_squares = await sum_of_async(
                self._squared_deviations(values, mean), rep
            )
            return await rep.square_root_async(
                self._variance(sum_of_squares, length - 1)
            )
        except ARITHMETIC_FAULTS as e:
            logger.debug(
                "standard_deviation_fallback",
                representation=rep.name,
                length=length,
                error=repr(e),
            )

        sum_of_squares = await sum_of_async(self._powered_deviations(values, mean), rep)
        return await rep.square_root_async(self._variance(sum_of_squares, length))

    # =========================================================================
    # COEFFICIENT OF VARIATION
    # =========================================================================

    def _bounded_ratio(self, standard_deviation: N, mean: N) -> N:
        rep = self.representation
        # Нулевое среднее: отношение не определено
        if mean == rep.zero:
            return rep.one

        ratio = rep.divide(standard_deviation, mean)
        # Неположительное отношение (например, отрицательное среднее)
        # не имеет смысла как коэффициент вариации
        if ratio <= rep.zero:
            return rep.one
        return ratio

    def coefficient_of_variation(self, values: Sequence[N]) -> N:
        """
        Коэффициент вариации standard_deviation / mean.

        Returns:
            1 при длине < 2, нулевом среднем или результате <= 0

        Raises:
            ArithmeticError: Ошибка в fallback пути standard_deviation
        """
        if get_length(values) < 2:
            return self.representation.one

        return self._bounded_ratio(self.standard_deviation(values), self.mean(values))

    async def coefficient_of_variation_async(self, values: Sequence[N]) -> N:
        if get_length(values) < 2:
            return self.representation.one

        standard_deviation = await self.standard_deviation_async(values)
        mean = await self.mean_async(values)
        return self._bounded_ratio(standard_deviation, mean)

    # =========================================================================
    # Z-SCORE
    # =========================================================================

    def standard_score(self, value: N, mean: N, standard_deviation: N) -> N:
        """
        z-оценка одного значения: (value - mean) / standard_deviation.

        Returns:
            0 при нулевом standard_deviation
        """
        rep = self.representation
        if standard_deviation == rep.zero:
            return rep.zero
        return rep.divide(rep.subtract(value, mean), standard_deviation)

    def compute_z_score(self, values: Sequence[N]) -> N:
        """
        Среднее поэлементных z-оценок без подавления ошибок.

        Raises:
            EmptySequenceError: Пустая последовательность
            ArithmeticError: Арифметическая ошибка на любом шаге
        """
        rep = self.representation
        mean = self.mean(values)
        standard_deviation = self.standard_deviation(values)

        if standard_deviation == rep.zero:
            return rep.zero

        length = get_length(values)
        z_scores: list[Any] = [rep.zero] * length

        def body(i: int) -> None:
            z_scores[i] = self.standard_score(values[i], mean, standard_deviation)

        if self.policy.should_parallelize(length):
            parallel_for(0, length, self.policy.parallel_settings, body)
        else:
            for i in range(length):
                body(i)

        return self.mean(z_scores)

    async def compute_z_score_async(self, values: Sequence[N]) -> N:
        rep = self.representation
        mean = await self.mean_async(values)
        standard_deviation = await self.standard_deviation_async(values)

        if standard_deviation == rep.zero:
            return rep.zero

        length = get_length(values)
        z_scores: list[Any] = [rep.zero] * length

        def body(i: int) -> None:
            z_scores[i] = self.standard_score(values[i], mean, standard_deviation)

        if self.policy.should_parallelize(length):
            await parallel_for_async(0, length, self.policy.parallel_settings, body)
        else:

            async def work() -> None:
                for i in range(length):
                    body(i)
                    await yield_control()

            await run_in_background(work)

        return await self.mean_async(z_scores)

    def z_score(self, values: Sequence[N], fallback: N) -> N:
        """
        Агрегированная z-оценка последовательности.

        Args:
            values: Последовательность элементов представления
            fallback: Значение при любой арифметической ошибке
                или пустой последовательности

        Returns:
            Среднее поэлементных z-оценок; 0 при нулевом разбросе;
            fallback при ошибке
        """
        try:
            return self.compute_z_score(values)
        except Z_SCORE_FAULTS as e:
            logger.debug(
                "z_score_fallback", representation=self.representation.name, error=repr(e)
            )
            return fallback

    async def z_score_async(self, values: Sequence[N], fallback: N) -> N:
        try:
            return await self.compute_z_score_async(values)
        except Z_SCORE_FAULTS as e:
            logger.debug(
                "z_score_fallback", representation=self.representation.name, error=repr(e)
            )
            return fallback

    def __repr__(self) -> str:
        return f"StatisticsEngine({self.representation!r}, {self.policy!r})"


FIXED_POINT_ENGINE: Final[StatisticsEngine] = StatisticsEngine(FIXED_POINT)

BINARY_FLOAT_ENGINE: Final[StatisticsEngine] = StatisticsEngine(BINARY_FLOAT)


def engine_for(
    representation: CanonicalRepresentation,
    policy: ConcurrencyPolicy | None = None,
) -> StatisticsEngine:
    """Движок для представления с заданной политикой."""
    base = FIXED_POINT_ENGINE if representation is FIXED_POINT else BINARY_FLOAT_ENGINE
    if base.representation is not representation:
        return StatisticsEngine(representation, policy)
    return base.with_policy(policy)
