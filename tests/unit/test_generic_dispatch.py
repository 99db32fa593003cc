"""
Тесты для Generic Dispatch

Проверяет:
1. Decimal и float идут напрямую в свой движок
2. Прочие типы (int, Fraction, смешанные) — через теневую float копию
   с checked конверсией результата в тип первого элемента
3. OverflowOrPrecisionLoss пробрасывается везде, кроме z_score
4. z_score возвращает fallback без изменений при любой ошибке
5. power / square_root для любого типа
6. Асинхронные версии идентичны синхронным
"""

import asyncio
from decimal import Decimal
from fractions import Fraction

import pytest

from src.core.concurrency.parallel_tasks import ConcurrencyPolicy
from src.core.domain.sequences import NumericSequence
from src.core.math.numerical_safeguards import OverflowOrPrecisionLoss
from src.stats.generic import (
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

PARALLEL = ConcurrencyPolicy(available_parallelism=8)
SEQUENTIAL = ConcurrencyPolicy(available_parallelism=1)

SCENARIO = [2, 4, 4, 4, 5, 5, 7, 9]


# =============================================================================
# ТЕСТЫ: ТЕНЕВАЯ FLOAT КОПИЯ
# =============================================================================


class TestToFloatSequence:
    """Тесты to_float_sequence"""

    @pytest.mark.parametrize("policy", [PARALLEL, SEQUENTIAL])
    def test_conversion(self, policy) -> None:
        values = NumericSequence(list(range(200)))
        assert to_float_sequence(values, policy) == [float(i) for i in range(200)]

    def test_source_untouched(self) -> None:
        source = [Fraction(1, 2), Fraction(3, 4)]
        shadow = to_float_sequence(NumericSequence(source))
        assert shadow == [0.5, 0.75]
        assert source == [Fraction(1, 2), Fraction(3, 4)]

    @pytest.mark.parametrize("policy", [PARALLEL, SEQUENTIAL])
    def test_overflow_propagates(self, policy) -> None:
        values = list(range(100)) + [10**400]
        with pytest.raises(OverflowOrPrecisionLoss):
            to_float_sequence(NumericSequence(values), policy)

    @pytest.mark.parametrize("policy", [PARALLEL, SEQUENTIAL])
    def test_async_identical(self, policy) -> None:
        values = NumericSequence([Fraction(i, 3) for i in range(100)])
        assert asyncio.run(to_float_sequence_async(values, policy)) == (
            to_float_sequence(values, policy)
        )


# =============================================================================
# ТЕСТЫ: STANDARD DEVIATION / CV
# =============================================================================


class TestStandardDeviation:
    """Тесты generic standard_deviation"""

    def test_int_result_truncated(self) -> None:
        """≈ 2.138 → int 2"""
        result = standard_deviation(SCENARIO)
        assert result == 2
        assert type(result) is int

    def test_fraction_result_type(self) -> None:
        values = [Fraction(v) for v in SCENARIO]
        result = standard_deviation(values)
        assert isinstance(result, Fraction)
        assert float(result) == pytest.approx(2.13808993)

    def test_decimal_direct(self) -> None:
        result = standard_deviation([Decimal(v) for v in SCENARIO])
        assert isinstance(result, Decimal)
        assert abs(result - Decimal("2.138089935")) < Decimal("0.0001")

    def test_float_direct(self) -> None:
        result = standard_deviation([float(v) for v in SCENARIO])
        assert type(result) is float
        assert result == pytest.approx(2.13808993)

    def test_iterator_input(self) -> None:
        assert standard_deviation(float(v) for v in SCENARIO) == pytest.approx(
            2.13808993
        )

    def test_short_input(self) -> None:
        assert standard_deviation([5]) == 0
        assert standard_deviation([]) == 0

    def test_mixed_types_restored_to_first_type(self) -> None:
        values = [Decimal(2), 4.0, 4, Fraction(4), 5, 5, 7, 9]
        result = standard_deviation(values)
        assert isinstance(result, Decimal)
        assert abs(result - Decimal("2.138089935")) < Decimal("0.0001")

    def test_overflow_propagates(self) -> None:
        with pytest.raises(OverflowOrPrecisionLoss):
            standard_deviation([1, 2, 10**400])

    def test_parallel_conversion_path(self) -> None:
        values = list(range(1, 201))
        assert standard_deviation(values, policy=PARALLEL) == standard_deviation(
            values, policy=SEQUENTIAL
        )

    def test_async_identical(self) -> None:
        for values in (SCENARIO, [Fraction(v) for v in SCENARIO]):
            assert asyncio.run(standard_deviation_async(values)) == standard_deviation(
                values
            )


class TestCoefficientOfVariation:
    """Тесты generic coefficient_of_variation"""

    def test_fraction(self) -> None:
        values = [Fraction(v) for v in SCENARIO]
        result = coefficient_of_variation(values)
        assert isinstance(result, Fraction)
        assert float(result) == pytest.approx(2.13808993 / 5)

    def test_int_short_input(self) -> None:
        assert coefficient_of_variation([3]) == 1

    def test_negative_mean(self) -> None:
        assert coefficient_of_variation([-2, -4]) == 1

    def test_zero_mean_is_one(self) -> None:
        assert coefficient_of_variation([-1, 1]) == 1
        assert coefficient_of_variation([0, 0, 0]) == 1
        assert coefficient_of_variation([Fraction(0), Fraction(0)]) == 1
        assert asyncio.run(coefficient_of_variation_async([0, 0, 0])) == 1

    def test_async_identical(self) -> None:
        values = [Fraction(v) for v in SCENARIO]
        assert asyncio.run(coefficient_of_variation_async(values)) == (
            coefficient_of_variation(values)
        )


# =============================================================================
# ТЕСТЫ: Z-SCORE
# =============================================================================


class TestZScore:
    """Тесты generic z_score"""

    def test_int_zero_spread(self) -> None:
        assert z_score([10, 10, 10], -1) == 0

    def test_int_symmetric(self) -> None:
        assert z_score(SCENARIO, -1) == 0

    def test_empty_returns_fallback(self) -> None:
        assert z_score([], -99) == -99
        assert z_score([], Decimal(-99)) == Decimal(-99)
        assert z_score([], -99.0) == -99.0

    def test_conversion_error_returns_fallback(self) -> None:
        fallback = Fraction(-1)
        assert z_score([1, 2, 10**400], fallback) is fallback

    def test_float_overflow_returns_fallback(self) -> None:
        assert z_score([1e200, -1e200], -5.0) == -5.0

    def test_decimal_values_with_foreign_fallback(self) -> None:
        """Fallback другого типа: вычисление через float, результат — Decimal"""
        result = z_score([Decimal(10), Decimal(10)], -1)
        assert result == 0
        assert isinstance(result, Decimal)

    def test_parallel_matches_sequential(self) -> None:
        values = [i * i for i in range(100)]
        assert z_score(values, -1, policy=PARALLEL) == z_score(
            values, -1, policy=SEQUENTIAL
        )

    def test_async_identical(self) -> None:
        assert asyncio.run(z_score_async([], -99)) == -99
        assert asyncio.run(z_score_async([1, 2, 10**400], -7)) == -7

        values = [Fraction(i, 7) for i in range(80)]
        for policy in (PARALLEL, SEQUENTIAL):
            assert asyncio.run(z_score_async(values, Fraction(-1), policy=policy)) == (
                z_score(values, Fraction(-1), policy=policy)
            )


# =============================================================================
# ТЕСТЫ: POWER / SQUARE ROOT
# =============================================================================


class TestPowerAndSquareRoot:
    """Тесты generic power / square_root"""

    def test_power_zero_base(self) -> None:
        assert power(0, -3) == 0
        assert power(0.0, -3) == 0.0
        assert power(Decimal(0), -3) == 0

    def test_power_types(self) -> None:
        assert power(2.0, -3) == 0.125
        assert power(Decimal(2), -3) == Decimal("0.125")
        result = power(Fraction(1, 2), 3)
        assert result == Fraction(1, 8)
        assert isinstance(result, Fraction)

    def test_power_int_truncates_negative_exponent(self) -> None:
        assert power(2, -1) == 0
        assert power(3, 4) == 81

    def test_power_rejects_non_integer_exponent(self) -> None:
        with pytest.raises(TypeError):
            power(2.0, 1.5)  # type: ignore[arg-type]

    def test_square_root_types(self) -> None:
        assert square_root(16) == 4
        assert square_root(16.0) == 4.0
        assert abs(square_root(Decimal(16)) - 4) <= Decimal("0.0001")
        assert square_root(Fraction(1, 4)) == Fraction(1, 2)

    def test_square_root_non_positive(self) -> None:
        assert square_root(-4) == 0
        assert square_root(-4.0) == 0.0
        assert square_root(Decimal(-4)) == 0

    def test_square_root_overflow(self) -> None:
        with pytest.raises(OverflowOrPrecisionLoss):
            square_root(10**400)

    def test_async_identical(self) -> None:
        for value, exponent in ((Decimal("1.5"), 5), (2.5, -2), (Fraction(3, 2), 2), (0, -1)):
            assert asyncio.run(power_async(value, exponent)) == power(value, exponent)

        for value in (Decimal(2), 2.0, 9, Decimal(-1)):
            assert asyncio.run(square_root_async(value)) == square_root(value)
