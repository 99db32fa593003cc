"""
Тесты для Non-Positive Validators

Проверяет:
1. less_than_or_equal_to_zero для разных числовых типов
2. many_less_than_or_equal_to_zero: пустой набор → True
3. Последовательный и параллельный пути дают одинаковый ответ
4. Асинхронный аналог
"""

import asyncio
from decimal import Decimal
from fractions import Fraction

import pytest

from src.core.concurrency.parallel_tasks import ConcurrencyPolicy
from src.core.math.validators import (
    less_than_or_equal_to_zero,
    many_less_than_or_equal_to_zero,
    many_less_than_or_equal_to_zero_async,
)

PARALLEL = ConcurrencyPolicy(available_parallelism=8)
SEQUENTIAL = ConcurrencyPolicy(available_parallelism=1)


class TestLessThanOrEqualToZero:
    """Тесты одиночной проверки"""

    @pytest.mark.parametrize(
        "value", [0, -1, 0.0, -0.0, -1e-300, Decimal("-0.01"), Fraction(-1, 3)]
    )
    def test_non_positive(self, value) -> None:
        assert less_than_or_equal_to_zero(value)

    @pytest.mark.parametrize("value", [1, 1e-300, Decimal("0.01"), Fraction(1, 3)])
    def test_positive(self, value) -> None:
        assert not less_than_or_equal_to_zero(value)


class TestManyLessThanOrEqualToZero:
    """Тесты проверки набора значений"""

    def test_empty_is_true(self) -> None:
        assert many_less_than_or_equal_to_zero() is True
        assert many_less_than_or_equal_to_zero(policy=PARALLEL) is True

    def test_small_sets(self) -> None:
        assert many_less_than_or_equal_to_zero(1, 2, 0) is True
        assert many_less_than_or_equal_to_zero(1, 2, 3) is False

    @pytest.mark.parametrize("policy", [PARALLEL, SEQUENTIAL])
    def test_large_all_positive(self, policy) -> None:
        values = [float(i + 1) for i in range(1000)]
        assert many_less_than_or_equal_to_zero(*values, policy=policy) is False

    @pytest.mark.parametrize("policy", [PARALLEL, SEQUENTIAL])
    @pytest.mark.parametrize("position", [0, 499, 999])
    def test_large_with_non_positive(self, policy, position) -> None:
        values = [Decimal(i + 1) for i in range(1000)]
        values[position] = Decimal(-5)
        assert many_less_than_or_equal_to_zero(*values, policy=policy) is True

    def test_large_many_matches(self) -> None:
        values = [(-1) ** i * i for i in range(500)]
        assert many_less_than_or_equal_to_zero(*values, policy=PARALLEL) is True


class TestManyLessThanOrEqualToZeroAsync:
    """Тесты асинхронного аналога"""

    def test_empty_is_true(self) -> None:
        assert asyncio.run(many_less_than_or_equal_to_zero_async()) is True

    def test_small_sets(self) -> None:
        assert asyncio.run(many_less_than_or_equal_to_zero_async(3, -1)) is True
        assert asyncio.run(many_less_than_or_equal_to_zero_async(3, 1)) is False

    @pytest.mark.parametrize("policy", [PARALLEL, SEQUENTIAL])
    def test_large(self, policy) -> None:
        values = [i + 1 for i in range(200)]
        assert (
            asyncio.run(many_less_than_or_equal_to_zero_async(*values, policy=policy))
            is False
        )

        values[150] = 0
        assert (
            asyncio.run(many_less_than_or_equal_to_zero_async(*values, policy=policy))
            is True
        )
