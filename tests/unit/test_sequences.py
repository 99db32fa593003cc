"""
Тесты для NumericSequence и агрегатов последовательностей

Проверяет:
1. Доступ к элементам (get_length, at_index, first, to_sequence)
2. NumericSequence не копирует индексируемые коллекции
3. sum_of / average / maximum в арифметике представления
4. Пустая последовательность → EmptySequenceError
5. Асинхронные агрегаты идентичны синхронным
"""

import array
import asyncio
from decimal import Decimal

import pytest

from src.core.domain.representation import BINARY_FLOAT, FIXED_POINT
from src.core.domain.sequences import (
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
from src.core.math.numerical_safeguards import EmptySequenceError


# =============================================================================
# ТЕСТЫ ДОСТУПА
# =============================================================================


class TestElementAccess:
    """Тесты get_length / at_index / first / to_sequence"""

    def test_get_length_fast_path(self) -> None:
        assert get_length([1, 2, 3]) == 3
        assert get_length(range(10)) == 10
        assert get_length(array.array("d", [1.0, 2.0])) == 2

    def test_get_length_counts_iterators(self) -> None:
        assert get_length(x for x in range(5)) == 5

    def test_none_rejected(self) -> None:
        with pytest.raises(TypeError):
            get_length(None)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            at_index(None, 0)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            first(None)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            to_sequence(None)  # type: ignore[arg-type]

    def test_at_index_indexable(self) -> None:
        assert at_index([10, 20, 30], 1) == 20
        assert at_index((10, 20, 30), -1) == 30

    def test_at_index_iterator(self) -> None:
        assert at_index(iter([10, 20, 30]), 2) == 30

    def test_at_index_out_of_range(self) -> None:
        with pytest.raises(IndexError):
            at_index([1, 2], 5)
        with pytest.raises(IndexError):
            at_index(iter([1, 2]), 5)
        with pytest.raises(IndexError):
            at_index(iter([1, 2]), -1)

    def test_first(self) -> None:
        assert first([7, 8]) == 7
        assert first(iter([7, 8])) == 7

    def test_first_empty(self) -> None:
        with pytest.raises(EmptySequenceError):
            first([])

    def test_to_sequence(self) -> None:
        source = [1, 2, 3]
        assert to_sequence(source) is source
        assert to_sequence(x for x in source) == (1, 2, 3)


# =============================================================================
# ТЕСТЫ NUMERIC SEQUENCE
# =============================================================================


class TestNumericSequence:
    """Тесты NumericSequence"""

    def test_no_copy_of_indexable_source(self) -> None:
        source = [Decimal(1), Decimal(2)]
        sequence = NumericSequence(source)
        assert sequence.items is source
        assert len(sequence) == 2
        assert sequence[1] == Decimal(2)
        assert list(sequence) == source

    def test_iterator_materialized(self) -> None:
        sequence = NumericSequence(float(i) for i in range(4))
        assert len(sequence) == 4
        assert list(sequence) == [0.0, 1.0, 2.0, 3.0]
        # Повторный проход возможен
        assert sum(sequence) == 6.0

    def test_element_type(self) -> None:
        assert NumericSequence([1.5, 2.5]).element_type is float
        assert NumericSequence([Decimal(1)]).element_type is Decimal
        assert NumericSequence([]).element_type is None

    def test_empty(self) -> None:
        sequence = NumericSequence([])
        assert sequence.is_empty
        with pytest.raises(EmptySequenceError):
            sequence.first()

    def test_does_not_mutate_source(self) -> None:
        source = [3.0, 1.0, 2.0]
        NumericSequence(source)
        assert source == [3.0, 1.0, 2.0]


# =============================================================================
# ТЕСТЫ АГРЕГАТОВ
# =============================================================================


class TestAggregates:
    """Тесты sum_of / average / maximum"""

    def test_sum_of_decimal(self) -> None:
        values = [Decimal("0.1")] * 10
        assert sum_of(values, FIXED_POINT) == Decimal("1.0")

    def test_sum_of_empty_is_zero(self) -> None:
        assert sum_of([], FIXED_POINT) == 0
        assert sum_of([], BINARY_FLOAT) == 0.0

    def test_average(self) -> None:
        assert average([Decimal(2), Decimal(4), Decimal(9)], FIXED_POINT) == Decimal(5)
        assert average([1.0, 2.0], BINARY_FLOAT) == 1.5

    def test_average_rounded_to_context(self) -> None:
        result = average([Decimal(1), Decimal(0), Decimal(0)], FIXED_POINT)
        assert result == Decimal("0.3333333333333333333333333333")

    def test_average_empty_raises(self) -> None:
        with pytest.raises(EmptySequenceError):
            average([], FIXED_POINT)

    def test_maximum(self) -> None:
        assert maximum([3, 9, -2, 9, 4]) == 9
        assert maximum(iter([1.5, -7.0])) == 1.5

    def test_maximum_empty_raises(self) -> None:
        with pytest.raises(EmptySequenceError):
            maximum([])


class TestAsyncAggregates:
    """Асинхронные агрегаты дают тот же результат"""

    def test_sum_of_async(self) -> None:
        values = [Decimal("1.1"), Decimal("2.2"), Decimal("3.3")]
        assert asyncio.run(sum_of_async(values, FIXED_POINT)) == sum_of(
            values, FIXED_POINT
        )

    def test_average_async(self) -> None:
        values = [Decimal(1), Decimal(2), Decimal(2)]
        assert asyncio.run(average_async(values, FIXED_POINT)) == average(
            values, FIXED_POINT
        )

    def test_average_async_empty_raises(self) -> None:
        with pytest.raises(EmptySequenceError):
            asyncio.run(average_async([], BINARY_FLOAT))

    def test_maximum_async(self) -> None:
        assert asyncio.run(maximum_async([4, 11, 2])) == 11

    def test_maximum_async_empty_raises(self) -> None:
        with pytest.raises(EmptySequenceError):
            asyncio.run(maximum_async([]))
