"""
NumericSequence — единый доступ к упорядоченным числовым коллекциям

Ядро никогда не изменяет коллекцию вызывающего: доступ только по индексу
или полным проходом. Для контейнеров, которые уже знают свою длину
(list, tuple, array.array, range, ...), используется быстрый путь;
прочие итерируемые объекты материализуются один раз.

Агрегаты (sum_of, average, maximum) считаются последовательно в порядке
индексов, поэтому fixed-point результат воспроизводим бит-в-бит.
"""

import array
import itertools
from collections.abc import Iterable, Iterator, Sequence, Sized
from typing import Any

from src.core.concurrency.parallel_tasks import run_in_background, yield_control
from src.core.domain.representation import CanonicalRepresentation
from src.core.math.numerical_safeguards import EmptySequenceError


# =============================================================================
# ДОСТУП К ЭЛЕМЕНТАМ
# =============================================================================


def _is_indexable(source: Any) -> bool:
    return isinstance(source, (Sequence, array.array))


def get_length(source: Iterable[Any]) -> int:
    """
    Длина коллекции.

    Быстрый путь через len(); иначе подсчёт проходом
    (одноразовые итераторы при этом исчерпываются).

    Raises:
        TypeError: source is None
    """
    if source is None:
        raise TypeError("source must not be None")

    if isinstance(source, Sized):
        return len(source)

    return sum(1 for _ in source)


def at_index(source: Iterable[Any], index: int) -> Any:
    """
    Элемент по индексу.

    Raises:
        TypeError: source is None
        IndexError: Индекс вне диапазона
    """
    if source is None:
        raise TypeError("source must not be None")

    if _is_indexable(source):
        return source[index]

    if index < 0:
        raise IndexError(f"negative index {index} on a non-indexable source")

    for item in itertools.islice(source, index, index + 1):
        return item

    raise IndexError(f"index {index} out of range")


def first(source: Iterable[Any]) -> Any:
    """
    Первый элемент.

    Raises:
        EmptySequenceError: Коллекция пуста
    """
    if source is None:
        raise TypeError("source must not be None")

    for item in source:
        return item

    raise EmptySequenceError("sequence contains no elements")


def to_sequence(source: Iterable[Any]) -> Sequence[Any]:
    """Индексируемое представление: как есть или однократная материализация."""
    if source is None:
        raise TypeError("source must not be None")

    if _is_indexable(source):
        return source

    return tuple(source)


# =============================================================================
# NUMERIC SEQUENCE
# =============================================================================


class NumericSequence(Sequence):
    """
    Неизменяемое представление конечной последовательности чисел одного типа.

    Не копирует индексируемые коллекции вызывающего; прочие итерируемые
    объекты материализуются при создании.
    """

    __slots__ = ("_items", "_length")

    def __init__(self, source: Iterable[Any]):
        self._items = to_sequence(source)
        self._length = get_length(self._items)

    def __len__(self) -> int:
        return self._length

    def __getitem__(self, index):
        return self._items[index]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    @property
    def items(self) -> Sequence[Any]:
        """Исходная (backing) коллекция."""
        return self._items

    @property
    def is_empty(self) -> bool:
        return self._length == 0

    def first(self) -> Any:
        return first(self._items)

    @property
    def element_type(self) -> type | None:
        """Тип первого элемента или None для пустой последовательности."""
        if self._length == 0:
            return None
        return type(self._items[0])

    def __repr__(self) -> str:
        return f"NumericSequence(length={self._length}, element_type={self.element_type})"


# =============================================================================
# АГРЕГАТЫ
# =============================================================================


def sum_of(values: Iterable[Any], representation: CanonicalRepresentation) -> Any:
    """Сумма в порядке индексов в арифметике представления."""
    total = representation.zero
    for value in values:
        total = representation.add(total, value)
    return total


def average(values: Sequence[Any], representation: CanonicalRepresentation) -> Any:
    """
    Среднее арифметическое.

    Raises:
        EmptySequenceError: Пустая последовательность (ошибка вызывающего)
    """
    count = get_length(values)
    if count == 0:
        raise EmptySequenceError("cannot compute the mean of an empty sequence")

    return representation.divide(
        sum_of(values, representation), representation.from_count(count)
    )


def maximum(values: Iterable[Any]) -> Any:
    """
    Максимум упорядоченным проходом (без параллелизма).

    Raises:
        EmptySequenceError: Пустая последовательность
    """
    result = first(values)
    for value in values:
        if value > result:
            result = value
    return result


async def sum_of_async(
    values: Iterable[Any], representation: CanonicalRepresentation
) -> Any:
    """Асинхронный аналог sum_of (уступка после каждого элемента)."""

    async def work() -> Any:
        total = representation.zero
        for value in values:
            total = representation.add(total, value)
            await yield_control()
        return total

    return await run_in_background(work)


async def average_async(
    values: Sequence[Any], representation: CanonicalRepresentation
) -> Any:
    """Асинхронный аналог average."""
    count = get_length(values)
    if count == 0:
        raise EmptySequenceError("cannot compute the mean of an empty sequence")

    total = await sum_of_async(values, representation)
    return representation.divide(total, representation.from_count(count))


async def maximum_async(values: Iterable[Any]) -> Any:
    """Асинхронный аналог maximum."""
    result = first(values)

    async def work() -> Any:
        current = result
        for value in values:
            if value > current:
                current = value
            await yield_control()
        return current

    return await run_in_background(work)
