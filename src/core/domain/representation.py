"""
CanonicalRepresentation — два канонических числовых представления

Закрытый набор представлений, для которых ядро имеет собственные алгоритмы:
- FixedPointDecimal: decimal.Decimal в fixed-point контексте
- BinaryFloat: встроенный float

Любой другой числовой тип поэлементно конвертируется в BinaryFloat
на уровне generic dispatch (src.stats.generic).

Арифметика каждого представления:
- Fixed-point: только методы контекста (детерминизм в любом потоке),
  переполнение и деление на ноль → decimal ловушки (ArithmeticError)
- Float: встроенные операторы, деление на ноль → ZeroDivisionError,
  inf/NaN ловятся через ensure_finite
"""

from abc import ABC, abstractmethod
from decimal import Context, Decimal
from typing import Any, Final, Generic, TypeVar

from src.core.math.numerical_safeguards import (
    FAST_ACCURACY,
    get_fixed_point_context,
    is_valid_float,
    to_decimal_checked,
    to_float_checked,
)
from src.core.math.primitives import (
    decimal_power,
    decimal_power_async,
    decimal_square_root,
    decimal_square_root_async,
    float_power,
    float_square_root,
)

N = TypeVar("N", Decimal, float)


# =============================================================================
# БАЗОВЫЙ КЛАСС
# =============================================================================


class CanonicalRepresentation(ABC, Generic[N]):
    """
    Арифметика одного канонического представления.

    Экземпляры не хранят изменяемого состояния и разделяются между потоками.
    """

    name: str
    element_type: type

    @property
    @abstractmethod
    def zero(self) -> N: ...

    @property
    @abstractmethod
    def one(self) -> N: ...

    def accepts(self, value: Any) -> bool:
        """Точное совпадение типа (подклассы идут через generic путь)."""
        return type(value) is self.element_type

    @abstractmethod
    def convert(self, value: Any) -> N:
        """Checked конверсия произвольного числа в представление."""

    @abstractmethod
    def from_count(self, count: int) -> N: ...

    @abstractmethod
    def add(self, a: N, b: N) -> N: ...

    @abstractmethod
    def subtract(self, a: N, b: N) -> N: ...

    @abstractmethod
    def multiply(self, a: N, b: N) -> N: ...

    @abstractmethod
    def divide(self, a: N, b: N) -> N: ...

    @abstractmethod
    def power(self, value: N, exponent: int) -> N: ...

    @abstractmethod
    def square_root(self, value: N, tolerance: Decimal = FAST_ACCURACY) -> N:
        """Квадратный корень; tolerance учитывается только итеративными реализациями."""

    async def power_async(self, value: N, exponent: int) -> N:
        return self.power(value, exponent)

    async def square_root_async(
        self, value: N, tolerance: Decimal = FAST_ACCURACY
    ) -> N:
        return self.square_root(value, tolerance)

    def ensure_finite(self, value: N, what: str) -> N:
        """Проверка промежуточного результата; по умолчанию без проверки."""
        return value

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# =============================================================================
# FIXED-POINT DECIMAL
# =============================================================================


class FixedPointDecimal(CanonicalRepresentation[Decimal]):
    """
    Fixed-point представление на decimal.Decimal.

    Args:
        context: Явный контекст; по умолчанию процессный из NumericSettings
    """

    name = "fixed_point"
    element_type = Decimal

    def __init__(self, context: Context | None = None):
        self._context = context

    @property
    def context(self) -> Context:
        return self._context or get_fixed_point_context()

    @property
    def zero(self) -> Decimal:
        return Decimal(0)

    @property
    def one(self) -> Decimal:
        return Decimal(1)

    def convert(self, value: Any) -> Decimal:
        return to_decimal_checked(value, self.context)

    def from_count(self, count: int) -> Decimal:
        return self.context.create_decimal(count)

    def add(self, a: Decimal, b: Decimal) -> Decimal:
        return self.context.add(a, b)

    def subtract(self, a: Decimal, b: Decimal) -> Decimal:
        return self.context.subtract(a, b)

    def multiply(self, a: Decimal, b: Decimal) -> Decimal:
        return self.context.multiply(a, b)

    def divide(self, a: Decimal, b: Decimal) -> Decimal:
        return self.context.divide(a, b)

    def power(self, value: Decimal, exponent: int) -> Decimal:
        return decimal_power(value, exponent, context=self.context)

    def square_root(
        self, value: Decimal, tolerance: Decimal = FAST_ACCURACY
    ) -> Decimal:
        return decimal_square_root(value, tolerance, context=self.context)

    async def power_async(self, value: Decimal, exponent: int) -> Decimal:
        return await decimal_power_async(value, exponent, context=self.context)

    async def square_root_async(
        self, value: Decimal, tolerance: Decimal = FAST_ACCURACY
    ) -> Decimal:
        return await decimal_square_root_async(value, tolerance, context=self.context)


# =============================================================================
# BINARY FLOAT
# =============================================================================


class BinaryFloat(CanonicalRepresentation[float]):
    """Представление на встроенном float; power/sqrt через модуль math."""

    name = "binary_float"
    element_type = float

    @property
    def zero(self) -> float:
        return 0.0

    @property
    def one(self) -> float:
        return 1.0

    def convert(self, value: Any) -> float:
        return to_float_checked(value)

    def from_count(self, count: int) -> float:
        return float(count)

    def add(self, a: float, b: float) -> float:
        return a + b

    def subtract(self, a: float, b: float) -> float:
        return a - b

    def multiply(self, a: float, b: float) -> float:
        return a * b

    def divide(self, a: float, b: float) -> float:
        return a / b

    def power(self, value: float, exponent: int) -> float:
        return float_power(value, exponent)

    def square_root(self, value: float, tolerance: Decimal = FAST_ACCURACY) -> float:
        return float_square_root(value)

    def ensure_finite(self, value: float, what: str) -> float:
        """
        Float переполнение в Python не выбрасывает исключение:
        inf/NaN в промежуточном результате трактуется как арифметическая ошибка.
        """
        if not is_valid_float(value):
            raise OverflowError(f"{what} is not finite: {value}")
        return value


# =============================================================================
# ВЫБОР ПРЕДСТАВЛЕНИЯ
# =============================================================================

FIXED_POINT: Final[FixedPointDecimal] = FixedPointDecimal()

BINARY_FLOAT: Final[BinaryFloat] = BinaryFloat()

CANONICAL_REPRESENTATIONS: Final[tuple[CanonicalRepresentation, ...]] = (
    FIXED_POINT,
    BINARY_FLOAT,
)


def representation_of(value: Any) -> CanonicalRepresentation | None:
    """
    Каноническое представление значения или None для прочих типов.

    Examples:
        >>> representation_of(Decimal("1.5")) is FIXED_POINT
        True
        >>> representation_of(1.5) is BINARY_FLOAT
        True
        >>> representation_of(3) is None
        True
    """
    for representation in CANONICAL_REPRESENTATIONS:
        if representation.accepts(value):
            return representation
    return None
