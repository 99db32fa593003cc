"""
NumericSettings — процессные настройки численного ядра

Приоритет источников (от высшего к низшему):
  1. Аргументы конструктора
  2. Переменные окружения с префиксом ``ADVMATH_``
  3. Значения по умолчанию

Экземпляр создаётся один раз на процесс (get_settings) и далее
используется только на чтение.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class NumericSettings(BaseSettings):
    """
    Настройки fixed-point представления и логирования.

    Attributes:
        fixed_point_precision: Число значащих цифр Decimal контекста
        fixed_point_emax: Максимальная экспонента (переполнение выше неё)
        verbose: DEBUG-логирование
        log_json: JSON-рендеринг логов вместо консольного
    """

    model_config = SettingsConfigDict(env_prefix="ADVMATH_", frozen=True)

    fixed_point_precision: int = Field(default=28, ge=1, le=1000)
    fixed_point_emax: int = Field(default=28, ge=1)
    verbose: bool = False
    log_json: bool = False


@lru_cache(maxsize=1)
def get_settings() -> NumericSettings:
    """Единственный экземпляр настроек на процесс."""
    return NumericSettings()


def reset_settings() -> None:
    """Сброс закэшированных настроек (используется в тестах)."""
    get_settings.cache_clear()
