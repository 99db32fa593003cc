"""
Конфигурация и логирование ядра.

Настройки читаются из переменных окружения с префиксом ``ADVMATH_``;
логирование настраивается только явным вызовом configure_logging.
"""

from .logging import configure_logging
from .settings import NumericSettings, get_settings, reset_settings

__all__ = [
    "NumericSettings",
    "configure_logging",
    "get_settings",
    "reset_settings",
]
