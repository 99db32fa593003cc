"""
Конфигурация structlog

Два режима вывода (stderr):
- Консольный (по умолчанию): цветной вывод, если stderr — терминал
- JSON: структурированные JSON-строки

Библиотечные модули только получают логгер через structlog.get_logger
и пишут DEBUG-события (решение о параллелизме, fallback-пути).
Конфигурация выполняется вызывающим кодом; аргументы, не переданные
явно, берутся из NumericSettings (ADVMATH_VERBOSE, ADVMATH_LOG_JSON).
"""

import logging
import sys

import structlog

from .settings import get_settings

# Имя корневого логгера ядра (все модули пакета src.*)
LOGGER_NAMESPACE = "src"


def configure_logging(
    *,
    verbose: bool | None = None,
    log_json: bool | None = None,
) -> None:
    """
    Настройка structlog поверх stdlib logging.

    Args:
        verbose: DEBUG-уровень для логгеров ядра; иначе только WARNING+.
            None — значение NumericSettings.verbose
        log_json: JSONRenderer вместо ConsoleRenderer.
            None — значение NumericSettings.log_json
    """
    settings = get_settings()
    if verbose is None:
        verbose = settings.verbose
    if log_json is None:
        log_json = settings.log_json

    # События ядра — плоские key/value без контекста запроса и трейсбеков
    pre_chain: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger(LOGGER_NAMESPACE).setLevel(
        logging.DEBUG if verbose else logging.WARNING
    )
