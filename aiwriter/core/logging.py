"""Централизованная настройка логирования приложения.

Вешает один stdout-обработчик на корневой логгер, чтобы все модульные
логгеры (`logging.getLogger(__name__)`) писали без отдельной настройки.
"""
import logging
from logging.config import dictConfig


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    }


def configure_logging(level: str = "INFO") -> None:
    """Однократная настройка логирования.

    Если у корневого логгера уже есть обработчики (pytest, uvicorn, повторный
    вызов фабрики приложения), ничего не делаем, чтобы не дублировать вывод.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    dictConfig(_dict_config(level))
