"""
Логирование сервиса этикеток.

Сообщения пишутся с тегом подсистемы: "[Labels] Печать 3 шт 38x25mm".
- production: JSON-строка на запись, тег вынесен в поле "tag"
- debug: текст, extra-поля дописываются в конец как key=value
"""

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any

from pricetag.config import get_settings

# Атрибуты, которые есть у любой LogRecord; всё остальное пришло через extra=
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}

_TAG = re.compile(r"^\[(?P<tag>[A-Za-z_]+)\]\s*")

# Шумные библиотеки: рендер PDF/PNG и access-лог uvicorn
QUIET_LOGGERS = ("uvicorn.access", "PIL", "fontTools", "reportlab")


def record_extra(record: logging.LogRecord) -> dict[str, Any]:
    """Поля, переданные через extra= (product_id, labels_count...)."""
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


def split_tag(message: str) -> tuple[str | None, str]:
    """'[Labels] Печать' -> ('labels', 'Печать'); без тега -> (None, message)."""
    match = _TAG.match(message)
    if not match:
        return None, message
    return match.group("tag").lower(), message[match.end():]


class JSONFormatter(logging.Formatter):
    """
    Одна запись - одна JSON-строка.

    {"timestamp": "...", "level": "INFO", "logger": "pricetag.services.label_service",
     "tag": "labels", "message": "Печать 3 шт 38x25mm 'soap|'", "labels_count": 3, ...}

    extra-поля лежат на верхнем уровне, чтобы по ним фильтровать в Loki.
    """

    def format(self, record: logging.LogRecord) -> str:
        tag, message = split_tag(record.getMessage())
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
        }
        if tag:
            log_data["tag"] = tag

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record_extra(record).items():
            log_data.setdefault(key, value)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    """Человекочитаемый формат для debug."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extra = record_extra(record)
        if not extra:
            return line
        fields = " ".join(f"{key}={value}" for key, value in extra.items())
        head, sep, tail = line.partition("\n")
        return f"{head} | {fields}{sep}{tail}"


def setup_logging() -> None:
    """
    Настройка логирования приложения (вызывается в lifespan).

    Уровень: DEBUG при debug, иначе из LOG_LEVEL.
    """
    settings = get_settings()

    log_level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level)
    formatter = HumanFormatter() if settings.debug else JSONFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("pricetag").setLevel(log_level)
