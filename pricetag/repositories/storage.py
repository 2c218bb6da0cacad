"""
Хранилище JSON-значений по ключу.

Контракт как у localStorage браузерной версии:
- get(key, fallback) - испорченные или отсутствующие данные -> fallback, без исключений
- set(key, value) - сериализация в UTF-8 JSON
- remove(key)
"""

import json
import logging
from typing import Any, Protocol

from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class StorageKeys:
    """Ключи хранилища (совпадают с ключами localStorage старой версии)."""

    PRODUCTS = "lg_products"
    SETTINGS = "lg_settings"
    LAST_PRODUCT_ID = "lg_last_product_id"
    AUTO_BARCODES = "lg_auto_barcodes"
    BARCODE_COUNTERS = "lg_barcode_counters"


class JSONStore(Protocol):
    """Адаптер персистентности."""

    def get(self, key: str, fallback: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


def _decode(key: str, raw: str | bytes | None, fallback: Any) -> Any:
    """JSON -> объект; мусор и null -> fallback."""
    if raw is None:
        return fallback
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"[Storage] Испорченный JSON по ключу {key}: {e}")
        return fallback
    return fallback if value is None else value


class MemoryJSONStore:
    """
    Хранилище в памяти процесса.

    Значения хранятся сериализованными, чтобы поведение совпадало с Redis
    (в том числе для испорченных данных).
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str, fallback: Any = None) -> Any:
        return _decode(key, self._data.get(key), fallback)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value, ensure_ascii=False)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def raw(self, key: str) -> str | None:
        """Сырое значение (для отладки и тестов)."""
        return self._data.get(key)

    def put_raw(self, key: str, raw: str) -> None:
        """Записать значение как есть, без сериализации."""
        self._data[key] = raw


class RedisJSONStore:
    """
    Хранилище в Redis.

    Ключи хранятся с префиксом, TTL не ставится: товары и настройки живут,
    пока пользователь их не удалит.
    """

    def __init__(self, redis: Redis, prefix: str = ""):
        self.redis = redis
        self.prefix = prefix

    def _get_key(self, key: str) -> str:
        """Получить ключ Redis с префиксом."""
        return f"{self.prefix}{key}"

    def get(self, key: str, fallback: Any = None) -> Any:
        """
        Получить значение.

        Args:
            key: Ключ хранилища
            fallback: Значение при отсутствии/порче данных

        Returns:
            Распарсенный JSON или fallback
        """
        try:
            raw = self.redis.get(self._get_key(key))
        except RedisError as e:
            logger.warning(f"[Storage] Ошибка чтения {key} из Redis: {e}")
            return fallback
        return _decode(key, raw, fallback)

    def set(self, key: str, value: Any) -> None:
        """
        Сохранить значение.

        Ошибка записи пробрасывается наружу.
        """
        data = json.dumps(value, ensure_ascii=False)
        try:
            self.redis.set(self._get_key(key), data)
        except RedisError as e:
            logger.error(f"[Storage] Ошибка записи {key} в Redis: {e}")
            raise

    def remove(self, key: str) -> None:
        try:
            self.redis.delete(self._get_key(key))
        except RedisError as e:
            logger.error(f"[Storage] Ошибка удаления {key} из Redis: {e}")
            raise


def create_store(backend: str, redis_url: str = "", prefix: str = "") -> JSONStore:
    """
    Фабрика хранилища по настройкам.

    Args:
        backend: "memory" или "redis"
        redis_url: URL Redis (для backend="redis")
        prefix: Префикс ключей

    Returns:
        Реализация JSONStore
    """
    if backend == "redis":
        logger.debug(f"[Storage] Подключение к Redis: {redis_url}")
        return RedisJSONStore(Redis.from_url(redis_url), prefix=prefix)
    return MemoryJSONStore()
