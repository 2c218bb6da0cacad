# pricetag/services/barcode_resolver.py
"""
Определение значения баркода для товара.

Две стратегии за одним интерфейсом:
- PER_PRODUCT: один баркод на товар, все копии одинаковые (по умолчанию)
- SEQUENTIAL: числовой баркод увеличивается на каждой копии,
  счётчик продвигается после печати

Автобаркод: 8 цифр от миллисекундных часов, уникален среди всех
ранее выданных значений и стабилен для ключа товара.
"""

import logging
import time
from collections.abc import Callable
from typing import Protocol

from pricetag.config import LABEL
from pricetag.models.label_types import BarcodeMode
from pricetag.repositories.storage import JSONStore, StorageKeys

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class BarcodeValueResolver(Protocol):
    """Интерфейс стратегии баркодов."""

    def resolve(self, product_key: str, explicit_value: str = "") -> str: ...

    def resolve_copies(self, product_key: str, explicit_value: str, count: int) -> list[str]: ...

    def commit(self, product_key: str, values: list[str]) -> str | None: ...


class MonotonicClock:
    """
    Строго возрастающий счётчик от миллисекундных часов.

    Два вызова в одну миллисекунду дают разные значения.
    """

    def __init__(self, source: Callable[[], int] = _now_ms):
        self.source = source
        self._last = 0

    def __call__(self) -> int:
        value = max(self.source(), self._last + 1)
        self._last = value
        return value


# Общие часы процесса для всех резолверов
_PROCESS_CLOCK = MonotonicClock()


class PerProductBarcodeResolver:
    """
    Один баркод на товар.

    Явное значение используется как есть. Иначе - сохранённый автобаркод
    для ключа товара, иначе - новый уникальный.
    """

    def __init__(
        self,
        store: JSONStore,
        clock: Callable[[], int] | None = None,
        digits: int = LABEL.AUTO_BARCODE_DIGITS,
    ):
        self.store = store
        self.clock = clock or _PROCESS_CLOCK
        self.digits = digits

    def resolve(self, product_key: str, explicit_value: str = "") -> str:
        """
        Значение баркода для товара.

        Args:
            product_key: Ключ товара ("name|variation")
            explicit_value: Баркод, введённый пользователем

        Returns:
            Значение баркода
        """
        if explicit_value:
            return explicit_value

        mapping = self._load_map()
        existing = mapping.get(product_key)
        if existing:
            return existing

        value = self._generate(set(mapping.values()))
        mapping[product_key] = value
        self.store.set(StorageKeys.AUTO_BARCODES, mapping)
        logger.info(
            f"[Barcode] Новый автобаркод {value} для {product_key!r}",
            extra={"barcode": value, "product_key": product_key},
        )
        return value

    def resolve_copies(self, product_key: str, explicit_value: str, count: int) -> list[str]:
        """Все копии одного товара получают один и тот же баркод."""
        value = self.resolve(product_key, explicit_value)
        return [value] * max(1, count)

    def commit(self, product_key: str, values: list[str]) -> str | None:
        """После печати ничего не продвигается."""
        return None

    def _load_map(self) -> dict[str, str]:
        mapping = self.store.get(StorageKeys.AUTO_BARCODES, {})
        if not isinstance(mapping, dict):
            logger.warning("[Barcode] Карта автобаркодов испорчена, начинаем заново")
            return {}
        return {str(k): str(v) for k, v in mapping.items() if v}

    def _generate(self, taken: set[str]) -> str:
        """
        Новый баркод: последние N цифр часов, +1 по модулю 10^N до уникальности.

        Args:
            taken: Уже выданные значения

        Returns:
            Строка из N цифр
        """
        modulus = 10**self.digits
        if len(taken) >= modulus:
            raise RuntimeError("Пространство автобаркодов исчерпано")

        seed = str(self.clock())[-self.digits :].zfill(self.digits)
        while seed in taken:
            seed = str((int(seed) + 1) % modulus).zfill(self.digits)
        return seed


def _is_numeric(value: str) -> bool:
    return value.isascii() and value.isdigit()


def increment_value(value: str, step: int = 1) -> str:
    """
    Числовой баркод + step с сохранением ширины (ведущие нули).

    Переполнение заворачивается по модулю 10^ширина.
    """
    width = len(value)
    return str((int(value) + step) % 10**width).zfill(width)


class SequentialBarcodeResolver:
    """
    Последовательные баркоды: каждая копия получает следующий номер.

    База: явное значение -> сохранённый счётчик товара -> автобаркод.
    Нечисловая база повторяется без изменений.
    """

    def __init__(self, store: JSONStore, auto: PerProductBarcodeResolver | None = None):
        self.store = store
        self.auto = auto or PerProductBarcodeResolver(store)

    def resolve(self, product_key: str, explicit_value: str = "") -> str:
        """Значение для первой копии."""
        return self.resolve_copies(product_key, explicit_value, 1)[0]

    def resolve_copies(self, product_key: str, explicit_value: str, count: int) -> list[str]:
        """
        Значения для всех копий прохода.

        Args:
            product_key: Ключ товара
            explicit_value: Баркод из формы
            count: Количество копий

        Returns:
            Список значений длиной count
        """
        base = explicit_value or self._counter(product_key) or self.auto.resolve(product_key)
        count = max(1, count)
        if not _is_numeric(base):
            return [base] * count
        return [increment_value(base, i) for i in range(count)]

    def commit(self, product_key: str, values: list[str]) -> str | None:
        """
        Продвигает счётчик после печати.

        Returns:
            Следующее значение (для подстановки в форму) или None
        """
        if not values or not _is_numeric(values[-1]):
            return None

        next_value = increment_value(values[-1])
        counters = self._load_counters()
        counters[product_key] = next_value
        self.store.set(StorageKeys.BARCODE_COUNTERS, counters)
        logger.info(f"[Barcode] Счётчик {product_key!r} -> {next_value}")
        return next_value

    def _counter(self, product_key: str) -> str:
        return self._load_counters().get(product_key, "")

    def _load_counters(self) -> dict[str, str]:
        counters = self.store.get(StorageKeys.BARCODE_COUNTERS, {})
        if not isinstance(counters, dict):
            return {}
        return {str(k): str(v) for k, v in counters.items() if v}


def create_resolver(
    mode: BarcodeMode,
    store: JSONStore,
    clock: Callable[[], int] | None = None,
) -> BarcodeValueResolver:
    """
    Стратегия баркодов по режиму из настроек.

    Args:
        mode: Режим (per_product / sequential)
        store: Хранилище карт баркодов
        clock: Источник времени для автобаркода

    Returns:
        Реализация BarcodeValueResolver
    """
    auto = PerProductBarcodeResolver(store, clock=clock)
    if mode is BarcodeMode.SEQUENTIAL:
        return SequentialBarcodeResolver(store, auto=auto)
    return auto
