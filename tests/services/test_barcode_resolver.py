"""Тесты стратегий баркодов."""

import pytest

from pricetag.models.label_types import BarcodeMode
from pricetag.repositories.storage import StorageKeys
from pricetag.services.barcode_resolver import (
    MonotonicClock,
    PerProductBarcodeResolver,
    SequentialBarcodeResolver,
    create_resolver,
    increment_value,
)


class TestPerProductResolver:
    """Один баркод на товар."""

    def test_auto_value_is_eight_digits_from_clock(self, store, fixed_clock):
        resolver = PerProductBarcodeResolver(store, clock=fixed_clock)

        value = resolver.resolve("soap|lavender")

        assert value == "71717123"
        assert store.get(StorageKeys.AUTO_BARCODES) == {"soap|lavender": "71717123"}

    def test_same_key_same_value(self, store):
        """Повторный запрос по ключу возвращает сохранённое значение"""
        resolver = PerProductBarcodeResolver(store)

        first = resolver.resolve("soap|lavender")
        second = PerProductBarcodeResolver(store).resolve("soap|lavender")

        assert first == second

    def test_colliding_seeds_give_distinct_values(self, store, fixed_clock):
        """Одинаковые показания часов не дают дубликатов"""
        resolver = PerProductBarcodeResolver(store, clock=fixed_clock)

        values = [resolver.resolve(f"item{i}|") for i in range(3)]

        assert values == ["71717123", "71717124", "71717125"]

    def test_collision_wraps_around(self, store):
        resolver = PerProductBarcodeResolver(store, clock=lambda: 1699999999999)

        assert resolver.resolve("a|") == "99999999"
        assert resolver.resolve("b|") == "00000000"

    def test_explicit_value_wins_and_is_not_stored(self, store):
        resolver = PerProductBarcodeResolver(store)

        assert resolver.resolve("soap|", "4601234567890") == "4601234567890"
        assert store.get(StorageKeys.AUTO_BARCODES) is None

    def test_copies_share_value(self, store, fixed_clock):
        resolver = PerProductBarcodeResolver(store, clock=fixed_clock)

        assert resolver.resolve_copies("soap|", "", 3) == ["71717123"] * 3
        assert resolver.commit("soap|", ["71717123"] * 3) is None

    def test_corrupted_map_is_ignored(self, store, fixed_clock):
        store.put_raw(StorageKeys.AUTO_BARCODES, "{broken")
        resolver = PerProductBarcodeResolver(store, clock=fixed_clock)

        assert resolver.resolve("soap|") == "71717123"

    def test_exhausted_space(self, store):
        resolver = PerProductBarcodeResolver(store, digits=1)
        store.set(StorageKeys.AUTO_BARCODES, {f"k{i}|": str(i) for i in range(10)})
        with pytest.raises(RuntimeError):
            resolver.resolve("new|")


class TestSequentialResolver:
    """Последовательные баркоды."""

    def test_explicit_numeric_base_increments(self, store):
        resolver = SequentialBarcodeResolver(store)

        values = resolver.resolve_copies("soap|", "00000098", 3)

        assert values == ["00000098", "00000099", "00000100"]

    def test_commit_advances_counter(self, store):
        resolver = SequentialBarcodeResolver(store)
        values = resolver.resolve_copies("soap|", "100", 3)

        next_value = resolver.commit("soap|", values)

        assert next_value == "103"
        assert resolver.resolve_copies("soap|", "", 2) == ["103", "104"]

    def test_without_commit_values_repeat(self, store):
        """Превью не продвигает счётчик"""
        resolver = SequentialBarcodeResolver(store)

        assert resolver.resolve_copies("soap|", "100", 2) == resolver.resolve_copies(
            "soap|", "100", 2
        )

    def test_non_numeric_base_repeats(self, store):
        resolver = SequentialBarcodeResolver(store)

        assert resolver.resolve_copies("soap|", "ABC-1", 2) == ["ABC-1", "ABC-1"]
        assert resolver.commit("soap|", ["ABC-1", "ABC-1"]) is None

    def test_auto_base(self, store, fixed_clock):
        auto = PerProductBarcodeResolver(store, clock=fixed_clock)
        resolver = SequentialBarcodeResolver(store, auto=auto)

        assert resolver.resolve("soap|") == "71717123"


def test_increment_keeps_width():
    assert increment_value("0099") == "0100"
    assert increment_value("99") == "00"


def test_monotonic_clock():
    """Два вызова в одну миллисекунду дают разные значения"""
    clock = MonotonicClock(source=lambda: 5)
    assert [clock(), clock(), clock()] == [5, 6, 7]


def test_create_resolver(store):
    assert isinstance(create_resolver(BarcodeMode.PER_PRODUCT, store), PerProductBarcodeResolver)
    assert isinstance(create_resolver(BarcodeMode.SEQUENTIAL, store), SequentialBarcodeResolver)
