"""Тесты генератора символов штрихкода."""

import pytest

from pricetag.models.label_types import BarcodeType
from pricetag.services.barcode_generator import BarcodeSymbolRenderer, barcode_options


@pytest.fixture
def renderer() -> BarcodeSymbolRenderer:
    return BarcodeSymbolRenderer()


class TestEan13:
    def test_checksum_added(self, renderer):
        """12 цифр -> контрольная цифра считается"""
        symbol = renderer.draw("590123412345", barcode_options(BarcodeType.EAN13, 15))

        assert symbol.text == "5901234123457"
        assert len(symbol.modules) == 95
        assert set(symbol.modules) <= {"0", "1"}

    def test_wrong_checksum_recomputed(self, renderer):
        symbol = renderer.draw("5901234123450", barcode_options(BarcodeType.EAN13, 15))
        assert symbol.text == "5901234123457"

    @pytest.mark.parametrize("value", ["abc", "12345", "59012341234512"])
    def test_invalid_raises(self, renderer, value):
        with pytest.raises(ValueError):
            renderer.draw(value, barcode_options(BarcodeType.EAN13, 15))


class TestUpc:
    def test_checksum_added(self, renderer):
        symbol = renderer.draw("03600029145", barcode_options(BarcodeType.UPC, 15))

        assert symbol.text == "036000291452"
        assert len(symbol.modules) == 95


class TestCode128:
    def test_ascii_value(self, renderer):
        symbol = renderer.draw("71717123", barcode_options(BarcodeType.CODE128, 20))

        assert symbol.value == "71717123"
        assert symbol.modules.startswith("11")
        assert symbol.options.height == 20
        assert symbol.width_px == pytest.approx(len(symbol.modules) * 1.2)

    def test_non_ascii_raises(self, renderer):
        with pytest.raises(ValueError):
            renderer.draw("সাবান", barcode_options(BarcodeType.CODE128, 15))

    def test_empty_raises(self, renderer):
        with pytest.raises(ValueError):
            renderer.draw("   ", barcode_options(BarcodeType.CODE128, 15))


def test_options_defaults():
    """Параметры отрисовки как у браузерной версии"""
    options = barcode_options(BarcodeType.UPC, 23)

    assert options.format == "UPC"
    assert options.height == 23
    assert options.width == 1.2
    assert options.font_size == 10
    assert options.margin == 0
