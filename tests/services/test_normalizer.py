"""Тесты нормализации данных формы."""

from datetime import date
from decimal import Decimal

import pytest

from pricetag.config import LABEL
from pricetag.models.label_types import (
    BarcodeType,
    FontSizes,
    LabelData,
    LabelSize,
    NumeralSystem,
    make_product_key,
)
from pricetag.services.normalizer import (
    format_date,
    normalize_date,
    normalize_form,
    parse_int,
    parse_price,
    resolve_unit,
    to_latin_digits,
)


class TestParseInt:
    """Мягкий разбор целых (как parseInt)."""

    @pytest.mark.parametrize("value", ["0", "-5", "abc", "", None, "   "])
    def test_invalid_or_non_positive_becomes_one(self, value):
        """0, отрицательные и мусор -> 1"""
        assert parse_int(value) == 1

    def test_leading_integer(self):
        """Берётся ведущее целое"""
        assert parse_int("12 pcs") == 12
        assert parse_int("1.9") == 1

    def test_bengali_digits(self):
        """Бенгальские цифры принимаются"""
        assert parse_int("১২") == 12

    def test_float_nan_falls_back(self):
        assert parse_int(float("nan"), fallback=7) == 7

    @pytest.mark.parametrize("value", [float("inf"), float("-inf")])
    def test_float_infinity_falls_back(self, value):
        assert parse_int(value, fallback=7) == 7

    def test_huge_digit_string_falls_back(self):
        """Строка из тысяч цифр не роняет разбор"""
        assert parse_int("9" * 5000, fallback=3) == 3
        assert parse_int("০" * 30 + "5") == 5

    def test_maximum(self):
        assert parse_int("1000000000", maximum=50) == 50
        assert parse_int(10**12, maximum=50) == 50
        assert parse_int(1e12, maximum=50) == 50
        assert parse_int("abc", fallback=70, maximum=50) == 50


class TestParsePrice:
    def test_negative_clamped_to_zero(self):
        assert parse_price("-3") == Decimal("0")

    def test_garbage_is_zero(self):
        assert parse_price("abc") == Decimal("0")
        assert parse_price("NaN") == Decimal("0")

    def test_bengali_price(self):
        """১২০ -> 120"""
        assert parse_price("১২০") == Decimal("120")

    def test_decimal_kept(self):
        assert parse_price("12.50") == Decimal("12.50")


class TestDates:
    """Даты формы."""

    def test_round_trip(self):
        """normalize_date(format_date(iso)) == iso"""
        for iso in ("2025-01-01", "2024-02-29", "1999-12-31"):
            assert normalize_date(format_date(iso)) == iso

    def test_format(self):
        assert format_date("2025-03-07") == "07/03/2025"

    def test_short_dmy_accepted(self):
        assert normalize_date("1/2/2025") == "2025-02-01"

    def test_date_object(self):
        assert normalize_date(date(2025, 1, 1)) == "2025-01-01"

    def test_impossible_date_falls_back_to_cache(self):
        """31/02 - мусор, берётся последнее валидное значение"""
        assert normalize_date("31/02/2025", cached="2024-05-05") == "2024-05-05"
        assert normalize_date("31/02/2025") == ""

    def test_garbage_text(self):
        assert normalize_date("tomorrow") == ""

    def test_bengali_digits_in_date(self):
        assert normalize_date("০১/০১/২০২৫") == "2025-01-01"


class TestUnit:
    def test_custom_with_text(self):
        assert resolve_unit("custom", "  box ") == "box"

    def test_custom_without_text(self):
        """Пустая своя единица -> ইউনিট"""
        assert resolve_unit("custom", "   ") == "ইউনিট"

    def test_preset(self):
        assert resolve_unit("কেজি", "ignored") == "কেজি"


class TestNormalizeForm:
    """Сборка LabelData."""

    def test_defaults_for_empty_form(self):
        data = normalize_form({})

        assert data.qty == 1
        assert data.label_count == 1
        assert data.price == Decimal("0")
        assert data.label_size == LabelSize(38, 25)
        assert data.qty_unit == "গ্রাম"
        assert data.fonts == FontSizes()

    def test_text_trimmed(self):
        data = normalize_form({"name": "  Soap ", "variation": None})
        assert data.name == "Soap"
        assert data.variation == ""

    def test_counts_clamped(self):
        data = normalize_form({"qty": "-2", "label_count": "zero"})
        assert data.qty == 1
        assert data.label_count == 1

    def test_label_count_capped(self):
        """Число копий ограничено одним рулоном"""
        data = normalize_form({"label_count": "1000000000"})
        assert data.label_count == LABEL.MAX_LABEL_COUNT

    def test_extreme_numbers_do_not_raise(self):
        data = normalize_form(
            {
                "qty": "9" * 5000,
                "label_count": float("inf"),
                "barcode_height": float("-inf"),
                "fonts": {"name": float("inf"), "price": "9" * 5000},
            }
        )

        assert data.qty == 1
        assert data.label_count == 1
        assert data.barcode.height_px == LabelData().barcode.height_px
        assert data.fonts.name == FontSizes().name
        assert data.fonts.price == FontSizes().price

    def test_bengali_numerals_remembered(self):
        """Количество бенгальскими цифрами -> numerals=bengali"""
        data = normalize_form({"qty": "৫", "price": "120"})
        assert data.qty == 5
        assert data.numerals is NumeralSystem.BENGALI

    def test_latin_numerals(self):
        assert normalize_form({"qty": "5"}).numerals is NumeralSystem.LATIN

    def test_invalid_size_falls_back(self):
        assert normalize_form({"label_size": "big"}).label_size == LabelSize(38, 25)
        assert normalize_form({"label_size": "50x30"}).label_size == LabelSize(50, 30)

    def test_fonts_fall_back_to_defaults(self):
        """Пустые/мусорные кегли берутся из сохранённых настроек"""
        defaults = LabelData(fonts=FontSizes(name=20))
        data = normalize_form({"fonts": {"name": "", "price": "14", "qty": "0"}}, defaults)

        assert data.fonts.name == 20
        assert data.fonts.price == 14
        assert data.fonts.qty == 1

    def test_legacy_show_keys(self):
        """Старые ключи biz/pack/exp понимаются"""
        data = normalize_form({"show": {"biz": False, "exp": "false"}})
        assert data.show.business is False
        assert data.show.exp_date is False
        assert data.show.pack_date is True

    def test_date_cache(self):
        data = normalize_form(
            {"pack_date": "garbage", "exp_date": "2025-01-01"},
            date_cache={"pack_date": "2024-12-01"},
        )
        assert data.pack_date == "2024-12-01"
        assert data.exp_date == "2025-01-01"

    def test_barcode_fields(self):
        data = normalize_form(
            {"barcode_type": "EAN13", "barcode_value": " 590123412345 ", "barcode_height": "0"}
        )
        assert data.barcode.type is BarcodeType.EAN13
        assert data.barcode.value == "590123412345"
        assert data.barcode.height_px == 1

    def test_unknown_barcode_type_is_code128(self):
        assert normalize_form({"barcode_type": "qr"}).barcode.type is BarcodeType.CODE128


def test_product_key_ignores_case_and_spaces():
    assert make_product_key(" Soap", "Lavender ") == "soap|lavender"
    assert make_product_key("soap", "") == "soap|"


def test_to_latin_digits():
    assert to_latin_digits("১২৩abc") == "123abc"
