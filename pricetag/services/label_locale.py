# pricetag/services/label_locale.py
"""
Язык подписей этикетки и меню единиц измерения.

Язык определяется по содержимому полей (бенгальские буквы или цифры),
а не по настройке: подписи меняются прямо во время набора.
Ничего не кэшируется - чистые функции от текущих значений.
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

from pricetag.config import LABEL
from pricetag.models.label_types import LabelData, Language, NumeralSystem
from pricetag.services.normalizer import BENGALI_DIGITS

_BENGALI_LETTERS = re.compile(r"[অ-হ]")
_BENGALI_DIGIT = re.compile(r"[০-৯]")
_LATIN_DIGIT = re.compile(r"[0-9]")
_TO_BENGALI = str.maketrans("0123456789", BENGALI_DIGITS)


@dataclass(frozen=True)
class CaptionSet:
    """Подписи полей на выбранном языке."""

    qty: str
    price: str
    pack: str
    exp: str
    business: str


CAPTIONS: dict[Language, CaptionSet] = {
    Language.ENGLISH: CaptionSet(
        qty="Qty",
        price="Price",
        pack="Pckg",
        exp="EXP",
        business="Business",
    ),
    Language.BENGALI: CaptionSet(
        qty="পরিমাণ",
        price="দাম",
        pack="প্যাকিং",
        exp="মেয়াদ",
        business="ব্যবসা",
    ),
}

# Подписи единиц: значение всегда каноничное (бенгальское)
UNIT_CAPTIONS: dict[Language, dict[str, str]] = {
    Language.BENGALI: {unit: unit for unit in LABEL.PRESET_UNITS},
    Language.ENGLISH: {
        "গ্রাম": "Gram",
        "কেজি": "Kilogram",
        "পিস": "Piece",
        "লিটার": "Liter",
        "মিলি": "Milliliter",
    },
}
CUSTOM_UNIT_CAPTION = "Custom…"


def detect_language(*texts: str) -> Language:
    """
    Язык по содержимому полей.

    Любая бенгальская буква или цифра в любом поле -> бенгальский,
    иначе английский.
    """
    joined = "".join(t or "" for t in texts)
    if _BENGALI_LETTERS.search(joined) or _BENGALI_DIGIT.search(joined):
        return Language.BENGALI
    return Language.ENGLISH


def language_for(data: LabelData) -> Language:
    """Язык подписей для нормализованной этикетки."""
    return detect_language(
        data.name,
        data.variation,
        display_number(data.qty, data.numerals),
        display_number(data.price, data.numerals),
    )


def captions_for(language: Language) -> CaptionSet:
    return CAPTIONS[language]


def detect_numeral_system(value: str) -> Literal["bengali", "english", "mixed"]:
    """
    Система цифр в поле количества.

    Бенгальские цифры имеют приоритет; ни одной цифры -> "mixed".
    """
    if _BENGALI_DIGIT.search(value or ""):
        return "bengali"
    if _LATIN_DIGIT.search(value or ""):
        return "english"
    return "mixed"


def localize_digits(text: str, numerals: NumeralSystem) -> str:
    """Латинские цифры -> бенгальские, если пользователь вводил бенгальскими."""
    if numerals is NumeralSystem.BENGALI:
        return text.translate(_TO_BENGALI)
    return text


def display_number(value: object, numerals: NumeralSystem) -> str:
    """Число для вывода на этикетке в нужной системе цифр."""
    text = format(value, "f") if isinstance(value, Decimal) else str(value)
    return localize_digits(text, numerals)


@dataclass(frozen=True)
class UnitOption:
    value: str
    text: str


@dataclass(frozen=True)
class UnitMenu:
    """Меню выбора единицы измерения."""

    options: list[UnitOption]
    selected: str


def unit_menu(qty_text: str, current: str | None = None) -> UnitMenu:
    """
    Пересобирает список единиц под систему цифр в поле количества.

    Значения опций не меняются, меняются только подписи.
    Текущий выбор сохраняется, если он есть в новом списке.

    Args:
        qty_text: Текст поля количества
        current: Текущее выбранное значение

    Returns:
        UnitMenu с опциями и выбранным значением
    """
    language = (
        Language.BENGALI if detect_numeral_system(qty_text) == "bengali" else Language.ENGLISH
    )
    captions = UNIT_CAPTIONS[language]
    options = [UnitOption(value=unit, text=captions[unit]) for unit in LABEL.PRESET_UNITS]
    options.append(UnitOption(value=LABEL.CUSTOM_UNIT, text=CUSTOM_UNIT_CAPTION))

    values = {option.value for option in options}
    selected = current if current in values else options[0].value
    return UnitMenu(options=options, selected=selected)
