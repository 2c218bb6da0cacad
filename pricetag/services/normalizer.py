# pricetag/services/normalizer.py
"""
Нормализация сырых данных формы в LabelData.

Правила:
- Числа разбираются мягко (как parseInt в браузере), с безопасным fallback
- Количество и число этикеток не меньше 1, цена не меньше 0
- Бенгальские цифры (০-৯) принимаются наравне с латинскими
- Даты приводятся к ISO yyyy-mm-dd, мусор -> кэш поля или ""

Ошибки пользовательского ввода никогда не пробрасываются наружу:
этикетку сразу видит человек перед печатью.
"""

import logging
import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from pricetag.config import LABEL
from pricetag.models.label_types import (
    BarcodeSpec,
    BarcodeType,
    FontSizes,
    LabelData,
    LabelField,
    LabelSize,
    NumeralSystem,
    PriceMode,
    ShowFields,
)

logger = logging.getLogger(__name__)

BENGALI_DIGITS = "০১২৩৪৫৬৭৮৯"
_TO_LATIN = str.maketrans(BENGALI_DIGITS, "0123456789")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_DMY_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")

# Старые ключи формы (camelCase из браузерной версии) -> новые
_LEGACY_SHOW_KEYS = {"biz": "business", "pack": "pack_date", "exp": "exp_date"}


def to_latin_digits(text: str) -> str:
    """Заменяет бенгальские цифры латинскими."""
    return text.translate(_TO_LATIN)


def has_bengali_digits(text: str) -> bool:
    return any(ch in BENGALI_DIGITS for ch in text)


def _clamp(number: int, minimum: int, maximum: int | None) -> int:
    number = max(minimum, number)
    return min(maximum, number) if maximum is not None else number


def parse_int(
    value: Any,
    fallback: int = 1,
    minimum: int = 1,
    maximum: int | None = None,
) -> int:
    """
    Целое число из ввода формы.

    Берётся ведущее целое ("12 шт" -> 12, "1.5" -> 1).
    Нечисловой ввод, бесконечность и числа длиннее MAX_INT_DIGITS -> fallback.

    Args:
        value: Сырое значение
        fallback: Значение при мусоре на входе
        minimum: Нижняя граница
        maximum: Верхняя граница (None - без ограничения)

    Returns:
        Целое число в [minimum, maximum]
    """
    if isinstance(value, bool):
        return _clamp(fallback, minimum, maximum)
    if isinstance(value, int):
        return _clamp(value, minimum, maximum)
    if isinstance(value, float):
        if not math.isfinite(value):
            return _clamp(fallback, minimum, maximum)
        return _clamp(int(value), minimum, maximum)

    match = _LEADING_INT.match(to_latin_digits(str(value or "")))
    if not match:
        return _clamp(fallback, minimum, maximum)
    digits = match.group(1).lstrip("+-").lstrip("0")
    if len(digits) > LABEL.MAX_INT_DIGITS:
        logger.debug(f"[Normalizer] Слишком длинное число ({len(digits)} цифр), берём {fallback}")
        return _clamp(fallback, minimum, maximum)
    return _clamp(int(match.group(1)), minimum, maximum)


def parse_price(value: Any) -> Decimal:
    """
    Неотрицательная цена.

    Мусор -> 0, отрицательное -> 0.
    """
    text = to_latin_digits(str(value if value is not None else "")).strip().replace(",", "")
    if not text:
        return Decimal("0")
    try:
        price = Decimal(text)
    except InvalidOperation:
        return Decimal("0")
    if not price.is_finite() or price < 0:
        return Decimal("0")
    return price


def clean_text(value: Any) -> str:
    """Обрезанный текст, None -> ""."""
    if value is None:
        return ""
    return str(value).strip()


def format_date(iso: str) -> str:
    """
    ISO yyyy-mm-dd -> dd/mm/yyyy.

    Нераспознанная строка возвращается как есть.
    """
    if not iso:
        return ""
    parts = str(iso).split("-")
    if len(parts) == 3:
        year, month, day = parts
        return f"{day.zfill(2)}/{month.zfill(2)}/{year}"
    return str(iso)


def normalize_date(value: Any, cached: str = "") -> str:
    """
    Дата из формы -> ISO yyyy-mm-dd.

    Принимает date/datetime, ISO-строку (нативный date-инпут) или dd/mm/yyyy.
    Невалидная дата (31/02/2025) считается мусором.

    Args:
        value: Сырое значение поля
        cached: Последнее валидное ISO-значение этого поля

    Returns:
        ISO-строка, cached или ""
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = to_latin_digits(clean_text(value))
    if not text:
        return ""

    match = _DMY_DATE.match(text)
    if match:
        day, month, year = match.groups()
    else:
        match = _ISO_DATE.match(text)
        if not match:
            return cached or ""
        year, month, day = match.groups()

    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        logger.debug(f"[Normalizer] Невалидная дата: {text!r}")
        return cached or ""


def resolve_unit(unit: Any, custom: Any) -> str:
    """
    Единица измерения.

    "custom" -> текст пользователя или "ইউনিট".
    """
    unit_text = clean_text(unit)
    if unit_text == LABEL.CUSTOM_UNIT:
        return clean_text(custom) or LABEL.CUSTOM_UNIT_FALLBACK
    return unit_text or LABEL.PRESET_UNITS[0]


def _flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "on", "yes")
    return bool(value)


def _legacy_keyed(raw: Mapping[str, Any] | None) -> dict[str, Any]:
    """Приводит ключи show/fonts старого формата (biz/pack/exp) к новым."""
    if not isinstance(raw, Mapping):
        return {}
    return {_LEGACY_SHOW_KEYS.get(key, key): value for key, value in raw.items()}


def normalize_show(raw: Mapping[str, Any] | None, defaults: ShowFields | None = None) -> ShowFields:
    """Флаги видимости с заполнением пропусков значениями по умолчанию."""
    base = defaults or ShowFields()
    flags = _legacy_keyed(raw)
    return ShowFields(
        **{f.value: _flag(flags.get(f.value), base.is_on(f)) for f in LabelField}
    )


def normalize_fonts(raw: Mapping[str, Any] | None, defaults: FontSizes | None = None) -> FontSizes:
    """Кегли полей: мусор -> значение по умолчанию, минимум 1px."""
    base = defaults or FontSizes()
    sizes = _legacy_keyed(raw)
    return FontSizes(
        **{
            f.value: parse_int(sizes.get(f.value), fallback=base.get(f), minimum=1)
            for f in LabelField
        }
    )


def normalize_form(
    raw: Mapping[str, Any],
    defaults: LabelData | None = None,
    date_cache: Mapping[str, str] | None = None,
) -> LabelData:
    """
    Собирает LabelData из сырых значений формы.

    Отображаемые настройки (show, fonts, размер, баркод), которых нет в форме,
    берутся из defaults - обычно это сохранённые настройки пользователя.

    Args:
        raw: Значения формы (строки, числа, флаги)
        defaults: Значения по умолчанию для пропущенных полей
        date_cache: Последние валидные ISO-даты {"pack_date": ..., "exp_date": ...}

    Returns:
        LabelData
    """
    base = defaults or LabelData()
    cache = date_cache or {}

    qty_raw = clean_text(raw.get("qty"))
    price_raw = clean_text(raw.get("price"))
    numerals = (
        NumeralSystem.BENGALI
        if has_bengali_digits(qty_raw) or has_bengali_digits(price_raw)
        else NumeralSystem.LATIN
    )

    try:
        price_mode = PriceMode(clean_text(raw.get("price_mode")) or base.price_mode.value)
    except ValueError:
        price_mode = base.price_mode

    barcode_type = raw.get("barcode_type")
    data = LabelData(
        name=clean_text(raw.get("name")),
        variation=clean_text(raw.get("variation")),
        qty=parse_int(qty_raw, fallback=1),
        qty_unit=resolve_unit(raw.get("qty_unit"), raw.get("qty_unit_custom")),
        price=parse_price(price_raw),
        price_mode=price_mode,
        pack_date=normalize_date(raw.get("pack_date"), cache.get("pack_date", "")),
        exp_date=normalize_date(raw.get("exp_date"), cache.get("exp_date", "")),
        label_count=parse_int(
            raw.get("label_count"), fallback=1, maximum=LABEL.MAX_LABEL_COUNT
        ),
        label_size=LabelSize.parse(raw.get("label_size") or base.label_size, str(base.label_size)),
        show=normalize_show(raw.get("show"), base.show),
        fonts=normalize_fonts(raw.get("fonts"), base.fonts),
        business_name=clean_text(
            raw["business_name"] if raw.get("business_name") is not None else base.business_name
        ),
        barcode=BarcodeSpec(
            type=BarcodeType.parse(barcode_type) if barcode_type else base.barcode.type,
            value=clean_text(raw.get("barcode_value")),
            height_px=parse_int(
                raw.get("barcode_height"), fallback=base.barcode.height_px, minimum=1
            ),
        ),
        bold_text=_flag(raw.get("bold_text"), base.bold_text),
        numerals=numerals,
    )
    return data
