# pricetag/models/label_types.py
"""
Типы данных движка этикеток.

Все структуры неизменяемые: один LabelData живёт ровно один проход рендера.
"""

import re
from dataclasses import dataclass, field, fields, replace
from decimal import Decimal
from enum import Enum

from pricetag.config import LABEL


class LabelField(str, Enum):
    """Поля этикетки, которые можно включать/выключать."""

    NAME = "name"
    VARIATION = "variation"
    QTY = "qty"
    PRICE = "price"
    BUSINESS = "business"
    PACK_DATE = "pack_date"
    EXP_DATE = "exp_date"


class BarcodeType(str, Enum):
    """Символики штрихкода."""

    CODE128 = "code128"
    EAN13 = "ean13"
    UPC = "upc"

    @classmethod
    def parse(cls, value: object) -> "BarcodeType":
        """Неизвестный тип -> Code128."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.CODE128


class BarcodeMode(str, Enum):
    """Стратегия продолжения баркодов."""

    PER_PRODUCT = "per_product"  # Один баркод на товар, копии одинаковые
    SEQUENTIAL = "sequential"  # Числовой баркод растёт на каждой копии


class PriceMode(str, Enum):
    """Цена с налогом или без."""

    INC = "inc"
    EXC = "exc"


class Language(str, Enum):
    """Язык подписей на этикетке."""

    ENGLISH = "english"
    BENGALI = "bengali"


class NumeralSystem(str, Enum):
    """Система цифр, которой пользователь ввёл количество/цену."""

    LATIN = "latin"
    BENGALI = "bengali"


@dataclass(frozen=True)
class LabelSize:
    """Физический размер этикетки в мм."""

    width_mm: float
    height_mm: float

    _PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*[xX×]\s*(\d+(?:\.\d+)?)\s*$")

    @classmethod
    def parse(cls, value: object, default: str = LABEL.DEFAULT_LABEL_SIZE) -> "LabelSize":
        """
        Разбор строки вида "38x25".

        Args:
            value: Строка размера (или готовый LabelSize)
            default: Размер на случай мусора во входе

        Returns:
            LabelSize
        """
        if isinstance(value, LabelSize):
            return value
        match = cls._PATTERN.match(str(value or ""))
        if not match:
            match = cls._PATTERN.match(default)
        width, height = float(match.group(1)), float(match.group(2))
        if width <= 0 or height <= 0:
            return cls.parse(default)
        return cls(width, height)

    @property
    def width_px(self) -> float:
        return LABEL.mm_to_pixels(self.width_mm)

    @property
    def height_px(self) -> float:
        return LABEL.mm_to_pixels(self.height_mm)

    def __str__(self) -> str:
        return f"{self.width_mm:g}x{self.height_mm:g}"


@dataclass(frozen=True)
class ShowFields:
    """Какие поля показывать на этикетке."""

    name: bool = True
    variation: bool = True
    qty: bool = True
    price: bool = True
    business: bool = True
    pack_date: bool = True
    exp_date: bool = True

    def is_on(self, label_field: LabelField) -> bool:
        return bool(getattr(self, label_field.value))

    def to_dict(self) -> dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class FontSizes:
    """Кегль (px) для каждого поля."""

    name: int = LABEL.DEFAULT_FONTS["name"]
    variation: int = LABEL.DEFAULT_FONTS["variation"]
    qty: int = LABEL.DEFAULT_FONTS["qty"]
    price: int = LABEL.DEFAULT_FONTS["price"]
    business: int = LABEL.DEFAULT_FONTS["business"]
    pack_date: int = LABEL.DEFAULT_FONTS["pack_date"]
    exp_date: int = LABEL.DEFAULT_FONTS["exp_date"]

    def get(self, label_field: LabelField) -> int:
        return getattr(self, label_field.value)

    def updated(self, sizes: dict[LabelField, int]) -> "FontSizes":
        """Копия с заменёнными кеглями."""
        return replace(self, **{k.value: v for k, v in sizes.items()})

    def to_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class BarcodeSpec:
    """Параметры штрихкода этикетки."""

    type: BarcodeType = BarcodeType.CODE128
    value: str = ""
    height_px: int = LABEL.DEFAULT_BARCODE_HEIGHT


@dataclass(frozen=True)
class LabelData:
    """Нормализованные данные одной этикетки."""

    name: str = ""
    variation: str = ""
    qty: int = 1
    qty_unit: str = LABEL.PRESET_UNITS[0]
    price: Decimal = Decimal("0")
    price_mode: PriceMode = PriceMode.INC
    pack_date: str = ""  # ISO yyyy-mm-dd или ""
    exp_date: str = ""
    label_count: int = 1
    label_size: LabelSize = field(default_factory=lambda: LabelSize.parse(LABEL.DEFAULT_LABEL_SIZE))
    show: ShowFields = field(default_factory=ShowFields)
    fonts: FontSizes = field(default_factory=FontSizes)
    business_name: str = ""
    barcode: BarcodeSpec = field(default_factory=BarcodeSpec)
    bold_text: bool = False
    numerals: NumeralSystem = NumeralSystem.LATIN

    @property
    def product_key(self) -> str:
        return make_product_key(self.name, self.variation)

    def with_barcode_value(self, value: str) -> "LabelData":
        """Копия с проставленным значением баркода."""
        return replace(self, barcode=replace(self.barcode, value=value))


def make_product_key(name: str, variation: str) -> str:
    """
    Ключ товара для стабильности автобаркода.

    Регистр и крайние пробелы не влияют на ключ.
    """
    return f"{(name or '').strip().lower()}|{(variation or '').strip().lower()}"