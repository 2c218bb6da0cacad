"""
Pydantic схемы для API и сохраняемых документов.

Сохраняемые документы (StoredSettings, ProductRecord) принимают и старый
camelCase-формат браузерной версии (bizName, show.biz, qtyUnit, createdAt...).
"""

import logging
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from pricetag.config import LABEL
from pricetag.models.label_types import BarcodeMode, BarcodeType, PriceMode
from pricetag.services.normalizer import parse_int

logger = logging.getLogger(__name__)

SETTINGS_SCHEMA_VERSION = 2


# === Сохранённые настройки ===


class ShowSettings(BaseModel):
    """Видимость полей этикетки."""

    model_config = ConfigDict(extra="ignore")

    name: bool = True
    variation: bool = True
    qty: bool = True
    price: bool = True
    business: bool = Field(default=True, validation_alias=AliasChoices("business", "biz"))
    pack_date: bool = Field(default=True, validation_alias=AliasChoices("pack_date", "pack"))
    exp_date: bool = Field(default=True, validation_alias=AliasChoices("exp_date", "exp"))

    @field_validator("*", mode="before")
    @classmethod
    def null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class FontSettings(BaseModel):
    """Кегли полей (px)."""

    model_config = ConfigDict(extra="ignore")

    name: int = Field(default=LABEL.DEFAULT_FONTS["name"], ge=1)
    variation: int = Field(default=LABEL.DEFAULT_FONTS["variation"], ge=1)
    qty: int = Field(default=LABEL.DEFAULT_FONTS["qty"], ge=1)
    price: int = Field(default=LABEL.DEFAULT_FONTS["price"], ge=1)
    business: int = Field(
        default=LABEL.DEFAULT_FONTS["business"],
        ge=1,
        validation_alias=AliasChoices("business", "biz"),
    )
    pack_date: int = Field(
        default=LABEL.DEFAULT_FONTS["pack_date"],
        ge=1,
        validation_alias=AliasChoices("pack_date", "pack"),
    )
    exp_date: int = Field(
        default=LABEL.DEFAULT_FONTS["exp_date"],
        ge=1,
        validation_alias=AliasChoices("exp_date", "exp"),
    )

    @field_validator("*", mode="before")
    @classmethod
    def parse_size(cls, value: Any, info: ValidationInfo) -> int:
        """parseInt старой версии мог сохранить null (NaN) или строку."""
        default = cls.model_fields[info.field_name].default
        return parse_int(value, fallback=default, minimum=1)


class BarcodeSettings(BaseModel):
    """Настройки штрихкода."""

    model_config = ConfigDict(extra="ignore")

    type: BarcodeType = BarcodeType.CODE128
    height: int = Field(default=LABEL.DEFAULT_BARCODE_HEIGHT, ge=1)
    mode: BarcodeMode = BarcodeMode.PER_PRODUCT

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, value: Any) -> BarcodeType:
        return BarcodeType.parse(value)

    @field_validator("height", mode="before")
    @classmethod
    def parse_height(cls, value: Any) -> int:
        return parse_int(value, fallback=LABEL.DEFAULT_BARCODE_HEIGHT, minimum=1)

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls, value: Any) -> BarcodeMode:
        try:
            return BarcodeMode(value)
        except ValueError:
            return BarcodeMode.PER_PRODUCT


class StoredSettings(BaseModel):
    """
    Документ настроек (ключ lg_settings).

    Версия 1 - camelCase браузерной версии, мигрируется при загрузке.
    """

    model_config = ConfigDict(extra="ignore")

    schema_version: int = SETTINGS_SCHEMA_VERSION
    show: ShowSettings = Field(default_factory=ShowSettings)
    fonts: FontSettings = Field(default_factory=FontSettings)
    business_name: str = Field(default="", validation_alias=AliasChoices("business_name", "bizName"))
    label_size: str = Field(
        default=LABEL.DEFAULT_LABEL_SIZE,
        validation_alias=AliasChoices("label_size", "labelSize"),
    )
    price_mode: PriceMode = Field(
        default=PriceMode.INC,
        validation_alias=AliasChoices("price_mode", "priceMode"),
    )
    barcode: BarcodeSettings = Field(default_factory=BarcodeSettings)
    bold_text: bool = Field(default=False, validation_alias=AliasChoices("bold_text", "boldTextActive"))
    theme: Literal["dark", "light"] = "dark"

    @field_validator("schema_version", mode="before")
    @classmethod
    def current_version(cls, value: Any) -> int:
        return SETTINGS_SCHEMA_VERSION

    @field_validator("business_name", "label_size", mode="before")
    @classmethod
    def null_text(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return str(value).strip()

    @field_validator("price_mode", mode="before")
    @classmethod
    def parse_price_mode(cls, value: Any) -> PriceMode:
        try:
            return PriceMode(value)
        except ValueError:
            return PriceMode.INC


# === Товары ===


class ProductRecord(BaseModel):
    """
    Сохранённый товар (элемент массива lg_products).

    Количество и цена хранятся как ввёл пользователь (в том числе бенгальскими цифрами).
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    variation: str = ""
    qty: str = "1"
    qty_unit: str = Field(default="", validation_alias=AliasChoices("qty_unit", "qtyUnit"))
    price: str = ""
    pack_date: str = Field(default="", validation_alias=AliasChoices("pack_date", "packDate"))
    exp_date: str = Field(default="", validation_alias=AliasChoices("exp_date", "expDate"))
    barcode: str = ""
    created_at: int = Field(default=0, validation_alias=AliasChoices("created_at", "createdAt"))

    @field_validator(
        "name", "variation", "qty", "qty_unit", "price", "pack_date", "exp_date", "barcode",
        mode="before",
    )
    @classmethod
    def to_text(cls, value: Any, info: ValidationInfo) -> str:
        if value is None:
            return cls.model_fields[info.field_name].default
        return str(value)

    @field_validator("created_at", mode="before")
    @classmethod
    def to_epoch_ms(cls, value: Any) -> int:
        return parse_int(value, fallback=0, minimum=0)


class ProductListResponse(BaseModel):
    """Список товаров."""

    items: list[ProductRecord]
    total: int


class ProductFormResponse(BaseModel):
    """Значения формы для выбранного товара."""

    product_id: str
    name: str
    variation: str
    qty: str
    qty_unit: str
    qty_unit_custom: str = ""
    price: str
    pack_date: str
    exp_date: str
    barcode_value: str


# === Запросы ===


class LabelFormRequest(BaseModel):
    """
    Сырые значения формы этикетки.

    Типы нарочно мягкие: мусор во вводе нормализуется, а не отклоняется.
    Отсутствующие отображаемые настройки берутся из сохранённых.
    """

    name: str | None = None
    variation: str | None = None
    qty: str | int | float | None = None
    qty_unit: str | None = None
    qty_unit_custom: str | None = None
    price: str | int | float | None = None
    price_mode: str | None = None
    pack_date: str | None = None
    exp_date: str | None = None
    label_count: str | int | float | None = None
    label_size: str | None = None
    show: dict[str, Any] | None = None
    fonts: dict[str, Any] | None = None
    business_name: str | None = None
    barcode_type: str | None = None
    barcode_value: str | None = None
    barcode_height: str | int | float | None = None
    bold_text: bool | None = None

    # Последние валидные ISO-даты полей {"pack_date": ..., "exp_date": ...}
    date_cache: dict[str, str] | None = None

    def form_values(self) -> dict[str, Any]:
        """Значения для нормализатора (без служебных полей)."""
        return self.model_dump(exclude={"date_cache"}, exclude_none=True)


class PasswordRequest(BaseModel):
    """Подтверждение опасного действия паролем."""

    password: str = ""


class ResetSettingsRequest(PasswordRequest):
    """Сброс настроек."""

    section: Literal["display", "barcode", "all"] = "all"


# === Ответы ===


class UnitOptionItem(BaseModel):
    value: str
    text: str


class UnitOptionsResponse(BaseModel):
    """Меню единиц измерения."""

    options: list[UnitOptionItem]
    selected: str


class LabelPreviewResponse(BaseModel):
    """Превью прохода рендера."""

    labels: list[dict[str, Any]]
    count: int
    language: str
    captions: dict[str, str]
    barcode_value: str
    page_size: str
    page_css: str


class BoldToggleResponse(BaseModel):
    bold_text: bool
