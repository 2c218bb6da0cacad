"""
Хранилище настроек пользователя (ключ lg_settings).

Настройки хранятся одним JSON-документом. Каждое изменение - merge-patch
поверх текущего документа: ключи, о которых операция не знает, сохраняются.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from pricetag.config import LABEL
from pricetag.models.label_types import (
    BarcodeMode,
    BarcodeSpec,
    FontSizes,
    LabelData,
    LabelSize,
    ShowFields,
)
from pricetag.models.schemas import (
    BarcodeSettings,
    FontSettings,
    ShowSettings,
    StoredSettings,
)
from pricetag.repositories.storage import JSONStore, StorageKeys

logger = logging.getLogger(__name__)

# Ключи формата v1, которые заменяются новыми при записи
LEGACY_KEYS = ("bizName", "labelSize", "priceMode", "boldTextActive")
LEGACY_NESTED_KEYS = ("biz", "pack", "exp")

# Пресеты для популярных принтеров
PRESETS: dict[str, dict[str, Any]] = {
    # Шрифты подобраны по образцу этикетки Rongta 38x25
    "rongta_38x25": {
        "label_size": "38x25",
        "fonts": {
            "business": 7,
            "name": 6,
            "variation": 6,
            "qty": 10,
            "price": 8,
            "pack_date": 9,
            "exp_date": 10,
        },
        "barcode": {"height": 23},
    },
    # Только размер рулона
    "rongta_38x25_size": {"label_size": "38x25"},
}


class UnknownPresetError(LookupError):
    """Пресет с таким именем не существует."""


class InvalidSettingsError(ValueError):
    """Изменение делает документ настроек невалидным."""

    def __init__(self, fields: list[str]):
        super().__init__(f"Невалидные поля настроек: {', '.join(fields)}")
        self.fields = fields


def merge_patch(target: Any, patch: Any) -> Any:
    """
    JSON Merge Patch (RFC 7386).

    Вложенные словари сливаются, None удаляет ключ, остальное заменяется.

    Args:
        target: Исходный документ
        patch: Изменения

    Returns:
        Новый документ (исходный не изменяется)
    """
    if not isinstance(patch, Mapping):
        return patch

    result = dict(target) if isinstance(target, Mapping) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = merge_patch(result.get(key), value)
    return result


def _strip_legacy(document: dict[str, Any]) -> dict[str, Any]:
    """Убирает ключи v1 (их значения уже перенесены в новые)."""
    cleaned = {k: v for k, v in document.items() if k not in LEGACY_KEYS}
    for section in ("show", "fonts"):
        if isinstance(cleaned.get(section), Mapping):
            cleaned[section] = {
                k: v for k, v in cleaned[section].items() if k not in LEGACY_NESTED_KEYS
            }
    return cleaned


def _drop_path(document: Any, loc: tuple) -> Any:
    """
    Убирает из документа значение по пути ошибки валидации.

    Удаляется самый глубокий существующий ключ пути. Соседние ключи не трогаются.
    """
    if not loc or not isinstance(document, Mapping) or loc[0] not in document:
        return document
    result = dict(document)
    key = loc[0]
    if len(loc) > 1 and isinstance(result[key], Mapping):
        nested = _drop_path(result[key], loc[1:])
        if nested != result[key]:
            result[key] = nested
            return result
    del result[key]
    return result


def _error_fields(error: ValidationError) -> list[str]:
    return [".".join(str(part) for part in item["loc"]) for item in error.errors()]


class SettingsStore:
    """
    Настройки отображения, штрихкода и размера этикетки.

    Загрузка никогда не падает: испорченное поле -> его значение по умолчанию,
    остальные поля документа сохраняются.
    """

    # Сколько раз подряд сбрасываются невалидные поля при загрузке
    MAX_REPAIR_PASSES = 5

    def __init__(
        self,
        store: JSONStore,
        default_barcode_mode: BarcodeMode = BarcodeMode.PER_PRODUCT,
    ):
        self.store = store
        self.default_barcode_mode = BarcodeMode(default_barcode_mode)

    def _raw(self) -> dict[str, Any]:
        document = self.store.get(StorageKeys.SETTINGS, {})
        if not isinstance(document, dict):
            logger.warning("[Settings] Документ настроек не является объектом, используем умолчания")
            return {}
        return document

    def _with_default_mode(self, document: Mapping[str, Any]) -> dict[str, Any]:
        barcode = document.get("barcode")
        if not isinstance(barcode, Mapping) or "mode" not in barcode:
            return merge_patch(document, {"barcode": {"mode": self.default_barcode_mode.value}})
        return dict(document)

    def _repair(self, document: Mapping[str, Any]) -> tuple[dict[str, Any], StoredSettings]:
        """
        Валидирует документ, сбрасывая невалидные поля по одному.

        Returns:
            (исправленный документ, настройки)
        """
        current = dict(document)
        for _ in range(self.MAX_REPAIR_PASSES):
            try:
                return current, StoredSettings.model_validate(self._with_default_mode(current))
            except ValidationError as e:
                repaired = current
                for item in e.errors():
                    repaired = _drop_path(repaired, tuple(item["loc"]))
                if repaired == current:
                    break
                logger.warning(
                    f"[Settings] Невалидные поля сброшены к умолчаниям: {_error_fields(e)}"
                )
                current = repaired

        logger.warning("[Settings] Документ настроек не исправить, используем умолчания")
        return {}, StoredSettings(barcode=BarcodeSettings(mode=self.default_barcode_mode))

    def load(self) -> StoredSettings:
        """
        Текущие настройки.

        Пропущенные ключи заполняются умолчаниями, формат v1 мигрируется.
        """
        return self._repair(self._raw())[1]

    def patch(self, changes: Mapping[str, Any]) -> StoredSettings:
        """
        Применить merge-patch к документу настроек.

        Args:
            changes: Изменения (None удаляет ключ -> значение по умолчанию)

        Returns:
            Настройки после изменения

        Raises:
            InvalidSettingsError: Если изменение невалидно (документ не меняется)
        """
        base, _ = self._repair(self._raw())
        merged = merge_patch(base, changes)
        try:
            settings = StoredSettings.model_validate(self._with_default_mode(merged))
        except ValidationError as e:
            logger.info(f"[Settings] Изменение отклонено: {_error_fields(e)}")
            raise InvalidSettingsError(_error_fields(e)) from e

        document = merge_patch(_strip_legacy(merged), settings.model_dump(mode="json"))
        self.store.set(StorageKeys.SETTINGS, document)
        logger.debug(f"[Settings] Обновлены ключи: {sorted(changes)}")
        return settings

    def save_display(self, data: LabelData) -> StoredSettings:
        """Сохранить видимость полей, кегли и название организации."""
        return self.patch(
            {
                "show": data.show.to_dict(),
                "fonts": data.fonts.to_dict(),
                "business_name": data.business_name,
            }
        )

    def save_barcode(self, data: LabelData) -> StoredSettings:
        """Сохранить размер этикетки, тип и высоту штрихкода."""
        return self.patch(
            {
                "label_size": str(data.label_size),
                "barcode": {"type": data.barcode.type.value, "height": data.barcode.height_px},
            }
        )

    def remember_form(self, data: LabelData) -> StoredSettings:
        """
        Запомнить настройки из формы при каждом изменении.

        Товарные поля (название, цена, даты, баркод) не сохраняются.
        """
        return self.patch(
            {
                "price_mode": data.price_mode.value,
                "label_size": str(data.label_size),
                "barcode": {"type": data.barcode.type.value, "height": data.barcode.height_px},
            }
        )

    def reset(self, section: str = "all") -> StoredSettings:
        """
        Сброс настроек к умолчаниям.

        Args:
            section: "display" (видимость и кегли, название организации остаётся),
                "barcode" (размер и штрихкод) или "all" (весь документ)

        Returns:
            Настройки после сброса
        """
        if section == "display":
            settings = self.patch(
                {"show": ShowSettings().model_dump(), "fonts": FontSettings().model_dump()}
            )
        elif section == "barcode":
            defaults = BarcodeSettings()
            settings = self.patch(
                {
                    "label_size": LABEL.DEFAULT_LABEL_SIZE,
                    "barcode": {"type": defaults.type.value, "height": defaults.height},
                }
            )
        else:
            self.store.remove(StorageKeys.SETTINGS)
            settings = self.load()

        logger.info(f"[Settings] Сброс настроек: {section}")
        return settings

    def toggle_bold(self) -> bool:
        """Переключить жирный текст. Returns: новое состояние."""
        bold = not self.load().bold_text
        self.patch({"bold_text": bold})
        return bold

    def apply_preset(self, name: str) -> StoredSettings:
        """
        Применить пресет настроек.

        Raises:
            UnknownPresetError: Если пресета нет
        """
        preset = PRESETS.get(name)
        if preset is None:
            raise UnknownPresetError(name)
        logger.info(f"[Settings] Применён пресет {name}")
        return self.patch(preset)

    def label_defaults(self, settings: StoredSettings | None = None) -> LabelData:
        """
        LabelData с сохранёнными настройками - база для нормализации формы.
        """
        settings = settings or self.load()
        return LabelData(
            price_mode=settings.price_mode,
            label_size=LabelSize.parse(settings.label_size),
            show=ShowFields(**settings.show.model_dump()),
            fonts=FontSizes(**settings.fonts.model_dump()),
            business_name=settings.business_name,
            barcode=BarcodeSpec(type=settings.barcode.type, height_px=settings.barcode.height),
            bold_text=settings.bold_text,
        )
