"""
API эндпоинты для настроек этикетки.

Видимость полей, кегли, название организации, размер и штрихкод.
Все изменения - merge-patch поверх сохранённого документа.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from pricetag.api.dependencies import check_password, get_label_service, get_settings_store
from pricetag.config import Settings, get_settings
from pricetag.models.schemas import (
    BoldToggleResponse,
    LabelFormRequest,
    ResetSettingsRequest,
    StoredSettings,
)
from pricetag.repositories.settings_store import (
    PRESETS,
    InvalidSettingsError,
    SettingsStore,
    UnknownPresetError,
)
from pricetag.services.error_messages import invalid_settings, unknown_preset
from pricetag.services.label_service import LabelService

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=StoredSettings)
def get_preferences(store: SettingsStore = Depends(get_settings_store)) -> StoredSettings:
    """Текущие настройки (с умолчаниями для пропущенных ключей)."""
    return store.load()


@router.patch("", response_model=StoredSettings)
def patch_preferences(
    changes: dict[str, Any] = Body(...),
    store: SettingsStore = Depends(get_settings_store),
) -> StoredSettings:
    """
    Частичное обновление настроек (JSON Merge Patch).

    null удаляет ключ - значение возвращается к умолчанию.
    Невалидное изменение -> 422, документ не меняется.
    """
    try:
        return store.patch(changes)
    except InvalidSettingsError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=invalid_settings(e.fields).to_dict(),
        )


@router.post("/display", response_model=StoredSettings)
def save_display(
    form: LabelFormRequest,
    service: LabelService = Depends(get_label_service),
) -> StoredSettings:
    """Сохранить видимость полей, кегли и название организации из формы."""
    return service.save_display(form.form_values())


@router.post("/barcode", response_model=StoredSettings)
def save_barcode(
    form: LabelFormRequest,
    service: LabelService = Depends(get_label_service),
) -> StoredSettings:
    """Сохранить размер этикетки, тип и высоту штрихкода из формы."""
    return service.save_barcode(form.form_values())


@router.post("/reset", response_model=StoredSettings)
def reset_preferences(
    body: ResetSettingsRequest,
    store: SettingsStore = Depends(get_settings_store),
    settings: Settings = Depends(get_settings),
) -> StoredSettings:
    """
    Сброс настроек.

    section: display | barcode | all. Требует пароль.
    """
    check_password(body.password, settings)
    return store.reset(body.section)


@router.post("/bold", response_model=BoldToggleResponse)
def toggle_bold(store: SettingsStore = Depends(get_settings_store)) -> BoldToggleResponse:
    """Переключить жирный текст на этикетке."""
    return BoldToggleResponse(bold_text=store.toggle_bold())


@router.post("/presets/{name}", response_model=StoredSettings)
def apply_preset(
    name: str,
    store: SettingsStore = Depends(get_settings_store),
) -> StoredSettings:
    """Применить пресет (например, rongta_38x25)."""
    try:
        return store.apply_preset(name)
    except UnknownPresetError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=unknown_preset(name, sorted(PRESETS)).to_dict(),
        )
