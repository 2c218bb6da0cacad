"""
Dependencies для FastAPI эндпоинтов.

Хранилище, репозитории, сервис этикеток и проверка пароля
для опасных действий.
"""

import secrets
from functools import lru_cache

from fastapi import Depends, HTTPException, status

from pricetag.config import Settings, get_settings
from pricetag.models.label_types import BarcodeMode
from pricetag.repositories.product_repo import ProductRepository
from pricetag.repositories.settings_store import SettingsStore
from pricetag.repositories.storage import JSONStore, create_store
from pricetag.services.error_messages import WRONG_PASSWORD
from pricetag.services.label_service import LabelService


@lru_cache
def _store_for(backend: str, redis_url: str, prefix: str) -> JSONStore:
    return create_store(backend, redis_url=redis_url, prefix=prefix)


def get_store(settings: Settings = Depends(get_settings)) -> JSONStore:
    """Dependency для получения JSON-хранилища (одно на процесс)."""
    return _store_for(settings.storage_backend, settings.redis_url, settings.storage_prefix)


def get_settings_store(
    store: JSONStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> SettingsStore:
    """Dependency для получения SettingsStore."""
    return SettingsStore(store, default_barcode_mode=BarcodeMode(settings.default_barcode_mode))


def get_product_repo(store: JSONStore = Depends(get_store)) -> ProductRepository:
    """Dependency для получения ProductRepository."""
    return ProductRepository(store)


def get_label_service(
    store: JSONStore = Depends(get_store),
    settings_store: SettingsStore = Depends(get_settings_store),
) -> LabelService:
    """Dependency для получения LabelService."""
    return LabelService(store, settings_store)


def check_password(password: str, settings: Settings) -> None:
    """
    Проверка пароля для удаления и сброса.

    Raises:
        HTTPException 403: Если пароль неверный
    """
    if not secrets.compare_digest(password.encode(), settings.reset_password.encode()):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=WRONG_PASSWORD.to_dict(),
        )
