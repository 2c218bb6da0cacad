"""Общие фикстуры тестов."""

import pytest
from fastapi.testclient import TestClient

from pricetag.api.dependencies import get_store
from pricetag.main import app
from pricetag.repositories.settings_store import SettingsStore
from pricetag.repositories.storage import MemoryJSONStore
from pricetag.services.label_service import LabelService

# Миллисекунды, последние 8 цифр - "71717123"
FIXED_NOW_MS = 1717171717123


@pytest.fixture
def store() -> MemoryJSONStore:
    """Пустое хранилище в памяти."""
    return MemoryJSONStore()


@pytest.fixture
def fixed_clock():
    """Часы, которые всегда показывают одно и то же время."""
    return lambda: FIXED_NOW_MS


@pytest.fixture
def settings_store(store) -> SettingsStore:
    return SettingsStore(store)


@pytest.fixture
def label_service(store, settings_store) -> LabelService:
    """Сервис этикеток поверх хранилища в памяти."""
    return LabelService(store, settings_store)


@pytest.fixture
def client(store):
    """TestClient с подменённым хранилищем."""
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
