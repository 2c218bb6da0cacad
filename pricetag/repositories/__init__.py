"""
Репозитории поверх JSON-хранилища.

Repository Pattern обеспечивает:
- Абстракцию доступа к данным (память процесса или Redis)
- Централизованную логику миграции старых форматов
- Упрощённое тестирование
"""

from pricetag.repositories.product_repo import ProductRepository
from pricetag.repositories.settings_store import SettingsStore
from pricetag.repositories.storage import MemoryJSONStore, RedisJSONStore, create_store

__all__ = [
    "ProductRepository",
    "SettingsStore",
    "MemoryJSONStore",
    "RedisJSONStore",
    "create_store",
]
