"""
Репозиторий сохранённых товаров.

Товары хранятся массивом под ключом lg_products, последний использованный -
под lg_last_product_id. Товар создаётся только явным сохранением
и удаляется только явным удалением или очисткой.
"""

import logging
import time
from typing import Any
from uuid import uuid4

from pydantic import ValidationError

from pricetag.config import LABEL
from pricetag.models.label_types import LabelData
from pricetag.models.schemas import ProductFormResponse, ProductRecord
from pricetag.repositories.storage import JSONStore, StorageKeys

logger = logging.getLogger(__name__)


class ProductRepository:
    """Репозиторий для работы с сохранёнными товарами."""

    def __init__(self, store: JSONStore):
        self.store = store

    def _read(self) -> tuple[list[ProductRecord], list[Any]]:
        """
        Товары и нераспознанные записи.

        Нераспознанные записи не показываются, но сохраняются при записи списка.
        """
        items = self.store.get(StorageKeys.PRODUCTS, [])
        if not isinstance(items, list):
            logger.warning("[Products] Список товаров испорчен, считаем пустым")
            return [], []

        products: list[ProductRecord] = []
        broken: list[Any] = []
        for item in items:
            try:
                products.append(ProductRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(f"[Products] Пропущена испорченная запись: {e}")
                broken.append(item)
        return products, broken

    def _load(self) -> list[ProductRecord]:
        return self._read()[0]

    def _save(self, products: list[ProductRecord], broken: list[Any]) -> None:
        self.store.set(StorageKeys.PRODUCTS, [p.model_dump() for p in products] + broken)

    def get_all(self, search: str | None = None) -> list[ProductRecord]:
        """
        Товары, новые сверху.

        Args:
            search: Подстрока для поиска по "название вариация" (без учёта регистра)

        Returns:
            Список товаров
        """
        term = (search or "").strip().lower()
        products = [
            p for p in self._load() if term in f"{p.name} {p.variation}".lower()
        ]
        return sorted(products, key=lambda p: p.created_at, reverse=True)

    def get(self, product_id: str) -> ProductRecord | None:
        """Товар по ID или None."""
        for product in self._load():
            if product.id == product_id:
                return product
        return None

    def save_from_label(self, data: LabelData, qty_text: str = "", price_text: str = "") -> ProductRecord:
        """
        Сохранить товар из формы и сделать его последним использованным.

        Args:
            data: Нормализованные данные формы
            qty_text: Количество как ввёл пользователь
            price_text: Цена как ввёл пользователь

        Returns:
            Созданная запись
        """
        product = ProductRecord(
            id=uuid4().hex,
            name=data.name,
            variation=data.variation,
            qty=qty_text or str(data.qty),
            qty_unit=data.qty_unit,
            price=price_text or format(data.price, "f"),
            pack_date=data.pack_date,
            exp_date=data.exp_date,
            barcode=data.barcode.value,
            created_at=time.time_ns() // 1_000_000,
        )
        products, broken = self._read()
        products.append(product)
        self._save(products, broken)
        self.set_last_used(product.id)

        logger.info(
            f"[Products] Сохранён товар {product.id}: {product.name!r}",
            extra={"product_id": product.id},
        )
        return product

    def delete(self, product_id: str) -> bool:
        """
        Удалить товар.

        Returns:
            True если товар был удалён
        """
        products, broken = self._read()
        remaining = [p for p in products if p.id != product_id]
        if len(remaining) == len(products):
            return False

        self._save(remaining, broken)
        if self.last_used_id() == product_id:
            self.store.remove(StorageKeys.LAST_PRODUCT_ID)
        logger.info(f"[Products] Удалён товар {product_id}", extra={"product_id": product_id})
        return True

    def clear(self) -> int:
        """
        Удалить все товары.

        Returns:
            Количество удалённых товаров
        """
        count = len(self._load())
        self.store.remove(StorageKeys.PRODUCTS)
        self.store.remove(StorageKeys.LAST_PRODUCT_ID)
        logger.info(f"[Products] Удалены все товары ({count})")
        return count

    def last_used_id(self) -> str | None:
        value = self.store.get(StorageKeys.LAST_PRODUCT_ID)
        return str(value) if value else None

    def set_last_used(self, product_id: str) -> None:
        self.store.set(StorageKeys.LAST_PRODUCT_ID, product_id)

    def last_used(self) -> ProductRecord | None:
        """Последний использованный товар (для автозаполнения формы)."""
        product_id = self.last_used_id()
        return self.get(product_id) if product_id else None

    def to_form(self, product: ProductRecord) -> ProductFormResponse:
        """
        Значения формы для товара.

        Единица не из списка предустановленных -> "custom" + свой текст.
        """
        unit = product.qty_unit
        custom = ""
        if unit and unit not in LABEL.PRESET_UNITS:
            unit, custom = LABEL.CUSTOM_UNIT, product.qty_unit
        return ProductFormResponse(
            product_id=product.id,
            name=product.name,
            variation=product.variation,
            qty=product.qty or "1",
            qty_unit=unit or LABEL.PRESET_UNITS[0],
            qty_unit_custom=custom,
            price=product.price,
            pack_date=product.pack_date,
            exp_date=product.exp_date,
            barcode_value=product.barcode,
        )
