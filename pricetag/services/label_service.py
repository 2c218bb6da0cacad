"""
Проход рендера: форма -> нормализация -> баркод -> раскладка -> этикетки.

Превью и печать отличаются только тем, что печать продвигает
счётчик последовательных баркодов.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pricetag.models.label_types import LabelData, Language
from pricetag.models.schemas import StoredSettings
from pricetag.repositories.settings_store import SettingsStore
from pricetag.repositories.storage import JSONStore
from pricetag.services.barcode_generator import BarcodeSymbolRenderer
from pricetag.services.barcode_resolver import BarcodeValueResolver, create_resolver
from pricetag.services.label_locale import CaptionSet, captions_for, language_for
from pricetag.services.label_painter import paint_png_bytes
from pricetag.services.label_renderer import LabelDescriptor, render_copies
from pricetag.services.normalizer import normalize_form
from pricetag.services.print_job import PageSetup, PrintJob

logger = logging.getLogger(__name__)


@dataclass
class RenderPass:
    """Результат одного прохода рендера."""

    data: LabelData
    labels: list[LabelDescriptor]
    language: Language
    captions: CaptionSet
    page: PageSetup

    @property
    def barcode_values(self) -> list[str]:
        return [label.barcode_value for label in self.labels]


class LabelService:
    """
    Сервис генерации этикеток.

    Стратегия баркодов выбирается на каждый проход из сохранённых настроек.
    """

    def __init__(
        self,
        store: JSONStore,
        settings_store: SettingsStore,
        symbols: BarcodeSymbolRenderer | None = None,
        clock: Callable[[], int] | None = None,
    ):
        self.store = store
        self.settings_store = settings_store
        self.symbols = symbols or BarcodeSymbolRenderer()
        self.clock = clock

    def build(
        self,
        form: Mapping[str, Any],
        date_cache: Mapping[str, str] | None = None,
        settings: StoredSettings | None = None,
    ) -> LabelData:
        """Нормализованные данные формы поверх сохранённых настроек."""
        defaults = self.settings_store.label_defaults(settings)
        return normalize_form(form, defaults, date_cache)

    def resolver_for(self, settings: StoredSettings) -> BarcodeValueResolver:
        return create_resolver(settings.barcode.mode, self.store, clock=self.clock)

    def _render(
        self,
        form: Mapping[str, Any],
        date_cache: Mapping[str, str] | None,
    ) -> tuple[RenderPass, BarcodeValueResolver]:
        settings = self.settings_store.load()
        data = self.build(form, date_cache, settings)

        # Размер и штрихкод из формы запоминаются сразу, как в живой форме
        self.settings_store.remember_form(data)

        resolver = self.resolver_for(settings)
        labels = render_copies(data, resolver, self.symbols)
        language = language_for(data)

        render_pass = RenderPass(
            data=data,
            labels=labels,
            language=language,
            captions=captions_for(language),
            page=PageSetup.for_size(data.label_size),
        )
        return render_pass, resolver

    def preview(
        self,
        form: Mapping[str, Any],
        date_cache: Mapping[str, str] | None = None,
    ) -> RenderPass:
        """
        Превью всех копий.

        Счётчики баркодов не продвигаются: повторное превью даёт те же значения.
        """
        render_pass, _ = self._render(form, date_cache)
        logger.debug(
            f"[Labels] Превью {len(render_pass.labels)} шт {render_pass.data.product_key!r}"
        )
        return render_pass

    def image(
        self,
        form: Mapping[str, Any],
        index: int = 0,
        scale: float = 1.0,
        date_cache: Mapping[str, str] | None = None,
    ) -> bytes:
        """
        PNG одной копии.

        Raises:
            IndexError: Если копии с таким номером нет
        """
        render_pass = self.preview(form, date_cache)
        if index < 0 or index >= len(render_pass.labels):
            raise IndexError(index)
        return paint_png_bytes(render_pass.labels[index], scale)

    def print_job(
        self,
        form: Mapping[str, Any],
        date_cache: Mapping[str, str] | None = None,
    ) -> PrintJob:
        """
        Задание на печать.

        После рендера стратегия фиксирует выданные значения
        (для последовательной - счётчик уходит на следующий номер).
        """
        render_pass, resolver = self._render(form, date_cache)
        next_value = resolver.commit(render_pass.data.product_key, render_pass.barcode_values)

        logger.info(
            f"[Labels] Печать {len(render_pass.labels)} шт {render_pass.page.header_value()} "
            f"{render_pass.data.product_key!r}",
            extra={
                "labels_count": len(render_pass.labels),
                "page_size": render_pass.page.header_value(),
                "next_barcode": next_value,
            },
        )
        return PrintJob(page=render_pass.page, labels=render_pass.labels, next_barcode=next_value)

    def save_display(self, form: Mapping[str, Any]) -> StoredSettings:
        """Сохранить настройки отображения из формы."""
        return self.settings_store.save_display(self.build(form))

    def save_barcode(self, form: Mapping[str, Any]) -> StoredSettings:
        """Сохранить настройки штрихкода из формы."""
        return self.settings_store.save_barcode(self.build(form))
