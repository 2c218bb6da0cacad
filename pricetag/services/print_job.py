"""
Граница печати.

Страница PDF (и @page для браузерной печати) ровно по размеру этикетки,
без полей: термопринтер режет по этикетке, а не по A4.
"""

from dataclasses import dataclass, field

from pricetag.models.label_types import LabelSize
from pricetag.services.label_painter import paint_pdf
from pricetag.services.label_renderer import LabelDescriptor


@dataclass(frozen=True)
class PageSetup:
    """Размер страницы печати."""

    width_mm: float
    height_mm: float

    @classmethod
    def for_size(cls, size: LabelSize) -> "PageSetup":
        return cls(size.width_mm, size.height_mm)

    def css(self) -> str:
        """CSS-директива @page для печати из браузера."""
        return f"@page{{ size: {self.width_mm:g}mm {self.height_mm:g}mm; margin:0 }}"

    def header_value(self) -> str:
        """Значение заголовка X-Page-Size, например "38x25mm"."""
        return f"{self.width_mm:g}x{self.height_mm:g}mm"


@dataclass
class PrintJob:
    """
    Задание на печать: все копии одного прохода.

    Одна страница PDF = одна этикетка.
    """

    page: PageSetup
    labels: list[LabelDescriptor] = field(default_factory=list)
    next_barcode: str | None = None  # Следующее значение счётчика после печати

    @property
    def page_count(self) -> int:
        return len(self.labels)

    def to_pdf(self) -> bytes:
        return paint_pdf(self.labels)
