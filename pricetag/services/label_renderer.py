# pricetag/services/label_renderer.py
"""
Рендер этикетки в LabelDescriptor - дерево текстовых узлов и штрихкода.

Чистая функция от LabelData: никакого хранилища, часов или DOM.
Рисование на конкретной поверхности (PNG, PDF) - в label_painter.

Порядок узлов сверху вниз:
┌───────────────────┐
│   Организация     │  (всегда жирным)
│   Название        │
│   Вариация        │
│   Qty: 1 গ্রাম     │
│   Price: 120৳     │
│ Pckg: .. | EXP: ..│
│   ║║║║║║║║║║║║    │
└───────────────────┘
"""

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any

from pricetag.config import LABEL
from pricetag.models.label_types import LabelData, LabelField, Language
from pricetag.services.barcode_generator import (
    BarcodeSymbol,
    BarcodeSymbolRenderer,
    barcode_options,
)
from pricetag.services.barcode_resolver import BarcodeValueResolver
from pricetag.services.label_locale import (
    CaptionSet,
    captions_for,
    display_number,
    language_for,
    localize_digits,
)
from pricetag.services.layout_engine import LayoutResult, compute_layout
from pricetag.services.normalizer import format_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextNode:
    """Текстовый узел."""

    role: str
    text: str
    font_px: int
    bold: bool = False


@dataclass(frozen=True)
class RowNode:
    """Строка из нескольких текстовых узлов (даты)."""

    role: str
    children: tuple[TextNode, ...]


@dataclass(frozen=True)
class BarcodeNode:
    """Штрихкод."""

    symbol: BarcodeSymbol
    height_px: int
    role: str = "barcode"


@dataclass(frozen=True)
class PlaceholderNode:
    """Пустой узел вместо штрихкода, который не удалось сгенерировать."""

    role: str = "barcode"


LabelNode = TextNode | RowNode | BarcodeNode | PlaceholderNode


@dataclass(frozen=True)
class LabelDescriptor:
    """Готовая к отрисовке этикетка."""

    width_mm: float
    height_mm: float
    padding_px: int
    nodes: tuple[LabelNode, ...]
    language: Language
    barcode_value: str
    scale: float
    bold_text: bool = False

    @property
    def width_px(self) -> float:
        return LABEL.mm_to_pixels(self.width_mm)

    @property
    def height_px(self) -> float:
        return LABEL.mm_to_pixels(self.height_mm)

    def find(self, role: str) -> LabelNode | None:
        """Узел по роли (в том числе внутри строки дат)."""
        for node in self.nodes:
            if node.role == role:
                return node
            if isinstance(node, RowNode):
                for child in node.children:
                    if child.role == role:
                        return child
        return None

    def to_dict(self) -> dict[str, Any]:
        """Сериализация для API (JSON)."""
        nodes = []
        for node in self.nodes:
            item = asdict(node)
            item["kind"] = type(node).__name__.removesuffix("Node").lower()
            nodes.append(item)
        return {
            "width_mm": self.width_mm,
            "height_mm": self.height_mm,
            "width_px": round(self.width_px, 2),
            "height_px": round(self.height_px, 2),
            "padding_px": self.padding_px,
            "language": self.language.value,
            "barcode_value": self.barcode_value,
            "scale": round(self.scale, 4),
            "bold_text": self.bold_text,
            "nodes": nodes,
        }


def _date_text(iso: str, data: LabelData) -> str:
    if not iso:
        return LABEL.DATE_PLACEHOLDER
    return localize_digits(format_date(iso), data.numerals)


def label_texts(data: LabelData, captions: CaptionSet) -> dict[LabelField, str]:
    """
    Тексты полей с подписями.

    Args:
        data: Данные этикетки
        captions: Подписи на выбранном языке

    Returns:
        {поле: текст}
    """
    qty = display_number(data.qty, data.numerals)
    price = display_number(data.price, data.numerals)
    return {
        LabelField.NAME: data.name,
        LabelField.VARIATION: data.variation,
        LabelField.QTY: f"{captions.qty}: {qty} {data.qty_unit}".strip(),
        LabelField.PRICE: f"{captions.price}: {price}{LABEL.CURRENCY_SIGN}",
        LabelField.BUSINESS: data.business_name,
        LabelField.PACK_DATE: f"{captions.pack}: {_date_text(data.pack_date, data)}",
        LabelField.EXP_DATE: f"{captions.exp}: {_date_text(data.exp_date, data)}",
    }


def _draw_symbol(data: LabelData, symbols: BarcodeSymbolRenderer) -> BarcodeSymbol | None:
    """Штрихкод или None, если генерация не удалась."""
    value = data.barcode.value or LABEL.EMPTY_BARCODE_VALUE
    options = barcode_options(data.barcode.type, data.barcode.height_px)
    try:
        return symbols.draw(value, options)
    except Exception as e:
        # Невалидная пара тип/значение - этикетка рисуется без штрихкода
        logger.debug(f"[Render] Штрихкод {options.format} {value!r} не сгенерирован: {e}")
        return None


def _text_nodes(
    texts: dict[LabelField, str],
    layout: LayoutResult,
) -> list[LabelNode]:
    fonts = layout.fonts
    nodes: list[LabelNode] = []

    for label_field in (
        LabelField.BUSINESS,
        LabelField.NAME,
        LabelField.VARIATION,
        LabelField.QTY,
        LabelField.PRICE,
    ):
        if layout.is_visible(label_field):
            nodes.append(
                TextNode(
                    role=label_field.value,
                    text=texts[label_field],
                    font_px=fonts.get(label_field),
                    bold=label_field is LabelField.BUSINESS,
                )
            )

    parts: list[TextNode] = []
    for label_field in (LabelField.PACK_DATE, LabelField.EXP_DATE):
        if not layout.is_visible(label_field):
            continue
        if parts and layout.separator_font_px is not None:
            parts.append(
                TextNode(
                    role="separator",
                    text=LABEL.DATE_SEPARATOR,
                    font_px=layout.separator_font_px,
                )
            )
        parts.append(
            TextNode(role=label_field.value, text=texts[label_field], font_px=fonts.get(label_field))
        )
    if parts:
        nodes.append(RowNode(role="dates", children=tuple(parts)))

    return nodes


def render_label(
    data: LabelData,
    symbols: BarcodeSymbolRenderer | None = None,
) -> LabelDescriptor:
    """
    Рендер одной этикетки.

    Args:
        data: Данные с уже определённым значением баркода
        symbols: Генератор штрихкодов (по умолчанию python-barcode)

    Returns:
        LabelDescriptor
    """
    symbols = symbols or BarcodeSymbolRenderer()
    language = language_for(data)
    texts = label_texts(data, captions_for(language))

    symbol = _draw_symbol(data, symbols)
    layout = compute_layout(data, has_barcode=symbol is not None, texts=texts)

    nodes = _text_nodes(texts, layout)
    if symbol is not None:
        symbol = replace(symbol, options=replace(symbol.options, height=layout.barcode_height_px))
        nodes.append(BarcodeNode(symbol=symbol, height_px=layout.barcode_height_px))
    else:
        nodes.append(PlaceholderNode())

    return LabelDescriptor(
        width_mm=data.label_size.width_mm,
        height_mm=data.label_size.height_mm,
        padding_px=LABEL.PADDING_PX,
        nodes=tuple(nodes),
        language=language,
        barcode_value=data.barcode.value,
        scale=layout.scale,
        bold_text=data.bold_text,
    )


def render_copies(
    data: LabelData,
    resolver: BarcodeValueResolver,
    symbols: BarcodeSymbolRenderer | None = None,
) -> list[LabelDescriptor]:
    """
    Рендер всех копий (label_count) одного товара.

    Баркод определяется один раз на товар (или по копиям для
    последовательной стратегии). Одинаковые значения рендерятся один раз.

    Args:
        data: Нормализованные данные
        resolver: Стратегия баркодов
        symbols: Генератор штрихкодов

    Returns:
        Список LabelDescriptor длиной label_count
    """
    symbols = symbols or BarcodeSymbolRenderer()
    values = resolver.resolve_copies(data.product_key, data.barcode.value, data.label_count)

    rendered: dict[str, LabelDescriptor] = {}
    labels: list[LabelDescriptor] = []
    for value in values:
        if value not in rendered:
            rendered[value] = render_label(data.with_barcode_value(value), symbols)
        labels.append(rendered[value])
    return labels
