# pricetag/services/label_painter.py
"""
Отрисовка LabelDescriptor на поверхности.

- PNG через Pillow (превью)
- PDF через ReportLab (печать: одна страница = одна этикетка)

Раскладки здесь нет: узлы ставятся в колонку по центру с равными
промежутками (как flex column + space-between в браузерной версии).
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from io import BytesIO

from PIL import Image, ImageDraw, ImageFont
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from pricetag.config import LABEL
from pricetag.services.label_renderer import (
    BarcodeNode,
    LabelDescriptor,
    LabelNode,
    PlaceholderNode,
    RowNode,
    TextNode,
)

logger = logging.getLogger(__name__)

LINE_HEIGHT = 1.2
SEPARATOR_PADDING_PX = 4
BARCODE_TEXT_GAP_PX = 1

# Шрифты с поддержкой бенгальского; первый найденный используется
FONT_CANDIDATES = [
    (
        "/usr/share/fonts/truetype/noto/NotoSansBengali-Regular.ttf",
        "/usr/share/fonts/truetype/noto/NotoSansBengali-Bold.ttf",
    ),
    (
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    ),
    ("C:/Windows/Fonts/Nirmala.ttf", "C:/Windows/Fonts/NirmalaB.ttf"),
    ("C:/Windows/Fonts/arial.ttf", "C:/Windows/Fonts/arialbd.ttf"),
]

PDF_FONT_NAME = "LabelFont"
PDF_FONT_NAME_BOLD = "LabelFont-Bold"

# Флаг инициализации шрифта
_pdf_fonts: tuple[str, str] | None = None


@dataclass(frozen=True)
class PlacedNode:
    """Узел с вертикальной позицией (px от верхнего края этикетки)."""

    node: LabelNode
    top_px: float
    height_px: float


def node_height(node: LabelNode) -> float:
    """Высота узла в px."""
    if isinstance(node, TextNode):
        return node.font_px * LINE_HEIGHT
    if isinstance(node, RowNode):
        return max((child.font_px for child in node.children), default=0) * LINE_HEIGHT
    if isinstance(node, BarcodeNode):
        height = float(node.height_px)
        if node.symbol.options.display_value:
            height += node.symbol.options.font_size + BARCODE_TEXT_GAP_PX
        return height
    return 0.0


def stack_nodes(descriptor: LabelDescriptor) -> list[PlacedNode]:
    """
    Вертикальная расстановка узлов: равные промежутки между ними.

    Пустые узлы (placeholder) места не занимают.
    """
    nodes = [n for n in descriptor.nodes if not isinstance(n, PlaceholderNode)]
    heights = [node_height(n) for n in nodes]
    inner = descriptor.height_px - 2 * descriptor.padding_px
    free = inner - sum(heights)

    if len(nodes) == 1:
        top = descriptor.padding_px + max(0.0, free) / 2
        return [PlacedNode(nodes[0], top, heights[0])]

    gap = max(0.0, free) / (len(nodes) - 1) if len(nodes) > 1 else 0.0
    placed = []
    top = float(descriptor.padding_px)
    for node, height in zip(nodes, heights):
        placed.append(PlacedNode(node, top, height))
        top += height + gap
    return placed


def _module_width(node: BarcodeNode, inner_width: float) -> float:
    """Ширина модуля: из опций, но штрихкод не шире этикетки."""
    modules = len(node.symbol.modules) or 1
    return min(node.symbol.options.width, inner_width / modules)


def _bar_runs(modules: str) -> list[tuple[int, int]]:
    """Сплошные полосы: (начало, длина) в модулях."""
    runs = []
    start = None
    for i, bit in enumerate(modules + "0"):
        if bit == "1" and start is None:
            start = i
        elif bit != "1" and start is not None:
            runs.append((start, i - start))
            start = None
    return runs


# === PNG (Pillow) ===


@lru_cache(maxsize=64)
def _get_font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Получить шрифт для текста."""
    for regular, bold_path in FONT_CANDIDATES:
        path = bold_path if bold and os.path.exists(bold_path) else regular
        if os.path.exists(path):
            try:
                return ImageFont.truetype(path, size)
            except OSError:
                continue
    return ImageFont.load_default(size)


def _paint_text_png(
    draw: ImageDraw.ImageDraw,
    parts: list[TextNode],
    center_x: float,
    top: float,
    scale: float,
    bold_all: bool,
) -> None:
    fonts = [_get_font(max(1, round(p.font_px * scale)), p.bold or bold_all) for p in parts]
    widths = [draw.textlength(p.text, font=f) for p, f in zip(parts, fonts)]
    spacing = SEPARATOR_PADDING_PX * scale
    total = sum(widths) + spacing * (len(parts) - 1)

    x = center_x - total / 2
    for part, font, width in zip(parts, fonts, widths):
        draw.text((x, top), part.text, fill="black", font=font)
        x += width + spacing


def _paint_barcode_png(
    draw: ImageDraw.ImageDraw,
    node: BarcodeNode,
    placed: PlacedNode,
    descriptor: LabelDescriptor,
    scale: float,
) -> None:
    inner_width = descriptor.width_px - 2 * descriptor.padding_px
    module = _module_width(node, inner_width) * scale
    total = len(node.symbol.modules) * module
    x0 = descriptor.width_px * scale / 2 - total / 2
    top = placed.top_px * scale
    bottom = top + node.height_px * scale

    for start, length in _bar_runs(node.symbol.modules):
        left = x0 + start * module
        right = max(left, left + length * module - 1)
        draw.rectangle([left, top, right, bottom], fill=node.symbol.options.line_color)

    if node.symbol.options.display_value:
        font = _get_font(max(1, round(node.symbol.options.font_size * scale)))
        width = draw.textlength(node.symbol.text, font=font)
        draw.text(
            (descriptor.width_px * scale / 2 - width / 2, bottom + BARCODE_TEXT_GAP_PX * scale),
            node.symbol.text,
            fill=node.symbol.options.line_color,
            font=font,
        )


def paint_png(descriptor: LabelDescriptor, scale: float = 1.0) -> Image.Image:
    """
    Рисует этикетку в изображение.

    Args:
        descriptor: Этикетка
        scale: Масштаб (2.0 - для чёткого превью на retina)

    Returns:
        PIL Image
    """
    width = max(1, round(descriptor.width_px * scale))
    height = max(1, round(descriptor.height_px * scale))
    img = Image.new("RGB", (width, height), "white")
    draw = ImageDraw.Draw(img)
    center_x = width / 2

    for placed in stack_nodes(descriptor):
        node = placed.node
        if isinstance(node, TextNode):
            _paint_text_png(draw, [node], center_x, placed.top_px * scale, scale, descriptor.bold_text)
        elif isinstance(node, RowNode):
            _paint_text_png(
                draw, list(node.children), center_x, placed.top_px * scale, scale, descriptor.bold_text
            )
        elif isinstance(node, BarcodeNode):
            _paint_barcode_png(draw, node, placed, descriptor, scale)

    return img


def paint_png_bytes(descriptor: LabelDescriptor, scale: float = 1.0) -> bytes:
    """PNG-файл этикетки."""
    buffer = BytesIO()
    paint_png(descriptor, scale).save(buffer, format="PNG")
    return buffer.getvalue()


# === PDF (ReportLab) ===


def _ensure_pdf_fonts() -> tuple[str, str]:
    """Регистрирует TTF-шрифт для PDF; без него - Helvetica."""
    global _pdf_fonts
    if _pdf_fonts is not None:
        return _pdf_fonts

    for regular, bold in FONT_CANDIDATES:
        if not os.path.exists(regular):
            continue
        try:
            pdfmetrics.registerFont(TTFont(PDF_FONT_NAME, regular))
            pdfmetrics.registerFont(
                TTFont(PDF_FONT_NAME_BOLD, bold if os.path.exists(bold) else regular)
            )
            _pdf_fonts = (PDF_FONT_NAME, PDF_FONT_NAME_BOLD)
            return _pdf_fonts
        except Exception as e:
            logger.warning(f"[Painter] Не удалось зарегистрировать шрифт {regular}: {e}")

    logger.warning("[Painter] TTF-шрифт не найден, используется Helvetica (без бенгальского)")
    _pdf_fonts = ("Helvetica", "Helvetica-Bold")
    return _pdf_fonts


def _pt(px: float) -> float:
    """px этикетки -> пункты PDF."""
    return LABEL.pixels_to_mm(px) * mm


def _paint_text_pdf(
    c: canvas.Canvas,
    parts: list[TextNode],
    descriptor: LabelDescriptor,
    baseline_px: float,
    bold_all: bool,
) -> None:
    regular, bold = _ensure_pdf_fonts()
    fonts = [(bold if p.bold or bold_all else regular, _pt(p.font_px)) for p in parts]
    widths = [pdfmetrics.stringWidth(p.text, name, size) for p, (name, size) in zip(parts, fonts)]
    spacing = _pt(SEPARATOR_PADDING_PX)
    total = sum(widths) + spacing * (len(parts) - 1)

    x = _pt(descriptor.width_px) / 2 - total / 2
    y = _pt(descriptor.height_px - baseline_px)
    for part, (name, size), width in zip(parts, fonts, widths):
        c.setFont(name, size)
        c.drawString(x, y, part.text)
        x += width + spacing


def _paint_barcode_pdf(
    c: canvas.Canvas,
    node: BarcodeNode,
    placed: PlacedNode,
    descriptor: LabelDescriptor,
) -> None:
    inner_width = descriptor.width_px - 2 * descriptor.padding_px
    module = _module_width(node, inner_width)
    total = len(node.symbol.modules) * module
    x0 = descriptor.width_px / 2 - total / 2
    bottom_px = placed.top_px + node.height_px

    c.setFillColor(node.symbol.options.line_color)
    for start, length in _bar_runs(node.symbol.modules):
        c.rect(
            _pt(x0 + start * module),
            _pt(descriptor.height_px - bottom_px),
            _pt(length * module),
            _pt(node.height_px),
            stroke=0,
            fill=1,
        )

    if node.symbol.options.display_value:
        regular, _ = _ensure_pdf_fonts()
        size = _pt(node.symbol.options.font_size)
        baseline = bottom_px + BARCODE_TEXT_GAP_PX + node.symbol.options.font_size
        c.setFont(regular, size)
        c.drawCentredString(_pt(descriptor.width_px) / 2, _pt(descriptor.height_px - baseline), node.symbol.text)


def paint_pdf_page(c: canvas.Canvas, descriptor: LabelDescriptor) -> None:
    """Рисует одну этикетку на текущей странице PDF (Y от нижнего края)."""
    c.setFillColor("#000000")
    for placed in stack_nodes(descriptor):
        node = placed.node
        if isinstance(node, TextNode):
            baseline = placed.top_px + node.font_px
            _paint_text_pdf(c, [node], descriptor, baseline, descriptor.bold_text)
        elif isinstance(node, RowNode):
            baseline = placed.top_px + max(child.font_px for child in node.children)
            _paint_text_pdf(c, list(node.children), descriptor, baseline, descriptor.bold_text)
        elif isinstance(node, BarcodeNode):
            _paint_barcode_pdf(c, node, placed, descriptor)
            c.setFillColor("#000000")


def paint_pdf(descriptors: list[LabelDescriptor]) -> bytes:
    """
    PDF с этикетками: одна страница на этикетку, размер страницы = размер этикетки.

    Args:
        descriptors: Этикетки (все копии)

    Returns:
        bytes: PDF файл
    """
    buffer = BytesIO()
    c = None
    for descriptor in descriptors:
        pagesize = (descriptor.width_mm * mm, descriptor.height_mm * mm)
        if c is None:
            c = canvas.Canvas(buffer, pagesize=pagesize)
        else:
            c.setPageSize(pagesize)
        paint_pdf_page(c, descriptor)
        c.showPage()

    if c is None:
        c = canvas.Canvas(buffer)
    c.save()
    return buffer.getvalue()
