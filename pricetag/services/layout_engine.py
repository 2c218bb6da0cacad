# pricetag/services/layout_engine.py
"""
Раскладка этикетки и авто-масштабирование.

Решает три вещи:
1. Какие поля видимы (флаги show + правила для дат)
2. Итоговый кегль каждого поля после масштабирования
3. Высоту штрихкода после масштабирования

Алгоритм масштабирования:
1. мм -> px (≈3.78 px/мм), минус отступы
2. Штрихкод резервирует до 40% полезной высоты (но не больше своей высоты)
3. Требуемая высота текста = Σ кегль × вес строки
4. scale = min(доступно / требуется, ширина, 1.0) - только уменьшение
5. scale < 0.95 -> кегли floor(f × scale), минимум 6px; штрихкод минимум 10px

Функция детерминированная и идемпотентная: повторный запуск на собственном
результате не уменьшает размеры.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, replace

from pricetag.config import LABEL
from pricetag.models.label_types import FontSizes, LabelData, LabelField

# Порядок строк сверху вниз; даты - одна строка из двух полей
ROW_FIELDS: dict[str, tuple[LabelField, ...]] = {
    "business": (LabelField.BUSINESS,),
    "name": (LabelField.NAME,),
    "variation": (LabelField.VARIATION,),
    "qty": (LabelField.QTY,),
    "price": (LabelField.PRICE,),
    "dates": (LabelField.PACK_DATE, LabelField.EXP_DATE),
}


@dataclass(frozen=True)
class LayoutResult:
    """Результат раскладки."""

    visible: tuple[LabelField, ...]
    fonts: FontSizes  # Итоговые кегли (невидимые поля не трогаются)
    barcode_height_px: int
    scale: float  # Коэффициент первого прохода, не больше 1.0
    separator_font_px: int | None  # Кегль разделителя дат (если обе даты видны)
    text_area_px: float
    required_text_px: float

    def is_visible(self, label_field: LabelField) -> bool:
        return label_field in self.visible


def resolve_visibility(data: LabelData) -> tuple[LabelField, ...]:
    """
    Видимые поля этикетки.

    Правила:
    - Название, вариация, организация: флаг + непустой текст
    - Количество, цена: по флагу
    - Дата упаковки: по флагу, даже без даты (выводится dd/mm/yyyy)
    - Срок годности: по флагу ИЛИ если дата введена
    """
    show = data.show
    texts = {
        LabelField.NAME: data.name,
        LabelField.VARIATION: data.variation,
        LabelField.BUSINESS: data.business_name,
    }

    visible: list[LabelField] = []
    for label_field in LabelField:
        if label_field in texts:
            on = show.is_on(label_field) and bool(texts[label_field])
        elif label_field is LabelField.EXP_DATE:
            on = show.exp_date or bool(data.exp_date)
        else:
            on = show.is_on(label_field)
        if on:
            visible.append(label_field)
    return tuple(visible)


def estimate_text_width(text: str, font_px: float) -> float:
    """Оценка ширины строки по средней ширине символа."""
    return len(text) * font_px * LABEL.AVG_CHAR_WIDTH


def _row_font(row: str, visible: tuple[LabelField, ...], fonts: Mapping[LabelField, int]) -> int:
    """Кегль строки: для дат - наибольший из видимых."""
    sizes = [fonts[f] for f in ROW_FIELDS[row] if f in visible]
    return max(sizes) if sizes else 0


def _required_height(visible: tuple[LabelField, ...], fonts: Mapping[LabelField, int]) -> float:
    total = 0.0
    for row, weight in LABEL.ROW_WEIGHTS.items():
        total += _row_font(row, visible, fonts) * weight
    return total


def _widest_line(
    visible: tuple[LabelField, ...],
    fonts: Mapping[LabelField, int],
    texts: Mapping[LabelField, str],
) -> float:
    """Ширина самой длинной строки; даты считаются одной строкой с разделителем."""
    widest = 0.0
    for row, row_fields in ROW_FIELDS.items():
        parts = [f for f in row_fields if f in visible and texts.get(f)]
        if not parts:
            continue
        width = sum(estimate_text_width(texts[f], fonts[f]) for f in parts)
        if len(parts) > 1:
            sep_font = min(fonts[f] for f in parts)
            width += estimate_text_width(f" {LABEL.DATE_SEPARATOR} ", sep_font)
        widest = max(widest, width)
    return widest


def _fit_scale(
    data: LabelData,
    visible: tuple[LabelField, ...],
    fonts: Mapping[LabelField, int],
    barcode_height: int,
    has_barcode: bool,
    texts: Mapping[LabelField, str] | None,
) -> tuple[float, float, float]:
    """
    Коэффициент, при котором текст помещается.

    Returns:
        (scale, доступная высота текста, требуемая высота текста)
    """
    padding = LABEL.PADDING_PX
    available_width = data.label_size.width_px - padding * 2
    available_height = data.label_size.height_px - padding * 2

    reserved = min(barcode_height, available_height * LABEL.BARCODE_MAX_SHARE) if has_barcode else 0
    text_area = available_height - reserved - LABEL.BARCODE_GAP_PX

    required = _required_height(visible, fonts)
    height_scale = text_area / required if required > 0 else 1.0

    width_scale = 1.0
    if texts:
        widest = _widest_line(visible, fonts, texts)
        if widest > 0:
            width_scale = available_width * LABEL.WIDTH_OVERFLOW_TOLERANCE / widest

    scale = max(0.0, min(height_scale, width_scale, 1.0))
    return scale, text_area, required


def compute_layout(
    data: LabelData,
    has_barcode: bool = True,
    texts: Mapping[LabelField, str] | None = None,
) -> LayoutResult:
    """
    Раскладка этикетки с авто-масштабированием.

    Масштабирование повторяется, пока содержимое не поместится или размеры
    не упрутся в минимумы - результат является неподвижной точкой.

    Args:
        data: Нормализованные данные этикетки
        has_barcode: Отрисован ли штрихкод (при ошибке генерации - нет)
        texts: Итоговые тексты полей для проверки ширины (опционально)

    Returns:
        LayoutResult
    """
    visible = resolve_visibility(data)
    fonts = {f: data.fonts.get(f) for f in LabelField}
    barcode_height = data.barcode.height_px

    first_scale, text_area, required = _fit_scale(
        data, visible, fonts, barcode_height, has_barcode, texts
    )
    scale = first_scale

    while scale < LABEL.SCALE_THRESHOLD:
        new_fonts = dict(fonts)
        for f in visible:
            new_fonts[f] = min(fonts[f], max(LABEL.MIN_FONT_PX, math.floor(fonts[f] * scale)))
        new_barcode = barcode_height
        if has_barcode:
            new_barcode = min(
                barcode_height, max(LABEL.MIN_BARCODE_PX, math.floor(barcode_height * scale))
            )

        if new_fonts == fonts and new_barcode == barcode_height:
            break

        fonts, barcode_height = new_fonts, new_barcode
        scale, _, _ = _fit_scale(data, visible, fonts, barcode_height, has_barcode, texts)

    separator_font = None
    if LabelField.PACK_DATE in visible and LabelField.EXP_DATE in visible:
        separator_font = min(fonts[LabelField.PACK_DATE], fonts[LabelField.EXP_DATE])

    return LayoutResult(
        visible=visible,
        fonts=data.fonts.updated(fonts),
        barcode_height_px=barcode_height,
        scale=first_scale,
        separator_font_px=separator_font,
        text_area_px=text_area,
        required_text_px=required,
    )


def apply_layout(data: LabelData, result: LayoutResult) -> LabelData:
    """LabelData с итоговыми кеглями и высотой штрихкода из раскладки."""
    return replace(
        data,
        fonts=result.fonts,
        barcode=replace(data.barcode, height_px=result.barcode_height_px),
    )
