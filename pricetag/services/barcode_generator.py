"""
Генератор штрихкодов Code128, EAN-13 и UPC-A.

Превращает значение баркода в последовательность модулей (полос),
которую рисуют адаптеры (PNG через Pillow, PDF через ReportLab).
Для рендерера этикетки это чёрный ящик: невалидная комбинация
типа и значения -> исключение.
"""

from dataclasses import dataclass

from barcode import EAN13, UPCA, Code128

from pricetag.models.label_types import BarcodeType

# Формат JsBarcode старой версии -> тип этикетки
FORMAT_NAMES = {
    BarcodeType.CODE128: "CODE128",
    BarcodeType.EAN13: "EAN13",
    BarcodeType.UPC: "UPC",
}


@dataclass(frozen=True)
class BarcodeOptions:
    """Параметры отрисовки штрихкода."""

    format: str = "CODE128"
    height: int = 15  # Высота полос, px
    width: float = 1.2  # Ширина модуля, px
    display_value: bool = True  # Писать значение под штрихкодом
    font_size: int = 10
    margin: int = 0
    line_color: str = "#000"
    background: str = "#fff"
    font: str = "Inter, system-ui, sans-serif"


@dataclass(frozen=True)
class BarcodeSymbol:
    """Результат генерации штрихкода."""

    format: str
    value: str
    modules: str  # "1" - полоса, "0" - просвет
    text: str  # Человекочитаемая подпись (с контрольной цифрой)
    options: BarcodeOptions

    @property
    def width_px(self) -> float:
        """Ширина символа без полей."""
        return len(self.modules) * self.options.width + 2 * self.options.margin


def barcode_options(barcode_type: BarcodeType, height: int) -> BarcodeOptions:
    """Опции отрисовки для типа и высоты этикетки."""
    return BarcodeOptions(format=FORMAT_NAMES.get(barcode_type, "CODE128"), height=height)


class BarcodeSymbolRenderer:
    """
    Генератор символов штрихкода.

    Поддерживает:
    - EAN-13: 12 цифр (контрольная считается) или 13 (контрольная пересчитывается)
    - UPC-A: 11 или 12 цифр аналогично
    - Code128: любая непустая ASCII-строка
    """

    def draw(self, value: str, options: BarcodeOptions) -> BarcodeSymbol:
        """
        Генерирует символ штрихкода.

        Args:
            value: Значение баркода
            options: Формат и размеры

        Returns:
            BarcodeSymbol с модулями и подписью

        Raises:
            ValueError: Если значение не подходит под формат
        """
        value = (value or "").strip()
        if not value:
            raise ValueError("Пустой баркод")

        if options.format == "EAN13":
            code = EAN13(self._digits(value, (12, 13), "EAN-13")[:12])
        elif options.format == "UPC":
            code = UPCA(self._digits(value, (11, 12), "UPC-A")[:11])
        else:
            if not value.isascii() or not value.isprintable():
                raise ValueError(f"Code128 поддерживает только ASCII: {value!r}")
            code = Code128(value)

        modules = "".join(code.build())
        return BarcodeSymbol(
            format=options.format,
            value=value,
            modules=modules,
            text=code.get_fullcode(),
            options=options,
        )

    def _digits(self, value: str, lengths: tuple[int, ...], name: str) -> str:
        """Проверка цифрового баркода фиксированной длины."""
        if not (value.isascii() and value.isdigit()):
            raise ValueError(f"{name} требует только цифры, получено: {value!r}")
        if len(value) not in lengths:
            expected = "-".join(str(n) for n in lengths)
            raise ValueError(f"{name} требует {expected} цифр, получено: {len(value)}")
        return value
