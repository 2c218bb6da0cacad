"""
Конфигурация приложения PriceTag.

Все настройки в одном месте (SSOT - Single Source of Truth).
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LabelSettings:
    """
    Константы движка раскладки этикеток.

    Значения сняты с браузерной версии генератора (термопринтер Rongta, 96 DPI экрана).
    """

    # Приближённый перевод мм -> px (1мм ≈ 3.78px при 96 DPI)
    PX_PER_MM: float = 3.78

    # Внутренний отступ этикетки со всех сторон
    PADDING_PX: int = 4

    # Зазор между текстовым блоком и штрихкодом
    BARCODE_GAP_PX: int = 2

    # Штрихкод занимает не больше 40% полезной высоты
    BARCODE_MAX_SHARE: float = 0.4

    # Масштабируем только при заметном уменьшении
    SCALE_THRESHOLD: float = 0.95

    # Абсолютные минимумы после масштабирования
    MIN_FONT_PX: int = 6
    MIN_BARCODE_PX: int = 10

    # Допуск переполнения по ширине (10%)
    WIDTH_OVERFLOW_TOLERANCE: float = 1.1

    # Средняя ширина символа относительно кегля
    AVG_CHAR_WIDTH: float = 0.55

    # Вес строки ≈ типичная высота строки относительно кегля
    ROW_WEIGHTS: dict[str, float] = {
        "business": 1.2,
        "name": 1.0,
        "variation": 0.8,
        "qty": 0.7,
        "price": 0.9,
        "dates": 0.6,
    }

    # Кегли по умолчанию (px)
    DEFAULT_FONTS: dict[str, int] = {
        "name": 11,
        "variation": 6,
        "qty": 7,
        "price": 10,
        "business": 7,
        "pack_date": 9,
        "exp_date": 9,
    }

    DEFAULT_LABEL_SIZE: str = "38x25"
    DEFAULT_BARCODE_TYPE: str = "code128"
    DEFAULT_BARCODE_HEIGHT: int = 15

    # Шаблон даты, если дата не выбрана
    DATE_PLACEHOLDER: str = "dd/mm/yyyy"
    DATE_SEPARATOR: str = "|"

    # Значение для отрисовки, если баркод пустой
    EMPTY_BARCODE_VALUE: str = "000000000000"

    # Автогенерируемый баркод: 8 цифр
    AUTO_BARCODE_DIGITS: int = 8

    # Копий за один проход (рулон 1000 шт)
    MAX_LABEL_COUNT: int = 1000

    # Более длинная строка цифр считается мусором
    MAX_INT_DIGITS: int = 18

    CURRENCY_SIGN: str = "৳"

    # Каноничные единицы измерения (значения не зависят от языка подписи)
    PRESET_UNITS: list[str] = ["গ্রাম", "কেজি", "পিস", "লিটার", "মিলি"]
    CUSTOM_UNIT: str = "custom"
    CUSTOM_UNIT_FALLBACK: str = "ইউনিট"

    @classmethod
    def mm_to_pixels(cls, mm: float) -> float:
        """Конвертация миллиметров в пиксели экрана."""
        return mm * cls.PX_PER_MM

    @classmethod
    def pixels_to_mm(cls, pixels: float) -> float:
        """Конвертация пикселей экрана в миллиметры."""
        return pixels / cls.PX_PER_MM


class Settings(BaseSettings):
    """
    Настройки приложения из переменных окружения.

    Загружаются из .env файла или переменных окружения.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PRICETAG_",
        extra="ignore",
    )

    # === Приложение ===
    app_name: str = "PriceTag API"
    app_version: str = "0.1.0"
    debug: bool = False

    # === Хранилище ===
    storage_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = Field(default="redis://localhost:6379/0")
    storage_prefix: str = ""

    # Пароль для удаления товаров и сброса настроек
    reset_password: str = Field(default="123456")

    # Стратегия баркодов по умолчанию (если в настройках пусто)
    default_barcode_mode: Literal["per_product", "sequential"] = "per_product"

    # === CORS ===
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    # === Логирование ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> Settings:
    """
    Получить настройки приложения (singleton).

    Использует кэширование для избежания повторного чтения .env
    """
    return Settings()


# Экспорт констант этикеток для удобства
LABEL = LabelSettings()
