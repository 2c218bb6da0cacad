"""
Точка входа FastAPI приложения PriceTag.

Генератор ценников для термопринтеров: превью, PDF для печати,
сохранённые товары и настройки.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pricetag.api.routes import health, labels, preferences, products
from pricetag.config import get_settings
from pricetag.logging_config import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifecycle приложения.

    Инициализация при старте, очистка при завершении.
    """
    setup_logging()
    logger.info(f"[START] {settings.app_name} v{settings.app_version} (storage={settings.storage_backend})")

    yield

    logger.info(f"[STOP] {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
## PriceTag API

Генерация ценников для термопринтеров (Rongta и аналоги).

### Возможности:

* **Превью** - описание этикетки и PNG каждой копии
* **Печать** - PDF, одна страница на этикетку точно по размеру рулона
* **Авто-масштабирование** - текст и штрихкод ужимаются под размер этикетки
* **Автобаркод** - стабильный 8-значный баркод для товара без своего
* **Бенгальский** - подписи и цифры подстраиваются под ввод
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Page-Size", "X-Page-Count", "X-Next-Barcode"],
)


# Подключение роутеров
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(labels.router, prefix="/api/v1")
app.include_router(products.router, prefix="/api/v1")
app.include_router(preferences.router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Корневой эндпоинт - ссылка на документацию."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
