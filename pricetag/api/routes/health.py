"""
Health check эндпоинты.
"""

from fastapi import APIRouter, Depends

from pricetag.api.dependencies import get_store
from pricetag.repositories.storage import JSONStore

router = APIRouter()


@router.get("/health")
async def health_check(store: JSONStore = Depends(get_store)) -> dict[str, str]:
    """
    Базовая проверка состояния сервиса.

    Returns:
        Статус "ok" и тип хранилища
    """
    return {"status": "ok", "storage": type(store).__name__}
