"""
API эндпоинты для сохранённых товаров.

Товар сохраняет товарные поля формы (название, вариация, количество,
цена, даты, баркод) для быстрого повторного заполнения.
Удаление защищено паролем.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from pricetag.api.dependencies import check_password, get_label_service, get_product_repo
from pricetag.config import Settings, get_settings
from pricetag.models.schemas import (
    LabelFormRequest,
    PasswordRequest,
    ProductFormResponse,
    ProductListResponse,
    ProductRecord,
)
from pricetag.repositories.product_repo import ProductRepository
from pricetag.services.error_messages import NO_LAST_PRODUCT, product_not_found
from pricetag.services.label_service import LabelService

router = APIRouter(prefix="/products", tags=["Products"])


def _not_found(product_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=product_not_found(product_id).to_dict(),
    )


@router.get("", response_model=ProductListResponse)
def list_products(
    search: str | None = Query(default=None, description="Поиск по названию и вариации"),
    repo: ProductRepository = Depends(get_product_repo),
) -> ProductListResponse:
    """
    Список сохранённых товаров, новые сверху.

    Параметры:
    - search: Подстрока названия или вариации (опционально)
    """
    items = repo.get_all(search)
    return ProductListResponse(items=items, total=len(items))


@router.post("", response_model=ProductRecord, status_code=status.HTTP_201_CREATED)
def save_product(
    form: LabelFormRequest,
    repo: ProductRepository = Depends(get_product_repo),
    service: LabelService = Depends(get_label_service),
) -> ProductRecord:
    """
    Сохранить товар из формы.

    Сохранённый товар становится последним использованным.
    """
    data = service.build(form.form_values(), form.date_cache)
    qty_text = str(form.qty).strip() if form.qty is not None else ""
    price_text = str(form.price).strip() if form.price is not None else ""
    return repo.save_from_label(data, qty_text=qty_text, price_text=price_text)


@router.get("/last", response_model=ProductFormResponse)
def last_product(repo: ProductRepository = Depends(get_product_repo)) -> ProductFormResponse:
    """Форма последнего использованного товара (автозаполнение при открытии)."""
    product = repo.last_used()
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=NO_LAST_PRODUCT.to_dict(),
        )
    return repo.to_form(product)


@router.get("/{product_id}/form", response_model=ProductFormResponse)
def use_product(
    product_id: str,
    repo: ProductRepository = Depends(get_product_repo),
) -> ProductFormResponse:
    """Значения формы для товара; товар становится последним использованным."""
    product = repo.get(product_id)
    if product is None:
        raise _not_found(product_id)

    repo.set_last_used(product.id)
    return repo.to_form(product)


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    body: PasswordRequest,
    repo: ProductRepository = Depends(get_product_repo),
    settings: Settings = Depends(get_settings),
) -> dict[str, str]:
    """
    Удалить товар.

    Raises:
        HTTPException 403: Неверный пароль
        HTTPException 404: Товар не найден
    """
    check_password(body.password, settings)
    if not repo.delete(product_id):
        raise _not_found(product_id)
    return {"status": "deleted", "id": product_id}


@router.delete("")
def clear_products(
    body: PasswordRequest,
    repo: ProductRepository = Depends(get_product_repo),
    settings: Settings = Depends(get_settings),
) -> dict[str, int]:
    """Удалить все сохранённые товары (требует пароль)."""
    check_password(body.password, settings)
    return {"deleted": repo.clear()}
