"""
API эндпоинты для генерации этикеток.

Превью (JSON-описание и PNG) и печать (PDF, одна страница на этикетку).
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from pricetag.api.dependencies import get_label_service
from pricetag.models.schemas import (
    LabelFormRequest,
    LabelPreviewResponse,
    UnitOptionItem,
    UnitOptionsResponse,
)
from pricetag.services.error_messages import label_out_of_range
from pricetag.services.label_locale import unit_menu
from pricetag.services.label_service import LabelService

router = APIRouter(prefix="/labels", tags=["Labels"])


@router.post("/preview", response_model=LabelPreviewResponse)
def preview_labels(
    form: LabelFormRequest,
    service: LabelService = Depends(get_label_service),
) -> LabelPreviewResponse:
    """
    Превью этикеток.

    Возвращает описание каждой копии, язык подписей и @page для печати.
    Размер этикетки и настройки штрихкода из формы запоминаются.
    """
    render_pass = service.preview(form.form_values(), form.date_cache)
    return LabelPreviewResponse(
        labels=[label.to_dict() for label in render_pass.labels],
        count=len(render_pass.labels),
        language=render_pass.language.value,
        captions=asdict(render_pass.captions),
        barcode_value=render_pass.labels[0].barcode_value,
        page_size=str(render_pass.data.label_size),
        page_css=render_pass.page.css(),
    )


@router.post("/image")
def label_image(
    form: LabelFormRequest,
    index: int = Query(default=0, ge=0, description="Номер копии"),
    scale: float = Query(default=2.0, gt=0, le=10, description="Масштаб изображения"),
    service: LabelService = Depends(get_label_service),
) -> Response:
    """PNG одной копии этикетки."""
    try:
        png = service.image(form.form_values(), index=index, scale=scale, date_cache=form.date_cache)
    except IndexError:
        count = service.build(form.form_values()).label_count
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=label_out_of_range(index, count).to_dict(),
        )
    return Response(content=png, media_type="image/png")


@router.post("/print")
def print_labels(
    form: LabelFormRequest,
    service: LabelService = Depends(get_label_service),
) -> Response:
    """
    PDF для печати.

    Страница = этикетка, размер страницы = размер этикетки, без полей.
    Для последовательных баркодов счётчик продвигается после генерации.

    Headers:
        X-Page-Size: размер страницы ("38x25mm")
        X-Next-Barcode: следующий баркод (пусто, если счётчика нет)
    """
    job = service.print_job(form.form_values(), form.date_cache)
    return Response(
        content=job.to_pdf(),
        media_type="application/pdf",
        headers={
            "Content-Disposition": 'inline; filename="labels.pdf"',
            "X-Page-Size": job.page.header_value(),
            "X-Page-Count": str(job.page_count),
            "X-Next-Barcode": job.next_barcode or "",
        },
    )


@router.get("/unit-options", response_model=UnitOptionsResponse)
def unit_options(
    qty: str = Query(default="", description="Текст поля количества"),
    current: str | None = Query(default=None, description="Текущая единица"),
) -> UnitOptionsResponse:
    """
    Меню единиц измерения.

    Подписи на бенгальском, если количество введено бенгальскими цифрами.
    """
    menu = unit_menu(qty, current)
    return UnitOptionsResponse(
        options=[UnitOptionItem(value=o.value, text=o.text) for o in menu.options],
        selected=menu.selected,
    )
