"""Тесты прохода рендера (превью и печать)."""

import pytest

from pricetag.models.label_types import LabelSize, Language
from pricetag.repositories.storage import StorageKeys
from pricetag.services.label_service import LabelService

SOAP = {"name": "soap", "variation": "lavender", "label_size": "38x25", "label_count": "3"}


class TestPreview:
    def test_three_copies_share_eight_digit_barcode(self, label_service):
        """38x25 × 3 копии: один 8-значный баркод, стабильный при повторе"""
        first = label_service.preview(SOAP)
        second = label_service.preview(SOAP)

        values = first.barcode_values
        assert len(values) == 3
        assert len(set(values)) == 1
        assert len(values[0]) == 8 and values[0].isdigit()
        assert second.barcode_values == values

    def test_key_ignores_case(self, label_service):
        first = label_service.preview(SOAP)
        second = label_service.preview({**SOAP, "name": "  SOAP "})

        assert first.barcode_values[0] == second.barcode_values[0]

    def test_page_and_language(self, label_service):
        render_pass = label_service.preview(SOAP)

        assert render_pass.page.css() == "@page{ size: 38mm 25mm; margin:0 }"
        assert render_pass.language is Language.ENGLISH
        assert render_pass.captions.qty == "Qty"

    def test_form_settings_remembered(self, label_service, settings_store):
        """Размер и штрихкод из формы запоминаются при превью"""
        label_service.preview({**SOAP, "label_size": "50x30", "barcode_height": "20"})
        settings = settings_store.load()

        assert settings.label_size == "50x30"
        assert settings.barcode.height == 20

    def test_saved_settings_are_defaults(self, label_service, settings_store):
        settings_store.patch({"label_size": "58x40", "business_name": "Shop"})

        render_pass = label_service.preview({"name": "soap"})

        assert render_pass.data.label_size == LabelSize(58, 40)
        assert render_pass.labels[0].find("business").text == "Shop"

    def test_bold_from_settings(self, label_service, settings_store):
        settings_store.toggle_bold()
        assert label_service.preview(SOAP).labels[0].bold_text is True

    def test_image(self, label_service):
        png = label_service.image(SOAP, index=2)
        assert png.startswith(b"\x89PNG")

    def test_image_out_of_range(self, label_service):
        with pytest.raises(IndexError):
            label_service.image(SOAP, index=3)


class TestPrint:
    def test_per_product_does_not_advance(self, label_service, store):
        job = label_service.print_job(SOAP)

        assert job.page_count == 3
        assert job.next_barcode is None
        assert job.page.header_value() == "38x25mm"
        assert job.to_pdf().startswith(b"%PDF")
        assert store.get(StorageKeys.BARCODE_COUNTERS) is None

    def test_sequential_commits_after_print(self, label_service, settings_store):
        settings_store.patch({"barcode": {"mode": "sequential"}})

        job = label_service.print_job({**SOAP, "barcode_value": "100"})
        assert [label.barcode_value for label in job.labels] == ["100", "101", "102"]
        assert job.next_barcode == "103"

        again = label_service.print_job(SOAP)
        assert again.labels[0].barcode_value == "103"

    def test_sequential_preview_does_not_commit(self, label_service, settings_store):
        settings_store.patch({"barcode": {"mode": "sequential"}})

        first = label_service.preview({**SOAP, "label_count": "2"})
        second = label_service.preview({**SOAP, "label_count": "2"})

        assert first.barcode_values == second.barcode_values
        assert int(first.barcode_values[1]) == int(first.barcode_values[0]) + 1


def test_clock_injected(store, settings_store, fixed_clock):
    service = LabelService(store, settings_store, clock=fixed_clock)
    assert service.preview(SOAP).barcode_values == ["71717123"] * 3


def test_save_display_and_barcode(label_service, settings_store):
    label_service.save_display({"business_name": "Shop", "fonts": {"name": 14}, "show": {"qty": False}})
    label_service.save_barcode({"label_size": "40x30", "barcode_type": "ean13"})

    settings = settings_store.load()
    assert settings.business_name == "Shop"
    assert settings.fonts.name == 14
    assert settings.show.qty is False
    assert settings.label_size == "40x30"
    assert settings.barcode.type.value == "ean13"
