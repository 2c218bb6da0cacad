"""Тесты отрисовки PNG/PDF и границы печати."""

import re

import pytest
from PIL import Image

from pricetag.models.label_types import BarcodeSpec, LabelData, LabelSize
from pricetag.services.label_painter import (
    PlacedNode,
    _bar_runs,
    paint_pdf,
    paint_png,
    paint_png_bytes,
    stack_nodes,
)
from pricetag.services.label_renderer import render_label
from pricetag.services.print_job import PageSetup, PrintJob


@pytest.fixture
def descriptor():
    data = LabelData(name="Soap", variation="Lavender", barcode=BarcodeSpec(value="71717123"))
    return render_label(data)


def _page_count(pdf: bytes) -> int:
    return len(re.findall(rb"/Type /Page[^s]", pdf))


class TestStacking:
    def test_nodes_fill_label_height(self, descriptor):
        placed = stack_nodes(descriptor)
        first, last = placed[0], placed[-1]

        assert all(isinstance(p, PlacedNode) for p in placed)
        assert first.top_px == descriptor.padding_px
        bottom = last.top_px + last.height_px
        assert bottom == pytest.approx(descriptor.height_px - descriptor.padding_px)

    def test_nodes_do_not_overlap(self, descriptor):
        placed = stack_nodes(descriptor)
        for upper, lower in zip(placed, placed[1:]):
            assert upper.top_px + upper.height_px <= lower.top_px + 1e-6


def test_bar_runs():
    assert _bar_runs("1101001") == [(0, 2), (3, 1), (6, 1)]
    assert _bar_runs("000") == []


class TestPng:
    def test_size_matches_label(self, descriptor):
        img = paint_png(descriptor)
        assert img.size == (round(38 * 3.78), round(25 * 3.78))

    def test_scale(self, descriptor):
        img = paint_png(descriptor, scale=2)
        assert img.size == (round(38 * 3.78 * 2), round(25 * 3.78 * 2))

    def test_has_ink(self, descriptor):
        """На этикетке есть тёмные пиксели (текст и полосы)"""
        darkest, lightest = paint_png(descriptor, scale=2).convert("L").getextrema()
        assert darkest < 128
        assert lightest == 255

    def test_png_bytes(self, descriptor):
        data = paint_png_bytes(descriptor)
        assert data.startswith(b"\x89PNG")


class TestPdf:
    def test_one_page_per_label(self, descriptor):
        pdf = paint_pdf([descriptor] * 3)

        assert pdf.startswith(b"%PDF")
        assert _page_count(pdf) == 3

    def test_print_job(self, descriptor):
        job = PrintJob(page=PageSetup(38, 25), labels=[descriptor, descriptor])

        assert job.page_count == 2
        assert _page_count(job.to_pdf()) == 2


class TestPageSetup:
    def test_css(self):
        """@page ровно по размеру этикетки, без полей"""
        assert PageSetup(38, 25).css() == "@page{ size: 38mm 25mm; margin:0 }"

    def test_from_label_size(self):
        page = PageSetup.for_size(LabelSize(50, 30))
        assert page.header_value() == "50x30mm"

    def test_fractional_size(self):
        assert PageSetup(40.5, 30).css() == "@page{ size: 40.5mm 30mm; margin:0 }"


def test_image_is_rgb(descriptor):
    assert isinstance(paint_png(descriptor), Image.Image)
    assert paint_png(descriptor).mode == "RGB"
