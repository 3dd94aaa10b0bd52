"""Tests for core.pdf_image."""

import struct

import fitz
import pytest

from core.pdf_image import render_first_page_png
from util.errors import ConversionError

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _pdf(width=612, height=792, pages=1, **save_kwargs):
    doc = fitz.open()
    for i in range(pages):
        page = doc.new_page(width=width, height=height)
        page.insert_text((72, 72), f"Certificate of Completion {i + 1}")
    data = doc.tobytes(**save_kwargs)
    doc.close()
    return data


def _png_size(png):
    # IHDR is the first chunk: width and height are big-endian uint32.
    return struct.unpack(">II", png[16:24])


class TestRenderFirstPagePng:
    def test_long_edge_is_scaled_to_max_dimension(self):
        png = render_first_page_png(_pdf(width=1000, height=2048), max_dimension=1024)
        assert png.startswith(PNG_SIGNATURE)
        width, height = _png_size(png)
        assert height == 1024
        assert width == 500

    def test_landscape(self):
        width, height = _png_size(render_first_page_png(_pdf(width=800, height=400), 400))
        assert (width, height) == (400, 200)

    def test_only_first_page_is_rendered(self):
        png = render_first_page_png(_pdf(width=400, height=800, pages=3), 400)
        assert _png_size(png) == (200, 400)

    @pytest.mark.parametrize("data", [b"", b"not a pdf at all", b"%PDF-1.7\n%%EOF"])
    def test_unreadable_input(self, data):
        with pytest.raises(ConversionError):
            render_first_page_png(data)

    def test_password_protected(self):
        data = _pdf(encryption=fitz.PDF_ENCRYPT_AES_256, user_pw="user", owner_pw="owner")
        with pytest.raises(ConversionError, match="password"):
            render_first_page_png(data)

    def test_rejects_non_positive_dimension(self):
        with pytest.raises(ValueError):
            render_first_page_png(_pdf(), max_dimension=0)
