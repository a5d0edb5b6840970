#!/usr/bin/env python3
"""
Tests for monochrome ROM font handling
"""

import pytest
from PIL import Image

from pcg_editor.constants import FONT_DATA_SIZE
from pcg_editor.exceptions import ValidationError
from pcg_editor.font_utils import extract_font_data, get_font_glyph, load_font_into_store


@pytest.fixture
def font_image():
    """White 128x128 sheet with a short bar in glyph 65"""
    image = Image.new("RGB", (128, 128), (255, 255, 255))
    for x in range(8, 12):
        image.putpixel((x, 33), (0, 0, 0))  # tile (1, 4), row 1
    image.putpixel((15, 39), (100, 255, 255))  # dark red channel only
    return image


@pytest.mark.unit
class TestExtractFontData:
    """Test font sheet conversion"""

    def test_size(self, font_image):
        assert len(extract_font_data(font_image)) == FONT_DATA_SIZE

    def test_glyph_rows(self, font_image):
        data = extract_font_data(font_image)
        glyph = get_font_glyph(data, 65)

        assert glyph == bytes([0x00, 0xF0, 0, 0, 0, 0, 0, 0x01])
        assert data.count(0) == FONT_DATA_SIZE - 2

    def test_larger_image_uses_top_left(self, font_image):
        larger = Image.new("RGB", (200, 150), (0, 0, 0))
        larger.paste(font_image, (0, 0))
        assert extract_font_data(larger) == extract_font_data(font_image)

    def test_too_small(self):
        with pytest.raises(ValidationError):
            extract_font_data(Image.new("RGB", (64, 128)))


@pytest.mark.unit
class TestFontGlyphs:
    """Test glyph access and store loading"""

    def test_get_font_glyph_wrong_size(self):
        with pytest.raises(ValidationError):
            get_font_glyph(bytes(100), 0)

    def test_load_font_into_store(self, empty_store, font_image):
        data = extract_font_data(font_image)

        assert load_font_into_store(empty_store, data, color=4) == 256

        assert empty_store.get_pixel(65, 0, 1) == 4
        assert empty_store.get_pixel(65, 4, 1) == 0
        assert empty_store.get_plane_row(65, 0, 1) == 0
        assert empty_store.get_plane_row(65, 2, 1) == 0xF0
