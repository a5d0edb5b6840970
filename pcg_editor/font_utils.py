#!/usr/bin/env python3
"""
Monochrome ROM font handling

A font image is a 16x16 grid of 8x8 glyphs drawn dark on a light
background. It is reduced to 2048 bytes, one byte per glyph row.
"""

import numpy as np
from PIL import Image

from .character_store import CharacterStore
from .constants import (
    CHANNEL_THRESHOLD,
    COLOR_WHITE,
    FONT_BYTES_PER_CHAR,
    FONT_DATA_SIZE,
    RASTER_HEIGHT,
    RASTER_TILES_PER_ROW,
    RASTER_WIDTH,
    TOTAL_CHARS,
)
from .exceptions import ValidationError


def extract_font_data(image: Image.Image) -> bytes:
    """
    Convert a font image to 2048 bytes of glyph rows.

    A dot is set where its red channel is below 128.

    Raises:
        ValidationError: If the image is smaller than 128x128
    """
    if image.width < RASTER_WIDTH or image.height < RASTER_HEIGHT:
        raise ValidationError(
            f"Font image must be at least {RASTER_WIDTH}x{RASTER_HEIGHT}, "
            f"got {image.width}x{image.height}"
        )

    red = np.asarray(image.convert("RGB"))[:RASTER_HEIGHT, :RASTER_WIDTH, 0]
    dots = (red < CHANNEL_THRESHOLD).astype(np.uint8)

    tiles = dots.reshape(RASTER_TILES_PER_ROW, 8, RASTER_TILES_PER_ROW, 8)
    tiles = tiles.transpose(0, 2, 1, 3).reshape(TOTAL_CHARS, 8, 8)
    return np.packbits(tiles, axis=2).tobytes()


def get_font_glyph(font_data: bytes, code: int) -> bytes:
    """Return the 8 row bytes of one glyph"""
    if len(font_data) != FONT_DATA_SIZE:
        raise ValidationError(
            f"Font data must be {FONT_DATA_SIZE} bytes, got {len(font_data)}"
        )
    offset = (code & 0xFF) * FONT_BYTES_PER_CHAR
    return bytes(font_data[offset:offset + FONT_BYTES_PER_CHAR])


def load_font_into_store(store: CharacterStore, font_data: bytes,
                         color: int = COLOR_WHITE) -> int:
    """Write every glyph of a font into a store in one color"""
    for code in range(TOTAL_CHARS):
        store.set_monochrome_character(code, get_font_glyph(font_data, code), color)
    return TOTAL_CHARS
