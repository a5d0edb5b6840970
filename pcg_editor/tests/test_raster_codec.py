#!/usr/bin/env python3
"""
Tests for the raster image format
"""

import asyncio

import numpy as np
import pytest
from PIL import Image

from pcg_editor.character_store import CharacterStore
from pcg_editor.color_quantizer import ReduceMode
from pcg_editor.constants import TOTAL_BYTES, X1_PALETTE
from pcg_editor.exceptions import DecodeError
from pcg_editor.raster_codec import (
    decode_raster,
    default_raster_filename,
    encode_png,
    indices_to_snapshot,
    load_raster,
    load_raster_async,
    save_raster,
    save_raster_async,
    snapshot_to_indices,
)


def _black_rgb():
    return np.zeros((128, 128, 3), dtype=np.uint8)


@pytest.mark.unit
class TestSaveRaster:
    """Test rendering"""

    def test_image_format(self, pattern_store):
        image = save_raster(pattern_store)

        assert image.mode == "P"
        assert image.size == (128, 128)
        assert image.getpalette()[:24] == [c for color in X1_PALETTE for c in color]

    def test_tile_placement(self, empty_store):
        empty_store.set_pixel(17, 2, 3, 6)
        empty_store.set_pixel(255, 7, 7, 1)

        image = save_raster(empty_store)

        assert image.getpixel((10, 11)) == 6
        assert image.getpixel((127, 127)) == 1
        assert image.getpixel((0, 0)) == 0

    def test_background_color(self, empty_store):
        image = save_raster(empty_store, background=(10, 20, 30))

        assert image.getpalette()[:3] == [10, 20, 30]
        assert image.convert("RGB").getpixel((5, 5)) == (10, 20, 30)

    def test_index_helpers_round_trip(self, pattern_data):
        indices = snapshot_to_indices(pattern_data)

        assert indices.shape == (128, 128)
        assert indices_to_snapshot(indices) == pattern_data


@pytest.mark.unit
class TestLoadRaster:
    """Test decoding and quantization into a store"""

    def test_single_red_pixel(self, empty_store):
        rgb = _black_rgb()
        rgb[37, 20] = (255, 0, 0)

        assert load_raster(Image.fromarray(rgb), empty_store, ReduceMode.NONE) == 256

        for code in range(256):
            pixels = empty_store.get_character_pixels(code)
            if code == 66:
                assert pixels[5, 4] == 2
                assert np.count_nonzero(pixels) == 1
            else:
                assert not pixels.any()

    def test_round_trip(self, pattern_store, pattern_data, empty_store):
        load_raster(save_raster(pattern_store), empty_store)
        assert empty_store.get_all_data() == pattern_data

    def test_png_bytes_round_trip(self, pattern_store, pattern_data, empty_store):
        png = encode_png(save_raster(pattern_store))

        assert png.startswith(b"\x89PNG")
        load_raster(png, empty_store)
        assert empty_store.get_all_data() == pattern_data

    def test_non_palette_image_falls_back_to_reduce(self, empty_store):
        rgb = _black_rgb()
        rgb[0, 0] = (200, 100, 130)

        load_raster(Image.fromarray(rgb), empty_store, ReduceMode.NONE)

        assert empty_store.get_pixel(0, 0, 0) == 3  # red + blue

    def test_wrong_size_is_resized(self, gradient_image, empty_store):
        assert load_raster(gradient_image, empty_store, ReduceMode.DITHER) == 256
        assert empty_store.get_all_data() != bytes(TOTAL_BYTES)

    def test_transparent_pixels_are_black(self, empty_store):
        rgba = np.zeros((128, 128, 4), dtype=np.uint8)
        rgba[..., :3] = 255
        rgba[0, 0, 3] = 255

        load_raster(Image.fromarray(rgba), empty_store)

        assert empty_store.get_pixel(0, 0, 0) == 7
        assert empty_store.get_pixel(0, 1, 0) == 0

    def test_fully_redefines_store(self, pattern_store):
        load_raster(Image.fromarray(_black_rgb()), pattern_store)
        assert pattern_store.get_all_data() == bytes(TOTAL_BYTES)

    def test_single_notification(self, empty_store, palette_image):
        changes = []
        empty_store.add_listener(changes.append)

        load_raster(palette_image, empty_store)
        assert changes == [-1]

    def test_undecodable_bytes(self, pattern_store, pattern_data):
        with pytest.raises(DecodeError):
            load_raster(b"not an image", pattern_store)
        assert pattern_store.get_all_data() == pattern_data

    def test_missing_file(self, temp_dir, empty_store):
        with pytest.raises(FileNotFoundError):
            load_raster(temp_dir / "missing.png", empty_store)

    def test_default_filename(self):
        assert default_raster_filename() == "pcg.png"


@pytest.mark.integration
class TestRasterFiles:
    """Test reading and writing image files"""

    def test_file_round_trip(self, temp_dir, pattern_store, pattern_data):
        path = temp_dir / "pcg.png"
        save_raster(pattern_store).save(path)

        assert decode_raster(path) == pattern_data
        assert decode_raster(str(path)) == pattern_data

    def test_corrupt_file(self, temp_dir):
        path = temp_dir / "broken.png"
        path.write_bytes(b"\x89PNG\r\n\x1a\n" + bytes(20))

        with pytest.raises(DecodeError):
            decode_raster(path)


@pytest.mark.unit
class TestAsyncRaster:
    """Test the worker-thread variants"""

    def test_load_raster_async(self, pattern_store, pattern_data, empty_store):
        image = save_raster(pattern_store)

        count = asyncio.run(load_raster_async(image, empty_store))

        assert count == 256
        assert empty_store.get_all_data() == pattern_data

    def test_load_raster_async_failure(self, pattern_store, pattern_data):
        with pytest.raises(DecodeError):
            asyncio.run(load_raster_async(b"garbage", pattern_store))
        assert pattern_store.get_all_data() == pattern_data

    def test_save_raster_async(self, pattern_store, pattern_data, empty_store):
        png = asyncio.run(save_raster_async(pattern_store))

        load_raster(png, empty_store)
        assert empty_store.get_all_data() == pattern_data
