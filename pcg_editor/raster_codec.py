#!/usr/bin/env python3
"""
Raster image (.png) PCG format

The image is 128x128 pixels, a 16x16 grid of 8x8 tiles where tile i
(row-major) holds character i. Pixels use the X1 palette, index 0 is the
background.
"""

import asyncio
import io
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from .character_store import CharacterStore
from .color_quantizer import ReduceMode, is_exact_palette, reduce_colors
from .constants import (
    BYTES_PER_PLANE,
    CHAR_HEIGHT,
    CHAR_WIDTH,
    DEFAULT_RASTER_FILENAME,
    MAX_RASTER_FILE_SIZE,
    PLANE_COUNT,
    RASTER_HEIGHT,
    RASTER_TILES_PER_ROW,
    RASTER_WIDTH,
    TOTAL_CHARS,
    X1_PALETTE,
)
from .exceptions import DecodeError
from .logging_config import get_logger
from .security_utils import validate_file_path

logger = get_logger("raster_codec")

RasterSource = Union[Image.Image, bytes, bytearray, str, Path]

_TILES = RASTER_TILES_PER_ROW


def snapshot_to_indices(snapshot: bytes) -> np.ndarray:
    """Render a 6144-byte store snapshot as a 128x128 index grid"""
    planes = np.frombuffer(snapshot, dtype=np.uint8).reshape(
        TOTAL_CHARS, PLANE_COUNT, BYTES_PER_PLANE, 1
    )
    bits = np.unpackbits(planes, axis=3)  # (256, 3, 8, 8)
    tiles = bits[:, 0] | (bits[:, 1] << 1) | (bits[:, 2] << 2)

    grid = tiles.reshape(_TILES, _TILES, CHAR_HEIGHT, CHAR_WIDTH)
    return grid.transpose(0, 2, 1, 3).reshape(RASTER_HEIGHT, RASTER_WIDTH)


def indices_to_snapshot(indices: np.ndarray) -> bytes:
    """Pack a 128x128 index grid into a 6144-byte store snapshot"""
    grid = np.asarray(indices, dtype=np.uint8)
    tiles = grid.reshape(_TILES, CHAR_HEIGHT, _TILES, CHAR_WIDTH).transpose(0, 2, 1, 3)
    tiles = tiles.reshape(TOTAL_CHARS, CHAR_HEIGHT, CHAR_WIDTH)

    planes = [np.packbits((tiles >> plane) & 1, axis=2).reshape(TOTAL_CHARS, BYTES_PER_PLANE)
              for plane in range(PLANE_COUNT)]
    return np.stack(planes, axis=1).tobytes()


def _build_palette(background: tuple[int, int, int]) -> list[int]:
    palette = [channel for color in X1_PALETTE for channel in color]
    palette[0:3] = list(background)
    return palette


def render_snapshot(snapshot: bytes,
                    background: tuple[int, int, int] = X1_PALETTE[0]) -> Image.Image:
    """Create the indexed 128x128 image for a store snapshot"""
    indices = snapshot_to_indices(snapshot).astype(np.uint8)
    image = Image.frombytes("P", (RASTER_WIDTH, RASTER_HEIGHT), indices.tobytes())
    image.putpalette(_build_palette(background))
    return image


def save_raster(store: CharacterStore,
                background: tuple[int, int, int] = X1_PALETTE[0]) -> Image.Image:
    """
    Render all 256 characters as a 128x128 indexed image.

    Args:
        store: Source store
        background: RGB used for color index 0

    Returns:
        PIL image in 'P' mode
    """
    return render_snapshot(store.get_all_data(), background)


def encode_png(image: Image.Image) -> bytes:
    """Encode an image as PNG bytes"""
    buffer = io.BytesIO()
    image.save(buffer, "PNG")
    return buffer.getvalue()


def open_image(source: RasterSource) -> Image.Image:
    """
    Open and fully decode an image from a PIL image, bytes or a path.

    Raises:
        DecodeError: If the data cannot be decoded as an image
    """
    if isinstance(source, Image.Image):
        return source

    try:
        if isinstance(source, (bytes, bytearray)):
            image = Image.open(io.BytesIO(source))
        else:
            image = Image.open(validate_file_path(source, max_size=MAX_RASTER_FILE_SIZE))
        image.load()
        return image
    except FileNotFoundError:
        raise
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeError(f"Failed to load image: {e}") from e


def _to_rgba_array(image: Image.Image) -> np.ndarray:
    if image.size != (RASTER_WIDTH, RASTER_HEIGHT):
        logger.warning("Image size is %dx%d, expected %dx%d",
                       image.width, image.height, RASTER_WIDTH, RASTER_HEIGHT)
    rgba = image.convert("RGBA")
    if rgba.size != (RASTER_WIDTH, RASTER_HEIGHT):
        rgba = rgba.resize((RASTER_WIDTH, RASTER_HEIGHT), Image.Resampling.NEAREST)

    pixels = np.array(rgba, dtype=np.uint8)
    # Fully transparent pixels read as black
    pixels[pixels[..., 3] == 0, :3] = 0
    return pixels


def decode_raster(source: RasterSource, reduce_mode: ReduceMode = ReduceMode.NONE) -> bytes:
    """
    Decode and quantize an image into a 6144-byte store snapshot.

    Raises:
        DecodeError: If the image cannot be decoded
    """
    reduce_mode = ReduceMode(reduce_mode)
    try:
        pixels = _to_rgba_array(open_image(source))
    except FileNotFoundError:
        raise
    except (OSError, ValueError) as e:
        raise DecodeError(f"Failed to decode image: {e}") from e

    if reduce_mode == ReduceMode.NONE:
        if not is_exact_palette(pixels):
            logger.info("Non-X1 colors detected, using reduce mode")
        indices = reduce_colors(pixels, ReduceMode.REDUCE)
    else:
        indices = reduce_colors(pixels, reduce_mode)

    return indices_to_snapshot(indices)


def load_raster(source: RasterSource, store: CharacterStore,
                reduce_mode: ReduceMode = ReduceMode.NONE) -> int:
    """
    Redefine all 256 characters from a raster image.

    The store is written only after the image has been decoded and
    reduced, so a failure leaves it untouched.

    Returns:
        Number of characters written (always 256)
    """
    store.set_all_data(decode_raster(source, reduce_mode))
    return TOTAL_CHARS


async def load_raster_async(source: RasterSource, store: CharacterStore,
                            reduce_mode: ReduceMode = ReduceMode.NONE) -> int:
    """Decode in a worker thread, then redefine all 256 characters"""
    snapshot = await asyncio.to_thread(decode_raster, source, reduce_mode)
    store.set_all_data(snapshot)
    return TOTAL_CHARS


async def save_raster_async(store: CharacterStore,
                            background: tuple[int, int, int] = X1_PALETTE[0]) -> bytes:
    """Render the store and encode it as PNG in a worker thread"""
    snapshot = store.get_all_data()
    return await asyncio.to_thread(
        lambda: encode_png(render_snapshot(snapshot, background))
    )


def default_raster_filename() -> str:
    return DEFAULT_RASTER_FILENAME
