#!/usr/bin/env python3
"""
Color reduction to the fixed X1 8-color palette

Every mode thresholds the R, G and B channels independently and packs
the resulting bits into a color index (B | R << 1 | G << 2).
"""

from enum import Enum
from typing import Union

import numpy as np
from PIL import Image

from .constants import (
    CHANNEL_THRESHOLD,
    DITHER_DIVISOR,
    DITHER_MATRIX,
    RETRO_CONTRAST_GAIN,
    RETRO_CONTRAST_MIDPOINT,
    RETRO_SATURATION_FACTOR,
    RETRO_THRESHOLD_LOW,
    RETRO_THRESHOLD_SPAN,
    X1_PALETTE,
)

ImageInput = Union[Image.Image, np.ndarray]

_DITHER = np.array(DITHER_MATRIX, dtype=np.float64)
_PALETTE = np.array(X1_PALETTE, dtype=np.int16)


class ReduceMode(str, Enum):
    """Available color reduction algorithms"""

    NONE = "none"  # exact palette expected, thresholded like REDUCE
    REDUCE = "reduce"  # plain threshold at 128
    DITHER = "dither"  # 4x4 ordered dither
    EDFS = "edfs"  # serpentine Floyd-Steinberg error diffusion
    RETRO = "retro"  # contrast + saturation boost + narrowed dither


def _as_rgb_array(image: ImageInput) -> np.ndarray:
    """Return an H x W x 3 array of channel values"""
    if isinstance(image, Image.Image):
        return np.asarray(image.convert("RGB"), dtype=np.int16)

    array = np.asarray(image)
    if array.ndim == 2:
        array = np.stack([array] * 3, axis=-1)
    return array[..., :3].astype(np.int16)


def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


def rgb_to_color_index(rgb: np.ndarray, threshold=CHANNEL_THRESHOLD) -> np.ndarray:
    """
    Threshold channels and pack the bits into palette indices.

    Args:
        rgb: H x W x 3 channel values
        threshold: Scalar or H x W array compared with every channel

    Returns:
        H x W uint8 array of indices (0-7)
    """
    threshold = np.asarray(threshold, dtype=np.float64)
    if threshold.ndim == 2:
        threshold = threshold[..., np.newaxis]

    bits = (rgb >= threshold).astype(np.uint8)
    return bits[..., 2] | (bits[..., 0] << 1) | (bits[..., 1] << 2)


def _dither_ranks(height: int, width: int) -> np.ndarray:
    rows = np.arange(height)[:, np.newaxis] % 4
    cols = np.arange(width)[np.newaxis, :] % 4
    return _DITHER[rows, cols]


def _reduce(rgb: np.ndarray) -> np.ndarray:
    return rgb_to_color_index(rgb, CHANNEL_THRESHOLD)


def _dither(rgb: np.ndarray) -> np.ndarray:
    # One threshold per position, shared by all three channels
    threshold = _dither_ranks(rgb.shape[0], rgb.shape[1]) / DITHER_DIVISOR * 255
    return rgb_to_color_index(rgb, threshold)


def _error_diffusion(rgb: np.ndarray) -> np.ndarray:
    height, width = rgb.shape[:2]
    buffer = rgb.astype(np.float64)
    result = np.zeros((height, width), dtype=np.uint8)

    # (dx, dy, weight); dx is mirrored on right-to-left rows
    neighbours = ((1, 0, 7 / 16), (-1, 1, 3 / 16), (0, 1, 5 / 16), (1, 1, 1 / 16))

    for y in range(height):
        left_to_right = y % 2 == 0
        step = 1 if left_to_right else -1
        columns = range(width) if left_to_right else range(width - 1, -1, -1)

        for x in columns:
            old = buffer[y, x]
            new = np.where(old >= CHANNEL_THRESHOLD, 255.0, 0.0)
            error = old - new

            for dx, dy, weight in neighbours:
                nx = x + dx * step
                ny = y + dy
                if 0 <= nx < width and ny < height:
                    buffer[ny, nx] += error * weight

            bits = new >= CHANNEL_THRESHOLD
            result[y, x] = int(bits[2]) | (int(bits[0]) << 1) | (int(bits[1]) << 2)

    return result


def _sigmoidal_contrast(values: np.ndarray, gain: float, midpoint: float) -> np.ndarray:
    def sigmoid(x):
        return 1.0 / (1.0 + np.exp(-gain * (x - midpoint)))

    low = sigmoid(0.0)
    high = sigmoid(1.0)
    curve = sigmoid(values / 255.0)
    return _round_half_up((curve - low) / (high - low) * 255)


def _hue_to_channel(p: np.ndarray, q: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.where(t < 0, t + 1, t)
    t = np.where(t > 1, t - 1, t)
    return np.select(
        [t < 1 / 6, t < 1 / 2, t < 2 / 3],
        [p + (q - p) * 6 * t, q, p + (q - p) * (2 / 3 - t) * 6],
        default=p,
    )


def _enhance_saturation(rgb: np.ndarray, factor: float) -> np.ndarray:
    """Scale HSL saturation (clamped to 1) and convert back to RGB"""
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    top = np.maximum(np.maximum(r, g), b)
    bottom = np.minimum(np.minimum(r, g), b)

    high = top / 255
    low = bottom / 255
    lightness = (high + low) / 2
    chroma = high - low
    colored = top != bottom

    with np.errstate(divide="ignore", invalid="ignore"):
        saturation = np.where(
            lightness > 0.5, chroma / (2 - high - low), chroma / (high + low)
        )
        hue = np.select(
            [top == r, top == g],
            [((g - b) / 255 / chroma + np.where(g < b, 6, 0)) / 6,
             ((b - r) / 255 / chroma + 2) / 6],
            default=((r - g) / 255 / chroma + 4) / 6,
        )
    saturation = np.where(colored, saturation, 0.0)
    hue = np.where(colored, hue, 0.0)

    saturation = np.minimum(1.0, saturation * factor)

    q = np.where(lightness < 0.5,
                 lightness * (1 + saturation),
                 lightness + saturation - lightness * saturation)
    p = 2 * lightness - q

    channels = []
    for shift in (1 / 3, 0.0, -1 / 3):
        value = np.where(saturation == 0, lightness, _hue_to_channel(p, q, hue + shift))
        channels.append(_round_half_up(np.clip(value * 255, 0, 255)))

    return np.stack(channels, axis=-1)


def _retro(rgb: np.ndarray) -> np.ndarray:
    contrasted = _sigmoidal_contrast(
        rgb.astype(np.float64), RETRO_CONTRAST_GAIN, RETRO_CONTRAST_MIDPOINT
    )
    processed = _enhance_saturation(contrasted, RETRO_SATURATION_FACTOR)

    ranks = _dither_ranks(rgb.shape[0], rgb.shape[1])
    threshold = RETRO_THRESHOLD_LOW + ranks / DITHER_DIVISOR * RETRO_THRESHOLD_SPAN
    return rgb_to_color_index(processed, threshold)


_REDUCERS = {
    ReduceMode.NONE: _reduce,
    ReduceMode.REDUCE: _reduce,
    ReduceMode.DITHER: _dither,
    ReduceMode.EDFS: _error_diffusion,
    ReduceMode.RETRO: _retro,
}


def reduce_colors(image: ImageInput, mode: ReduceMode = ReduceMode.REDUCE) -> np.ndarray:
    """
    Reduce an image to X1 palette indices.

    Args:
        image: PIL image or H x W x (3|4) array (alpha is ignored)
        mode: Reduction algorithm

    Returns:
        H x W uint8 array of color indices (0-7)
    """
    rgb = _as_rgb_array(image)
    return _REDUCERS[ReduceMode(mode)](rgb)


def is_exact_palette(image: ImageInput) -> bool:
    """Check that every pixel is exactly one of the 8 palette colors"""
    rgb = _as_rgb_array(image)
    matches = (rgb[..., np.newaxis, :] == _PALETTE).all(axis=-1)
    return bool(matches.any(axis=-1).all())
