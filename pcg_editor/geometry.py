#!/usr/bin/env python3
"""
Edit buffer transforms
Moves, rotations and flips applied to the current edit region
"""

from enum import Enum

import numpy as np

from .character_store import CharacterStore
from .constants import CHAR_HEIGHT, CHAR_WIDTH
from .edit_region import EditMode, EditRegion, resolve_cursor_region
from .logging_config import get_logger

logger = get_logger("geometry")


class TransformKind(str, Enum):
    """Transform applied to an edit region"""

    MOVE_RIGHT = "right"
    MOVE_LEFT = "left"
    MOVE_UP = "up"
    MOVE_DOWN = "down"
    ROTATE_90 = "rot90"
    ROTATE_180 = "rot180"
    # Names follow the X1 tool: FLIP_H mirrors top/bottom, FLIP_V left/right
    FLIP_H = "flipH"
    FLIP_V = "flipV"


_TRANSFORM_NAMES = {
    TransformKind.MOVE_RIGHT: "Move Right",
    TransformKind.MOVE_LEFT: "Move Left",
    TransformKind.MOVE_UP: "Move Up",
    TransformKind.MOVE_DOWN: "Move Down",
    TransformKind.ROTATE_90: "Rotate 90°",
    TransformKind.ROTATE_180: "Rotate 180°",
    TransformKind.FLIP_H: "Flip H",
    TransformKind.FLIP_V: "Flip V",
}

_ROTATIONS = (TransformKind.ROTATE_90, TransformKind.ROTATE_180)


def transform_name(kind: TransformKind) -> str:
    """Display name of a transform"""
    return _TRANSFORM_NAMES[TransformKind(kind)]


def transform_grid(pixels: np.ndarray, kind: TransformKind) -> np.ndarray:
    """
    Apply a transform to a height x width grid of color indices.

    Moves wrap around the edges. ROTATE_90 turns counter-clockwise and
    needs a square grid.
    """
    kind = TransformKind(kind)

    if kind == TransformKind.MOVE_RIGHT:
        result = np.roll(pixels, -1, axis=1)
    elif kind == TransformKind.MOVE_LEFT:
        result = np.roll(pixels, 1, axis=1)
    elif kind == TransformKind.MOVE_UP:
        result = np.roll(pixels, -1, axis=0)
    elif kind == TransformKind.MOVE_DOWN:
        result = np.roll(pixels, 1, axis=0)
    elif kind == TransformKind.ROTATE_90:
        if pixels.shape[0] != pixels.shape[1]:
            raise ValueError(f"Rotate 90 needs a square grid, got {pixels.shape}")
        result = np.rot90(pixels, k=1)
    elif kind == TransformKind.ROTATE_180:
        result = pixels[::-1, ::-1]
    elif kind == TransformKind.FLIP_H:
        result = pixels[::-1, :]
    else:
        result = pixels[:, ::-1]

    return np.ascontiguousarray(result)


def _tile_origins(region: EditRegion):
    for y in range(0, region.height, CHAR_HEIGHT):
        for x in range(0, region.width, CHAR_WIDTH):
            yield x, y


def gather_region(store: CharacterStore, region: EditRegion) -> np.ndarray:
    """Read a region into a single height x width grid"""
    grid = np.zeros((region.height, region.width), dtype=np.uint8)
    for x, y in _tile_origins(region):
        grid[y:y + CHAR_HEIGHT, x:x + CHAR_WIDTH] = store.get_character_pixels(
            region.slot_for(x, y)
        )
    return grid


def scatter_region(store: CharacterStore, region: EditRegion, grid: np.ndarray) -> None:
    """Write a height x width grid back into the region's characters"""
    for x, y in _tile_origins(region):
        store.set_character_pixels(
            region.slot_for(x, y), grid[y:y + CHAR_HEIGHT, x:x + CHAR_WIDTH]
        )


def apply_transform(store: CharacterStore, mode: EditMode, cursor_x: int,
                    cursor_y: int, kind: TransformKind) -> bool:
    """
    Transform the edit region under the cursor in place.

    Args:
        store: Edit buffer to modify
        mode: Current edit mode
        cursor_x: Dot cursor X (0-15)
        cursor_y: Dot cursor Y (0-15)
        kind: Transform to apply

    Returns:
        False (store untouched) when a rotation is requested for a
        VERTICAL or HORIZONTAL region, True otherwise
    """
    kind = TransformKind(kind)
    mode = EditMode(mode)
    region = resolve_cursor_region(mode, cursor_x, cursor_y)

    if kind in _ROTATIONS and not region.is_square:
        logger.debug("%s is not available in %s mode", transform_name(kind), mode.name)
        return False

    grid = gather_region(store, region)
    scatter_region(store, region, transform_grid(grid, kind))
    return True
