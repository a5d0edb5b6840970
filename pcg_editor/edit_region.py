#!/usr/bin/env python3
"""
Edit region calculation
Maps the edit mode and cursor position to the affected characters
"""

from dataclasses import dataclass
from enum import IntEnum

from .constants import CHAR_HEIGHT, CHAR_WIDTH, DEFINITION_CHARS_PER_ROW


class EditMode(IntEnum):
    """How the 2x2 characters of the edit area are grouped"""

    SEPARATE = 0  # four unrelated characters
    VERTICAL = 1  # two characters stacked vertically
    HORIZONTAL = 2  # two characters side by side
    ALL = 3  # all four characters form one 16x16 image


@dataclass(frozen=True)
class EditRegion:
    """Pixel rectangle of the edit area and the character slots tiling it"""

    start_x: int
    start_y: int
    width: int
    height: int
    char_codes: tuple[int, ...]

    @property
    def is_square(self) -> bool:
        return self.width == self.height

    def slot_for(self, x: int, y: int) -> int:
        """Character code owning region-local pixel (x, y)"""
        columns = 2 if self.width > CHAR_WIDTH else 1
        index = x // CHAR_WIDTH + (y // CHAR_HEIGHT) * columns
        return self.char_codes[index]


def cursor_char_pos(cursor_x: int, cursor_y: int) -> tuple[int, int]:
    """Convert a dot cursor (0-15, 0-15) to a character quadrant (0-1, 0-1)"""
    return cursor_x // CHAR_WIDTH, cursor_y // CHAR_HEIGHT


def resolve_region(mode: EditMode, char_x: int, char_y: int) -> EditRegion:
    """
    Get the edit region for a mode and cursor quadrant.

    Args:
        mode: Edit mode
        char_x: Quadrant column (0-1)
        char_y: Quadrant row (0-1)

    Returns:
        EditRegion covering 8 or 16 dots in each direction
    """
    stride = DEFINITION_CHARS_PER_ROW

    if mode == EditMode.SEPARATE:
        return EditRegion(char_x * CHAR_WIDTH, char_y * CHAR_HEIGHT, 8, 8,
                          (char_x + char_y * stride,))
    if mode == EditMode.VERTICAL:
        return EditRegion(char_x * CHAR_WIDTH, 0, 8, 16,
                          (char_x, char_x + stride))
    if mode == EditMode.HORIZONTAL:
        return EditRegion(0, char_y * CHAR_HEIGHT, 16, 8,
                          (char_y * stride, char_y * stride + 1))
    return EditRegion(0, 0, 16, 16, (0, 1, stride, stride + 1))


def resolve_cursor_region(mode: EditMode, cursor_x: int, cursor_y: int) -> EditRegion:
    """Resolve the edit region under a dot cursor"""
    char_x, char_y = cursor_char_pos(cursor_x, cursor_y)
    return resolve_region(mode, char_x, char_y)
