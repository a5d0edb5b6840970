#!/usr/bin/env python3
"""
Editing commands between the definition store and the edit buffer

The edit buffer uses slots 0, 1, 16 and 17 as the 2x2 edit area. The
definition store holds the 256 characters being designed.
"""

from typing import Optional, Sequence

from .character_store import CharacterStore
from .constants import (
    BYTES_PER_CHAR,
    CHAR_CODE_MASK,
    COLOR_COUNT,
    COLOR_WHITE,
    TOTAL_CHARS,
)
from .edit_region import EditMode, EditRegion, resolve_cursor_region
from .exceptions import ValidationError
from .font_utils import get_font_glyph
from .logging_config import get_logger

logger = get_logger("editor_commands")


def _definition_codes(region: EditRegion, code: int) -> list[int]:
    """Definition codes matching each edit-buffer slot of a region"""
    first = region.char_codes[0]
    return [(code + slot - first) & CHAR_CODE_MASK for slot in region.char_codes]


def set_chr(definition: CharacterStore, edit_buffer: CharacterStore, mode: EditMode,
            cursor_x: int, cursor_y: int, code: int) -> list[int]:
    """
    Copy the edit region into the definition store.

    Returns:
        Definition codes that were written
    """
    region = resolve_cursor_region(mode, cursor_x, cursor_y)
    targets = _definition_codes(region, code)
    for slot, target in zip(region.char_codes, targets):
        definition.set_character(target, edit_buffer.get_character(slot))
    logger.debug("Set CHR $%02X (%d characters)", code & CHAR_CODE_MASK, len(targets))
    return targets


def load_chr(definition: CharacterStore, edit_buffer: CharacterStore, mode: EditMode,
             cursor_x: int, cursor_y: int, code: int,
             font_data: Optional[bytes] = None) -> list[int]:
    """
    Copy characters into the edit region.

    With font_data the glyphs come from the monochrome ROM font and are
    drawn white on black, otherwise they are copied from the definition
    store.

    Returns:
        Source codes that were read
    """
    region = resolve_cursor_region(mode, cursor_x, cursor_y)
    sources = _definition_codes(region, code)
    for slot, source in zip(region.char_codes, sources):
        if font_data is not None:
            edit_buffer.set_monochrome_character(
                slot, get_font_glyph(font_data, source), COLOR_WHITE
            )
        else:
            edit_buffer.set_character(slot, definition.get_character(source))
    return sources


def clear_region(edit_buffer: CharacterStore, mode: EditMode,
                 cursor_x: int, cursor_y: int) -> None:
    """Set every dot of the edit region to black"""
    region = resolve_cursor_region(mode, cursor_x, cursor_y)
    for slot in region.char_codes:
        edit_buffer.set_character(slot, bytes(BYTES_PER_CHAR))


def color_change(edit_buffer: CharacterStore, mode: EditMode, cursor_x: int,
                 cursor_y: int, color_map: Sequence[int]) -> None:
    """
    Replace colors inside the edit region.

    Args:
        color_map: New color for each of the 8 current colors

    Raises:
        ValidationError: If the map does not hold 8 colors in 0-7
    """
    if len(color_map) != COLOR_COUNT or not all(0 <= c < COLOR_COUNT for c in color_map):
        raise ValidationError(f"Color map must hold {COLOR_COUNT} colors in 0-7")

    region = resolve_cursor_region(mode, cursor_x, cursor_y)
    lookup = list(color_map)
    for slot in region.char_codes:
        pixels = edit_buffer.get_character_pixels(slot)
        remapped = pixels.copy()
        for color in range(COLOR_COUNT):
            remapped[pixels == color] = lookup[color]
        if (remapped != pixels).any():
            edit_buffer.set_character_pixels(slot, remapped)


def transfer(store: CharacterStore, start: int, end: int, target: int) -> int:
    """
    Copy characters start..end to target..target+count-1.

    Returns:
        Number of characters copied

    Raises:
        ValidationError: If the range is empty or the copy passes code 255
    """
    count = end - start + 1
    if (count <= 0 or start < 0 or end >= TOTAL_CHARS
            or target < 0 or target + count > TOTAL_CHARS):
        raise ValidationError(f"Invalid range: ${start:02X}-${end:02X} -> ${target:02X}")

    source = store.clone()
    for i in range(count):
        store.set_character(target + i, source.get_character(start + i))

    logger.info("Transfer: $%02X-$%02X -> $%02X", start, end, target)
    return count
