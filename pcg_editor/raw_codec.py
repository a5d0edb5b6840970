#!/usr/bin/env python3
"""
Raw binary (.bin) PCG format

Normal layout: each character's 24 bytes as stored (B[8], R[8], G[8]).
Triple-speed (x3) layout: per character, 8 rows of [B, R, G] bytes.
"""

from .character_store import CharacterStore
from .constants import (
    BYTES_PER_CHAR,
    BYTES_PER_PLANE,
    DEFAULT_BIN_FILENAME,
    DEFAULT_BIN_X3_FILENAME,
    PLANE_COUNT,
    TOTAL_CHARS,
)
from .exceptions import FormatError, ValidationError
from .logging_config import get_logger

logger = get_logger("raw_codec")


def validate_range(start: int, end: int) -> int:
    """
    Validate an inclusive character range.

    Returns:
        Number of characters in the range

    Raises:
        ValidationError: If the range is empty or outside 0-255
    """
    count = end - start + 1
    if count <= 0:
        raise ValidationError(f"Invalid range: {start}-{end}")
    if start < 0 or end >= TOTAL_CHARS:
        raise ValidationError(f"Range {start}-{end} is outside 0-{TOTAL_CHARS - 1}")
    return count


def interleave_rows(char_data: bytes) -> bytes:
    """Convert plane-major character bytes to row-interleaved (x3) order"""
    output = bytearray(BYTES_PER_CHAR)
    for row in range(BYTES_PER_PLANE):
        for plane in range(PLANE_COUNT):
            output[row * PLANE_COUNT + plane] = char_data[plane * BYTES_PER_PLANE + row]
    return bytes(output)


def deinterleave_rows(x3_data: bytes) -> bytes:
    """Convert row-interleaved (x3) character bytes back to plane-major order"""
    output = bytearray(BYTES_PER_CHAR)
    for row in range(BYTES_PER_PLANE):
        for plane in range(PLANE_COUNT):
            output[plane * BYTES_PER_PLANE + row] = x3_data[row * PLANE_COUNT + plane]
    return bytes(output)


def save_bin(store: CharacterStore, start: int, end: int, interleaved: bool = False) -> bytes:
    """
    Serialize characters start..end (inclusive).

    Args:
        store: Source store
        start: First character code
        end: Last character code
        interleaved: Use the triple-speed (x3) row layout

    Returns:
        (end - start + 1) * 24 bytes
    """
    count = validate_range(start, end)

    output = bytearray()
    for i in range(count):
        char_data = store.get_character(start + i)
        output.extend(interleave_rows(char_data) if interleaved else char_data)

    logger.debug("Saved %d characters (%s layout)", count,
                 "x3" if interleaved else "normal")
    return bytes(output)


def load_bin(data: bytes, store: CharacterStore, start: int, interleaved: bool = False) -> int:
    """
    Load consecutive characters starting at a code.

    Trailing bytes that do not fill a whole character are ignored.

    Returns:
        Number of characters written

    Raises:
        FormatError: If data holds no complete character
        ValidationError: If the characters would run past code 255
    """
    count = len(data) // BYTES_PER_CHAR

    if count == 0:
        raise FormatError(f"File too small: {len(data)} bytes, need {BYTES_PER_CHAR}")
    if start < 0 or start + count > TOTAL_CHARS:
        raise ValidationError(
            f"{count} characters from {start} exceed {TOTAL_CHARS} characters"
        )

    if len(data) % BYTES_PER_CHAR:
        logger.warning("Ignoring %d trailing bytes", len(data) % BYTES_PER_CHAR)

    for i in range(count):
        chunk = bytes(data[i * BYTES_PER_CHAR:(i + 1) * BYTES_PER_CHAR])
        store.set_character(start + i, deinterleave_rows(chunk) if interleaved else chunk)

    return count


def default_bin_filename(interleaved: bool) -> str:
    """Default file name for the chosen layout"""
    return DEFAULT_BIN_X3_FILENAME if interleaved else DEFAULT_BIN_FILENAME
