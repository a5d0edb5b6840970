#!/usr/bin/env python3
"""
Bitplane character store for the X1 PCG editor

Data layout:
    256 characters x 24 bytes (B[8], R[8], G[8]) = 6144 bytes.
    Each plane holds 8 rows of 1 byte, bit 7 is the leftmost dot.
    A dot's color (0-7) is B | R << 1 | G << 2.
"""

from typing import Callable

import numpy as np

from .constants import (
    ALL_CHARACTERS,
    BYTES_PER_CHAR,
    BYTES_PER_PLANE,
    CHAR_CODE_MASK,
    CHAR_HEIGHT,
    CHAR_WIDTH,
    FONT_BYTES_PER_CHAR,
    PLANE_B,
    PLANE_COUNT,
    PLANE_G,
    PLANE_R,
    TOTAL_BYTES,
)
from .exceptions import ValidationError

ChangeListener = Callable[[int], None]


def _char_offset(code: int) -> int:
    return (code & CHAR_CODE_MASK) * BYTES_PER_CHAR


class CharacterStore:
    """
    Owns a 256-character PCG buffer.

    Every mutation notifies registered listeners with the affected
    character code, or ALL_CHARACTERS for whole-buffer updates.
    """

    def __init__(self) -> None:
        self._data = bytearray(TOTAL_BYTES)
        self._listeners: list[ChangeListener] = []

    # Change notification

    def add_listener(self, listener: ChangeListener) -> None:
        """Register a callback receiving the changed code"""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        """Unregister a previously added callback"""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify(self, code: int) -> None:
        """Send a change notification for a code (or ALL_CHARACTERS)"""
        for listener in list(self._listeners):
            listener(code)

    # Whole-buffer access

    def clear(self) -> None:
        """Zero the whole buffer (all characters become black)"""
        self._data[:] = bytes(TOTAL_BYTES)
        self.notify(ALL_CHARACTERS)

    def get_all_data(self) -> bytes:
        """Return a 6144-byte snapshot of the store"""
        return bytes(self._data)

    def set_all_data(self, data: bytes) -> None:
        """
        Restore the store from a snapshot.

        Raises:
            ValidationError: If the snapshot is not exactly 6144 bytes
        """
        if len(data) != TOTAL_BYTES:
            raise ValidationError(
                f"PCG data must be {TOTAL_BYTES} bytes, got {len(data)}"
            )
        self._data[:] = data
        self.notify(ALL_CHARACTERS)

    def clone(self) -> "CharacterStore":
        """Create an independent deep copy (listeners are not copied)"""
        cloned = CharacterStore()
        cloned._data[:] = self._data
        return cloned

    # Character access

    def get_character(self, code: int) -> bytes:
        """Return the 24 plane-major bytes (B[8], R[8], G[8]) of a character"""
        offset = _char_offset(code)
        return bytes(self._data[offset:offset + BYTES_PER_CHAR])

    def set_character(self, code: int, data: bytes) -> None:
        """
        Replace the 24 plane-major bytes of a character.

        Raises:
            ValidationError: If data is not exactly 24 bytes
        """
        if len(data) != BYTES_PER_CHAR:
            raise ValidationError(
                f"PCG character must be {BYTES_PER_CHAR} bytes, got {len(data)}"
            )
        offset = _char_offset(code)
        self._data[offset:offset + BYTES_PER_CHAR] = data
        self.notify(code & CHAR_CODE_MASK)

    def get_plane_row(self, code: int, plane: int, row: int) -> int:
        """Get one row byte of a plane (0=B, 1=R, 2=G)"""
        return self._data[self._plane_row_offset(code, plane, row)]

    def set_plane_row(self, code: int, plane: int, row: int, value: int) -> None:
        """Set one row byte of a plane (0=B, 1=R, 2=G)"""
        self._data[self._plane_row_offset(code, plane, row)] = value & 0xFF
        self.notify(code & CHAR_CODE_MASK)

    @staticmethod
    def _plane_row_offset(code: int, plane: int, row: int) -> int:
        return (_char_offset(code)
                + (plane & 0x03) * BYTES_PER_PLANE
                + (row & 0x07))

    # Pixel access

    def get_pixel(self, code: int, x: int, y: int) -> int:
        """Get the color (0-7) of a dot"""
        offset = _char_offset(code) + (y & 0x07)
        mask = 0x80 >> (x & 0x07)

        b = 1 if self._data[offset] & mask else 0
        r = 1 if self._data[offset + BYTES_PER_PLANE] & mask else 0
        g = 1 if self._data[offset + BYTES_PER_PLANE * 2] & mask else 0

        return b | (r << 1) | (g << 2)

    def set_pixel(self, code: int, x: int, y: int, color: int) -> None:
        """Set the color (0-7) of a dot"""
        offset = _char_offset(code) + (y & 0x07)
        mask = 0x80 >> (x & 0x07)

        for plane in (PLANE_B, PLANE_R, PLANE_G):
            index = offset + plane * BYTES_PER_PLANE
            if color & (1 << plane):
                self._data[index] |= mask
            else:
                self._data[index] &= ~mask & 0xFF

        self.notify(code & CHAR_CODE_MASK)

    def get_character_pixels(self, code: int) -> np.ndarray:
        """Return the character as an 8x8 array of color indices"""
        planes = np.frombuffer(self.get_character(code), dtype=np.uint8)
        bits = np.unpackbits(planes.reshape(PLANE_COUNT, BYTES_PER_PLANE, 1), axis=2)
        return (bits[PLANE_B] | (bits[PLANE_R] << 1) | (bits[PLANE_G] << 2)).astype(np.uint8)

    def set_character_pixels(self, code: int, pixels: np.ndarray) -> None:
        """Write an 8x8 array of color indices into a character"""
        grid = np.asarray(pixels, dtype=np.uint8)
        if grid.shape != (CHAR_HEIGHT, CHAR_WIDTH):
            raise ValidationError(
                f"Character pixels must be {CHAR_WIDTH}x{CHAR_HEIGHT}, got {grid.shape}"
            )
        planes = [np.packbits((grid >> plane) & 1, axis=1).reshape(-1)
                  for plane in (PLANE_B, PLANE_R, PLANE_G)]
        self.set_character(code, np.concatenate(planes).tobytes())

    def set_monochrome_character(self, code: int, bitmap: bytes, color: int) -> None:
        """
        Write a 1-bit 8x8 glyph using one color.

        The bitmap goes into every plane that is set in the color,
        the remaining planes are zeroed.

        Raises:
            ValidationError: If bitmap is not exactly 8 bytes
        """
        if len(bitmap) != FONT_BYTES_PER_CHAR:
            raise ValidationError(
                f"Monochrome data must be {FONT_BYTES_PER_CHAR} bytes, got {len(bitmap)}"
            )
        offset = _char_offset(code)
        for plane in (PLANE_B, PLANE_R, PLANE_G):
            start = offset + plane * BYTES_PER_PLANE
            if color & (1 << plane):
                self._data[start:start + BYTES_PER_PLANE] = bitmap
            else:
                self._data[start:start + BYTES_PER_PLANE] = bytes(BYTES_PER_PLANE)

        self.notify(code & CHAR_CODE_MASK)
