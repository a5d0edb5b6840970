#!/usr/bin/env python3
"""
Constants for the X1 PCG editor
All magic numbers and format specifications in one place
"""

# Character (glyph) specifications
CHAR_WIDTH = 8  # pixels
CHAR_HEIGHT = 8  # pixels
BYTES_PER_PLANE = 8  # one byte per row
PLANE_COUNT = 3  # B, R, G
BYTES_PER_CHAR = BYTES_PER_PLANE * PLANE_COUNT  # 24
TOTAL_CHARS = 256
TOTAL_BYTES = BYTES_PER_CHAR * TOTAL_CHARS  # 6144
CHAR_CODE_MASK = 0xFF

# Plane indices inside a character payload
PLANE_B = 0
PLANE_R = 1
PLANE_G = 2

# Sentinel passed to change listeners for whole-store updates
ALL_CHARACTERS = -1

# X1 colors (index = B | R << 1 | G << 2)
COLOR_WHITE = 7
COLOR_COUNT = 8

X1_PALETTE: tuple[tuple[int, int, int], ...] = (
    (0, 0, 0),        # 0: black
    (0, 0, 255),      # 1: blue
    (255, 0, 0),      # 2: red
    (255, 0, 255),    # 3: magenta
    (0, 255, 0),      # 4: green
    (0, 255, 255),    # 5: cyan
    (255, 255, 0),    # 6: yellow
    (255, 255, 255),  # 7: white
)

# Edit area (2x2 characters, 16x16 dots)
DEFINITION_CHARS_PER_ROW = 16  # slot stride between vertically adjacent chars

# Raster interchange image (16x16 tiles of 8x8)
RASTER_TILES_PER_ROW = 16
RASTER_WIDTH = RASTER_TILES_PER_ROW * CHAR_WIDTH  # 128
RASTER_HEIGHT = RASTER_TILES_PER_ROW * CHAR_HEIGHT  # 128
MAX_RASTER_FILE_SIZE = 5 * 1024 * 1024  # 5MB

# Monochrome ROM font (one byte per glyph row)
FONT_BYTES_PER_CHAR = 8
FONT_DATA_SIZE = FONT_BYTES_PER_CHAR * TOTAL_CHARS  # 2048

# Raw binary (.bin) limits
MAX_BIN_FILE_SIZE = TOTAL_BYTES + BYTES_PER_CHAR - 1  # full bank plus ignored tail
MAX_BAS_FILE_SIZE = 1024 * 1024  # 1MB

# X1 BASIC program text
BAS_LINE_START = 60960
BAS_LINE_STEP = 10
BAS_HEX_LENGTH = BYTES_PER_CHAR * 2  # 48
BAS_LINE_SEPARATOR = "\r"

# X1 BASIC tokens (binary program)
TOKEN_DEFCHR = 0xB2
TOKEN_STRING_PREFIX = 0xFF  # "$" extension prefix
TOKEN_FUNC_CALL = 0xA0
TOKEN_LPAREN = 0x28
TOKEN_RPAREN = 0x29
TOKEN_EQUAL = 0xF4
TOKEN_HEXCHR = 0xBF
TOKEN_QUOTE = 0x22
TOKEN_INT16_PREFIX = 0x12
TOKEN_LINE_TERMINATOR = 0x00

# Legacy 1-byte biased integers (value + 1), load only
SMALL_INT_MIN_BYTE = 0x02
SMALL_INT_MAX_BYTE = 0x0A

PROGRAM_TERMINATOR = b"\x00\x00"
LINK_FIELD_SIZE = 2
LINE_NUMBER_FIELD_SIZE = 2

# Color reduction
DITHER_MATRIX = (
    (1, 9, 3, 11),
    (13, 5, 15, 7),
    (4, 12, 2, 10),
    (16, 8, 14, 6),
)
DITHER_DIVISOR = 17
CHANNEL_THRESHOLD = 128
RETRO_CONTRAST_GAIN = -8.0
RETRO_CONTRAST_MIDPOINT = 0.5
RETRO_SATURATION_FACTOR = 2.0
RETRO_THRESHOLD_LOW = 28
RETRO_THRESHOLD_SPAN = 200  # 28..228

# Default file names
DEFAULT_BIN_FILENAME = "pcg.bin"
DEFAULT_BIN_X3_FILENAME = "pcg_x3.bin"
DEFAULT_BAS_FILENAME = "pcg.bas"
DEFAULT_ASC_FILENAME = "pcg.asc"
DEFAULT_RASTER_FILENAME = "pcg.png"
