#!/usr/bin/env python3
"""
X1 BASIC program (.bas / .asc) PCG format

Each character becomes one program line:

    60960 DEFCHR$(65)=HEXCHR$("<48 hex digits>")

The ASCII variant is plain text separated by CR. The binary variant is a
tokenized program: every physical line is

    [link:u16le][line number:u16le][tokens...][0x00]

where link counts the bytes from its own position to the next link, and
a link of 0x0000 ends the program.
"""

import re
import struct
from enum import Enum
from typing import Optional

from .character_store import CharacterStore
from .constants import (
    BAS_HEX_LENGTH,
    BAS_LINE_SEPARATOR,
    BAS_LINE_START,
    BAS_LINE_STEP,
    DEFAULT_ASC_FILENAME,
    DEFAULT_BAS_FILENAME,
    LINE_NUMBER_FIELD_SIZE,
    LINK_FIELD_SIZE,
    PROGRAM_TERMINATOR,
    SMALL_INT_MAX_BYTE,
    SMALL_INT_MIN_BYTE,
    TOKEN_DEFCHR,
    TOKEN_EQUAL,
    TOKEN_FUNC_CALL,
    TOKEN_HEXCHR,
    TOKEN_INT16_PREFIX,
    TOKEN_LINE_TERMINATOR,
    TOKEN_LPAREN,
    TOKEN_QUOTE,
    TOKEN_RPAREN,
    TOKEN_STRING_PREFIX,
    TOTAL_CHARS,
)
from .exceptions import ValidationError
from .logging_config import get_logger
from .raw_codec import validate_range

logger = get_logger("program_codec")

DEFCHR_TOKENS = bytes([TOKEN_DEFCHR, TOKEN_STRING_PREFIX, TOKEN_FUNC_CALL])
HEXCHR_TOKENS = bytes([TOKEN_STRING_PREFIX, TOKEN_HEXCHR])

DEFCHR_PATTERN = re.compile(
    r'DEFCHR\$\s*\(\s*(\d+)\s*\)\s*=\s*HEXCHR\$\s*\(\s*"([0-9A-Fa-f]+)"\s*\)',
    re.IGNORECASE | re.ASCII,
)
HEX_STRING_PATTERN = re.compile(rb"[0-9A-Fa-f]{%d}" % BAS_HEX_LENGTH)
LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")

MAX_LINE_NUMBER = 0xFFFF


class LoadMode(str, Enum):
    """Where loaded characters are written"""

    START = "start"  # consecutive codes from the caller's start code
    ORIGINAL = "original"  # the code written in each DEFCHR$ line


def _line_numbers(count: int, line_start: int) -> list[int]:
    numbers = [line_start + i * BAS_LINE_STEP for i in range(count)]
    if line_start < 0 or numbers[-1] > MAX_LINE_NUMBER:
        raise ValidationError(
            f"Line numbers {line_start}-{numbers[-1]} exceed {MAX_LINE_NUMBER}"
        )
    return numbers


def _hex_payload(store: CharacterStore, code: int) -> str:
    return store.get_character(code).hex().upper()


def save_ascii(store: CharacterStore, start: int, end: int,
               line_start: int = BAS_LINE_START) -> str:
    """
    Write characters start..end as X1 BASIC program text.

    Lines are separated by a bare CR and the text ends with a CR.
    """
    count = validate_range(start, end)
    numbers = _line_numbers(count, line_start)

    lines = []
    for i, line_number in enumerate(numbers):
        code = start + i
        lines.append(
            f'{line_number}DEFCHR$({code})=HEXCHR$("{_hex_payload(store, code)}")'
        )

    return BAS_LINE_SEPARATOR.join(lines) + BAS_LINE_SEPARATOR


def encode_defchr_line(line_number: int, code: int, hex_payload: str) -> bytes:
    """Encode one tokenized DEFCHR$ line, including its link field"""
    body = bytearray()
    body.extend(struct.pack("<H", line_number))
    body.extend(DEFCHR_TOKENS)
    body.append(TOKEN_LPAREN)
    body.append(TOKEN_INT16_PREFIX)
    body.extend(struct.pack("<H", code))
    body.append(TOKEN_RPAREN)
    body.append(TOKEN_EQUAL)
    body.extend(HEXCHR_TOKENS)
    body.append(TOKEN_LPAREN)
    body.append(TOKEN_QUOTE)
    body.extend(hex_payload.encode("ascii"))
    body.append(TOKEN_QUOTE)
    body.append(TOKEN_RPAREN)
    body.append(TOKEN_LINE_TERMINATOR)

    link = LINK_FIELD_SIZE + len(body)
    return struct.pack("<H", link) + bytes(body)


def save_binary(store: CharacterStore, start: int, end: int,
                line_start: int = BAS_LINE_START) -> bytes:
    """Write characters start..end as a tokenized X1 BASIC program"""
    count = validate_range(start, end)
    numbers = _line_numbers(count, line_start)

    output = bytearray()
    for i, line_number in enumerate(numbers):
        code = start + i
        output.extend(encode_defchr_line(line_number, code, _hex_payload(store, code)))
    output.extend(PROGRAM_TERMINATOR)

    return bytes(output)


class _CharacterSink:
    """Resolves target codes and writes parsed characters into a store"""

    def __init__(self, store: CharacterStore, start: int, mode: LoadMode):
        self.store = store
        self.mode = LoadMode(mode)
        self.current = start
        self.loaded = 0

    def accept(self, original_code: int, payload: bytes) -> bool:
        """
        Store one parsed character.

        Returns:
            False once the START counter has passed the last code
        """
        target = original_code if self.mode == LoadMode.ORIGINAL else self.current

        if not 0 <= target < TOTAL_CHARS:
            logger.warning("Code out of range: %d", target)
            if self.mode == LoadMode.START:
                self.current += 1
            return True

        self.store.set_character(target, payload)
        self.loaded += 1

        if self.mode == LoadMode.START:
            self.current += 1
            if self.current >= TOTAL_CHARS:
                return False
        return True


def load_ascii(text: str, store: CharacterStore, start: int = 0,
               mode: LoadMode = LoadMode.ORIGINAL) -> int:
    """
    Load DEFCHR$ lines from program text.

    Lines may be separated by CR, LF or CRLF. Lines without a DEFCHR$
    statement are ignored, lines with a wrong hex length are skipped.

    Returns:
        Number of characters written
    """
    sink = _CharacterSink(store, start, mode)

    for line in LINE_BREAK_PATTERN.split(text):
        match = DEFCHR_PATTERN.search(line)
        if not match:
            continue

        original_code = int(match.group(1))
        hex_str = match.group(2)

        if len(hex_str) != BAS_HEX_LENGTH:
            logger.warning("Invalid hex length for code %d: %d",
                           original_code, len(hex_str))
            continue

        if not sink.accept(original_code, bytes.fromhex(hex_str)):
            break

    return sink.loaded


class _NoMatch(Exception):
    """Internal signal: the tokenized line does not follow the DEFCHR$ grammar"""


class _TokenReader:
    """Cursor over one tokenized line, bounded by the line terminator"""

    def __init__(self, data: bytes, pos: int, end: int):
        self.data = data
        self.pos = pos
        self.end = end

    def peek(self) -> int:
        if self.pos >= self.end:
            raise _NoMatch
        return self.data[self.pos]

    def expect(self, token: int) -> None:
        if self.peek() != token:
            raise _NoMatch
        self.pos += 1

    def expect_sequence(self, tokens: bytes) -> None:
        if self.pos + len(tokens) > self.end:
            raise _NoMatch
        if self.data[self.pos:self.pos + len(tokens)] != tokens:
            raise _NoMatch
        self.pos += len(tokens)

    def read_integer(self) -> int:
        """Read a 3-byte INT16 literal or a legacy 1-byte biased literal"""
        first = self.peek()
        if first == TOKEN_INT16_PREFIX:
            if self.pos + 3 > self.end:
                raise _NoMatch
            value = struct.unpack_from("<H", self.data, self.pos + 1)[0]
            self.pos += 3
            return value
        if SMALL_INT_MIN_BYTE <= first <= SMALL_INT_MAX_BYTE:
            self.pos += 1
            return first - 1
        raise _NoMatch

    def read_hex_string(self) -> bytes:
        if self.pos + BAS_HEX_LENGTH > self.end:
            raise _NoMatch
        raw = bytes(self.data[self.pos:self.pos + BAS_HEX_LENGTH])
        if not HEX_STRING_PATTERN.fullmatch(raw):
            raise _NoMatch
        self.pos += BAS_HEX_LENGTH
        return raw


def parse_defchr_line(data: bytes, pos: int, end: int) -> Optional[tuple[int, bytes]]:
    """
    Parse a tokenized DEFCHR$ statement.

    Args:
        data: Program bytes
        pos: Offset of the statement (just after the line number)
        end: Offset of the line terminator

    Returns:
        (character code, 24-byte payload) or None if the line does not match
    """
    reader = _TokenReader(data, pos, end)
    try:
        reader.expect_sequence(DEFCHR_TOKENS)
        reader.expect(TOKEN_LPAREN)
        code = reader.read_integer()
        reader.expect(TOKEN_RPAREN)
        reader.expect(TOKEN_EQUAL)
        reader.expect_sequence(HEXCHR_TOKENS)
        reader.expect(TOKEN_LPAREN)
        reader.expect(TOKEN_QUOTE)
        hex_bytes = reader.read_hex_string()
        reader.expect(TOKEN_QUOTE)
        reader.expect(TOKEN_RPAREN)
    except _NoMatch:
        return None

    return code, bytes.fromhex(hex_bytes.decode("ascii"))


def load_binary(data: bytes, store: CharacterStore, start: int = 0,
                mode: LoadMode = LoadMode.ORIGINAL) -> int:
    """
    Load DEFCHR$ lines from a tokenized program.

    Lines that are not DEFCHR$ statements are skipped silently; malformed
    DEFCHR$ lines are skipped with a warning.

    Returns:
        Number of characters written
    """
    sink = _CharacterSink(store, start, mode)
    offset = 0

    while offset < len(data) - 1:
        link = struct.unpack_from("<H", data, offset)[0]
        if link == 0:
            break

        line_start = offset
        body = offset + LINK_FIELD_SIZE + LINE_NUMBER_FIELD_SIZE
        line_end = min(line_start + link - 1, len(data))

        if bytes(data[body:body + len(DEFCHR_TOKENS)]) == DEFCHR_TOKENS:
            parsed = parse_defchr_line(data, body, line_end)
            if parsed is None:
                logger.warning("Skipping malformed DEFCHR$ line at offset %d", line_start)
            elif not sink.accept(*parsed):
                break
        else:
            logger.debug("Skipping non-DEFCHR$ line at offset %d", line_start)

        offset = line_start + link

    return sink.loaded


def load_program(data: bytes, store: CharacterStore, start: int = 0,
                 mode: LoadMode = LoadMode.ORIGINAL) -> int:
    """
    Load a program, detecting the variant.

    Data containing a 0x00 byte is a tokenized program, anything else is
    decoded as UTF-8 text.

    Returns:
        Number of characters written
    """
    if TOKEN_LINE_TERMINATOR in data:
        return load_binary(data, store, start, mode)

    text = bytes(data).decode("utf-8-sig", errors="replace")
    return load_ascii(text, store, start, mode)


def default_bas_filename(binary: bool) -> str:
    """Default file name for the chosen variant"""
    return DEFAULT_BAS_FILENAME if binary else DEFAULT_ASC_FILENAME
