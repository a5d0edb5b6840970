#!/usr/bin/env python3
"""
X1 PCG converter

Usage:
    pcg-convert INPUT OUTPUT [options]

The formats are chosen by file extension:
    .bin          raw PCG data (x3 layout: --in-interleaved when reading,
                  --interleaved when writing)
    .bas          tokenized X1 BASIC program (--ascii writes text instead)
    .asc          X1 BASIC program text
    .png (others) 128x128 image of all 256 characters

Options:
    --start <code>      First character to write (default: 0)
    --end <code>        Last character to write (default: 255)
    --load-start <code> Where .bin data (or --load-mode start) begins
    --load-mode <mode>  'original' or 'start' for .bas/.asc input
    --reduce <mode>     none, reduce, dither, edfs or retro for image input
    --interleaved       Write .bin output in the x3 layout
    --in-interleaved    Read .bin input in the x3 layout
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from .character_store import CharacterStore
from .color_quantizer import ReduceMode
from .constants import MAX_BAS_FILE_SIZE, MAX_BIN_FILE_SIZE, TOTAL_CHARS
from .exceptions import PCGEditorError, format_error_message
from .logging_config import setup_logging
from .program_codec import LoadMode, load_program, save_ascii, save_binary
from .raster_codec import load_raster, save_raster
from .raw_codec import load_bin, save_bin
from .security_utils import validate_file_path, validate_output_path
from .settings_manager import SettingsManager, get_settings

BIN_EXTENSIONS = {".bin"}
PROGRAM_EXTENSIONS = {".bas", ".asc"}
IMAGE_EXTENSIONS = {".png", ".gif", ".bmp", ".jpg", ".jpeg", ".webp"}
# Formats Pillow cannot write from a palette image
RGB_ONLY_EXTENSIONS = {".jpg", ".jpeg", ".webp"}


def parse_code(value: str) -> int:
    """Parse a character code given in decimal, 0x hex or $ hex"""
    text = value.strip()
    try:
        code = int(text[1:], 16) if text.startswith("$") else int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid character code: {value!r}")
    if not 0 <= code < TOTAL_CHARS:
        raise argparse.ArgumentTypeError(f"character code out of range: {value!r}")
    return code


def _file_kind(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in BIN_EXTENSIONS:
        return "bin"
    if suffix in PROGRAM_EXTENSIONS:
        return "bas"
    if suffix in IMAGE_EXTENSIONS:
        return "image"
    raise PCGEditorError(f"Unsupported file type: {path.name}")


def build_parser(settings: SettingsManager) -> argparse.ArgumentParser:
    start, end = settings.get_export_range()
    defaults = settings.get_conversion_defaults()

    parser = argparse.ArgumentParser(
        prog="pcg-convert",
        description="Convert X1 PCG data between .bin, .bas/.asc and image files",
    )
    parser.add_argument("input", type=Path, help="Input file")
    parser.add_argument("output", type=Path, help="Output file")
    parser.add_argument("--start", type=parse_code, default=start,
                        help="First character to write")
    parser.add_argument("--end", type=parse_code, default=end,
                        help="Last character to write")
    parser.add_argument("--load-start", type=parse_code,
                        default=defaults["load_start"],
                        help="First character code for loaded data")
    parser.add_argument("--load-mode", choices=[m.value for m in LoadMode],
                        default=defaults["bas_load_mode"],
                        help="Target codes for program input")
    parser.add_argument("--reduce", choices=[m.value for m in ReduceMode],
                        default=defaults["reduce_mode"],
                        help="Color reduction for image input")
    parser.add_argument("--interleaved", action="store_true",
                        default=defaults["bin_interleaved"],
                        help="Write .bin output in the triple-speed (x3) layout")
    parser.add_argument("--in-interleaved", action="store_true",
                        help="Read .bin input in the triple-speed (x3) layout")
    parser.add_argument("--ascii", action="store_true",
                        help="Write .bas output as program text")
    parser.add_argument("--log-level", default="WARNING",
                        help="Log level (DEBUG, INFO, WARNING, ERROR)")
    return parser


def read_input(path: Path, store: CharacterStore, args: argparse.Namespace) -> int:
    """Load an input file into the store, returning the character count"""
    kind = _file_kind(path)

    if kind == "image":
        return load_raster(path, store, ReduceMode(args.reduce))

    max_size = MAX_BIN_FILE_SIZE if kind == "bin" else MAX_BAS_FILE_SIZE
    with open(validate_file_path(path, max_size=max_size), "rb") as f:
        data = f.read()

    if kind == "bin":
        return load_bin(data, store, args.load_start, args.in_interleaved)
    return load_program(data, store, args.load_start, LoadMode(args.load_mode))


def write_output(path: Path, store: CharacterStore, args: argparse.Namespace) -> None:
    """Write the store to an output file"""
    kind = _file_kind(path)
    output_file = validate_output_path(path)

    if kind == "image":
        image = save_raster(store)
        if path.suffix.lower() in RGB_ONLY_EXTENSIONS:
            image = image.convert("RGB")
        image.save(output_file)
        return

    if kind == "bin":
        data = save_bin(store, args.start, args.end, args.interleaved)
    elif args.ascii or path.suffix.lower() == ".asc":
        data = save_ascii(store, args.start, args.end).encode("ascii")
    else:
        data = save_binary(store, args.start, args.end)

    with open(output_file, "wb") as f:
        f.write(data)


def main(argv: Optional[list[str]] = None,
         settings: Optional[SettingsManager] = None) -> int:
    settings = settings or get_settings()
    args = build_parser(settings).parse_args(argv)
    setup_logging(args.log_level)

    store = CharacterStore()
    try:
        count = read_input(args.input, store, args)
        write_output(args.output, store, args)
    except (PCGEditorError, OSError) as e:
        print(f"Error: {format_error_message('convert ' + str(args.input), e)}",
              file=sys.stderr)
        return 1

    settings.remember_conversion(_file_kind(args.input), str(args.input),
                                 str(args.output), args.start, args.end)

    print(f"Loaded {count} characters from {args.input}")
    print(f"Wrote {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
