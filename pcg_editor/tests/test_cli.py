#!/usr/bin/env python3
"""
Tests for the pcg-convert command line tool
"""

import argparse

import pytest
from PIL import Image

from pcg_editor.cli import main, parse_code
from pcg_editor.program_codec import save_binary
from pcg_editor.raw_codec import save_bin
from pcg_editor.settings_manager import SettingsManager


@pytest.fixture
def settings(temp_dir):
    return SettingsManager("test_app", settings_dir=temp_dir / "settings")


@pytest.fixture
def bin_file(temp_dir, pattern_store):
    path = temp_dir / "pcg.bin"
    path.write_bytes(save_bin(pattern_store, 0, 255))
    return path


def _run(args, settings):
    return main([str(a) for a in args] + ["--log-level", "ERROR"], settings)


@pytest.mark.unit
class TestParseCode:
    @pytest.mark.parametrize("text,expected", [
        ("65", 65), ("0x41", 65), ("$41", 65), ("255", 255),
    ])
    def test_valid(self, text, expected):
        assert parse_code(text) == expected

    @pytest.mark.parametrize("text", ["256", "-1", "abc"])
    def test_invalid(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_code(text)


@pytest.mark.integration
class TestConvert:
    """Test whole conversions through files"""

    def test_bin_to_png_and_back(self, temp_dir, bin_file, pattern_data, settings):
        png = temp_dir / "pcg.png"
        out = temp_dir / "out.bin"

        assert _run([bin_file, png], settings) == 0
        assert _run([png, out], settings) == 0
        assert out.read_bytes() == pattern_data

    def test_bin_to_bas(self, temp_dir, bin_file, pattern_store, settings):
        out = temp_dir / "pcg.bas"

        assert _run([bin_file, out, "--start", "0x10", "--end", "$11"], settings) == 0
        assert out.read_bytes() == save_binary(pattern_store, 16, 17)

    def test_bin_to_ascii(self, temp_dir, bin_file, settings):
        out = temp_dir / "pcg.asc"

        assert _run([bin_file, out, "--end", "0"], settings) == 0
        assert out.read_text().startswith("60960DEFCHR$(0)=HEXCHR$(")

    def test_bas_with_ascii_flag(self, temp_dir, bin_file, settings):
        out = temp_dir / "pcg.bas"

        assert _run([bin_file, out, "--end", "1", "--ascii"], settings) == 0
        assert b"\x00" not in out.read_bytes()

    def test_interleaved_output(self, temp_dir, bin_file, pattern_store, settings):
        out = temp_dir / "pcg_x3.bin"

        assert _run([bin_file, out, "--interleaved"], settings) == 0
        assert out.read_bytes() == save_bin(pattern_store, 0, 255, True)

    def test_interleaved_input(self, temp_dir, pattern_store, pattern_data, settings):
        src = temp_dir / "pcg_x3.bin"
        src.write_bytes(save_bin(pattern_store, 0, 255, True))
        out = temp_dir / "pcg.bin"

        assert _run([src, out, "--in-interleaved"], settings) == 0
        assert out.read_bytes() == pattern_data

    def test_jpeg_output(self, temp_dir, bin_file, settings):
        out = temp_dir / "pcg.jpg"

        assert _run([bin_file, out], settings) == 0
        with Image.open(out) as image:
            assert image.format == "JPEG"
            assert image.size == (128, 128)

    def test_bin_with_trailing_bytes(self, temp_dir, pattern_data, settings):
        src = temp_dir / "padded.bin"
        src.write_bytes(pattern_data + bytes(10))
        out = temp_dir / "pcg.bin"

        assert _run([src, out], settings) == 0
        assert out.read_bytes() == pattern_data

    def test_load_start(self, temp_dir, pattern_store, settings):
        src = temp_dir / "one.bin"
        src.write_bytes(pattern_store.get_character(3))
        out = temp_dir / "all.bin"

        assert _run([src, out, "--load-start", "200"], settings) == 0
        data = out.read_bytes()
        assert data[200 * 24:201 * 24] == pattern_store.get_character(3)
        assert data[:200 * 24] == bytes(200 * 24)

    def test_records_recent_file(self, temp_dir, bin_file, settings):
        assert _run([bin_file, temp_dir / "x.png"], settings) == 0
        assert settings.get_recent_files("bin") == [str(bin_file)]


@pytest.mark.integration
class TestErrors:
    """Test failures reported through the exit code"""

    def test_missing_input(self, temp_dir, settings, capsys):
        assert _run([temp_dir / "missing.bin", temp_dir / "out.png"], settings) == 1
        assert "File not found" in capsys.readouterr().err

    def test_unsupported_type(self, temp_dir, bin_file, settings, capsys):
        assert _run([bin_file, temp_dir / "out.txt"], settings) == 1
        assert "Unsupported file type" in capsys.readouterr().err

    def test_overflowing_load(self, temp_dir, bin_file, settings, capsys):
        assert _run([bin_file, temp_dir / "out.png", "--load-start", "1"], settings) == 1
        assert "Invalid input" in capsys.readouterr().err

    def test_bad_code_argument(self, temp_dir, bin_file, settings):
        with pytest.raises(SystemExit):
            _run([bin_file, temp_dir / "out.png", "--start", "300"], settings)
