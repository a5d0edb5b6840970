#!/usr/bin/env python3
"""
Path checks for files read and written by the PCG tools
"""

import pathlib
from typing import Union

from .exceptions import PCGEditorError

PathLike = Union[str, pathlib.Path]

_URI_SCHEMES = ("file:", "http:", "https:", "ftp:", "sftp:")
_PROTECTED_DIRS = ("/etc/", "/usr/", "/bin/", "/sbin/", "/lib/", "/sys/", "/proc/", "/dev/")


class SecurityError(PCGEditorError):
    """Raised when a file path is unsafe to use"""
    pass


def _check_path_format(path_str: str) -> None:
    if path_str.startswith(_URI_SCHEMES):
        raise SecurityError(f"URI schemes not allowed: {path_str}")
    if path_str.startswith("\\\\"):
        raise SecurityError(f"UNC paths not allowed: {path_str}")


def _check_protected(path: pathlib.Path) -> None:
    path_str = path.as_posix() + ("/" if path.is_dir() else "")
    for pattern in _PROTECTED_DIRS:
        if path_str.startswith(pattern):
            raise SecurityError(f"Access to system directories not allowed: {path}")


def validate_file_path(file_path: PathLike, max_size: int) -> str:
    """
    Validate a path that is about to be read.

    Args:
        file_path: Path to validate
        max_size: Maximum allowed file size in bytes

    Returns:
        Absolute path as a string

    Raises:
        SecurityError: If the path is unsafe, not a file or too large
    """
    _check_path_format(str(file_path))
    path = pathlib.Path(file_path).resolve()
    _check_protected(path)

    if path.exists():
        if not path.is_file():
            raise SecurityError(f"Path is not a file: {path}")
        file_size = path.stat().st_size
        if file_size > max_size:
            raise SecurityError(f"File too large: {file_size} bytes (max {max_size})")

    return str(path)


def validate_output_path(file_path: PathLike) -> str:
    """
    Validate a path that is about to be written.

    Raises:
        SecurityError: If the path is unsafe or its directory is missing
    """
    _check_path_format(str(file_path))
    path = pathlib.Path(file_path).resolve()
    _check_protected(path)

    if not path.parent.exists():
        raise SecurityError(f"Parent directory does not exist: {path.parent}")
    if path.exists() and not path.is_file():
        raise SecurityError(f"Path is not a file: {path}")

    return str(path)
