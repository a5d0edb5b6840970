#!/usr/bin/env python3
"""
Custom exceptions and error handling utilities for the PCG editor.

This module defines domain-specific exceptions and provides utilities
for consistent error reporting across the codecs and the CLI.
"""


class PCGEditorError(Exception):
    """Base exception for all PCG editor errors"""
    pass


class ValidationError(PCGEditorError):
    """Raised when a payload length or numeric range is invalid"""
    pass


class FormatError(PCGEditorError):
    """Raised when file contents do not match the expected layout"""
    pass


class DecodeError(PCGEditorError):
    """Raised when an image cannot be decoded"""
    pass


def format_error_message(operation: str, error: Exception) -> str:
    """
    Format an error message for user display.

    Args:
        operation: Description of the operation that failed
        error: The exception that was raised

    Returns:
        User-friendly error message
    """
    if isinstance(error, FileNotFoundError):
        return f"File not found during {operation}"
    elif isinstance(error, PermissionError):
        return f"Permission denied during {operation}"
    elif isinstance(error, DecodeError):
        return f"Cannot decode image: {error}"
    elif isinstance(error, FormatError):
        return f"Invalid file format: {error}"
    elif isinstance(error, ValidationError):
        return f"Invalid input: {error}"
    else:
        return f"Failed to {operation}: {error}"
