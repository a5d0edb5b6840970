#!/usr/bin/env python3
"""
Session persistence for the PCG editor
Saves both character stores and the editor state as one JSON document
"""

import base64
import binascii
import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, Union

from .character_store import CharacterStore
from .constants import COLOR_WHITE, FONT_DATA_SIZE
from .edit_region import EditMode
from .logging_config import get_logger

logger = get_logger("session_store")

SESSION_VERSION = 1


def encode_snapshot(data: bytes) -> str:
    """Encode a byte snapshot as base64 text"""
    return base64.b64encode(bytes(data)).decode("ascii")


def decode_snapshot(text: str) -> bytes:
    """Decode base64 text produced by encode_snapshot"""
    return base64.b64decode(text.encode("ascii"), validate=True)


@dataclass
class EditorState:
    """Editor state kept between sessions"""

    edit_mode: EditMode = EditMode.SEPARATE
    cursor_x: int = 0
    cursor_y: int = 0
    current_color: int = COLOR_WHITE
    last_direction: str = "right"
    current_char_code: int = 0
    edit_chr_code: int = 0
    grid_visible: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EditorState":
        """Build a state from saved values, using defaults for missing keys"""
        known = {f.name for f in fields(cls)}
        state = cls(**{key: value for key, value in data.items() if key in known})
        state.edit_mode = EditMode(state.edit_mode)
        return state

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["edit_mode"] = int(self.edit_mode)
        return data


@dataclass
class SavedSession:
    """Everything restored from a session file"""

    pcg_data: bytes
    edit_buffer: bytes
    editor_state: EditorState = field(default_factory=EditorState)
    font_data: Optional[bytes] = None

    def restore(self, definition: CharacterStore, edit_buffer: CharacterStore) -> None:
        """
        Rehydrate both stores.

        Raises:
            ValidationError: If a snapshot is not 6144 bytes
        """
        definition.set_all_data(self.pcg_data)
        edit_buffer.set_all_data(self.edit_buffer)


class SessionStore:
    """Reads and writes a session JSON file"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def save(self, definition: CharacterStore, edit_buffer: CharacterStore,
             editor_state: EditorState, font_data: Optional[bytes] = None) -> None:
        """Write the session file (OSError propagates)"""
        document = {
            "version": SESSION_VERSION,
            "pcg_data": encode_snapshot(definition.get_all_data()),
            "edit_buffer": encode_snapshot(edit_buffer.get_all_data()),
            "editor_state": editor_state.to_dict(),
        }
        if font_data is not None:
            document["font_data"] = encode_snapshot(font_data)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(document, f, indent=2)
        logger.debug("Session saved to %s", self.path)

    def load(self) -> Optional[SavedSession]:
        """
        Read the session file.

        Returns:
            The saved session, or None if there is none or it is unreadable
        """
        if not self.path.exists():
            logger.info("No saved session found")
            return None

        try:
            with open(self.path) as f:
                document = json.load(f)
            pcg_data = decode_snapshot(document["pcg_data"])
            edit_buffer = decode_snapshot(document["edit_buffer"])
            editor_state = EditorState.from_dict(document.get("editor_state") or {})
        except (OSError, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error("Failed to load session: %s", e)
            return None

        font_data = None
        if "font_data" in document:
            try:
                decoded = decode_snapshot(document["font_data"])
            except (binascii.Error, ValueError, AttributeError):
                decoded = b""
            if len(decoded) == FONT_DATA_SIZE:
                font_data = decoded
            else:
                logger.warning("Ignoring saved font data of %d bytes", len(decoded))

        return SavedSession(pcg_data, edit_buffer, editor_state, font_data)

    def clear(self) -> None:
        """Delete the session file"""
        if self.path.exists():
            self.path.unlink()
