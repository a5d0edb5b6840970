"""
X1 PCG Editor
Character storage, editing transforms and file codecs for X1 PCG data
"""

from .character_store import CharacterStore
from .color_quantizer import ReduceMode, reduce_colors
from .edit_region import EditMode, EditRegion, resolve_region
from .exceptions import DecodeError, FormatError, PCGEditorError, ValidationError
from .geometry import TransformKind, apply_transform
from .program_codec import LoadMode, load_program, save_ascii, save_binary
from .raster_codec import load_raster, save_raster
from .raw_codec import load_bin, save_bin

__version__ = "1.0.0"
__all__ = [
    "CharacterStore",
    "DecodeError",
    "EditMode",
    "EditRegion",
    "FormatError",
    "LoadMode",
    "PCGEditorError",
    "ReduceMode",
    "TransformKind",
    "ValidationError",
    "apply_transform",
    "load_bin",
    "load_program",
    "load_raster",
    "reduce_colors",
    "resolve_region",
    "save_ascii",
    "save_bin",
    "save_binary",
    "save_raster",
]
