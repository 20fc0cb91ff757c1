"""Keymap registry and key-sequence resolution."""

from .models import BufferScope, Keymap, KeymapOptions, Mode
from .notation import normalize_lhs, parse_keys
from .registry import KeymapRegistry, Precedence, RegistryStats
from .resolver import KeymapResolver, ResolutionResult
from .defaults import DEFAULT_KEYMAPS, KeymapSpec, load_default_keymaps

__all__ = [
    "BufferScope",
    "Keymap",
    "KeymapOptions",
    "Mode",
    "normalize_lhs",
    "parse_keys",
    "KeymapRegistry",
    "Precedence",
    "RegistryStats",
    "KeymapResolver",
    "ResolutionResult",
    "DEFAULT_KEYMAPS",
    "KeymapSpec",
    "load_default_keymaps",
]
