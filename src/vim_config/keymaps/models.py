"""Dataclasses describing modes, keymaps and their options."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from vim_config.actions import Action, Callback, Command
from vim_config.errors import InvalidModeError


class Mode(str, Enum):
    """Input modes a keymap can be registered for."""

    NORMAL = "normal"
    INSERT = "insert"
    VISUAL = "visual"
    VISUAL_BLOCK = "visual-block"
    TERMINAL = "terminal"
    COMMAND = "command"

    @property
    def short(self) -> str:
        return _SHORT_NAMES[self]

    @classmethod
    def parse(cls, value: object) -> "Mode":
        """Accept a ``Mode``, its name, or the vim short code (``n``, ``x``...)."""

        if isinstance(value, Mode):
            return value
        if isinstance(value, str):
            key = value.strip().lower().replace("_", "-")
            mode = _ALIASES.get(key)
            if mode is not None:
                return mode
        raise InvalidModeError(value)


_SHORT_NAMES = {
    Mode.NORMAL: "n",
    Mode.INSERT: "i",
    Mode.VISUAL: "v",
    Mode.VISUAL_BLOCK: "x",
    Mode.TERMINAL: "t",
    Mode.COMMAND: "c",
}

_ALIASES = {mode.value: mode for mode in Mode}
_ALIASES.update({short: mode for mode, short in _SHORT_NAMES.items()})
_ALIASES["visualblock"] = Mode.VISUAL_BLOCK


BufferScope = Optional[int]
"""``None`` is the global scope; an ``int`` is a buffer id."""


@dataclass(frozen=True, slots=True)
class KeymapOptions:
    """Metadata attached to a keymap (``desc``, ``silent``, ``noremap``, ``buffer``)."""

    description: str = ""
    silent: bool = False
    noremap: bool = True
    buffer: BufferScope = None

    def __post_init__(self) -> None:
        if self.buffer is not None and (
            isinstance(self.buffer, bool) or not isinstance(self.buffer, int)
        ):
            raise TypeError("buffer must be an int buffer id or None")


@dataclass(frozen=True, slots=True)
class Keymap:
    """A bound trigger: ``mode`` + normalized ``lhs`` -> ``rhs``."""

    mode: Mode
    lhs: str
    rhs: Action
    options: KeymapOptions = field(default_factory=KeymapOptions)
    keys: tuple[str, ...] = ()
    source: str | None = None

    def __post_init__(self) -> None:
        if not self.lhs:
            raise ValueError("keymap lhs cannot be empty")
        if not self.keys:
            object.__setattr__(self, "keys", (self.lhs,))

    @property
    def scope(self) -> BufferScope:
        return self.options.buffer

    @property
    def buffer_local(self) -> bool:
        return self.options.buffer is not None

    @property
    def description(self) -> str:
        return self.options.description

    @property
    def is_callback(self) -> bool:
        return isinstance(self.rhs, Callback)

    @property
    def command(self) -> str | None:
        return self.rhs.text if isinstance(self.rhs, Command) else None


__all__ = [
    "BufferScope",
    "Keymap",
    "KeymapOptions",
    "Mode",
]
