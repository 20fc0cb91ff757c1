"""Exception taxonomy shared by the keymap and autocommand layers."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from vim_config.autocmds.models import AutocmdRule, EventContext


class VimConfigError(Exception):
    """Base class for configuration errors."""


class InvalidModeError(VimConfigError, ValueError):
    """Raised when a keymap references a mode that does not exist."""

    def __init__(self, mode: object) -> None:
        super().__init__(f"Unsupported mode {mode!r}")
        self.mode = mode


class GroupNotFoundError(VimConfigError, KeyError):
    """Raised when an autocommand group is referenced before it is defined."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Autocommand group '{self.name}' is not defined"


class ActionInvocationError(VimConfigError, RuntimeError):
    """Wraps an exception raised by an autocommand action during ``fire``.

    Never raised out of the dispatcher; instances are logged, handed to the
    host error channel and collected on the dispatch report.
    """

    def __init__(self, rule: "AutocmdRule", context: "EventContext") -> None:
        super().__init__(
            f"Autocommand {rule.id} ({rule.group.name}) failed on "
            f"{context.event.value} for {context.match!r}"
        )
        self.rule = rule
        self.context = context


__all__ = [
    "VimConfigError",
    "InvalidModeError",
    "GroupNotFoundError",
    "ActionInvocationError",
]
