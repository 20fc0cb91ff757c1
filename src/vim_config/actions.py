"""Tagged action variants shared by keymaps and autocommands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union


@dataclass(frozen=True, slots=True)
class Command:
    """Editor command text handed to the host for execution."""

    text: str

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("command text cannot be empty")

    @property
    def label(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class Callback:
    """Python callable invoked in-process."""

    handler: Callable[..., object]
    name: str | None = None

    def __post_init__(self) -> None:
        if not callable(self.handler):
            raise TypeError("handler must be callable")
        if self.name is None:
            label = getattr(self.handler, "__qualname__", None) or repr(self.handler)
            object.__setattr__(self, "name", label)

    @property
    def label(self) -> str:
        return self.name or "<callback>"

    def __call__(self, *args: object, **kwargs: object) -> object:
        return self.handler(*args, **kwargs)


Action = Union[Command, Callback]


def coerce_action(value: object) -> Action:
    """Wrap plain strings as ``Command`` and plain callables as ``Callback``."""

    if isinstance(value, (Command, Callback)):
        return value
    if isinstance(value, str):
        return Command(value)
    if callable(value):
        return Callback(value)
    raise TypeError(f"Cannot use {type(value).__name__} as an action")


__all__ = ["Action", "Callback", "Command", "coerce_action"]
