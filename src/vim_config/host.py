"""Outbound surface towards the editor runtime hosting the configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Tuple

Position = Tuple[int, int]
"""``(line, column)``; lines are 1-based, columns 0-based (vim marks)."""


class EditorHost(Protocol):
    """Operations the configuration layer asks of the editor."""

    def execute(self, command: str, context: object | None = None) -> None: ...

    def report_error(self, error: Exception) -> None: ...

    def highlight_yank(self, buffer: Optional[int], timeout_ms: int) -> None: ...

    def get_mark(self, buffer: int, name: str) -> Position: ...

    def line_count(self, buffer: int) -> int: ...

    def set_cursor(self, buffer: int, position: Position) -> None: ...


@dataclass
class RecordingHost:
    """In-memory host that records every outbound call.

    Used by the tests and by headless embedding; the Textual demo wraps it.
    """

    commands: List[Tuple[str, object | None]] = field(default_factory=list)
    errors: List[Exception] = field(default_factory=list)
    highlights: List[Tuple[Optional[int], int]] = field(default_factory=list)
    marks: Dict[Tuple[int, str], Position] = field(default_factory=dict)
    line_counts: Dict[int, int] = field(default_factory=dict)
    cursors: Dict[int, Position] = field(default_factory=dict)

    def execute(self, command: str, context: object | None = None) -> None:
        self.commands.append((command, context))

    def report_error(self, error: Exception) -> None:
        self.errors.append(error)

    def highlight_yank(self, buffer: Optional[int], timeout_ms: int) -> None:
        self.highlights.append((buffer, timeout_ms))

    def get_mark(self, buffer: int, name: str) -> Position:
        return self.marks.get((buffer, name), (0, 0))

    def line_count(self, buffer: int) -> int:
        return self.line_counts.get(buffer, 0)

    def set_cursor(self, buffer: int, position: Position) -> None:
        line, _ = position
        if line < 1 or line > self.line_count(buffer):
            raise ValueError(f"Cursor position {position} outside buffer {buffer}")
        self.cursors[buffer] = position

    @property
    def executed(self) -> List[str]:
        return [command for command, _ in self.commands]


__all__ = ["EditorHost", "Position", "RecordingHost"]
