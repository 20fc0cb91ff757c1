"""Events, groups and rules managed by the autocommand dispatcher."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatchcase
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from vim_config.actions import Action


class Event(str, Enum):
    """Editor lifecycle events rules can subscribe to."""

    BUF_WRITE_PRE = "BufWritePre"
    BUF_READ_PRE = "BufReadPre"
    BUF_READ_POST = "BufReadPost"
    BUF_NEW_FILE = "BufNewFile"
    BUF_ENTER = "BufEnter"
    BUF_DELETE = "BufDelete"
    FILE_TYPE = "FileType"
    VIM_RESIZED = "VimResized"
    TEXT_YANK_POST = "TextYankPost"
    TERM_OPEN = "TermOpen"

    @classmethod
    def parse(cls, value: object) -> "Event":
        if isinstance(value, Event):
            return value
        if isinstance(value, str):
            event = _EVENT_LOOKUP.get(value.strip().lower())
            if event is not None:
                return event
        raise ValueError(f"Unknown autocommand event {value!r}")

    @property
    def matches_filetype(self) -> bool:
        """``FileType`` patterns match the filetype name, not the file path."""

        return self is Event.FILE_TYPE


_EVENT_LOOKUP = {event.value.lower(): event for event in Event}
_EVENT_LOOKUP.update(
    {
        "buffer-saved": Event.BUF_WRITE_PRE,
        "save": Event.BUF_WRITE_PRE,
        "buffer-read": Event.BUF_READ_POST,
        "file-type-detected": Event.FILE_TYPE,
        "window-resized": Event.VIM_RESIZED,
        "text-yanked": Event.TEXT_YANK_POST,
        "terminal-opened": Event.TERM_OPEN,
        "buffer-entered": Event.BUF_ENTER,
        "buffer-deleted": Event.BUF_DELETE,
        "new-file": Event.BUF_NEW_FILE,
    }
)


def parse_events(events: Event | str | Iterable[Event | str]) -> frozenset[Event]:
    if isinstance(events, (str, Event)):
        items: Iterable[Event | str] = (events,)
    else:
        items = events
    parsed = frozenset(Event.parse(item) for item in items)
    if not parsed:
        raise ValueError("at least one event is required")
    return parsed


def parse_patterns(pattern: str | Iterable[str] | None) -> tuple[str, ...]:
    if pattern is None:
        return ("*",)
    if isinstance(pattern, str):
        values: Iterable[str] = (pattern,)
    else:
        values = pattern
    cleaned = tuple(dict.fromkeys(p.strip() for p in values if p and p.strip()))
    if not cleaned:
        raise ValueError("pattern cannot be empty")
    return cleaned


def pattern_matches(pattern: str, subject: str, *, filetype: bool = False) -> bool:
    """Glob-match ``subject``; path patterns without ``/`` also try the basename."""

    if pattern == "*":
        return True
    if fnmatchcase(subject, pattern):
        return True
    if filetype or "/" in pattern:
        return False
    return fnmatchcase(posixpath.basename(subject), pattern)


@dataclass(frozen=True, slots=True)
class EventContext:
    """Payload describing a fired event.

    ``pattern`` is filled in by the dispatcher with the rule pattern that
    matched before the action is invoked.
    """

    event: Event
    buffer: Optional[int] = None
    filename: str = ""
    filetype: str = ""
    data: Mapping[str, object] = field(default_factory=dict)
    pattern: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "event", Event.parse(self.event))
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    @property
    def match(self) -> str:
        if self.event.matches_filetype:
            return self.filetype or self.filename
        return self.filename


@dataclass(slots=True)
class AutocmdGroup:
    """Named, clearable collection of rules.

    ``generation`` increases every time the group is cleared; rules stamped
    with an older generation are inert.
    """

    name: str
    clear: bool = True
    generation: int = 0
    deleted: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("group name cannot be empty")


@dataclass(slots=True, eq=False)
class AutocmdRule:
    id: int
    group: AutocmdGroup
    events: frozenset[Event]
    patterns: tuple[str, ...]
    action: Action
    once: bool = False
    description: str = ""
    generation: int = 0
    fired: int = 0
    retired: bool = False

    @property
    def active(self) -> bool:
        return (
            not self.retired
            and not self.group.deleted
            and self.generation == self.group.generation
        )

    @property
    def state(self) -> str:
        if not self.active:
            return "retired"
        return "fired" if self.fired else "registered"

    def match(self, context: EventContext) -> Optional[str]:
        """Return the first pattern matching ``context`` or ``None``."""

        if context.event not in self.events:
            return None
        subject = context.match
        filetype = context.event.matches_filetype
        for pattern in self.patterns:
            if pattern_matches(pattern, subject, filetype=filetype):
                return pattern
        return None


RuleHandle = AutocmdRule


__all__ = [
    "AutocmdGroup",
    "AutocmdRule",
    "Event",
    "EventContext",
    "RuleHandle",
    "parse_events",
    "parse_patterns",
    "pattern_matches",
]
