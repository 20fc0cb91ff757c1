"""Autocommand groups, rules and event dispatch."""

from .defaults import load_default_autocmds
from .dispatcher import (
    AutocmdDispatcher,
    CommandExecutor,
    DispatcherStats,
    DispatchReport,
    ErrorReporter,
)
from .models import (
    AutocmdGroup,
    AutocmdRule,
    Event,
    EventContext,
    RuleHandle,
    pattern_matches,
)

__all__ = [
    "AutocmdDispatcher",
    "CommandExecutor",
    "DispatcherStats",
    "DispatchReport",
    "ErrorReporter",
    "AutocmdGroup",
    "AutocmdRule",
    "Event",
    "EventContext",
    "RuleHandle",
    "pattern_matches",
    "load_default_autocmds",
]
