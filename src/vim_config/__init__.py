"""Declarative editor configuration: keymaps, options and autocommands."""

__all__ = [
    "actions",
    "adapters",
    "autocmds",
    "errors",
    "host",
    "keymaps",
    "options",
    "runtime",
    "session",
]

__version__ = "0.1.0"
