"""Built-in autocommand groups (``General`` and ``FileTypeSettings``)."""

from __future__ import annotations

import os
import re
from pathlib import Path

from vim_config.host import EditorHost
from vim_config.keymaps import KeymapRegistry
from vim_config.options import OptionsStore

from .dispatcher import AutocmdDispatcher
from .models import AutocmdRule, Event, EventContext

GENERAL_GROUP = "General"
FILETYPE_GROUP = "FileTypeSettings"

YANK_HIGHLIGHT_MS = 200
TRAILING_WHITESPACE_COMMAND = r"%s/\s\+$//e"
CLOSE_WITH_Q_FILETYPES = (
    "help",
    "lspinfo",
    "man",
    "qf",
    "query",
    "notify",
    "startuptime",
)

_URL_RE = re.compile(r"^\w\w+://")


def _buffer(context: EventContext) -> int:
    # Buffer 0 is the current buffer, as in the editor API.
    return context.buffer if context.buffer is not None else 0


def load_default_autocmds(
    dispatcher: AutocmdDispatcher,
    *,
    host: EditorHost,
    keymaps: KeymapRegistry,
    options: OptionsStore,
) -> list[AutocmdRule]:
    """(Re)define both default groups; safe to call on every reload."""

    def highlight_yank(context: EventContext) -> None:
        host.highlight_yank(context.buffer, YANK_HIGHLIGHT_MS)

    def close_with_q(context: EventContext) -> None:
        buffer = _buffer(context)
        options.set_local(buffer, "buflisted", False)
        keymaps.bind(
            "n",
            "q",
            "<cmd>close<cr>",
            buffer=buffer,
            silent=True,
            source=GENERAL_GROUP,
        )

    def restore_last_position(context: EventContext) -> None:
        buffer = _buffer(context)
        mark = host.get_mark(buffer, '"')
        if 0 < mark[0] <= host.line_count(buffer):
            try:
                host.set_cursor(buffer, mark)
            except ValueError:
                # Mark no longer fits the buffer; leave the cursor alone.
                pass

    def terminal_options(context: EventContext) -> None:
        buffer = _buffer(context)
        options.set_local(buffer, "number", False)
        options.set_local(buffer, "relativenumber", False)
        options.set_local(buffer, "signcolumn", "no")

    def create_parent_directory(context: EventContext) -> None:
        if not context.filename or _URL_RE.match(context.filename):
            return
        real = os.path.realpath(context.filename)
        Path(real).parent.mkdir(parents=True, exist_ok=True)

    def markdown_settings(context: EventContext) -> None:
        buffer = _buffer(context)
        options.set_local(buffer, "wrap", True)
        options.set_local(buffer, "spell", True)

    def gitcommit_settings(context: EventContext) -> None:
        buffer = _buffer(context)
        options.set_local(buffer, "spell", True)
        options.set_local(buffer, "colorcolumn", "72")

    groups = {
        GENERAL_GROUP: (
            (Event.TEXT_YANK_POST, "*", highlight_yank, "Highlight on yank"),
            (
                Event.BUF_WRITE_PRE,
                "*",
                TRAILING_WHITESPACE_COMMAND,
                "Remove trailing whitespace on save",
            ),
            (Event.VIM_RESIZED, "*", "wincmd =", "Equalize splits on resize"),
            (
                Event.FILE_TYPE,
                CLOSE_WITH_Q_FILETYPES,
                close_with_q,
                "Close auxiliary windows with q",
            ),
            (
                Event.BUF_READ_POST,
                None,
                restore_last_position,
                "Go to last location when opening a file",
            ),
            (Event.TERM_OPEN, "*", terminal_options, "Plain terminal buffers"),
            (
                Event.BUF_WRITE_PRE,
                "*",
                create_parent_directory,
                "Create missing directories when saving",
            ),
        ),
        FILETYPE_GROUP: (
            (Event.FILE_TYPE, "markdown", markdown_settings, "Markdown wrap + spell"),
            (Event.FILE_TYPE, "gitcommit", gitcommit_settings, "Commit message spell"),
        ),
    }

    rules: list[AutocmdRule] = []
    for name, declarations in groups.items():
        group = dispatcher.define_group(name, clear=True)
        for event, pattern, action, description in declarations:
            rules.append(
                dispatcher.add_rule(
                    group, event, pattern, action, description=description
                )
            )
    return rules


__all__ = [
    "CLOSE_WITH_Q_FILETYPES",
    "FILETYPE_GROUP",
    "GENERAL_GROUP",
    "TRAILING_WHITESPACE_COMMAND",
    "YANK_HIGHLIGHT_MS",
    "load_default_autocmds",
]
