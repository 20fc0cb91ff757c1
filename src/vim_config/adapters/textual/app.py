"""Executable Textual app that exercises the configuration layer."""

from __future__ import annotations

import argparse
import os
from typing import Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Log, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use vim_config.adapters.textual.app"
    ) from exc

from vim_config.host import RecordingHost
from vim_config.keymaps import Mode
from vim_config.runtime import telemetry
from vim_config.session import EditorConfig

from .controller import TextualConfigAdapter, TextualUIHooks


class DemoHost(RecordingHost):
    """Recording host that also mirrors commands and errors into the log view."""

    def __init__(self) -> None:
        super().__init__()
        self.app: Optional["VimConfigApp"] = None

    def execute(self, command: str, context: object | None = None) -> None:
        super().execute(command, context)
        if self.app is not None:
            self.app.write_log(f"execute :: {command}")

    def report_error(self, error: Exception) -> None:
        super().report_error(error)
        if self.app is not None:
            self.app.write_log(f"error :: {error}")


class VimConfigApp(App[None]):
    """Shows resolved keymaps and fired autocommands as you type."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #status {
        height: 1;
        background: $accent;
        color: $text;
        padding: 0 1;
    }

    #pending {
        height: 1;
        padding: 0 1;
    }

    #log {
        height: 1fr;
        border: round $accent;
    }
    """

    def __init__(
        self,
        *,
        filename: Optional[str] = None,
        filetype: str = "",
    ) -> None:
        super().__init__()
        self.host = DemoHost()
        self.host.app = self
        self.config = EditorConfig(self.host, logger_name="vim_config.app").load()
        hooks = TextualUIHooks(
            update_status=self._set_status,
            show_pending=self._set_pending,
            log=self.write_log,
        )
        self.adapter = TextualConfigAdapter(self.config, hooks)
        self._filename = filename
        self._filetype = filetype
        self._timer = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        with Vertical():
            yield Static("NORMAL", id="status")
            yield Static("", id="pending")
            yield Log(id="log")
        yield Footer()

    def on_mount(self) -> None:
        if self._filename:
            self.adapter.open_buffer(1, self._filename, self._filetype)

    def on_key(self, event: events.Key) -> None:
        event.stop()
        if self.adapter.mode is Mode.NORMAL and event.key == "i":
            self.adapter.set_mode(Mode.INSERT)
            return
        if self.adapter.mode is Mode.INSERT and event.key == "escape":
            self.adapter.set_mode(Mode.NORMAL)
            return
        self.adapter.handle_textual_key(event.key, character=event.character)
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        if self.adapter.pending:
            self._timer = self.set_timer(
                self.adapter.config.resolver.timeout_ms / 1000,
                self.adapter.handle_timeout,
            )

    def on_resize(self, event: events.Resize) -> None:
        self.adapter.handle_resize(event.size.width, event.size.height)

    def write_log(self, line: str) -> None:
        if self.is_mounted:
            self.query_one("#log", Log).write_line(line)

    def _set_status(self, text: str) -> None:
        self.query_one("#status", Static).update(text)

    def _set_pending(self, text: str) -> None:
        self.query_one("#pending", Static).update(text)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("filename", nargs="?", help="File to pretend to open")
    parser.add_argument("--filetype", default="", help="Filetype for FileType rules")
    parser.add_argument(
        "--log-preset",
        default=os.getenv("VIM_CONFIG_LOG_PRESET", "quiet"),
        choices=sorted(telemetry.PRESETS),
        help="telemetry preset",
    )
    args = parser.parse_args(argv)
    telemetry.configure(preset=args.log_preset)
    VimConfigApp(filename=args.filename, filetype=args.filetype).run()


if __name__ == "__main__":  # pragma: no cover
    main()
