"""Owned configuration state: options, keymaps and autocommands for one host."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from vim_config.actions import Callback, Command
from vim_config.autocmds import AutocmdDispatcher, DispatchReport, Event, EventContext
from vim_config.autocmds.defaults import load_default_autocmds
from vim_config.host import EditorHost, RecordingHost
from vim_config.keymaps import (
    BufferScope,
    Keymap,
    KeymapRegistry,
    KeymapResolver,
    Precedence,
    ResolutionResult,
)
from vim_config.keymaps.defaults import load_default_keymaps
from vim_config.options import OptionsStore, load_default_options
from vim_config.runtime import telemetry


class EditorConfig:
    """Everything a configuration script mutates, constructed once per host.

    ``load`` runs the built-in configuration and can be re-run at any time:
    options are reassigned, keymaps replace their previous definitions and
    autocommand groups are cleared before being rebuilt.
    """

    def __init__(
        self,
        host: Optional[EditorHost] = None,
        *,
        precedence: Precedence = "buffer",
        fallback: bool = True,
        logger_name: str | None = None,
    ) -> None:
        self.host: EditorHost = host if host is not None else RecordingHost()
        self._logger_name = logger_name
        self.options = OptionsStore()
        self.keymaps = KeymapRegistry(
            precedence=precedence,
            fallback=fallback,
            logger_name=logger_name,
        )
        self.resolver = KeymapResolver(self.keymaps, logger_name=logger_name)
        self.autocmds = AutocmdDispatcher(
            executor=self.host.execute,
            on_error=self.host.report_error,
            logger_name=logger_name,
        )
        self.loads = 0

    def load(self, *, home: Optional[str] = None) -> "EditorConfig":
        with telemetry.span(
            "session::load",
            logger_name=self._logger_name,
            component="session",
            metadata={"load": self.loads + 1},
        ) as handle:
            load_default_options(self.options, home=home)
            keymaps = load_default_keymaps(self.keymaps)
            rules = load_default_autocmds(
                self.autocmds,
                host=self.host,
                keymaps=self.keymaps,
                options=self.options,
            )
            timeout = self.options.get("timeoutlen")
            if isinstance(timeout, int) and timeout > 0:
                self.resolver.timeout_ms = timeout
            self.loads += 1
            handle.add_metadata("keymaps", len(keymaps))
            handle.add_metadata("autocmds", len(rules))
        return self

    def press(
        self,
        mode: str,
        keys: str | Sequence[str],
        *,
        buffer: BufferScope = None,
    ) -> ResolutionResult:
        """Resolve a complete ``keys`` sequence and run the bound action.

        The sequence is taken as final: a match that is also the prefix of a
        longer mapping still runs. Hosts feeding keys one at a time hold such
        matches until ``timeoutlen`` expires and then call ``execute``.
        """

        result = self.resolver.resolve(mode, keys, scope=buffer)
        if result.status == "match" and result.keymap is not None:
            self.execute(result.keymap)
        return result

    def execute(self, keymap: Keymap) -> None:
        """Run ``keymap``'s action; a failure is reported to the host."""

        rhs = keymap.rhs
        try:
            if isinstance(rhs, Command):
                self.host.execute(rhs.text, keymap)
            elif isinstance(rhs, Callback):
                rhs()
        except Exception as exc:
            telemetry.record_event(
                "keymaps.action_failed",
                level="error",
                data={
                    "mode": keymap.mode.value,
                    "lhs": keymap.lhs,
                    "error": f"{type(exc).__name__}: {exc}",
                },
                logger_name=self._logger_name,
            )
            self.host.report_error(exc)

    def fire(
        self,
        event: Event | str,
        context: EventContext | Mapping[str, object] | None = None,
        **fields: object,
    ) -> DispatchReport:
        return self.autocmds.fire(event, context, **fields)

    def buffer_wiped(self, buffer: int) -> DispatchReport:
        """Fire ``BufDelete`` then drop the buffer's local keymaps and options."""

        report = self.autocmds.fire(Event.BUF_DELETE, buffer=buffer)
        self.keymaps.wipe_buffer(buffer)
        self.options.clear_buffer(buffer)
        return report


__all__ = ["EditorConfig"]
