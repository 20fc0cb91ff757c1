"""Bridges Textual key/resize/buffer events into an ``EditorConfig``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from vim_config.autocmds import DispatchReport, Event
from vim_config.keymaps import Keymap, Mode, ResolutionResult, parse_keys
from vim_config.session import EditorConfig


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


_SPECIAL_KEYS = {
    "escape": "Esc",
    "enter": "CR",
    "tab": "Tab",
    "backspace": "BS",
    "delete": "Del",
    "space": "Space",
    "up": "Up",
    "down": "Down",
    "left": "Left",
    "right": "Right",
    "home": "Home",
    "end": "End",
    "pageup": "PageUp",
    "pagedown": "PageDown",
}

_MODIFIERS = {"ctrl": "C", "shift": "S", "alt": "A", "meta": "A", "super": "D"}


def textual_key_to_token(key: str, character: Optional[str] = None) -> str:
    """Translate a Textual key name (``ctrl+s``, ``escape``...) to vim notation."""

    parts = key.split("+")
    name = parts[-1]
    modifiers = [_MODIFIERS[part] for part in parts[:-1] if part in _MODIFIERS]
    if not modifiers and character and character.isprintable():
        return "<Space>" if character == " " else character
    base = _SPECIAL_KEYS.get(name.lower(), name)
    if len(base) == 1 and not modifiers:
        return base
    return parse_keys("<" + "-".join(modifiers + [base]) + ">")[0]


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks the adapter uses to update Textual widgets."""

    update_status: Callable[[str], None] = _noop
    show_pending: Callable[[str], None] = _noop
    log: Callable[[str], None] = _noop


class TextualConfigAdapter:
    """Feeds keys through the resolver and turns UI events into autocommands."""

    def __init__(
        self,
        config: EditorConfig,
        hooks: TextualUIHooks,
        *,
        mode: Mode | str = Mode.NORMAL,
    ) -> None:
        self.config = config
        self.hooks = hooks
        self.mode = Mode.parse(mode)
        self.buffer: Optional[int] = None
        self._pending: list[str] = []
        self._held: Optional[Keymap] = None

    @property
    def pending(self) -> str:
        return "".join(self._pending)

    def set_mode(self, mode: Mode | str) -> None:
        self.mode = Mode.parse(mode)
        self._reset_pending()
        self.hooks.update_status(self.mode.value.upper())

    def handle_textual_key(
        self, key: str, *, character: Optional[str] = None
    ) -> ResolutionResult:
        return self._feed(textual_key_to_token(key, character))

    def handle_timeout(self) -> None:
        """``timeoutlen`` expired: run the held match, if any, and drop the prefix."""

        if not self._pending:
            return
        self._log("timeout ->", pending=self.pending)
        held = self._held
        if held is None:
            self._reset_pending()
            return
        self._commit(held)

    def _feed(self, token: str) -> ResolutionResult:
        self._pending.append(token)
        result = self.config.resolver.resolve(
            self.mode, self._pending, scope=self.buffer
        )
        self._log("key ->", token=token, status=result.status, pending=self.pending)
        if result.status == "match" and result.keymap is not None:
            if result.next_expected:
                # A longer mapping shares this prefix; wait for more keys.
                self._held = result.keymap
                self.hooks.show_pending(self.pending)
                return result
            self._commit(result.keymap)
            return result
        if result.status == "pending":
            self.hooks.show_pending(self.pending)
            return result
        if self._held is not None:
            self._commit(self._held)
            return result
        self._reset_pending()
        return result

    def _commit(self, keymap: Keymap) -> None:
        leftover = self._pending[len(keymap.keys) :]
        self._reset_pending()
        self.hooks.update_status(keymap.description or keymap.rhs.label)
        self.config.execute(keymap)
        for token in leftover:
            self._feed(token)

    def handle_resize(self, width: int, height: int) -> DispatchReport:
        report = self.config.fire(
            Event.VIM_RESIZED,
            buffer=self.buffer,
            data={"width": width, "height": height},
        )
        self._log("resize ->", width=width, height=height, invoked=report.count)
        return report

    def open_buffer(self, buffer: int, filename: str, filetype: str = "") -> None:
        self.buffer = buffer
        for event in (Event.BUF_READ_POST, Event.FILE_TYPE):
            report = self.config.fire(
                event, buffer=buffer, filename=filename, filetype=filetype
            )
            self._log(f"{event.value} ->", invoked=report.count)

    def save_buffer(self, filename: str) -> DispatchReport:
        report = self.config.fire(
            Event.BUF_WRITE_PRE, buffer=self.buffer, filename=filename
        )
        self._log("BufWritePre ->", invoked=report.count, failures=len(report.failures))
        return report

    def close_buffer(self) -> None:
        if self.buffer is None:
            return
        self.config.buffer_wiped(self.buffer)
        self._log("BufDelete ->", buffer=self.buffer)
        self.buffer = None

    def _reset_pending(self) -> None:
        self._pending.clear()
        self._held = None
        self.hooks.show_pending("")

    def _log(self, prefix: str, **fields: object) -> None:
        parts = [prefix, f"mode={self.mode.value}"]
        parts.extend(f"{key}={value!r}" for key, value in fields.items())
        self.hooks.log(" ".join(parts))


__all__ = ["TextualConfigAdapter", "TextualUIHooks", "textual_key_to_token"]
