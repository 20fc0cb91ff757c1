"""Global and buffer-local editor options."""

from __future__ import annotations

import os
from typing import Dict, Mapping, Optional

OptionValue = object

_MISSING = object()


def _normalize(name: str) -> str:
    cleaned = name.strip().lower()
    if not cleaned:
        raise ValueError("option name cannot be empty")
    return cleaned


class OptionsStore:
    """Key/value option table with per-buffer overrides (``opt_local``)."""

    def __init__(self, defaults: Optional[Mapping[str, OptionValue]] = None) -> None:
        self._global: Dict[str, OptionValue] = {}
        self._local: Dict[int, Dict[str, OptionValue]] = {}
        if defaults:
            self.update(defaults)

    def set(self, name: str, value: OptionValue) -> None:
        self._global[_normalize(name)] = value

    def update(self, values: Mapping[str, OptionValue]) -> None:
        for name, value in values.items():
            self.set(name, value)

    def get(self, name: str, default: OptionValue = None) -> OptionValue:
        return self._global.get(_normalize(name), default)

    def append(self, name: str, value: str) -> str:
        """Add ``value`` to a comma-separated list option (``opt.x:append``)."""

        key = _normalize(name)
        current = str(self._global.get(key) or "")
        items = [item for item in current.split(",") if item]
        if value not in items:
            items.append(value)
        joined = ",".join(items)
        self._global[key] = joined
        return joined

    def set_local(self, buffer: int, name: str, value: OptionValue) -> None:
        self._local.setdefault(buffer, {})[_normalize(name)] = value

    def get_local(
        self, buffer: int, name: str, default: OptionValue = None
    ) -> OptionValue:
        key = _normalize(name)
        local = self._local.get(buffer, {}).get(key, _MISSING)
        if local is not _MISSING:
            return local
        return self._global.get(key, default)

    def clear_buffer(self, buffer: int) -> None:
        self._local.pop(buffer, None)

    def snapshot(self, buffer: Optional[int] = None) -> Mapping[str, OptionValue]:
        merged = dict(self._global)
        if buffer is not None:
            merged.update(self._local.get(buffer, {}))
        return merged

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _normalize(name) in self._global


DEFAULT_OPTIONS: Mapping[str, OptionValue] = {
    "number": True,
    "relativenumber": True,
    "tabstop": 2,
    "shiftwidth": 2,
    "expandtab": True,
    "autoindent": True,
    "smartindent": True,
    "wrap": False,
    "ignorecase": True,
    "smartcase": True,
    "hlsearch": False,
    "incsearch": True,
    "cursorline": True,
    "termguicolors": True,
    "signcolumn": "yes",
    "scrolloff": 8,
    "sidescrolloff": 8,
    "backspace": "indent,eol,start",
    "splitright": True,
    "splitbelow": True,
    "swapfile": False,
    "backup": False,
    "undofile": True,
    "completeopt": "menuone,noselect",
    "updatetime": 50,
    "timeoutlen": 300,
    "encoding": "utf-8",
    "fileencoding": "utf-8",
    "conceallevel": 0,
    "pumheight": 10,
    "showmode": False,
    "showtabline": 2,
    "laststatus": 3,
    "foldmethod": "expr",
    "foldexpr": "nvim_treesitter#foldexpr()",
    "foldenable": False,
    "foldlevel": 99,
}


def load_default_options(store: OptionsStore, *, home: Optional[str] = None) -> None:
    store.update(DEFAULT_OPTIONS)
    store.append("clipboard", "unnamedplus")
    base = home if home is not None else os.path.expanduser("~")
    store.set("undodir", os.path.join(base, ".vim", "undodir"))


__all__ = ["DEFAULT_OPTIONS", "OptionsStore", "OptionValue", "load_default_options"]
