"""Built-in keymaps: leader, window/buffer/tab management and editing helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from .models import Keymap
from .registry import KeymapRegistry

DEFAULT_LEADER = " "


@dataclass(frozen=True, slots=True)
class KeymapSpec:
    """Unbound keymap declaration; ``lhs`` may still contain ``<leader>``."""

    modes: tuple[str, ...]
    lhs: str
    rhs: str
    description: str = ""
    silent: bool = False

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(f"{mode}:{self.lhs}" for mode in self.modes)


def _n(lhs: str, rhs: str, description: str = "", *, silent: bool = False) -> KeymapSpec:
    return KeymapSpec(("n",), lhs, rhs, description, silent)


def _quiet(modes: str, lhs: str, rhs: str) -> KeymapSpec:
    return KeymapSpec(tuple(modes), lhs, rhs, silent=True)


DEFAULT_KEYMAPS: tuple[KeymapSpec, ...] = (
    _n("<leader>nh", ":nohl<CR>", "Clear search highlights"),
    _quiet("n", "x", '"_x'),
    # Windows
    _n("<leader>sv", "<C-w>v", "Split window vertically"),
    _n("<leader>sh", "<C-w>s", "Split window horizontally"),
    _n("<leader>se", "<C-w>=", "Make splits equal size"),
    _n("<leader>sx", "<cmd>close<CR>", "Close current split"),
    _n("<C-h>", "<C-w>h", "Navigate left"),
    _n("<C-j>", "<C-w>j", "Navigate down"),
    _n("<C-k>", "<C-w>k", "Navigate up"),
    _n("<C-l>", "<C-w>l", "Navigate right"),
    _quiet("n", "<C-Up>", ":resize -2<CR>"),
    _quiet("n", "<C-Down>", ":resize +2<CR>"),
    _quiet("n", "<C-Left>", ":vertical resize -2<CR>"),
    _quiet("n", "<C-Right>", ":vertical resize +2<CR>"),
    # Buffers
    _quiet("n", "<S-l>", ":bnext<CR>"),
    _quiet("n", "<S-h>", ":bprevious<CR>"),
    _n("<leader>bd", ":bdelete<CR>", "Delete buffer"),
    # Tabs
    _n("<leader>to", "<cmd>tabnew<CR>", "Open new tab"),
    _n("<leader>tx", "<cmd>tabclose<CR>", "Close current tab"),
    _n("<leader>tn", "<cmd>tabn<CR>", "Go to next tab"),
    _n("<leader>tp", "<cmd>tabp<CR>", "Go to previous tab"),
    _n("<leader>tf", "<cmd>tabnew %<CR>", "Open current buffer in new tab"),
    # Moving text
    _quiet("n", "<A-j>", "<Esc>:m .+1<CR>==gi"),
    _quiet("n", "<A-k>", "<Esc>:m .-2<CR>==gi"),
    _quiet("v", "<A-j>", ":m '>+1<CR>gv=gv"),
    _quiet("v", "<A-k>", ":m '<-2<CR>gv=gv"),
    _quiet("v", "<", "<gv"),
    _quiet("v", ">", ">gv"),
    _quiet("x", "J", ":move '>+1<CR>gv=gv"),
    _quiet("x", "K", ":move '<-2<CR>gv=gv"),
    _quiet("v", "p", '"_dP'),
    # Files
    _n("<C-s>", ":w<CR>", "Save file"),
    KeymapSpec(("i",), "<C-s>", "<Esc>:w<CR>a", "Save file"),
    _n("<leader>qq", ":qa<CR>", "Quit all"),
    _n("<leader>fm", "<cmd>lua vim.lsp.buf.format({ async = true })<CR>", "Format file"),
    # Quickfix and diagnostics
    _n("<leader>xn", ":cnext<CR>", "Next quickfix"),
    _n("<leader>xp", ":cprev<CR>", "Previous quickfix"),
    _n("[d", "<cmd>lua vim.diagnostic.goto_prev()<CR>", "Previous diagnostic"),
    _n("]d", "<cmd>lua vim.diagnostic.goto_next()<CR>", "Next diagnostic"),
    _n("<leader>e", "<cmd>lua vim.diagnostic.open_float()<CR>", "Show diagnostic error"),
    _n("<leader>q", "<cmd>lua vim.diagnostic.setloclist()<CR>", "Open diagnostic list"),
)


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    leader: str | None = DEFAULT_LEADER,
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
    extra_keymaps: Iterable[KeymapSpec] | None = None,
) -> list[Keymap]:
    """Bind the built-in keymaps; ``include``/``exclude`` take ``"<mode>:<lhs>"`` ids.

    ``leader`` is applied to the registry before binding, matching vim where
    ``mapleader`` must be set before the maps that use it.
    """

    if leader is not None:
        registry.leader = leader
        registry.local_leader = leader

    filters = _build_filters(include, exclude)
    bound: list[Keymap] = []
    for spec in (*DEFAULT_KEYMAPS, *(extra_keymaps or ())):
        for mode, spec_id in zip(spec.modes, spec.ids):
            if not _selected(spec_id, filters):
                continue
            bound.append(
                registry.bind(
                    mode,
                    spec.lhs,
                    spec.rhs,
                    description=spec.description,
                    silent=spec.silent,
                    source="defaults",
                )
            )
    return bound


def _build_filters(
    include: Sequence[str] | None, exclude: Sequence[str] | None
) -> tuple[set[str] | None, set[str]]:
    include_set = set(include) if include else None
    exclude_set = set(exclude or ())
    return include_set, exclude_set


def _selected(item_id: str, filters: tuple[set[str] | None, set[str]]) -> bool:
    include, exclude = filters
    if include is not None and item_id not in include:
        return False
    return item_id not in exclude


__all__ = ["DEFAULT_KEYMAPS", "DEFAULT_LEADER", "KeymapSpec", "load_default_keymaps"]
