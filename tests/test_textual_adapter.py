from __future__ import annotations

from typing import List

import pytest

from vim_config.adapters.textual import (
    TextualConfigAdapter,
    TextualUIHooks,
    textual_key_to_token,
)
from vim_config.host import RecordingHost
from vim_config.session import EditorConfig


def make_adapter(tmp_path, **hooks: object) -> tuple[TextualConfigAdapter, RecordingHost]:
    host = RecordingHost()
    config = EditorConfig(host).load(home=str(tmp_path))
    adapter = TextualConfigAdapter(config, TextualUIHooks(**hooks))  # type: ignore[arg-type]
    return adapter, host


@pytest.mark.parametrize(
    ("key", "character", "expected"),
    [
        ("x", "x", "x"),
        ("space", " ", "<Space>"),
        ("ctrl+s", None, "<C-s>"),
        ("shift+l", "L", "<S-l>"),
        ("alt+j", None, "<A-j>"),
        ("ctrl+up", None, "<C-Up>"),
        ("escape", None, "<Esc>"),
        ("enter", "\r", "<CR>"),
        ("f5", None, "<F5>"),
        ("left_square_bracket", "[", "["),
    ],
)
def test_textual_key_to_token(key: str, character: str | None, expected: str) -> None:
    assert textual_key_to_token(key, character) == expected


def test_leader_sequence_goes_pending_then_executes(tmp_path) -> None:
    pending: List[str] = []
    statuses: List[str] = []
    adapter, host = make_adapter(
        tmp_path, show_pending=pending.append, update_status=statuses.append
    )

    first = adapter.handle_textual_key("space", character=" ")
    second = adapter.handle_textual_key("s", character="s")
    third = adapter.handle_textual_key("v", character="v")

    assert (first.status, second.status, third.status) == ("pending", "pending", "match")
    assert "<Space>s" in pending
    assert pending[-1] == ""
    assert host.executed == ["<C-w>v"]
    assert statuses == ["Split window vertically"]
    assert adapter.pending == ""


def test_miss_resets_pending(tmp_path) -> None:
    adapter, host = make_adapter(tmp_path)

    adapter.handle_textual_key("space", character=" ")
    result = adapter.handle_textual_key("z", character="z")

    assert result.status == "miss"
    assert adapter.pending == ""
    assert host.executed == []


def test_timeout_clears_pending(tmp_path) -> None:
    logs: List[str] = []
    adapter, _ = make_adapter(tmp_path, log=logs.append)

    adapter.handle_textual_key("space", character=" ")
    adapter.handle_timeout()

    assert adapter.pending == ""
    assert any(line.startswith("timeout ->") for line in logs)


def test_mode_switch_changes_resolution(tmp_path) -> None:
    adapter, host = make_adapter(tmp_path)

    adapter.set_mode("insert")
    adapter.handle_textual_key("ctrl+s")

    assert host.executed == ["<Esc>:w<CR>a"]


def test_buffer_lifecycle_fires_autocommands(tmp_path) -> None:
    adapter, host = make_adapter(tmp_path)
    target = tmp_path / "out" / "notes.md"

    adapter.open_buffer(3, str(target), "markdown")
    adapter.save_buffer(str(target))
    adapter.handle_resize(120, 40)

    options = adapter.config.options
    assert options.get_local(3, "spell") is True
    assert target.parent.is_dir()
    assert host.executed[-1] == "wincmd ="

    adapter.close_buffer()
    assert adapter.buffer is None
    assert options.get_local(3, "spell") is None


def test_buffer_local_map_resolves_for_open_buffer(tmp_path) -> None:
    adapter, host = make_adapter(tmp_path)

    adapter.open_buffer(5, "/usr/share/man/ls.1", "man")
    adapter.handle_textual_key("q", character="q")

    assert host.executed == ["<cmd>close<cr>"]


def test_ambiguous_match_waits_for_longer_mapping(tmp_path) -> None:
    adapter, host = make_adapter(tmp_path)

    statuses = [
        adapter.handle_textual_key("space", character=" ").status,
        adapter.handle_textual_key("q", character="q").status,
    ]

    assert statuses == ["pending", "match"]
    assert host.executed == []
    assert adapter.pending == "<Space>q"

    adapter.handle_textual_key("q", character="q")

    assert host.executed == [":qa<CR>"]
    assert adapter.pending == ""


def test_timeout_runs_held_match(tmp_path) -> None:
    statuses: List[str] = []
    adapter, host = make_adapter(tmp_path, update_status=statuses.append)

    adapter.handle_textual_key("space", character=" ")
    adapter.handle_textual_key("q", character="q")
    adapter.handle_timeout()

    assert host.executed == ["<cmd>lua vim.diagnostic.setloclist()<CR>"]
    assert statuses == ["Open diagnostic list"]
    assert adapter.pending == ""


def test_unmatched_key_after_held_match_commits_and_replays(tmp_path) -> None:
    adapter, host = make_adapter(tmp_path)
    adapter.config.keymaps.bind("n", "g", ":first<CR>")
    adapter.config.keymaps.bind("n", "gx", ":second<CR>")
    adapter.config.keymaps.bind("n", "z", ":third<CR>")

    adapter.handle_textual_key("g", character="g")
    adapter.handle_textual_key("z", character="z")

    assert host.executed == [":first<CR>", ":third<CR>"]
    assert adapter.pending == ""
