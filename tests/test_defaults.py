from __future__ import annotations

from vim_config.autocmds.defaults import (
    FILETYPE_GROUP,
    GENERAL_GROUP,
    TRAILING_WHITESPACE_COMMAND,
    YANK_HIGHLIGHT_MS,
)
from vim_config.host import RecordingHost
from vim_config.keymaps import DEFAULT_KEYMAPS, KeymapRegistry, load_default_keymaps
from vim_config.session import EditorConfig


def make_config(tmp_path) -> tuple[EditorConfig, RecordingHost]:
    host = RecordingHost()
    config = EditorConfig(host).load(home=str(tmp_path))
    return config, host


def test_load_default_keymaps_binds_every_declared_mode() -> None:
    registry = KeymapRegistry()

    bound = load_default_keymaps(registry)

    expected = sum(len(spec.modes) for spec in DEFAULT_KEYMAPS)
    assert len(bound) == expected
    assert registry.leader == " "
    assert registry.resolve("n", "<Space>sv").description == "Split window vertically"
    assert registry.resolve("x", "J").command == ":move '>+1<CR>gv=gv"
    assert registry.resolve("i", "<C-s>").command == "<Esc>:w<CR>a"


def test_load_default_keymaps_filters() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry, include=("n:<C-s>", "i:<C-s>"), exclude=("i:<C-s>",))

    assert registry.stats().binding_count == 1
    assert registry.resolve("n", "<C-s>") is not None


def test_reload_is_idempotent(tmp_path) -> None:
    config, _ = make_config(tmp_path)
    first = (config.keymaps.stats().binding_count, config.autocmds.stats().rule_count)

    config.load(home=str(tmp_path))
    config.load(home=str(tmp_path))

    second = (config.keymaps.stats().binding_count, config.autocmds.stats().rule_count)
    assert first == second
    assert config.autocmds.stats().groups == (GENERAL_GROUP, FILETYPE_GROUP)
    assert config.loads == 3


def test_resolver_uses_timeoutlen_option(tmp_path) -> None:
    config, _ = make_config(tmp_path)

    result = config.resolver.resolve("n", "<leader>s")

    assert result.status == "pending"
    assert result.timeout_ms == 300


def test_press_executes_command_through_host(tmp_path) -> None:
    config, host = make_config(tmp_path)

    result = config.press("n", " qq")

    assert result.status == "match"
    assert host.executed == [":qa<CR>"]


def test_press_reports_failing_callback(tmp_path) -> None:
    config, host = make_config(tmp_path)

    def broken() -> None:
        raise RuntimeError("no lsp attached")

    config.keymaps.bind("n", "<leader>fm", broken)
    config.press("n", "<leader>fm")

    assert len(host.errors) == 1
    assert str(host.errors[0]) == "no lsp attached"


def test_write_runs_whitespace_strip_and_creates_directories(tmp_path) -> None:
    config, host = make_config(tmp_path)
    target = tmp_path / "nested" / "dir" / "file.txt"

    report = config.fire("BufWritePre", buffer=1, filename=str(target))

    assert report.ok
    assert host.executed == [TRAILING_WHITESPACE_COMMAND]
    assert target.parent.is_dir()


def test_write_skips_directory_creation_for_urls(tmp_path, monkeypatch) -> None:
    config, _ = make_config(tmp_path)
    monkeypatch.chdir(tmp_path)

    config.fire("BufWritePre", filename="scp://host/path/file.txt")

    assert not (tmp_path / "scp:").exists()


def test_yank_highlight(tmp_path) -> None:
    config, host = make_config(tmp_path)

    config.fire("TextYankPost", buffer=2)

    assert host.highlights == [(2, YANK_HIGHLIGHT_MS)]


def test_resize_equalizes_splits(tmp_path) -> None:
    config, host = make_config(tmp_path)

    config.fire("VimResized")

    assert host.executed == ["wincmd ="]


def test_help_filetype_gets_buffer_local_close_map(tmp_path) -> None:
    config, _ = make_config(tmp_path)

    config.fire("FileType", buffer=9, filetype="help", filename="vim.txt")

    keymap = config.keymaps.resolve("n", "q", scope=9)
    assert keymap is not None
    assert keymap.buffer_local
    assert keymap.options.silent is True
    assert keymap.command == "<cmd>close<cr>"
    assert config.options.get_local(9, "buflisted") is False
    assert config.keymaps.resolve("n", "q") is None


def test_markdown_and_gitcommit_settings(tmp_path) -> None:
    config, _ = make_config(tmp_path)

    config.fire("FileType", buffer=1, filetype="markdown")
    config.fire("FileType", buffer=2, filetype="gitcommit")

    assert config.options.get_local(1, "wrap") is True
    assert config.options.get_local(1, "spell") is True
    assert config.options.get_local(2, "colorcolumn") == "72"
    assert config.options.get_local(2, "wrap") is False
    assert config.keymaps.resolve("n", "q", scope=1) is None


def test_terminal_buffers_drop_numbers(tmp_path) -> None:
    config, _ = make_config(tmp_path)

    config.fire("TermOpen", buffer=4, filename="term://bash")

    assert config.options.get_local(4, "number") is False
    assert config.options.get_local(4, "relativenumber") is False
    assert config.options.get_local(4, "signcolumn") == "no"
    assert config.options.get("number") is True


def test_read_restores_last_position_within_buffer(tmp_path) -> None:
    config, host = make_config(tmp_path)
    host.marks[(1, '"')] = (12, 4)
    host.line_counts[1] = 40
    host.marks[(2, '"')] = (90, 0)
    host.line_counts[2] = 10

    config.fire("BufReadPost", buffer=1, filename="a.py")
    config.fire("BufReadPost", buffer=2, filename="b.py")

    assert host.cursors == {1: (12, 4)}
    assert host.errors == []


class StrictCursorHost(RecordingHost):
    def set_cursor(self, buffer: int, position: tuple[int, int]) -> None:
        raise ValueError(f"Column {position[1]} outside line {position[0]}")


def test_read_ignores_mark_the_host_rejects(tmp_path) -> None:
    host = StrictCursorHost()
    config = EditorConfig(host).load(home=str(tmp_path))
    host.marks[(1, '"')] = (3, 80)
    host.line_counts[1] = 10

    report = config.fire("BufReadPost", buffer=1, filename="a.py")

    assert report.ok
    assert host.errors == []
    assert host.cursors == {}


def test_buffer_wiped_drops_local_state(tmp_path) -> None:
    config, _ = make_config(tmp_path)
    config.fire("FileType", buffer=9, filetype="qf")

    config.buffer_wiped(9)

    assert config.keymaps.resolve("n", "q", scope=9) is None
    assert config.options.get_local(9, "buflisted") is None
