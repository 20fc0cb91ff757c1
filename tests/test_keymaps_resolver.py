from __future__ import annotations

import pytest

from vim_config.keymaps import KeymapRegistry, KeymapResolver


def build_registry(*lhs: str, leader: str = " ") -> KeymapRegistry:
    registry = KeymapRegistry(leader=leader)
    for index, keys in enumerate(lhs):
        registry.bind("n", keys, f":cmd{index}<CR>")
    return registry


def test_resolver_matches_exact_sequence() -> None:
    registry = build_registry("<leader>sv")
    resolver = KeymapResolver(registry)

    result = resolver.resolve("n", ("<Space>", "s", "v"))

    assert result.status == "match"
    assert result.keymap is not None
    assert result.keymap.lhs == "<Space>sv"
    assert result.consumed == 3


def test_resolver_reports_pending_for_prefix() -> None:
    registry = build_registry("<leader>sv", "<leader>sh")
    resolver = KeymapResolver(registry, timeout_ms=300)

    result = resolver.resolve("n", " s")

    assert result.status == "pending"
    assert result.next_expected == ("h", "v")
    assert result.timeout_ms == 300


def test_resolver_match_with_longer_candidates_keeps_hint() -> None:
    registry = build_registry("<leader>q", "<leader>qq")
    resolver = KeymapResolver(registry, timeout_ms=300)

    result = resolver.resolve("n", "<leader>q")

    assert result.status == "match"
    assert result.next_expected == ("q",)
    assert result.timeout_ms == 300


def test_resolver_miss_reports_consumed_prefix() -> None:
    registry = build_registry("gg")
    resolver = KeymapResolver(registry)

    result = resolver.resolve("n", "gx")

    assert result.status == "miss"
    assert result.consumed == 1


def test_resolver_empty_input_is_a_miss() -> None:
    resolver = KeymapResolver(build_registry("gg"))

    assert resolver.resolve("n", "").status == "miss"


def test_resolver_prefers_buffer_local_binding() -> None:
    registry = build_registry("q")
    local = registry.bind("n", "q", "<cmd>close<cr>", buffer=3)
    resolver = KeymapResolver(registry)

    assert resolver.resolve("n", "q", scope=3).keymap is local
    assert resolver.resolve("n", "q").keymap is not local


def test_resolver_cache_refreshes_on_revision() -> None:
    registry = build_registry()
    resolver = KeymapResolver(registry)

    assert resolver.resolve("n", "x").status == "miss"

    registry.bind("n", "x", '"_x')

    match = resolver.resolve("n", "x")
    assert match.status == "match"
    assert match.keymap is not None
    assert match.keymap.command == '"_x'


def test_resolver_follows_precedence_changes() -> None:
    registry = build_registry("q")
    local = registry.bind("n", "q", "<cmd>close<cr>", buffer=3)
    resolver = KeymapResolver(registry)

    assert resolver.resolve("n", "q", scope=3).keymap is local

    registry.precedence = "global"

    assert resolver.resolve("n", "q", scope=3).keymap is not local

    registry.fallback = False

    assert resolver.resolve("n", "q", scope=3).keymap is local


def test_resolver_rejects_non_positive_timeout() -> None:
    with pytest.raises(ValueError):
        KeymapResolver(build_registry(), timeout_ms=0)
