"""Trie-based resolution of partially typed key sequences."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Sequence

from vim_config.runtime.telemetry import span

from .models import BufferScope, Keymap, Mode
from .notation import parse_keys
from .registry import KeymapRegistry

DEFAULT_TIMEOUT_MS = 1000


@dataclass(slots=True)
class TrieNode:
    keymap: Optional[Keymap] = None
    children: Dict[str, "TrieNode"] = field(default_factory=dict)

    def child(self, token: str) -> "TrieNode":
        return self.children.setdefault(token, TrieNode())

    def next_tokens(self) -> tuple[str, ...]:
        return tuple(sorted(self.children))


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome of feeding a key sequence to the resolver.

    ``match`` may still carry ``next_expected`` when a longer mapping shares
    the prefix; hosts that honour ``timeoutlen`` wait ``timeout_ms`` before
    committing to it.
    """

    status: Literal["match", "pending", "miss"]
    keymap: Optional[Keymap] = None
    consumed: int = 0
    next_expected: tuple[str, ...] = ()
    timeout_ms: Optional[int] = None


class KeymapResolver:
    """Builds a trie per ``(mode, scope)`` and walks it token by token."""

    def __init__(
        self,
        registry: KeymapRegistry,
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        logger_name: str | None = None,
    ) -> None:
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")
        self._registry = registry
        self.timeout_ms = timeout_ms
        self._logger_name = logger_name
        self._cache: Dict[tuple[Mode, BufferScope], tuple[int, TrieNode]] = {}

    def resolve(
        self,
        mode: Mode | str,
        keys: str | Sequence[str],
        *,
        scope: BufferScope = None,
    ) -> ResolutionResult:
        resolved_mode = Mode.parse(mode)
        raw = keys if isinstance(keys, str) else "".join(keys)
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": resolved_mode.value, "keys": raw},
        ) as handle:
            if not raw:
                handle.add_metadata("status", "miss")
                return ResolutionResult(status="miss")
            tokens = parse_keys(
                raw,
                leader=self._registry.leader,
                local_leader=self._registry.local_leader,
            )
            node = self._ensure_trie(resolved_mode, scope)
            consumed = 0
            for token in tokens:
                child = node.children.get(token)
                if child is None:
                    handle.add_metadata("status", "miss")
                    return ResolutionResult(status="miss", consumed=consumed)
                node = child
                consumed += 1

            next_expected = node.next_tokens()
            if node.keymap is not None:
                handle.add_metadata("status", "match")
                return ResolutionResult(
                    status="match",
                    keymap=node.keymap,
                    consumed=consumed,
                    next_expected=next_expected,
                    timeout_ms=self.timeout_ms if next_expected else None,
                )
            if next_expected:
                handle.add_metadata("status", "pending")
                return ResolutionResult(
                    status="pending",
                    consumed=consumed,
                    next_expected=next_expected,
                    timeout_ms=self.timeout_ms,
                )
            handle.add_metadata("status", "miss")
            return ResolutionResult(status="miss", consumed=consumed)

    def reset(self) -> None:
        self._cache.clear()

    def _ensure_trie(self, mode: Mode, scope: BufferScope) -> TrieNode:
        revision = self._registry.revision()
        cached = self._cache.get((mode, scope))
        if cached and cached[0] == revision:
            return cached[1]

        root = TrieNode()
        # Lowest precedence first so preferred scopes overwrite shared leaves.
        for candidate in reversed(self._registry.lookup_order(scope)):
            for keymap in self._registry.iter_bindings(mode, scope=candidate):
                node = root
                for token in keymap.keys:
                    node = node.child(token)
                node.keymap = keymap
        self._cache[(mode, scope)] = (revision, root)
        return root


__all__ = ["KeymapResolver", "ResolutionResult", "DEFAULT_TIMEOUT_MS"]
