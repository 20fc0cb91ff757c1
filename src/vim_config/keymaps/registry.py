"""Keymap registry storing bindings per mode and scope."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Literal, Optional

from vim_config.actions import coerce_action
from vim_config.runtime.telemetry import span

from .models import BufferScope, Keymap, KeymapOptions, Mode
from .notation import normalize_lhs, parse_keys

Precedence = Literal["buffer", "global"]

_ANY_SCOPE = object()
_UNSET: Any = object()


@dataclass(slots=True)
class RegistryStats:
    """Lightweight snapshot describing registry state."""

    binding_count: int
    buffer_local_count: int
    modes: tuple[str, ...]
    buffers: tuple[int, ...]


class KeymapRegistry:
    """Owns every keymap, keyed by ``(mode, scope)`` then normalized ``lhs``.

    Binding the same ``(mode, lhs, scope)`` twice replaces the earlier
    keymap. ``resolve`` with a buffer scope consults the buffer-local table
    and the global table in the order given by ``precedence``; with
    ``fallback=False`` only the requested scope is consulted.
    """

    def __init__(
        self,
        *,
        leader: str = "\\",
        local_leader: str | None = None,
        precedence: Precedence = "buffer",
        fallback: bool = True,
        logger_name: str | None = None,
    ) -> None:
        self.leader = leader
        self.local_leader = local_leader
        self._tables: Dict[tuple[Mode, BufferScope], Dict[str, Keymap]] = {}
        self._logger_name = logger_name
        self._revision = 0
        self.precedence = precedence
        self.fallback = fallback

    @property
    def precedence(self) -> Precedence:
        return self._precedence

    @precedence.setter
    def precedence(self, value: Precedence) -> None:
        if value not in ("buffer", "global"):
            raise ValueError(f"Unknown precedence '{value}'")
        self._precedence: Precedence = value
        self._touch()

    @property
    def fallback(self) -> bool:
        return self._fallback

    @fallback.setter
    def fallback(self, value: bool) -> None:
        self._fallback = bool(value)
        self._touch()

    def revision(self) -> int:
        return self._revision

    def normalize(self, lhs: str) -> str:
        return normalize_lhs(lhs, leader=self.leader, local_leader=self.local_leader)

    def bind(
        self,
        mode: Mode | str,
        lhs: str,
        rhs: object,
        options: KeymapOptions | None = None,
        *,
        description: str | None = None,
        silent: bool | None = None,
        noremap: bool | None = None,
        buffer: BufferScope = _UNSET,
        source: str | None = None,
    ) -> Keymap:
        """Register ``lhs`` -> ``rhs`` in ``mode``; last write wins."""

        resolved_mode = Mode.parse(mode)
        if not lhs:
            raise ValueError("lhs cannot be empty")
        opts = _merge_options(
            options,
            description=description,
            silent=silent,
            noremap=noremap,
            buffer=buffer,
        )
        with span(
            "keymaps::bind",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": resolved_mode.value, "lhs": lhs},
        ) as handle:
            keys = parse_keys(lhs, leader=self.leader, local_leader=self.local_leader)
            keymap = Keymap(
                mode=resolved_mode,
                lhs="".join(keys),
                rhs=coerce_action(rhs),
                options=opts,
                keys=keys,
                source=source,
            )
            table = self._tables.setdefault((resolved_mode, opts.buffer), {})
            if keymap.lhs in table:
                handle.add_metadata("replaced", True)
                # Re-insert so iteration order reflects the latest definition.
                del table[keymap.lhs]
            table[keymap.lhs] = keymap
            self._touch()
            return keymap

    def unbind(self, mode: Mode | str, lhs: str, scope: BufferScope = None) -> bool:
        resolved_mode = Mode.parse(mode)
        with span(
            "keymaps::unbind",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": resolved_mode.value, "lhs": lhs},
        ):
            table = self._tables.get((resolved_mode, scope))
            if not table or not lhs:
                return False
            removed = table.pop(self.normalize(lhs), None)
            if removed is None:
                return False
            if not table:
                del self._tables[(resolved_mode, scope)]
            self._touch()
            return True

    def resolve(
        self, mode: Mode | str, lhs: str, scope: BufferScope = None
    ) -> Optional[Keymap]:
        resolved_mode = Mode.parse(mode)
        if not lhs:
            return None
        normalized = self.normalize(lhs)
        for candidate in self.lookup_order(scope):
            keymap = self._tables.get((resolved_mode, candidate), {}).get(normalized)
            if keymap is not None:
                return keymap
        return None

    def lookup_order(self, scope: BufferScope) -> tuple[BufferScope, ...]:
        if scope is None:
            return (None,)
        if not self.fallback:
            return (scope,)
        if self.precedence == "buffer":
            return (scope, None)
        return (None, scope)

    def iter_bindings(
        self, mode: Mode | str | None = None, *, scope: object = _ANY_SCOPE
    ) -> Iterator[Keymap]:
        wanted = Mode.parse(mode) if mode is not None else None
        for (table_mode, table_scope), table in self._tables.items():
            if wanted is not None and table_mode is not wanted:
                continue
            if scope is not _ANY_SCOPE and table_scope != scope:
                continue
            yield from table.values()

    def wipe_buffer(self, buffer: int) -> int:
        """Drop every keymap local to ``buffer``; returns how many were removed."""

        with span(
            "keymaps::wipe_buffer",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"buffer": buffer},
        ) as handle:
            doomed = [key for key in self._tables if key[1] == buffer]
            removed = sum(len(self._tables.pop(key)) for key in doomed)
            handle.add_metadata("removed", removed)
            if removed:
                self._touch()
            return removed

    def stats(self) -> RegistryStats:
        total = 0
        local = 0
        buffers: set[int] = set()
        for (_, scope), table in self._tables.items():
            total += len(table)
            if scope is not None:
                local += len(table)
                buffers.add(scope)
        return RegistryStats(
            binding_count=total,
            buffer_local_count=local,
            modes=tuple(sorted({mode.value for mode, _ in self._tables})),
            buffers=tuple(sorted(buffers)),
        )

    def _touch(self) -> None:
        self._revision += 1


def _merge_options(
    options: KeymapOptions | None,
    *,
    description: str | None,
    silent: bool | None,
    noremap: bool | None,
    buffer: object,
) -> KeymapOptions:
    base = options or KeymapOptions()
    return KeymapOptions(
        description=base.description if description is None else description,
        silent=base.silent if silent is None else silent,
        noremap=base.noremap if noremap is None else noremap,
        buffer=base.buffer if buffer is _UNSET else buffer,  # type: ignore[arg-type]
    )


__all__ = [
    "KeymapRegistry",
    "Precedence",
    "RegistryStats",
]
