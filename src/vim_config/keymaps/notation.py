"""Key notation parsing (``<leader>nh``, ``<C-s>``, ``<A-j>``...)."""

from __future__ import annotations

import re

LEADER_TOKEN = "<leader>"
LOCAL_LEADER_TOKEN = "<localleader>"

_SPECIAL_KEYS = {
    "cr": "CR",
    "enter": "CR",
    "return": "CR",
    "esc": "Esc",
    "space": "Space",
    "tab": "Tab",
    "bs": "BS",
    "backspace": "BS",
    "del": "Del",
    "up": "Up",
    "down": "Down",
    "left": "Left",
    "right": "Right",
    "home": "Home",
    "end": "End",
    "pageup": "PageUp",
    "pagedown": "PageDown",
    "lt": "lt",
    "bar": "Bar",
    "bslash": "Bslash",
    "nop": "Nop",
}

_MODIFIERS = {"c": "C", "s": "S", "a": "A", "m": "A", "d": "D"}
_MODIFIER_ORDER = ("C", "S", "A", "D")

_TOKEN_RE = re.compile(r"<[^<>\s]+>|.", re.DOTALL)
_FUNCTION_KEY_RE = re.compile(r"^f\d{1,2}$", re.IGNORECASE)


def _canonical_key(name: str) -> str:
    lowered = name.lower()
    if lowered in _SPECIAL_KEYS:
        return _SPECIAL_KEYS[lowered]
    if _FUNCTION_KEY_RE.match(name):
        return name.upper()
    return name


def _canonical_bracket(token: str) -> str:
    body = token[1:-1]
    parts = body.split("-")
    # "<C-->" style bindings leave an empty trailing part for the minus key.
    if len(parts) > 1 and parts[-1] == "" and parts[-2] == "":
        parts = parts[:-2] + ["-"]
    modifiers: list[str] = []
    for part in parts[:-1]:
        mod = _MODIFIERS.get(part.lower())
        if mod is None:
            # Not a modifier chord; leave unknown notation untouched.
            return token
        if mod not in modifiers:
            modifiers.append(mod)
    key = parts[-1]
    if not modifiers:
        canonical = _canonical_key(key)
        if canonical == key and len(key) > 1 and key.lower() not in _SPECIAL_KEYS:
            return token
        return f"<{canonical}>"
    if len(key) == 1 and modifiers == ["C"]:
        key = key.lower()
    else:
        key = _canonical_key(key)
    ordered = [mod for mod in _MODIFIER_ORDER if mod in modifiers]
    return "<" + "-".join(ordered + [key]) + ">"


def expand_leaders(lhs: str, *, leader: str, local_leader: str | None = None) -> str:
    """Substitute ``<leader>`` / ``<localleader>`` (case-insensitive)."""

    local = leader if local_leader is None else local_leader
    expanded = re.sub(re.escape(LOCAL_LEADER_TOKEN), lambda _: local, lhs, flags=re.IGNORECASE)
    return re.sub(re.escape(LEADER_TOKEN), lambda _: leader, expanded, flags=re.IGNORECASE)


def parse_keys(lhs: str, *, leader: str = "\\", local_leader: str | None = None) -> tuple[str, ...]:
    """Split ``lhs`` into canonical key tokens.

    Literal spaces become ``<Space>`` so that a space leader and
    ``<Space>`` spell the same sequence.
    """

    if not lhs:
        raise ValueError("lhs cannot be empty")
    expanded = expand_leaders(lhs, leader=leader, local_leader=local_leader)
    tokens: list[str] = []
    for raw in _TOKEN_RE.findall(expanded):
        if raw == " ":
            tokens.append("<Space>")
        elif len(raw) > 2 and raw.startswith("<"):
            tokens.append(_canonical_bracket(raw))
        else:
            tokens.append(raw)
    return tuple(tokens)


def normalize_lhs(lhs: str, *, leader: str = "\\", local_leader: str | None = None) -> str:
    return "".join(parse_keys(lhs, leader=leader, local_leader=local_leader))


__all__ = [
    "LEADER_TOKEN",
    "LOCAL_LEADER_TOKEN",
    "expand_leaders",
    "normalize_lhs",
    "parse_keys",
]
