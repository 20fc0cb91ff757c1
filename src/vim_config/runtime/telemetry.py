"""telelog wiring for vim_config.

Keymap and autocommand operations run inside ``span(...)``; dispatch-time
failures go out through ``record_event(..., level="error")``. Output is
configured once per process from a named preset or the ``VIM_CONFIG_*``
environment variables.
"""

from __future__ import annotations

import os
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, MutableMapping, Optional, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "VIM_CONFIG_"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", "vim_config")

# Settings understood by ``_build_config``; unset keys keep telelog defaults.
PRESETS: Dict[str, Dict[str, Any]] = {
    "development": {"level": "DEBUG", "console": True, "color": True},
    "production": {
        "level": "INFO",
        "console": False,
        "file": "vim_config.log",
        "buffered": True,
    },
    "quiet": {"level": "ERROR", "console": False},
}

_LOGGERS: MutableMapping[str, Any] = {}
_CONFIG: Optional[Any] = None


def _env(name: str) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}")


def _env_flag(name: str) -> bool:
    return (_env(name) or "").strip().lower() in {"1", "true", "yes", "on"}


def _env_settings() -> Dict[str, Any]:
    console = not _env_flag("DISABLE_CONSOLE")
    return {
        "level": _env("LOG_LEVEL") or "WARNING",
        "console": console,
        "color": console and not _env_flag("NO_COLOR"),
        "json": _env_flag("LOG_JSON"),
        "file": _env("LOG_FILE"),
        "buffered": _env_flag("LOG_BUFFERED"),
        "buffer_size": int(_env("LOG_BUFFER_SIZE") or "2048"),
    }


def _build_config(settings: Dict[str, Any]) -> Any:
    config = tl.Config()
    config.with_min_level(str(settings.get("level", "WARNING")).upper())
    config.with_console_output(bool(settings.get("console", True)))
    if settings.get("color"):
        config.with_colored_output(True)
    if settings.get("json"):
        config.with_json_format(True)
    log_file = _env("LOG_FILE") or settings.get("file")
    if log_file:
        config.with_file_output(log_file)
    if settings.get("buffered"):
        config.with_buffering(True)
        if "buffer_size" in settings:
            config.with_buffer_size(settings["buffer_size"])
    # Spans rely on telelog's profiler.
    config.with_profiling(True)
    return config


def configure(*, preset: Optional[str] = None, config: Optional[Any] = None) -> None:
    """Swap the active telelog config and drop cached loggers.

    ``preset`` names an entry of ``PRESETS``; ``config`` is a ready-made
    ``telelog.Config``. With neither, the environment decides.
    """

    global _CONFIG
    if preset and config is not None:
        raise ValueError("Provide either `config` or `preset`, not both.")
    if preset:
        try:
            settings = PRESETS[preset.lower()]
        except KeyError:
            raise ValueError(f"Unknown preset '{preset}'.") from None
        config = _build_config(settings)
    elif config is None:
        config = _build_config(_env_settings())
    else:
        config.with_profiling(True)
    _CONFIG = config
    _LOGGERS.clear()


def get_logger(name: Optional[str] = None) -> Any:
    if _CONFIG is None:
        configure()
    logger_name = name or DEFAULT_LOGGER_NAME
    if logger_name not in _LOGGERS:
        _LOGGERS[logger_name] = tl.Logger.with_config(logger_name, _CONFIG)
    return _LOGGERS[logger_name]


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple, set, frozenset)):
        return repr(value)
    return str(value)


def _emit(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    name = level.lower()
    structured = getattr(logger, f"{name}_with", None)
    if structured is not None:
        structured(message, [(str(key), _text(value)) for key, value in payload.items()])
        return
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    _emit(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    """Yielded by ``span``; metadata added here is logged if the block fails."""

    logger: Any
    name: str
    component: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _text(value)

    def fail(self, reason: str) -> None:
        payload: Dict[str, Any] = {"span": self.name, **self.metadata, "reason": reason}
        if self.component:
            payload["component"] = self.component
        _emit(self.logger, "error", "span::fail", payload)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile a block under ``name``, tracked as ``component`` when given.

    ``metadata`` is pushed as logger context while the block runs. An
    exception leaving the block is logged as ``span::fail`` and re-raised.
    """

    log = get_logger(logger_name)
    context = {key: _text(value) for key, value in (metadata or {}).items()}
    for key, value in context.items():
        log.add_context(key, value)
    handle = SpanHandle(logger=log, name=name, component=component, metadata=dict(context))
    tracked = log.track_component(component) if component else nullcontext()
    try:
        with tracked, log.profile(name):
            try:
                yield handle
            except Exception as exc:
                handle.fail(str(exc))
                raise
    finally:
        for key in context:
            log.remove_context(key)


__all__ = [
    "PRESETS",
    "SpanHandle",
    "configure",
    "get_logger",
    "record_event",
    "span",
]
