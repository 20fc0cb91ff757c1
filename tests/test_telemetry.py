from __future__ import annotations

import pytest

from vim_config.runtime import telemetry


def test_presets_cover_demo_choices() -> None:
    assert sorted(telemetry.PRESETS) == ["development", "production", "quiet"]
    assert telemetry.PRESETS["quiet"]["console"] is False


def test_unknown_preset_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown preset"):
        telemetry.configure(preset="verbose")


def test_preset_and_config_are_exclusive() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(preset="quiet", config=object())


def test_span_reraises_and_keeps_metadata() -> None:
    telemetry.configure(preset="quiet")

    with pytest.raises(KeyError):
        with telemetry.span(
            "tests::span", component="tests", metadata={"lhs": "<C-s>"}
        ) as handle:
            handle.add_metadata("buffer", 3)
            raise KeyError("boom")

    assert handle.metadata == {"lhs": "<C-s>", "buffer": "3"}
